"""
Firebase Authentication via the Identity Toolkit REST API

The Admin SDK cannot verify passwords, so sign-in and sign-up go through
the same public REST endpoints the web client uses, keyed by the
project's web API key.
"""

import asyncio
from typing import Any, Optional

import requests

from expense_tracker.config import FirebaseSettings, get_settings
from expense_tracker.log import get_logger
from expense_tracker.models import User
from expense_tracker.services.identity.interface import (
    AuthenticationError,
    IdentityProvider,
)


IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts"

# Firebase error codes → messages we show on the login page
FRIENDLY_ERRORS = {
    "EMAIL_NOT_FOUND": "No account exists for this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password.",
    "INVALID_EMAIL": "Please enter a valid email address.",
    "USER_DISABLED": "This account has been disabled.",
    "EMAIL_EXISTS": "An account with this email already exists.",
    "WEAK_PASSWORD": "Password should be at least 6 characters.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
}

logger = get_logger(__name__)


def friendly_error(code: str) -> str:
    """Translate a Firebase error code (which may carry a suffix) to a message."""
    key = code.split(":")[0].strip()
    return FRIENDLY_ERRORS.get(key, "Authentication failed. Please try again.")


class FirebaseIdentityProvider(IdentityProvider):
    """Identity provider backed by Firebase Authentication."""

    def __init__(
        self,
        settings: Optional[FirebaseSettings] = None,
        http: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().firebase
        self._http = http or requests.Session()

    def _post(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to an Identity Toolkit endpoint and return the JSON body."""
        url = f"{IDENTITY_TOOLKIT_URL}:{action}"
        try:
            response = self._http.post(
                url,
                params={"key": self._settings.web_api_key},
                json=payload,
                timeout=self._settings.request_timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("identity_request_failed", action=action, error=str(e))
            raise AuthenticationError("Could not reach the sign-in service.") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            code = body.get("error", {}).get("message", "")
            logger.warning("identity_request_rejected", action=action, code=code)
            raise AuthenticationError(friendly_error(code))

        return body

    async def sign_in(self, email: str, password: str) -> User:
        data = await asyncio.to_thread(
            self._post,
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return User(
            uid=data["localId"],
            email=data.get("email", email),
            display_name=data.get("displayName") or None,
        )

    async def sign_up(self, email: str, password: str, display_name: str) -> User:
        data = await asyncio.to_thread(
            self._post,
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        # Display name is a separate profile update, as in the web SDK
        await asyncio.to_thread(
            self._post,
            "update",
            {
                "idToken": data["idToken"],
                "displayName": display_name,
                "returnSecureToken": False,
            },
        )
        return User(
            uid=data["localId"],
            email=data.get("email", email),
            display_name=display_name,
        )

    async def sign_out(self) -> None:
        # Tokens are not persisted server-side; dropping the session is enough
        return None
