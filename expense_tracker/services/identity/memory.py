"""In-memory identity provider for tests and offline development."""

import hashlib
from typing import Optional

from expense_tracker.models import User, generate_id
from expense_tracker.services.identity.interface import (
    AuthenticationError,
    IdentityProvider,
)


MIN_PASSWORD_LENGTH = 6


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class InMemoryIdentityProvider(IdentityProvider):
    """
    Keeps users in a dict keyed by lower-cased email.

    Applies the same basic rules as Firebase: unique email, password of
    at least six characters.
    """

    def __init__(self):
        self._users: dict[str, tuple[str, User]] = {}
        self.sign_out_calls = 0

    async def sign_in(self, email: str, password: str) -> User:
        entry = self._users.get(email.strip().lower())
        if entry is None or entry[0] != _hash_password(password):
            raise AuthenticationError("Incorrect email or password.")
        return entry[1]

    async def sign_up(self, email: str, password: str, display_name: str) -> User:
        key = email.strip().lower()
        if "@" not in key:
            raise AuthenticationError("Please enter a valid email address.")
        if key in self._users:
            raise AuthenticationError("An account with this email already exists.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError("Password should be at least 6 characters.")

        user = User(uid=generate_id(), email=email.strip(), display_name=display_name or None)
        self._users[key] = (_hash_password(password), user)
        return user

    async def sign_out(self) -> None:
        self.sign_out_calls += 1

    def get_user(self, email: str) -> Optional[User]:
        entry = self._users.get(email.strip().lower())
        return entry[1] if entry else None
