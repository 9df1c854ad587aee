"""
Session Context

DESIGN DECISION: The current user is held in an explicit object that
is created at app start and handed to every page manager and the
repository. Nothing reads auth state from a module-level global.

Lifecycle:
1. Created signed-out when the app starts
2. Updated on sign-in / sign-up
3. Cleared on sign-out

Listeners subscribed with `subscribe()` are told about every change,
which is how the shell re-routes after login/logout.
"""

from typing import Callable, Optional

from expense_tracker.log import get_logger
from expense_tracker.models import User
from expense_tracker.services.identity.interface import IdentityProvider


SessionListener = Callable[[Optional[User]], None]

logger = get_logger(__name__)


class SessionContext:
    """Current-user state plus the provider used to change it."""

    def __init__(
        self,
        provider: IdentityProvider,
        user: Optional[User] = None,
    ):
        self._provider = provider
        self._user = user
        self._listeners: list[SessionListener] = []

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def uid(self) -> Optional[str]:
        return self._user.uid if self._user else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener for user changes.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: Optional[User]) -> None:
        self._user = user
        for listener in list(self._listeners):
            listener(user)

    async def sign_in(self, email: str, password: str) -> User:
        """Sign in through the provider and make the user current."""
        user = await self._provider.sign_in(email.strip(), password)
        logger.info("user_signed_in", uid=user.uid)
        self._set_user(user)
        return user

    async def sign_up(self, email: str, password: str, display_name: str) -> User:
        """Create an account through the provider and make it current."""
        user = await self._provider.sign_up(email.strip(), password, display_name.strip())
        logger.info("user_signed_up", uid=user.uid)
        self._set_user(user)
        return user

    async def sign_out(self) -> None:
        """Sign out and clear the current user."""
        await self._provider.sign_out()
        if self._user:
            logger.info("user_signed_out", uid=self._user.uid)
        self._set_user(None)
