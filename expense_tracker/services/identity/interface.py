"""
Abstract Identity Interface

DESIGN DECISION: Authentication is delegated to a hosted identity
service. The app only needs three operations, so the interface has
exactly three methods. Session state is NOT held here - see
SessionContext, which wraps a provider and owns the current user.
"""

from abc import ABC, abstractmethod

from expense_tracker.models import User


class IdentityProvider(ABC):
    """Email + password authentication against an identity service."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> User:
        """
        Authenticate an existing user.

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str, display_name: str) -> User:
        """
        Create a user and set their display name.

        Raises:
            AuthenticationError: If the account cannot be created
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """End the provider-side session, if the provider keeps one."""
        pass


class AuthenticationError(Exception):
    """Sign-in or sign-up failed. The message is safe to show to the user."""
    pass
