"""
Identity Services Package

Abstract identity provider, Firebase and in-memory implementations, and
the explicit session context passed to every page.
"""

from expense_tracker.services.identity.interface import (
    AuthenticationError,
    IdentityProvider,
)
from expense_tracker.services.identity.firebase_auth import FirebaseIdentityProvider
from expense_tracker.services.identity.memory import InMemoryIdentityProvider
from expense_tracker.services.identity.session import SessionContext

__all__ = [
    "AuthenticationError",
    "FirebaseIdentityProvider",
    "IdentityProvider",
    "InMemoryIdentityProvider",
    "SessionContext",
]
