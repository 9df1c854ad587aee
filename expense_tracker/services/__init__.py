"""Services package."""

from expense_tracker.services.identity import (
    AuthenticationError,
    FirebaseIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
    SessionContext,
)
from expense_tracker.services.storage import (
    DocumentStore,
    ExpenseRepository,
    FirestoreClient,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    NotFoundError,
    PermissionDeniedError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Identity services
    "AuthenticationError",
    "FirebaseIdentityProvider",
    "IdentityProvider",
    "InMemoryIdentityProvider",
    "SessionContext",
    # Storage services
    "DocumentStore",
    "ExpenseRepository",
    "FirestoreClient",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "NotFoundError",
    "PermissionDeniedError",
    "StorageConnectionError",
    "StorageError",
]
