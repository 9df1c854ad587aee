"""
Storage Services Package

Provides the abstract document store, its Firestore and in-memory
implementations, and the per-user repository built on top of them.
"""

from expense_tracker.services.storage.interface import (
    DocumentStore,
    NotFoundError,
    PermissionDeniedError,
    StorageConnectionError,
    StorageError,
)
from expense_tracker.services.storage.firestore import (
    FirestoreClient,
    FirestoreDocumentStore,
)
from expense_tracker.services.storage.memory import InMemoryDocumentStore
from expense_tracker.services.storage.repository import (
    ExpenseRepository,
    collection_path,
)

__all__ = [
    # Interfaces
    "DocumentStore",
    # Exceptions
    "NotFoundError",
    "PermissionDeniedError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "FirestoreClient",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    # Repository
    "ExpenseRepository",
    "collection_path",
]
