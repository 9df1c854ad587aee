"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for document storage.
This allows us to:
1. Keep Firestore details out of the repository and pages
2. Use in-memory storage for testing and local development
3. Swap the backend without touching business logic

The interface is intentionally tiny - collections of documents keyed by
id, with full-document overwrites. No partial updates, no transactions.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class DocumentStore(ABC):
    """
    Abstract interface for a document database.

    Collections are addressed by slash-separated paths such as
    `users/{uid}/expenses`; documents within them are keyed by id.
    """

    @abstractmethod
    async def list_documents(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """
        List all documents in a collection.

        Args:
            collection_path: Slash-separated collection path
            order_by: Field to sort on, if any
            descending: Sort direction when order_by is given

        Returns:
            Document bodies, each including its `id`

        Raises:
            PermissionDeniedError: If the backend refuses access
            StorageError: For any other backend failure
        """
        pass

    @abstractmethod
    async def set_document(
        self,
        collection_path: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        """
        Write a document, replacing any existing one with the same id.

        Raises:
            PermissionDeniedError: If the backend refuses access
            StorageError: For any other backend failure
        """
        pass

    @abstractmethod
    async def delete_document(
        self,
        collection_path: str,
        doc_id: str,
    ) -> None:
        """
        Delete a document by id. Deleting a missing document is not an error.

        Raises:
            PermissionDeniedError: If the backend refuses access
            StorageError: For any other backend failure
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PermissionDeniedError(StorageError):
    """The backend refused the operation for the current credentials."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
