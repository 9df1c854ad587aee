"""
In-Memory Document Store

Used by the test suite and by `STORAGE_BACKEND=memory` for local runs
without Firebase credentials. Data lives for the life of the process.
"""

import copy
from typing import Any, Optional

from expense_tracker.services.storage.interface import (
    DocumentStore,
    PermissionDeniedError,
)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    `denied_paths` lets tests simulate security-rule rejections: any
    operation on a collection path starting with one of these prefixes
    raises PermissionDeniedError.
    """

    def __init__(self, denied_paths: Optional[set[str]] = None):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.denied_paths: set[str] = set(denied_paths or ())
        self.write_count = 0

    def _check_access(self, collection_path: str) -> None:
        for prefix in self.denied_paths:
            if collection_path.startswith(prefix):
                raise PermissionDeniedError(
                    f"Missing or insufficient permissions for {collection_path}"
                )

    async def list_documents(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        self._check_access(collection_path)
        docs = [
            {**copy.deepcopy(data), "id": doc_id}
            for doc_id, data in self._collections.get(collection_path, {}).items()
        ]
        if order_by:
            # Firestore leaves out documents that lack the order_by field
            docs = [d for d in docs if order_by in d]
            docs.sort(key=lambda d: d[order_by], reverse=descending)
        return docs

    async def set_document(
        self,
        collection_path: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        self._check_access(collection_path)
        self._collections.setdefault(collection_path, {})[doc_id] = copy.deepcopy(data)
        self.write_count += 1

    async def delete_document(
        self,
        collection_path: str,
        doc_id: str,
    ) -> None:
        self._check_access(collection_path)
        self._collections.get(collection_path, {}).pop(doc_id, None)
        self.write_count += 1

    def raw(self, collection_path: str) -> dict[str, dict[str, Any]]:
        """Direct view of a collection, for inspection."""
        return self._collections.get(collection_path, {})
