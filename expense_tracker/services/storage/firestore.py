"""
Firestore Storage Implementation

DESIGN DECISION: Cloud Firestore is the production backend because:
1. Per-user collections map directly onto `users/{uid}/...` paths
2. Documents are keyed by the client-generated record id
3. Google manages backups and scaling

TRADEOFFS:
- No cross-document transactions (each write stands alone)
- Last write wins across tabs/devices
- The Admin SDK is synchronous; calls run in a worker thread so
  concurrent page loads do not serialize on the event loop
- The Admin SDK authenticates with a service account and bypasses
  Firestore security rules. PermissionDenied is still mapped to
  PermissionDeniedError (IAM misconfiguration can raise it), but in
  practice the SWALLOW/RAISE policy is exercised against the in-memory
  store's `denied_paths`, not against rule rejections here.
  Per-user isolation relies on the `users/{uid}` path the repository
  builds from the signed-in session.

The implementation follows the abstract interface, so tests and local
runs use the in-memory store without changing business logic.
"""

import asyncio
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import FirebaseSettings, get_settings
from expense_tracker.log import get_logger
from expense_tracker.services.storage.interface import (
    DocumentStore,
    PermissionDeniedError,
    StorageConnectionError,
    StorageError,
)


FIREBASE_APP_NAME = "expense-tracker"

logger = get_logger(__name__)


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles service-account authentication. Only the initial connection
    is retried; individual reads and writes are not.
    """

    def __init__(self, settings: Optional[FirebaseSettings] = None):
        self._settings = settings or get_settings().firebase
        self._app: Optional[firebase_admin.App] = None
        self._db = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self):
        """
        Establish the Firestore client.

        Reuses an already-initialized Firebase app of the same name.
        """
        if self._db is None:
            try:
                try:
                    self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
                except ValueError:
                    options = {}
                    if self._settings.project_id:
                        options["projectId"] = self._settings.project_id
                    cred = credentials.Certificate(self._settings.credentials_path)
                    self._app = firebase_admin.initialize_app(
                        cred, options, name=FIREBASE_APP_NAME
                    )
                self._db = firestore.client(app=self._app)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Firebase credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Firestore: {e}")

        return self._db

    def collection(self, collection_path: str):
        """Get a collection reference by path."""
        return self.connect().collection(collection_path)


class FirestoreDocumentStore(DocumentStore):
    """
    Firestore implementation of the document store.

    Document bodies are stored as-is; the id lives in the document key
    and is also kept in the body for parity with the web client.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    @staticmethod
    def _translate(error: Exception, action: str, collection_path: str) -> StorageError:
        """Map Google API errors onto the storage exception hierarchy."""
        if isinstance(error, google_exceptions.PermissionDenied):
            return PermissionDeniedError(
                f"Permission denied while trying to {action} {collection_path}: {error}"
            )
        if isinstance(error, StorageError):
            return error
        return StorageError(f"Failed to {action} {collection_path}: {error}")

    def _list_sync(
        self,
        collection_path: str,
        order_by: Optional[str],
        descending: bool,
    ) -> list[dict[str, Any]]:
        query = self._client.collection(collection_path)
        if order_by:
            direction = (
                firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            )
            query = query.order_by(order_by, direction=direction)
        return [
            {**(snapshot.to_dict() or {}), "id": snapshot.id}
            for snapshot in query.stream()
        ]

    async def list_documents(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        """List documents in a Firestore collection."""
        try:
            return await asyncio.to_thread(
                self._list_sync, collection_path, order_by, descending
            )
        except Exception as e:
            raise self._translate(e, "list", collection_path) from e

    async def set_document(
        self,
        collection_path: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        """Overwrite a Firestore document."""
        try:
            ref = self._client.collection(collection_path).document(doc_id)
            await asyncio.to_thread(ref.set, data)
            logger.debug("document_written", collection=collection_path, doc_id=doc_id)
        except Exception as e:
            raise self._translate(e, "write", collection_path) from e

    async def delete_document(
        self,
        collection_path: str,
        doc_id: str,
    ) -> None:
        """Delete a Firestore document."""
        try:
            ref = self._client.collection(collection_path).document(doc_id)
            await asyncio.to_thread(ref.delete)
            logger.debug("document_deleted", collection=collection_path, doc_id=doc_id)
        except Exception as e:
            raise self._translate(e, "delete", collection_path) from e
