"""
Expense Repository

Maps account/category/expense CRUD onto per-user collections:

    users/{uid}/accounts
    users/{uid}/categories
    users/{uid}/expenses

DESIGN DECISION: Permission failures are handled by an explicit,
configurable ErrorPolicy instead of ad hoc per call:

- SWALLOW: log a warning and return the fallback (seed data or [] for
  reads, False for writes). The page carries on as if nothing happened.
- RAISE: let PermissionDeniedError reach the page, which shows an alert.

The repository default comes from settings; every method also takes
`on_error=` to override it for a single call. Any other StorageError
always propagates.
"""

from typing import Callable, Optional, Type, TypeVar

from pydantic import ValidationError

from expense_tracker.config import ErrorPolicy, get_settings
from expense_tracker.defaults import default_accounts, default_categories
from expense_tracker.log import get_logger
from expense_tracker.models import Account, Category, Expense
from expense_tracker.models.entities import DocumentModel
from expense_tracker.services.identity.session import SessionContext
from expense_tracker.services.storage.interface import (
    DocumentStore,
    PermissionDeniedError,
)


ACCOUNTS = "accounts"
CATEGORIES = "categories"
EXPENSES = "expenses"

RecordT = TypeVar("RecordT", bound=DocumentModel)

logger = get_logger(__name__)


def collection_path(uid: str, kind: str) -> str:
    """Path of a user's collection of `kind`."""
    return f"users/{uid}/{kind}"


class ExpenseRepository:
    """
    Persistence adapter for one signed-in session.

    The session is read on every call, so the same repository keeps
    working across sign-in and sign-out.
    """

    def __init__(
        self,
        store: DocumentStore,
        session: SessionContext,
        error_policy: Optional[ErrorPolicy] = None,
    ):
        self._store = store
        self._session = session
        self._error_policy = error_policy or get_settings().app.persistence_error_mode

    @property
    def error_policy(self) -> ErrorPolicy:
        return self._error_policy

    def _path(self, kind: str) -> Optional[str]:
        uid = self._session.uid
        return collection_path(uid, kind) if uid else None

    def _absorb(
        self,
        error: PermissionDeniedError,
        on_error: Optional[ErrorPolicy],
        action: str,
        kind: str,
    ) -> None:
        """Re-raise or log a permission failure according to policy."""
        policy = on_error or self._error_policy
        if policy == ErrorPolicy.RAISE:
            raise error
        logger.warning(
            "storage_permission_denied",
            action=action,
            kind=kind,
            error=str(error),
            hint="Check your Firestore security rules",
        )

    async def _list(
        self,
        kind: str,
        model: Type[RecordT],
        fallback: Callable[[], list[RecordT]],
        on_error: Optional[ErrorPolicy],
        order_by: Optional[str] = None,
        fallback_when_empty: bool = True,
    ) -> list[RecordT]:
        path = self._path(kind)
        if path is None:
            return fallback()

        try:
            documents = await self._store.list_documents(
                path, order_by=order_by, descending=order_by is not None
            )
        except PermissionDeniedError as e:
            self._absorb(e, on_error, "list", kind)
            return fallback()

        if not documents and fallback_when_empty:
            return fallback()

        records = []
        for document in documents:
            try:
                records.append(model.from_document(document))
            except ValidationError as e:
                logger.warning(
                    "malformed_document_skipped",
                    kind=kind,
                    doc_id=document.get("id"),
                    error=str(e),
                )
        return records

    async def _save(
        self,
        kind: str,
        record: DocumentModel,
        on_error: Optional[ErrorPolicy],
    ) -> bool:
        path = self._path(kind)
        if path is None:
            logger.info("write_skipped_signed_out", kind=kind)
            return False

        try:
            await self._store.set_document(path, record.id, record.to_document())
        except PermissionDeniedError as e:
            self._absorb(e, on_error, "save", kind)
            return False
        return True

    async def _delete(
        self,
        kind: str,
        record_id: str,
        on_error: Optional[ErrorPolicy],
    ) -> bool:
        path = self._path(kind)
        if path is None:
            logger.info("delete_skipped_signed_out", kind=kind)
            return False

        try:
            await self._store.delete_document(path, record_id)
        except PermissionDeniedError as e:
            self._absorb(e, on_error, "delete", kind)
            return False
        return True

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def list_accounts(self, on_error: Optional[ErrorPolicy] = None) -> list[Account]:
        """User's accounts, or the seed set when signed out / none saved."""
        return await self._list(ACCOUNTS, Account, default_accounts, on_error)

    async def save_account(self, account: Account, on_error: Optional[ErrorPolicy] = None) -> bool:
        return await self._save(ACCOUNTS, account, on_error)

    async def delete_account(self, account_id: str, on_error: Optional[ErrorPolicy] = None) -> bool:
        return await self._delete(ACCOUNTS, account_id, on_error)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self, on_error: Optional[ErrorPolicy] = None) -> list[Category]:
        """User's categories (migrated to the current shape), or the seed set."""
        return await self._list(CATEGORIES, Category, default_categories, on_error)

    async def save_category(self, category: Category, on_error: Optional[ErrorPolicy] = None) -> bool:
        return await self._save(CATEGORIES, category, on_error)

    async def delete_category(self, category_id: str, on_error: Optional[ErrorPolicy] = None) -> bool:
        """Delete a category. Expenses pointing at it are left untouched."""
        return await self._delete(CATEGORIES, category_id, on_error)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def list_expenses(self, on_error: Optional[ErrorPolicy] = None) -> list[Expense]:
        """User's expenses, newest date first. Never seeded."""
        return await self._list(
            EXPENSES,
            Expense,
            list,
            on_error,
            order_by="date",
            fallback_when_empty=False,
        )

    async def save_expense(self, expense: Expense, on_error: Optional[ErrorPolicy] = None) -> bool:
        return await self._save(EXPENSES, expense, on_error)

    async def delete_expense(self, expense_id: str, on_error: Optional[ErrorPolicy] = None) -> bool:
        return await self._delete(EXPENSES, expense_id, on_error)
