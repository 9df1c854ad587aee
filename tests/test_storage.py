"""
Tests for the persistence layer

Runs the repository against the in-memory document store. Permission
failures are simulated with the store's `denied_paths`.
"""

import datetime as dt

import pytest

from conftest import make_expense
from expense_tracker.config import ErrorPolicy
from expense_tracker.defaults import DEFAULT_ACCOUNTS, DEFAULT_CATEGORIES
from expense_tracker.models import Account, AccountType, Category, CategoryType
from expense_tracker.services.storage import (
    ExpenseRepository,
    InMemoryDocumentStore,
    PermissionDeniedError,
    StorageError,
    collection_path,
)


class TestInMemoryDocumentStore:
    """Tests for the dict-backed store."""

    @pytest.mark.asyncio
    async def test_set_then_list(self):
        store = InMemoryDocumentStore()
        await store.set_document("users/u/accounts", "a1", {"name": "HDFC"})
        assert await store.list_documents("users/u/accounts") == [{"name": "HDFC", "id": "a1"}]

    @pytest.mark.asyncio
    async def test_ordering_skips_documents_without_field(self):
        """Like Firestore, ordering drops documents missing the field."""
        store = InMemoryDocumentStore()
        await store.set_document("c", "old", {"date": "2024-01-01"})
        await store.set_document("c", "new", {"date": "2024-02-01"})
        await store.set_document("c", "undated", {"amount": 5})
        documents = await store.list_documents("c", order_by="date", descending=True)
        assert [d["id"] for d in documents] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_denied_paths_raise(self):
        store = InMemoryDocumentStore(denied_paths={"users/u"})
        with pytest.raises(PermissionDeniedError):
            await store.list_documents("users/u/expenses")

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self):
        store = InMemoryDocumentStore()
        await store.set_document("c", "d", {"tags": ["a"]})
        (document,) = await store.list_documents("c")
        document["tags"].append("b")
        assert store.raw("c")["d"]["tags"] == ["a"]

    def test_permission_error_is_storage_error(self):
        assert issubclass(PermissionDeniedError, StorageError)


class TestRepositoryReads:
    """Tests for list_* behavior and seeding."""

    def test_collection_path(self):
        assert collection_path("u1", "expenses") == "users/u1/expenses"

    @pytest.mark.asyncio
    async def test_account_round_trip_preserves_fields(self, repository):
        """save_account then list_accounts returns an equal record."""
        account = Account(name="HDFC", nickname="Daily", type=AccountType.CREDIT, last_four="1234")
        assert await repository.save_account(account) is True
        assert await repository.list_accounts() == [account]

    @pytest.mark.asyncio
    async def test_empty_collections_return_seeds(self, repository):
        assert await repository.list_accounts() == list(DEFAULT_ACCOUNTS)
        assert await repository.list_categories() == list(DEFAULT_CATEGORIES)

    @pytest.mark.asyncio
    async def test_signed_out_reads(self, store, signed_out_session):
        """Signed out: seeds for the catalog, nothing for expenses."""
        repository = ExpenseRepository(store, signed_out_session, error_policy=ErrorPolicy.SWALLOW)
        assert await repository.list_accounts() == list(DEFAULT_ACCOUNTS)
        assert await repository.list_categories() == list(DEFAULT_CATEGORIES)
        assert await repository.list_expenses() == []

    @pytest.mark.asyncio
    async def test_expenses_are_newest_first(self, repository):
        for day in (3, 10, 7):
            await repository.save_expense(make_expense(day, dt.date(2024, 3, day), id=f"d{day}"))
        expenses = await repository.list_expenses()
        assert [e.id for e in expenses] == ["d10", "d7", "d3"]

    @pytest.mark.asyncio
    async def test_empty_expenses_are_not_seeded(self, repository):
        assert await repository.list_expenses() == []

    @pytest.mark.asyncio
    async def test_legacy_categories_are_migrated(self, repository, store, user):
        """Old {id, name} documents come back with type and subCategories filled."""
        await store.set_document(f"users/{user.uid}/categories", "c1", {"id": "c1", "name": "Food"})
        (category,) = await repository.list_categories()
        assert category.type == CategoryType.PERSONAL
        assert category.sub_categories == []

    @pytest.mark.asyncio
    async def test_malformed_documents_are_skipped(self, repository, store, user):
        path = f"users/{user.uid}/expenses"
        await store.set_document(path, "bad", {"date": "2024-03-01", "amount": -5})
        await repository.save_expense(make_expense(20, dt.date(2024, 3, 2), id="good"))
        assert [e.id for e in await repository.list_expenses()] == ["good"]


class TestRepositoryWrites:
    """Tests for save/delete behavior."""

    @pytest.mark.asyncio
    async def test_save_writes_camel_case_document(self, repository, store, user):
        category = Category(id="c1", name="Client", type=CategoryType.OTHER, sub_categories=["Meals"])
        await repository.save_category(category)
        assert store.raw(f"users/{user.uid}/categories")["c1"] == {
            "id": "c1",
            "name": "Client",
            "type": "other",
            "subCategories": ["Meals"],
        }

    @pytest.mark.asyncio
    async def test_save_overwrites_by_id(self, repository):
        category = Category(id="c1", name="Food")
        await repository.save_category(category)
        await repository.save_category(category.with_subcategory("Coffee"))
        (stored,) = await repository.list_categories()
        assert stored.sub_categories == ["Coffee"]

    @pytest.mark.asyncio
    async def test_delete(self, repository):
        expense = make_expense(10, dt.date(2024, 3, 1))
        await repository.save_expense(expense)
        assert await repository.delete_expense(expense.id) is True
        assert await repository.list_expenses() == []

    @pytest.mark.asyncio
    async def test_signed_out_writes_are_skipped(self, store, signed_out_session):
        """No store call is made without a user."""
        repository = ExpenseRepository(store, signed_out_session, error_policy=ErrorPolicy.RAISE)
        assert await repository.save_account(Account(name="HDFC")) is False
        assert await repository.delete_account("a1") is False
        assert store.write_count == 0

    @pytest.mark.asyncio
    async def test_repository_follows_session_changes(self, store, signed_out_session):
        """The same repository writes once a user signs in."""
        repository = ExpenseRepository(store, signed_out_session, error_policy=ErrorPolicy.SWALLOW)
        await signed_out_session.sign_up("new@example.com", "secret1", "New")
        assert await repository.save_account(Account(name="HDFC")) is True
        uid = signed_out_session.uid
        assert len(store.raw(f"users/{uid}/accounts")) == 1


class TestErrorPolicy:
    """Tests for SWALLOW / RAISE handling of permission failures."""

    @pytest.fixture
    def denied_store(self, user):
        return InMemoryDocumentStore(denied_paths={f"users/{user.uid}"})

    @pytest.mark.asyncio
    async def test_swallow_falls_back(self, denied_store, session):
        repository = ExpenseRepository(denied_store, session, error_policy=ErrorPolicy.SWALLOW)
        assert await repository.list_accounts() == list(DEFAULT_ACCOUNTS)
        assert await repository.list_expenses() == []
        assert await repository.save_expense(make_expense(5, dt.date(2024, 3, 1))) is False
        assert await repository.delete_category("c1") is False

    @pytest.mark.asyncio
    async def test_raise_propagates(self, denied_store, session):
        repository = ExpenseRepository(denied_store, session, error_policy=ErrorPolicy.RAISE)
        with pytest.raises(PermissionDeniedError):
            await repository.list_categories()
        with pytest.raises(PermissionDeniedError):
            await repository.save_account(Account(name="HDFC"))

    @pytest.mark.asyncio
    async def test_per_call_override(self, denied_store, session):
        """on_error= beats the repository default for one call."""
        repository = ExpenseRepository(denied_store, session, error_policy=ErrorPolicy.SWALLOW)
        with pytest.raises(PermissionDeniedError):
            await repository.list_expenses(on_error=ErrorPolicy.RAISE)

        strict = ExpenseRepository(denied_store, session, error_policy=ErrorPolicy.RAISE)
        assert await strict.list_expenses(on_error=ErrorPolicy.SWALLOW) == []

    @pytest.mark.asyncio
    async def test_other_storage_errors_always_propagate(self, session):
        class BrokenStore(InMemoryDocumentStore):
            async def list_documents(self, collection_path, order_by=None, descending=False):
                raise StorageError("backend unavailable")

        repository = ExpenseRepository(BrokenStore(), session, error_policy=ErrorPolicy.SWALLOW)
        with pytest.raises(StorageError):
            await repository.list_accounts()
