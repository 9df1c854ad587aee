"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, validators, aggregation)
2. Integration tests for flows (with in-memory services)
3. No real API calls in tests (use fakes)
"""

import datetime as dt

import pytest
from pydantic import ValidationError

from expense_tracker.defaults import DEFAULT_CATEGORIES, default_accounts, default_categories
from expense_tracker.models import (
    Account,
    AccountType,
    BudgetStatus,
    Category,
    CategoryType,
    DailyTotal,
    Expense,
    FormResult,
    ParsedExpense,
    User,
    ValidationIssue,
)


class TestAccountModel:
    """Tests for the Account record."""

    def test_account_document_uses_camel_case(self):
        """Stored documents keep the web client's camelCase keys."""
        account = Account(
            id="acc-1",
            name="HDFC",
            nickname="Daily Use",
            type=AccountType.CREDIT,
            last_four="4321",
        )
        assert account.to_document() == {
            "id": "acc-1",
            "name": "HDFC",
            "nickname": "Daily Use",
            "type": "credit",
            "lastFour": "4321",
        }

    def test_account_omits_blank_optionals(self):
        """Blank nickname and last four are stored as absent fields."""
        account = Account(name="Cash", nickname="  ", last_four="")
        document = account.to_document()
        assert "nickname" not in document
        assert "lastFour" not in document

    def test_account_rejects_bad_last_four(self):
        """lastFour must be exactly four digits."""
        with pytest.raises(ValidationError):
            Account(name="HDFC", last_four="12a4")

    def test_account_ids_are_unique(self):
        """Ids are generated client-side."""
        assert Account(name="A").id != Account(name="B").id

    def test_account_label(self):
        """Label shows the nickname when present."""
        assert Account(name="HDFC", nickname="Daily").label == "HDFC (Daily)"
        assert Account(name="HDFC").label == "HDFC"


class TestCategoryModel:
    """Tests for the Category record and its legacy migration."""

    def test_legacy_document_gets_defaults(self):
        """Documents without type/subCategories are migrated on read."""
        category = Category.from_document({"id": "c1", "name": "Food"})
        assert category.type == CategoryType.PERSONAL
        assert category.sub_categories == []

    def test_null_fields_are_migrated(self):
        """Explicit nulls are treated like missing fields."""
        category = Category.from_document(
            {"id": "c1", "name": "Food", "type": None, "subCategories": None}
        )
        assert category.type == CategoryType.PERSONAL
        assert category.sub_categories == []

    def test_has_subcategory_is_case_insensitive(self):
        """Subcategory lookup ignores case and whitespace."""
        category = Category(name="Food", sub_categories=["Groceries"])
        assert category.has_subcategory("  groceries ")
        assert not category.has_subcategory("Coffee")

    def test_with_subcategory_appends_copy(self):
        """Appending returns a new record; the original is untouched."""
        category = Category(name="Food", sub_categories=["Groceries"])
        updated = category.with_subcategory(" Coffee ")
        assert updated.sub_categories == ["Groceries", "Coffee"]
        assert category.sub_categories == ["Groceries"]
        assert updated.id == category.id


class TestExpenseModel:
    """Tests for the Expense record."""

    def test_expense_round_trip(self):
        """Document form stores the date as YYYY-MM-DD."""
        expense = Expense(
            id="e1",
            amount=450.0,
            date=dt.date(2024, 3, 5),
            account_id="a1",
            category_id="c1",
            description="Lunch",
            personal_expense=False,
            sub_category="Restaurants",
        )
        document = expense.to_document()
        assert document["date"] == "2024-03-05"
        assert document["accountId"] == "a1"
        assert document["personalExpense"] is False
        assert Expense.from_document(document) == expense

    def test_absent_personal_flag_means_personal(self):
        """A missing personalExpense counts as personal."""
        expense = Expense.from_document(
            {"id": "e1", "amount": 10, "date": "2024-01-01", "accountId": "a", "categoryId": "c"}
        )
        assert expense.personal_expense is None
        assert expense.is_personal is True

    def test_expense_rejects_non_positive_amount(self):
        """Amounts must be greater than zero."""
        with pytest.raises(ValidationError):
            Expense(amount=0, date=dt.date.today(), account_id="a", category_id="c")


class TestUserModel:
    """Tests for the signed-in user."""

    def test_initial_prefers_display_name(self):
        assert User(uid="u", email="bob@example.com", display_name="asha").initial == "A"

    def test_initial_falls_back_to_email(self):
        assert User(uid="u", email="bob@example.com").initial == "B"

    def test_initial_default(self):
        assert User(uid="u", email="").initial == "U"


class TestParsedExpense:
    """Tests for the AI parse result."""

    def test_parses_camel_case_payload(self):
        """The model answers with camelCase keys."""
        parsed = ParsedExpense.model_validate({
            "amount": 450,
            "date": "2024-03-05",
            "accountId": "a1",
            "categoryId": "c1",
            "subCategory": "Restaurants",
        })
        assert parsed.amount == 450
        assert parsed.date == dt.date(2024, 3, 5)
        assert parsed.missing_required_fields() == []

    def test_bad_date_becomes_none(self):
        """An unreadable date falls back to the caller's default."""
        parsed = ParsedExpense.model_validate({"amount": 1, "date": "yesterday"})
        assert parsed.date is None

    def test_missing_fields_reported(self):
        """Blank ids count as missing."""
        parsed = ParsedExpense.model_validate({"amount": 10, "accountId": "a1", "categoryId": " "})
        assert parsed.missing_required_fields() == ["categoryId"]


class TestSupportModels:
    """Tests for dashboard and form result models."""

    def test_daily_total_label(self):
        assert DailyTotal(date=dt.date(2024, 3, 5), amount=0).label == "03/05"

    def test_budget_status(self):
        """Budget status is informational: it reports, never blocks."""
        status = BudgetStatus(threshold=1000, spent=1250)
        assert status.exceeded
        assert status.remaining == 0
        assert status.ratio == pytest.approx(1.25)

    def test_form_result_invalid_uses_first_message(self):
        issues = [
            ValidationIssue(field="name", issue_type="missing", message="Name please"),
            ValidationIssue(field="type", issue_type="missing", message="Type please"),
        ]
        result = FormResult.invalid(issues)
        assert not result.success
        assert result.message == "Name please"
        assert result.has_errors
        assert len(result.issues_for("type")) == 1

    def test_validation_issue_severity_pattern(self):
        """Only error, warning and info are valid severities."""
        with pytest.raises(ValidationError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestDefaults:
    """Tests for the seed data."""

    def test_default_copies_are_independent(self):
        """Mutating a returned seed list never changes the seed itself."""
        categories = default_categories()
        categories[0].sub_categories.append("Snacks")
        assert "Snacks" not in DEFAULT_CATEGORIES[0].sub_categories

    def test_default_ids_are_stable(self):
        assert [a.id for a in default_accounts()] == [a.id for a in default_accounts()]
