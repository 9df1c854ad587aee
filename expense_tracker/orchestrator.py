"""
Page Managers for Expense Tracker

This module ties together the repository, the validator and the insight
engine, and defines the flows behind each page:
1. Dashboard (load → pick range → summarize → optional AI insights)
2. Expenses (manual entry, AI entry, filter, delete)
3. Accounts / Categories (catalog management)
4. Login (sign in / sign up)

DESIGN DECISION: The managers enforce the boundaries:
- Nothing is written before the form passes validation
- AI-parsed expenses are validated like any other input
- Local lists are updated after the write, never re-fetched

The managers hold plain Python state and know nothing about Streamlit,
so every flow can be driven from tests.
"""

import asyncio
import datetime as dt
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from expense_tracker.agents import GeminiInsightEngine, InsightEngine
from expense_tracker.analytics import (
    build_dashboard_summary,
    filter_by_scope,
    resolve_account_name,
    resolve_category_name,
)
from expense_tracker.config import Settings, StorageBackend, get_settings
from expense_tracker.log import get_logger
from expense_tracker.models import (
    Account,
    AccountType,
    Category,
    CategoryType,
    DashboardSummary,
    DateRange,
    Expense,
    ExpenseScope,
    FormResult,
    ValidationIssue,
)
from expense_tracker.services.identity import (
    AuthenticationError,
    FirebaseIdentityProvider,
    InMemoryIdentityProvider,
    SessionContext,
)
from expense_tracker.services.storage import (
    ExpenseRepository,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    PermissionDeniedError,
    StorageError,
)
from expense_tracker.shell import ROUTE_HOME
from expense_tracker.validation import (
    FormValidator,
    issues_from_validation_error,
    normalize_last_four,
    parse_amount,
)


NOT_STORED_NOTE = "it could not be stored, so it will disappear on reload"

logger = get_logger(__name__)


class PageState(str, Enum):
    LOADING = "loading"
    READY = "ready"


class FormState(str, Enum):
    IDLE = "idle"
    ADD_FORM_OPEN = "add_form_open"


class _PageManager:
    """Shared page/form state and the guarded write used by every manager."""

    def __init__(
        self,
        repository: ExpenseRepository,
        validator: Optional[FormValidator] = None,
    ):
        self._repository = repository
        self._validator = validator or FormValidator()
        self.page_state = PageState.LOADING
        self.form_state = FormState.IDLE
        self.processing = False

    @property
    def is_loading(self) -> bool:
        return self.page_state == PageState.LOADING

    def open_add_form(self) -> None:
        self.form_state = FormState.ADD_FORM_OPEN

    def close_add_form(self) -> None:
        self.form_state = FormState.IDLE

    async def _write(
        self,
        call: Callable[[], Awaitable[bool]],
        action: str,
    ) -> tuple[bool, Optional[str]]:
        """
        Run one repository write with the processing flag raised.

        Returns (stored, error_message). A permission failure under the
        RAISE policy, or any other storage failure, becomes a message.
        """
        self.processing = True
        try:
            return await call(), None
        except PermissionDeniedError as e:
            logger.warning("write_permission_denied", action=action, error=str(e))
            return False, f"Permission denied. Could not {action}."
        except StorageError as e:
            logger.error("write_failed", action=action, error=str(e))
            return False, f"Could not {action}. Please try again."
        finally:
            self.processing = False


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountManager(_PageManager):
    """Backs the Accounts page."""

    def __init__(
        self,
        repository: ExpenseRepository,
        validator: Optional[FormValidator] = None,
    ):
        super().__init__(repository, validator)
        self.accounts: list[Account] = []

    async def load(self) -> list[Account]:
        self.page_state = PageState.LOADING
        self.accounts = await self._repository.list_accounts()
        self.page_state = PageState.READY
        return self.accounts

    async def add_account(
        self,
        name: str,
        account_type: AccountType = AccountType.DEBIT,
        nickname: Optional[str] = None,
        last_four: Optional[str] = None,
    ) -> FormResult:
        """
        Validate, store and append a new account.

        `last_four` is cleaned to digits and cut to four before checking.
        """
        last_four = normalize_last_four(last_four)
        issues = self._validator.validate_account(name, last_four, nickname)
        if issues:
            return FormResult.invalid(issues)

        try:
            account = Account(
                name=name,
                nickname=nickname,
                type=account_type,
                last_four=last_four,
            )
        except ValidationError as e:
            return FormResult.invalid(issues_from_validation_error(e))
        stored, error = await self._write(
            lambda: self._repository.save_account(account), "add account"
        )
        if error:
            return FormResult.failed(error)

        self.accounts.append(account)
        self.close_add_form()
        message = "Account added" if stored else f"Account added, but {NOT_STORED_NOTE}"
        return FormResult(success=True, message=message, record=account)

    async def delete_account(self, account_id: str) -> FormResult:
        """Remove an account. Expenses that used it keep the dangling id."""
        _, error = await self._write(
            lambda: self._repository.delete_account(account_id), "delete account"
        )
        if error:
            return FormResult.failed(error)
        self.accounts = [a for a in self.accounts if a.id != account_id]
        return FormResult(success=True, message="Account deleted")


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryManager(_PageManager):
    """Backs the Categories page: categories plus their subcategories."""

    def __init__(
        self,
        repository: ExpenseRepository,
        validator: Optional[FormValidator] = None,
    ):
        super().__init__(repository, validator)
        self.categories: list[Category] = []
        self.selected_category_id: Optional[str] = None

    async def load(self) -> list[Category]:
        self.page_state = PageState.LOADING
        self.categories = await self._repository.list_categories()
        self.page_state = PageState.READY
        return self.categories

    def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    @property
    def selected_category(self) -> Optional[Category]:
        return self.get_category(self.selected_category_id)

    def select_category(self, category_id: Optional[str]) -> None:
        self.selected_category_id = category_id

    async def add_category(
        self,
        name: str,
        category_type: CategoryType = CategoryType.PERSONAL,
    ) -> FormResult:
        """Reject blank or duplicate names before anything is written."""
        issues = self._validator.validate_category(name, self.categories)
        if issues:
            return FormResult.invalid(issues)

        try:
            category = Category(name=name, type=category_type)
        except ValidationError as e:
            return FormResult.invalid(issues_from_validation_error(e))
        stored, error = await self._write(
            lambda: self._repository.save_category(category), "add category"
        )
        if error:
            return FormResult.failed(error)

        self.categories.append(category)
        self.close_add_form()
        message = "Category added" if stored else f"Category added, but {NOT_STORED_NOTE}"
        return FormResult(success=True, message=message, record=category)

    async def add_subcategory(self, category_id: str, name: str) -> FormResult:
        """
        Append a subcategory and rewrite the whole category document.

        Subcategories are never removed or renamed.
        """
        category = self.get_category(category_id)
        issues = self._validator.validate_subcategory(category, name)
        if issues:
            return FormResult.invalid(issues)

        updated = category.with_subcategory(name)
        stored, error = await self._write(
            lambda: self._repository.save_category(updated), "add subcategory"
        )
        if error:
            return FormResult.failed(error)

        self.categories = [updated if c.id == category_id else c for c in self.categories]
        message = "Subcategory added" if stored else f"Subcategory added, but {NOT_STORED_NOTE}"
        return FormResult(success=True, message=message, record=updated)

    async def delete_category(self, category_id: str) -> FormResult:
        """Remove a category. Its expenses are NOT deleted and show as Uncategorized."""
        _, error = await self._write(
            lambda: self._repository.delete_category(category_id), "delete category"
        )
        if error:
            return FormResult.failed(error)
        self.categories = [c for c in self.categories if c.id != category_id]
        if self.selected_category_id == category_id:
            self.selected_category_id = None
        return FormResult(success=True, message="Category deleted")


# =============================================================================
# EXPENSES
# =============================================================================

class ExpenseManager(_PageManager):
    """
    Backs the Expenses page.

    Two ways in:
    1. Manual form → validate → save → prepend
    2. Free text → AI parse → validate → save → prepend

    The AI path NEVER saves a partial record: a missing amount, account or
    category stops the flow with a message.
    """

    def __init__(
        self,
        repository: ExpenseRepository,
        insight_engine: InsightEngine,
        validator: Optional[FormValidator] = None,
    ):
        super().__init__(repository, validator)
        self._insight_engine = insight_engine
        self.accounts: list[Account] = []
        self.categories: list[Category] = []
        self.expenses: list[Expense] = []
        self.selected_account_id: Optional[str] = None
        self.selected_category_id: Optional[str] = None
        self.scope_filter = ExpenseScope.ALL

    async def load(self) -> None:
        """Load the three lists concurrently and preselect the first entries."""
        self.page_state = PageState.LOADING
        self.accounts, self.categories, self.expenses = await asyncio.gather(
            self._repository.list_accounts(),
            self._repository.list_categories(),
            self._repository.list_expenses(),
        )
        if self.accounts and self.selected_account_id is None:
            self.selected_account_id = self.accounts[0].id
        if self.categories and self.selected_category_id is None:
            self.selected_category_id = self.categories[0].id
        self.page_state = PageState.READY

    @property
    def requires_setup(self) -> bool:
        """No categories means nothing can be logged yet."""
        return self.page_state == PageState.READY and not self.categories

    def _category(self, category_id: Optional[str]) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def _personal_flag(self, category_id: str) -> bool:
        """Personal unless the category is explicitly typed 'other'."""
        category = self._category(category_id)
        if category is None:
            return True
        return category.type == CategoryType.PERSONAL

    def category_name(self, expense: Expense) -> str:
        return resolve_category_name(expense.category_id, self.categories)

    def account_name(self, expense: Expense) -> str:
        return resolve_account_name(expense.account_id, self.accounts)

    def set_scope_filter(self, scope: ExpenseScope) -> None:
        self.scope_filter = ExpenseScope(scope)

    @property
    def visible_expenses(self) -> list[Expense]:
        return filter_by_scope(self.expenses, self.scope_filter)

    async def _store_expense(self, expense: Expense) -> FormResult:
        stored, error = await self._write(
            lambda: self._repository.save_expense(expense), "add expense"
        )
        if error:
            return FormResult.failed(error)

        self.expenses.insert(0, expense)
        self.close_add_form()
        message = "Expense added" if stored else f"Expense added, but {NOT_STORED_NOTE}"
        return FormResult(success=True, message=message, record=expense)

    async def add_expense(
        self,
        amount: Any,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        expense_date: Optional[dt.date] = None,
        description: str = "",
        sub_category: Optional[str] = None,
        personal_expense: Optional[bool] = None,
    ) -> FormResult:
        """
        Manual entry.

        Account and category default to the current selection. When
        `personal_expense` is not given it follows the category type.
        """
        account_id = account_id or self.selected_account_id
        category_id = category_id or self.selected_category_id
        issues = self._validator.validate_expense(
            amount, account_id, category_id, expense_date, sub_category
        )
        if issues:
            return FormResult.invalid(issues)

        if personal_expense is None:
            personal_expense = self._personal_flag(category_id)

        try:
            expense = Expense(
                amount=parse_amount(amount),
                date=expense_date,
                account_id=account_id,
                category_id=category_id,
                description=(description or "")[:500],
                sub_category=sub_category or None,
                personal_expense=personal_expense,
            )
        except ValidationError as e:
            return FormResult.invalid(issues_from_validation_error(e))
        return await self._store_expense(expense)

    async def log_with_ai(self, text: str, today: Optional[dt.date] = None) -> FormResult:
        """
        Natural-language entry, e.g. "450 on lunch yesterday with HDFC card".

        Flow:
        1. Parse → the model proposes a partial expense
        2. Validate → required fields (and, if enabled, known ids)
        3. Build → date defaults to today, description to the text
        4. Save → prepend like a manual entry
        """
        text = (text or "").strip()
        if not text:
            return FormResult.invalid([ValidationIssue(
                field="text",
                issue_type="missing",
                message="Describe the expense first",
            )])

        today = today or dt.date.today()
        self.processing = True
        try:
            parsed = await self._insight_engine.parse_natural_language_expense(
                text, self.accounts, self.categories, today=today
            )
        finally:
            self.processing = False

        issues = self._validator.validate_parsed_expense(parsed, self.accounts, self.categories)
        if issues:
            logger.info(
                "ai_expense_rejected",
                reasons=[f"{i.field}:{i.issue_type}" for i in issues],
            )
            return FormResult.invalid(issues)

        try:
            expense = Expense(
                amount=parsed.amount,
                date=parsed.date or today,
                account_id=parsed.account_id,
                category_id=parsed.category_id,
                description=(parsed.description or text)[:500],
                sub_category=parsed.sub_category,
                personal_expense=self._personal_flag(parsed.category_id),
            )
        except ValidationError as e:
            logger.warning("ai_expense_unbuildable", error=str(e))
            return FormResult.invalid(issues_from_validation_error(e))
        logger.info("ai_expense_parsed", expense_id=expense.id, amount=expense.amount)
        return await self._store_expense(expense)

    async def delete_expense(self, expense_id: str) -> FormResult:
        _, error = await self._write(
            lambda: self._repository.delete_expense(expense_id), "delete expense"
        )
        if error:
            return FormResult.failed(error)
        self.expenses = [e for e in self.expenses if e.id != expense_id]
        return FormResult(success=True, message="Expense deleted")


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardFlow:
    """
    Backs the Dashboard page.

    Summaries are recomputed from the loaded lists on every call; the
    range selector only changes which expenses feed the totals.
    """

    def __init__(
        self,
        repository: ExpenseRepository,
        insight_engine: InsightEngine,
        settings: Optional[Settings] = None,
    ):
        self._repository = repository
        self._insight_engine = insight_engine
        app_settings = (settings or get_settings()).app
        self._budget_threshold = app_settings.budget_threshold
        self._recent_limit = app_settings.recent_activity_limit
        self.page_state = PageState.LOADING
        self.date_range = DateRange.MONTH
        self.accounts: list[Account] = []
        self.categories: list[Category] = []
        self.expenses: list[Expense] = []
        self.insights: Optional[str] = None
        self.insights_loading = False

    async def load(self) -> None:
        self.page_state = PageState.LOADING
        self.accounts, self.categories, self.expenses = await asyncio.gather(
            self._repository.list_accounts(),
            self._repository.list_categories(),
            self._repository.list_expenses(),
        )
        self.page_state = PageState.READY

    def set_range(self, date_range: DateRange) -> None:
        self.date_range = DateRange(date_range)

    def summary(self, now: Optional[dt.datetime] = None) -> DashboardSummary:
        return build_dashboard_summary(
            self.expenses,
            self.accounts,
            self.categories,
            self.date_range,
            now or dt.datetime.now().astimezone(),
            budget_threshold=self._budget_threshold,
            recent_limit=self._recent_limit,
        )

    async def request_insights(self) -> str:
        """Ask the engine for advice over everything loaded. Never raises."""
        self.insights_loading = True
        try:
            self.insights = await self._insight_engine.get_spending_insights(
                self.expenses, self.accounts, self.categories
            )
        finally:
            self.insights_loading = False
        return self.insights


# =============================================================================
# LOGIN
# =============================================================================

class LoginMode(str, Enum):
    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


class LoginFlow:
    """Backs the login page; one form toggling between sign-in and sign-up."""

    def __init__(self, session: SessionContext):
        self._session = session
        self.mode = LoginMode.SIGN_IN
        self.processing = False

    def toggle_mode(self) -> LoginMode:
        self.mode = LoginMode.SIGN_UP if self.mode == LoginMode.SIGN_IN else LoginMode.SIGN_IN
        return self.mode

    async def submit(
        self,
        mode: Optional[LoginMode],
        email: str,
        password: str,
        display_name: str = "",
    ) -> tuple[bool, Optional[str], Optional[str]]:
        """
        Sign in or sign up.

        Returns:
            (ok, error_message, next_route)
        """
        mode = LoginMode(mode or self.mode)
        if not email or not email.strip() or not password:
            return False, "Please enter your email and password.", None
        if mode == LoginMode.SIGN_UP and not (display_name or "").strip():
            return False, "Please enter your name.", None

        self.processing = True
        try:
            if mode == LoginMode.SIGN_UP:
                await self._session.sign_up(email, password, display_name)
            else:
                await self._session.sign_in(email, password)
        except AuthenticationError as e:
            return False, str(e), None
        finally:
            self.processing = False

        return True, None, ROUTE_HOME


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[SessionContext, ExpenseRepository, InsightEngine, FormValidator]:
    """
    Factory function to create all application components.

    The storage backend setting picks Firestore + Firebase Auth or the
    in-memory store + in-memory identity provider (local runs).

    Returns:
        (session, repository, insight_engine, validator)
    """
    settings = settings or get_settings()
    app_settings = settings.app

    if app_settings.storage_backend == StorageBackend.MEMORY:
        store = InMemoryDocumentStore()
        provider = InMemoryIdentityProvider()
    else:
        store = FirestoreDocumentStore()
        provider = FirebaseIdentityProvider()

    session = SessionContext(provider)
    repository = ExpenseRepository(
        store,
        session,
        error_policy=app_settings.persistence_error_mode,
    )
    insight_engine = GeminiInsightEngine(
        settings.gemini,
        expense_limit=app_settings.insight_expense_limit,
    )
    validator = FormValidator(app_settings.validate_ai_references)

    logger.info(
        "app_components_created",
        storage_backend=app_settings.storage_backend.value,
        error_policy=app_settings.persistence_error_mode.value,
    )
    return session, repository, insight_engine, validator
