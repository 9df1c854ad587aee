"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.entities import (
    Account,
    AccountType,
    Category,
    CategoryType,
    DateRange,
    Expense,
    ExpenseScope,
    ParsedExpense,
    User,
    generate_id,
)
from expense_tracker.models.dashboard import (
    BudgetStatus,
    CategoryTotal,
    DailyTotal,
    DashboardSummary,
)
from expense_tracker.models.forms import FormResult, ValidationIssue

__all__ = [
    # Records
    "Account",
    "AccountType",
    "Category",
    "CategoryType",
    "DateRange",
    "Expense",
    "ExpenseScope",
    "ParsedExpense",
    "User",
    "generate_id",
    # Dashboard
    "BudgetStatus",
    "CategoryTotal",
    "DailyTotal",
    "DashboardSummary",
    # Forms
    "FormResult",
    "ValidationIssue",
]
