"""
Dashboard Result Models

Outputs of the aggregation layer. These are plain containers; every
number in them is computed by expense_tracker.analytics.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from expense_tracker.models.entities import DateRange, Expense


class CategoryTotal(BaseModel):
    """Spending in one category over the filtered range."""

    category_id: str
    name: str
    total: float = Field(ge=0)


class DailyTotal(BaseModel):
    """Spending on a single calendar day."""

    date: dt.date
    amount: float = Field(ge=0)

    @property
    def label(self) -> str:
        """Short axis label, MM/DD."""
        return self.date.strftime("%m/%d")


class BudgetStatus(BaseModel):
    """
    Spending compared against the display threshold.

    This is informational only: nothing blocks spending over the threshold.
    """

    threshold: float = Field(gt=0)
    spent: float = Field(ge=0)

    @property
    def remaining(self) -> float:
        return max(self.threshold - self.spent, 0.0)

    @property
    def ratio(self) -> float:
        return self.spent / self.threshold

    @property
    def exceeded(self) -> bool:
        return self.spent > self.threshold


class DashboardSummary(BaseModel):
    """Everything the dashboard renders for one date range."""

    date_range: DateRange
    total_spent: float = 0.0
    personal_total: float = 0.0
    other_total: float = 0.0
    expense_count: int = 0
    average_expense: float = 0.0
    category_breakdown: list[CategoryTotal] = Field(default_factory=list)
    daily_trend: list[DailyTotal] = Field(default_factory=list)
    recent_activity: list[Expense] = Field(default_factory=list)
    top_category: Optional[str] = None
    most_used_account: Optional[str] = None
    budget: BudgetStatus
