"""
Expense Aggregation and Filtering

DESIGN DECISION: Every function here is PURE. It takes the full record
set plus an explicit `now`/`today` and returns a fresh value. No
caching, no storage access, no UI framework. The dashboard simply calls
these again on every render; with hundreds of records that is cheap.

Passing the clock in (instead of reading it) is what makes the date
windows testable.
"""

import datetime as dt
from collections import Counter
from typing import Iterable, Optional, Sequence

from expense_tracker.models import (
    Account,
    BudgetStatus,
    Category,
    CategoryTotal,
    DailyTotal,
    DashboardSummary,
    DateRange,
    Expense,
    ExpenseScope,
)


UNCATEGORIZED = "Uncategorized"
WEEK_WINDOW = dt.timedelta(days=7)
TREND_DAYS = 7
RECENT_ACTIVITY_LIMIT = 5


def _as_utc(moment: dt.datetime) -> dt.datetime:
    """Naive datetimes are read as UTC; aware ones are converted."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=dt.timezone.utc)
    return moment.astimezone(dt.timezone.utc)


# =============================================================================
# FILTERS
# =============================================================================

def in_range(expense: Expense, date_range: DateRange, now: dt.datetime) -> bool:
    """
    Check whether an expense falls inside a dashboard range.

    - WEEK: the expense day, taken at midnight UTC, is within the
      trailing 7x24h ending at `now`. A rolling window, not a calendar week
    - MONTH: same calendar month and year as `now`
    - YEAR: same calendar year as `now`

    Month and year use the wall-clock fields of `now` as given.
    """
    if date_range == DateRange.WEEK:
        moment = dt.datetime.combine(expense.date, dt.time.min, tzinfo=dt.timezone.utc)
        now_utc = _as_utc(now)
        return now_utc - WEEK_WINDOW <= moment <= now_utc
    if date_range == DateRange.MONTH:
        return expense.date.year == now.year and expense.date.month == now.month
    if date_range == DateRange.YEAR:
        return expense.date.year == now.year
    raise ValueError(f"Unknown date range: {date_range}")


def filter_by_range(
    expenses: Iterable[Expense],
    date_range: DateRange,
    now: dt.datetime,
) -> list[Expense]:
    """Expenses inside `date_range`, order preserved."""
    return [e for e in expenses if in_range(e, date_range, now)]


def filter_by_scope(
    expenses: Iterable[Expense],
    scope: ExpenseScope,
) -> list[Expense]:
    """Ledger filter: all, personal only, or other only."""
    if scope == ExpenseScope.ALL:
        return list(expenses)
    want_personal = scope == ExpenseScope.PERSONAL
    return [e for e in expenses if e.is_personal == want_personal]


# =============================================================================
# TOTALS
# =============================================================================

def total_spent(expenses: Iterable[Expense]) -> float:
    return sum(e.amount for e in expenses)


def personal_total(expenses: Iterable[Expense]) -> float:
    """Sum of personal expenses (an absent flag counts as personal)."""
    return sum(e.amount for e in expenses if e.is_personal)


def other_total(expenses: Sequence[Expense]) -> float:
    """Total minus the personal total."""
    return total_spent(expenses) - personal_total(expenses)


def personal_split(expenses: Sequence[Expense]) -> tuple[float, float]:
    """(personal, other) - the two always add up to the total."""
    personal = personal_total(expenses)
    return personal, total_spent(expenses) - personal


def expense_count(expenses: Sequence[Expense]) -> int:
    return len(expenses)


def average_expense(expenses: Sequence[Expense]) -> float:
    """Mean amount per expense; 0 for an empty list."""
    if not expenses:
        return 0.0
    return total_spent(expenses) / len(expenses)


# =============================================================================
# BREAKDOWNS AND SERIES
# =============================================================================

def category_breakdown(
    expenses: Sequence[Expense],
    categories: Sequence[Category],
) -> list[CategoryTotal]:
    """
    Per-category totals for the known categories.

    Categories with nothing spent are left out. Expenses whose category
    no longer exists are not attributed anywhere. Sorted by total,
    highest first; ties keep catalog order.
    """
    sums: dict[str, float] = {}
    for expense in expenses:
        sums[expense.category_id] = sums.get(expense.category_id, 0.0) + expense.amount

    totals = [
        CategoryTotal(category_id=c.id, name=c.name, total=sums[c.id])
        for c in categories
        if sums.get(c.id, 0.0) > 0
    ]
    totals.sort(key=lambda t: t.total, reverse=True)
    return totals


def daily_trend(
    expenses: Iterable[Expense],
    today: dt.date,
    days: int = TREND_DAYS,
) -> list[DailyTotal]:
    """
    Spending per calendar day for the last `days` days, oldest first,
    ending with `today`.

    Takes ALL expenses - the series ignores the dashboard range filter.
    """
    by_day: dict[dt.date, float] = {}
    for expense in expenses:
        by_day[expense.date] = by_day.get(expense.date, 0.0) + expense.amount

    series = []
    for offset in range(days - 1, -1, -1):
        day = today - dt.timedelta(days=offset)
        series.append(DailyTotal(date=day, amount=by_day.get(day, 0.0)))
    return series


def recent_activity(
    expenses: Sequence[Expense],
    limit: int = RECENT_ACTIVITY_LIMIT,
) -> list[Expense]:
    """First `limit` expenses in store order (newest date first)."""
    return list(expenses[:limit])


# =============================================================================
# LOOKUPS
# =============================================================================

def resolve_category_name(category_id: str, categories: Sequence[Category]) -> str:
    """Category name, or "Uncategorized" for a dangling id."""
    for category in categories:
        if category.id == category_id:
            return category.name
    return UNCATEGORIZED


def resolve_account_name(account_id: str, accounts: Sequence[Account]) -> str:
    """Account name, or blank for a dangling id."""
    for account in accounts:
        if account.id == account_id:
            return account.name
    return ""


def top_category(
    expenses: Sequence[Expense],
    categories: Sequence[Category],
) -> Optional[str]:
    """Name of the category with the highest spend, if any."""
    breakdown = category_breakdown(expenses, categories)
    return breakdown[0].name if breakdown else None


def most_used_account(
    expenses: Sequence[Expense],
    accounts: Sequence[Account],
) -> Optional[str]:
    """Name of the known account used by the most expenses, if any."""
    known = {a.id: a.name for a in accounts}
    counts = Counter(e.account_id for e in expenses if e.account_id in known)
    if not counts:
        return None
    account_id, _ = counts.most_common(1)[0]
    return known[account_id]


def budget_status(spent: float, threshold: float) -> BudgetStatus:
    """Compare spending against the display-only threshold."""
    return BudgetStatus(threshold=threshold, spent=spent)


# =============================================================================
# DASHBOARD
# =============================================================================

def build_dashboard_summary(
    expenses: Sequence[Expense],
    accounts: Sequence[Account],
    categories: Sequence[Category],
    date_range: DateRange,
    now: dt.datetime,
    budget_threshold: float,
    recent_limit: int = RECENT_ACTIVITY_LIMIT,
) -> DashboardSummary:
    """Compute every dashboard figure for one range in a single pass."""
    filtered = filter_by_range(expenses, date_range, now)
    personal, other = personal_split(filtered)
    spent = personal + other

    return DashboardSummary(
        date_range=date_range,
        total_spent=spent,
        personal_total=personal,
        other_total=other,
        expense_count=expense_count(filtered),
        average_expense=average_expense(filtered),
        category_breakdown=category_breakdown(filtered, categories),
        daily_trend=daily_trend(expenses, now.date()),
        recent_activity=recent_activity(expenses, recent_limit),
        top_category=top_category(filtered, categories),
        most_used_account=most_used_account(filtered, accounts),
        budget=budget_status(spent, budget_threshold),
    )
