"""Tests for the dashboard aggregation and filtering functions."""

import datetime as dt

import pytest

from conftest import make_expense
from expense_tracker.analytics import (
    UNCATEGORIZED,
    average_expense,
    build_dashboard_summary,
    category_breakdown,
    daily_trend,
    filter_by_range,
    filter_by_scope,
    in_range,
    most_used_account,
    other_total,
    personal_split,
    personal_total,
    recent_activity,
    resolve_account_name,
    resolve_category_name,
    top_category,
    total_spent,
)
from expense_tracker.models import (
    Account,
    Category,
    CategoryType,
    DateRange,
    ExpenseScope,
)


NOW = dt.datetime(2024, 3, 15, 14, 30)
TODAY = NOW.date()

FOOD = Category(id="food", name="Food")
TRAVEL = Category(id="travel", name="Travel")
CLIENT = Category(id="client", name="Client", type=CategoryType.OTHER)
CATEGORIES = [FOOD, TRAVEL, CLIENT]

UPI = Account(id="upi", name="UPI Wallet")
CARD = Account(id="card", name="HDFC Card")
ACCOUNTS = [UPI, CARD]


class TestRangeFilter:
    """Tests for week / month / year filtering."""

    def test_week_excludes_eight_days_ago(self):
        """An expense 8 days back is outside the rolling week."""
        expense = make_expense(10, TODAY - dt.timedelta(days=8))
        assert not in_range(expense, DateRange.WEEK, NOW)

    def test_week_includes_six_days_ago(self):
        expense = make_expense(10, TODAY - dt.timedelta(days=6))
        assert in_range(expense, DateRange.WEEK, NOW)

    def test_week_includes_today(self):
        """Today's date, taken at midnight, is not after now."""
        assert in_range(make_expense(10, TODAY), DateRange.WEEK, NOW)

    def test_week_excludes_future_dates(self):
        assert not in_range(make_expense(10, TODAY + dt.timedelta(days=1)), DateRange.WEEK, NOW)

    def test_week_reads_dates_as_utc_midnight(self):
        """An aware `now` is converted to UTC before comparing."""
        ist = dt.timezone(dt.timedelta(hours=5, minutes=30))
        early_morning = dt.datetime(2024, 3, 15, 1, 0, tzinfo=ist)  # 2024-03-14 19:30 UTC
        assert not in_range(make_expense(10, dt.date(2024, 3, 15)), DateRange.WEEK, early_morning)
        assert in_range(make_expense(10, dt.date(2024, 3, 14)), DateRange.WEEK, early_morning)
        assert in_range(make_expense(10, dt.date(2024, 3, 8)), DateRange.WEEK, early_morning)
        assert not in_range(make_expense(10, dt.date(2024, 3, 7)), DateRange.WEEK, early_morning)

    def test_naive_now_is_utc(self):
        assert in_range(make_expense(10, TODAY), DateRange.WEEK, NOW)
        assert in_range(
            make_expense(10, TODAY), DateRange.WEEK, NOW.replace(tzinfo=dt.timezone.utc)
        )

    def test_month_uses_wall_clock_of_now(self):
        ist = dt.timezone(dt.timedelta(hours=5, minutes=30))
        april_first = dt.datetime(2024, 4, 1, 1, 0, tzinfo=ist)
        assert in_range(make_expense(10, dt.date(2024, 4, 1)), DateRange.MONTH, april_first)

    def test_month_boundaries(self):
        """First and last day of the month are in; the 1st of next month is out."""
        assert in_range(make_expense(10, dt.date(2024, 3, 1)), DateRange.MONTH, NOW)
        assert in_range(make_expense(10, dt.date(2024, 3, 31)), DateRange.MONTH, NOW)
        assert not in_range(make_expense(10, dt.date(2024, 4, 1)), DateRange.MONTH, NOW)
        assert not in_range(make_expense(10, dt.date(2024, 2, 29)), DateRange.MONTH, NOW)

    def test_month_requires_same_year(self):
        assert not in_range(make_expense(10, dt.date(2023, 3, 15)), DateRange.MONTH, NOW)

    def test_year_is_calendar_year(self):
        assert in_range(make_expense(10, dt.date(2024, 1, 1)), DateRange.YEAR, NOW)
        assert in_range(make_expense(10, dt.date(2024, 12, 31)), DateRange.YEAR, NOW)
        assert not in_range(make_expense(10, dt.date(2023, 12, 31)), DateRange.YEAR, NOW)

    def test_unknown_range_raises(self):
        with pytest.raises(ValueError):
            in_range(make_expense(10, TODAY), "decade", NOW)

    def test_filter_preserves_order(self):
        expenses = [
            make_expense(1, TODAY, id="a"),
            make_expense(2, dt.date(2023, 1, 1), id="b"),
            make_expense(3, TODAY - dt.timedelta(days=1), id="c"),
        ]
        assert [e.id for e in filter_by_range(expenses, DateRange.MONTH, NOW)] == ["a", "c"]


class TestTotals:
    """Tests for totals and the personal/other split."""

    def test_scenario_personal_and_other(self):
        """400 personal + 100 other this month gives 500 / 400 / 100."""
        expenses = [
            make_expense(400, dt.date(2024, 3, 10), personal=True),
            make_expense(100, dt.date(2024, 3, 11), category_id="client", personal=False),
        ]
        filtered = filter_by_range(expenses, DateRange.MONTH, NOW)
        assert total_spent(filtered) == 500
        assert personal_total(filtered) == 400
        assert other_total(filtered) == 100

    def test_absent_flag_counts_as_personal(self):
        expenses = [make_expense(70, TODAY), make_expense(30, TODAY, personal=False)]
        assert personal_split(expenses) == (70, 30)

    @pytest.mark.parametrize("date_range", list(DateRange))
    def test_split_adds_up_to_total(self, date_range):
        """personal + other always equals the filtered total."""
        expenses = [
            make_expense(12.35, TODAY, personal=True),
            make_expense(7.10, TODAY - dt.timedelta(days=3), personal=False),
            make_expense(99.99, dt.date(2024, 1, 20)),
            make_expense(0.01, dt.date(2023, 6, 1), personal=False),
        ]
        filtered = filter_by_range(expenses, date_range, NOW)
        personal, other = personal_split(filtered)
        assert personal + other == pytest.approx(total_spent(filtered))

    def test_average_expense(self):
        assert average_expense([]) == 0.0
        assert average_expense([make_expense(10, TODAY), make_expense(30, TODAY)]) == 20


class TestBreakdowns:
    """Tests for the category breakdown and the daily trend."""

    def test_breakdown_sorted_and_skips_zero_categories(self):
        """Categories with nothing spent do not appear."""
        expenses = [
            make_expense(50, TODAY, category_id="food"),
            make_expense(25, TODAY, category_id="food"),
            make_expense(200, TODAY, category_id="client"),
        ]
        breakdown = category_breakdown(expenses, CATEGORIES)
        assert [(t.category_id, t.total) for t in breakdown] == [("client", 200), ("food", 75)]
        assert "travel" not in {t.category_id for t in breakdown}

    def test_breakdown_ignores_dangling_categories(self):
        """Expenses whose category was deleted are not attributed anywhere."""
        expenses = [make_expense(50, TODAY, category_id="deleted")]
        assert category_breakdown(expenses, CATEGORIES) == []

    def test_trend_has_seven_days_ending_today(self):
        trend = daily_trend([], TODAY)
        assert len(trend) == 7
        assert trend[0].date == TODAY - dt.timedelta(days=6)
        assert trend[-1].date == TODAY
        assert all(a.date < b.date for a, b in zip(trend, trend[1:]))

    def test_trend_sums_per_day_over_all_expenses(self):
        """The trend ignores the dashboard range and sums same-day expenses."""
        expenses = [
            make_expense(10, TODAY),
            make_expense(5, TODAY),
            make_expense(8, TODAY - dt.timedelta(days=2)),
            make_expense(99, TODAY - dt.timedelta(days=30)),
        ]
        amounts = [d.amount for d in daily_trend(expenses, TODAY)]
        assert amounts == [0, 0, 0, 0, 8, 0, 15]

    def test_recent_activity_keeps_store_order(self):
        expenses = [make_expense(i + 1, TODAY, id=f"e{i}") for i in range(8)]
        assert [e.id for e in recent_activity(expenses)] == ["e0", "e1", "e2", "e3", "e4"]
        assert len(recent_activity(expenses, limit=2)) == 2


class TestLookups:
    """Tests for name resolution and the 'top' figures."""

    def test_dangling_ids(self):
        assert resolve_category_name("gone", CATEGORIES) == UNCATEGORIZED
        assert resolve_account_name("gone", ACCOUNTS) == ""
        assert resolve_category_name("food", CATEGORIES) == "Food"

    def test_top_category_and_account(self):
        expenses = [
            make_expense(10, TODAY, category_id="food", account_id="card"),
            make_expense(15, TODAY, category_id="food", account_id="card"),
            make_expense(20, TODAY, category_id="travel", account_id="upi"),
        ]
        assert top_category(expenses, CATEGORIES) == "Food"
        assert most_used_account(expenses, ACCOUNTS) == "HDFC Card"

    def test_top_figures_empty(self):
        assert top_category([], CATEGORIES) is None
        assert most_used_account([], ACCOUNTS) is None

    def test_scope_filter(self):
        expenses = [
            make_expense(1, TODAY, id="p"),
            make_expense(2, TODAY, id="o", personal=False),
        ]
        assert [e.id for e in filter_by_scope(expenses, ExpenseScope.ALL)] == ["p", "o"]
        assert [e.id for e in filter_by_scope(expenses, ExpenseScope.PERSONAL)] == ["p"]
        assert [e.id for e in filter_by_scope(expenses, ExpenseScope.OTHER)] == ["o"]


class TestDashboardSummary:
    """Tests for the composed dashboard figures."""

    def test_summary_for_month(self):
        expenses = [
            make_expense(400, dt.date(2024, 3, 14), category_id="food", account_id="upi"),
            make_expense(100, dt.date(2024, 3, 2), category_id="client", account_id="card", personal=False),
            make_expense(999, dt.date(2024, 2, 10), category_id="travel", account_id="card"),
        ]
        summary = build_dashboard_summary(
            expenses, ACCOUNTS, CATEGORIES, DateRange.MONTH, NOW, budget_threshold=450
        )
        assert summary.total_spent == 500
        assert summary.personal_total == 400
        assert summary.other_total == 100
        assert summary.expense_count == 2
        assert summary.average_expense == 250
        assert [t.name for t in summary.category_breakdown] == ["Food", "Client"]
        assert summary.top_category == "Food"
        assert summary.budget.exceeded
        assert len(summary.daily_trend) == 7
        # Recent activity is unfiltered
        assert len(summary.recent_activity) == 3

    def test_summary_empty(self):
        summary = build_dashboard_summary([], ACCOUNTS, CATEGORIES, DateRange.WEEK, NOW, budget_threshold=1000)
        assert summary.total_spent == 0
        assert summary.category_breakdown == []
        assert summary.top_category is None
        assert not summary.budget.exceeded
