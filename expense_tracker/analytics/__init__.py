"""Aggregation and filtering over in-memory expense lists."""

from expense_tracker.analytics.aggregation import (
    UNCATEGORIZED,
    average_expense,
    budget_status,
    build_dashboard_summary,
    category_breakdown,
    daily_trend,
    expense_count,
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

__all__ = [
    "UNCATEGORIZED",
    "average_expense",
    "budget_status",
    "build_dashboard_summary",
    "category_breakdown",
    "daily_trend",
    "expense_count",
    "filter_by_range",
    "filter_by_scope",
    "in_range",
    "most_used_account",
    "other_total",
    "personal_split",
    "personal_total",
    "recent_activity",
    "resolve_account_name",
    "resolve_category_name",
    "top_category",
    "total_spent",
]
