"""
Abstract Insight Engine Interface

The boundary to the hosted language model. Implementations MUST NOT
raise to the caller: failures degrade to a canned string or None.
"""

import datetime as dt
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from expense_tracker.models import Account, Category, Expense, ParsedExpense


NO_EXPENSES_MESSAGE = "Add some expenses to get AI insights!"
EMPTY_INSIGHTS_MESSAGE = "I couldn't generate insights at this moment."
INSIGHTS_FAILED_MESSAGE = (
    "I'm having trouble analyzing your data right now. Please try again in a moment."
)


class InsightEngine(ABC):
    """Spending advice and natural-language expense parsing."""

    @abstractmethod
    async def get_spending_insights(
        self,
        expenses: Sequence[Expense],
        accounts: Sequence[Account],
        categories: Sequence[Category],
    ) -> str:
        """
        Short, actionable advice about the user's recent spending.

        Returns NO_EXPENSES_MESSAGE for an empty list and
        INSIGHTS_FAILED_MESSAGE on any remote error.
        """
        pass

    @abstractmethod
    async def parse_natural_language_expense(
        self,
        text: str,
        accounts: Sequence[Account],
        categories: Sequence[Category],
        today: Optional[dt.date] = None,
    ) -> Optional[ParsedExpense]:
        """
        Turn a sentence like "450 on lunch with HDFC card" into a partial expense.

        Returns None when the model fails or its output cannot be parsed.
        The result is NOT checked against the catalog here.
        """
        pass
