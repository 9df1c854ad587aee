"""
Shared fixtures.

Every external boundary (Firestore, Firebase Auth, Gemini) is replaced
by an in-memory fake, so no test touches the network.
"""

import datetime as dt
from typing import Optional

import pytest

from expense_tracker.agents import InsightEngine
from expense_tracker.config import ErrorPolicy
from expense_tracker.models import Expense, ParsedExpense, User
from expense_tracker.services.identity import InMemoryIdentityProvider, SessionContext
from expense_tracker.services.storage import ExpenseRepository, InMemoryDocumentStore
from expense_tracker.validation import FormValidator


class FakeInsightEngine(InsightEngine):
    """Returns canned results and records what it was asked."""

    def __init__(self, parsed: Optional[ParsedExpense] = None, insights: str = "Spend less on coffee."):
        self.parsed = parsed
        self.insights = insights
        self.parse_calls: list[str] = []
        self.insight_calls = 0

    async def get_spending_insights(self, expenses, accounts, categories) -> str:
        self.insight_calls += 1
        return self.insights

    async def parse_natural_language_expense(self, text, accounts, categories, today=None):
        self.parse_calls.append(text)
        return self.parsed


def make_expense(
    amount: float,
    on: dt.date,
    category_id: str = "default-food",
    account_id: str = "default-upi",
    personal: Optional[bool] = None,
    **extra,
) -> Expense:
    return Expense(
        amount=amount,
        date=on,
        account_id=account_id,
        category_id=category_id,
        personal_expense=personal,
        **extra,
    )


@pytest.fixture
def user():
    return User(uid="user-1", email="asha@example.com", display_name="Asha")


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def session(user):
    """A session that is already signed in."""
    return SessionContext(InMemoryIdentityProvider(), user=user)


@pytest.fixture
def signed_out_session():
    return SessionContext(InMemoryIdentityProvider())


@pytest.fixture
def repository(store, session):
    return ExpenseRepository(store, session, error_policy=ErrorPolicy.SWALLOW)


@pytest.fixture
def validator():
    return FormValidator(validate_ai_references=True)


@pytest.fixture
def engine():
    return FakeInsightEngine()
