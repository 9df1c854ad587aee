"""
Default Seed Data

Shown when nobody is signed in, or when a signed-in user has not created
any accounts/categories yet (first-run experience). Seed records are never
written back automatically; they become real documents only if the user
saves them.

Ids are fixed so that expenses created against a seed record keep
resolving across sessions.
"""

from expense_tracker.models import (
    Account,
    AccountType,
    Category,
    CategoryType,
)


DEFAULT_ACCOUNTS: tuple[Account, ...] = (
    Account(id="default-credit-card", name="Credit Card", type=AccountType.CREDIT),
    Account(id="default-debit-card", name="Debit Card", type=AccountType.DEBIT),
    Account(id="default-upi", name="UPI Wallet", type=AccountType.UPI),
)

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(
        id="default-food",
        name="Food & Dining",
        type=CategoryType.PERSONAL,
        sub_categories=["Groceries", "Restaurants", "Coffee"],
    ),
    Category(
        id="default-transport",
        name="Transport",
        type=CategoryType.PERSONAL,
        sub_categories=["Fuel", "Cab", "Metro"],
    ),
    Category(
        id="default-bills",
        name="Bills & Utilities",
        type=CategoryType.PERSONAL,
        sub_categories=["Electricity", "Internet", "Mobile"],
    ),
    Category(
        id="default-shopping",
        name="Shopping",
        type=CategoryType.PERSONAL,
        sub_categories=[],
    ),
    Category(
        id="default-health",
        name="Health",
        type=CategoryType.PERSONAL,
        sub_categories=["Medicine", "Doctor"],
    ),
    Category(
        id="default-business",
        name="Business",
        type=CategoryType.OTHER,
        sub_categories=["Travel", "Client Meals"],
    ),
)


def default_accounts() -> list[Account]:
    """Fresh copies of the seed accounts."""
    return [account.model_copy(deep=True) for account in DEFAULT_ACCOUNTS]


def default_categories() -> list[Category]:
    """Fresh copies of the seed categories."""
    return [category.model_copy(deep=True) for category in DEFAULT_CATEGORIES]
