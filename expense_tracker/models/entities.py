"""
Core Data Models for Expense Tracker

These models define the schemas for every record a user owns:
accounts (payment sources), categories (spending buckets) and expenses.

DESIGN DECISION: Python attributes are snake_case, stored documents are
camelCase. The alias generator bridges the two so the Firestore documents
keep the exact shape the web client has always written.

DESIGN DECISION: Category documents have drifted over time (older ones
lack `type` and `subCategories`). Rather than letting every page guess,
`Category.from_document` is the single migration/defaulting step and runs
at the persistence boundary.
"""

import datetime as dt
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kind of payment source."""
    CREDIT = "credit"
    DEBIT = "debit"
    UPI = "upi"


class CategoryType(str, Enum):
    """Whether a category is for self-spending or third-party spending."""
    PERSONAL = "personal"
    OTHER = "other"


class DateRange(str, Enum):
    """
    Dashboard date filter.

    WEEK is a rolling 7x24h window, not a calendar week.
    """
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ExpenseScope(str, Enum):
    """Ledger filter on the personal/other flag."""
    ALL = "all"
    PERSONAL = "personal"
    OTHER = "other"


def generate_id() -> str:
    """Random unique id, generated client-side."""
    return str(uuid4())


# =============================================================================
# STORED RECORDS
# =============================================================================

class DocumentModel(BaseModel):
    """Base for records persisted as documents."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a camelCase document, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def from_document(cls, data: dict[str, Any]):
        """Build a record from a stored document."""
        return cls.model_validate(data)


class Account(DocumentModel):
    """A card or wallet the user spends from."""

    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Client-generated unique id"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Bank or wallet name"
    )
    nickname: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Friendly label (e.g. Daily Use)"
    )
    type: AccountType = Field(
        default=AccountType.DEBIT,
        description="credit, debit or upi"
    )
    last_four: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}$",
        description="Last four digits of the card"
    )

    @field_validator('nickname', 'last_four', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty strings are stored as absent fields."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def label(self) -> str:
        """Display label: name plus nickname when present."""
        if self.nickname:
            return f"{self.name} ({self.nickname})"
        return self.name


class Category(DocumentModel):
    """
    A user-defined spending bucket.

    Subcategories are appended only, never renamed or removed.
    """

    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Client-generated unique id"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name (unique per user, case-insensitive)"
    )
    type: CategoryType = Field(
        default=CategoryType.PERSONAL,
        description="personal or other"
    )
    sub_categories: list[str] = Field(
        default_factory=list,
        description="Secondary labels within this category"
    )

    @model_validator(mode='before')
    @classmethod
    def migrate_legacy_shape(cls, data: Any) -> Any:
        """Fill fields missing from older `{id, name}` documents."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("type"):
            data.pop("type", None)
        for key in ("subCategories", "sub_categories"):
            if key in data and data[key] is None:
                data[key] = []
        return data

    def has_subcategory(self, name: str) -> bool:
        """Case-insensitive subcategory lookup."""
        wanted = name.strip().lower()
        return any(sub.lower() == wanted for sub in self.sub_categories)

    def with_subcategory(self, name: str) -> "Category":
        """Return a copy with `name` appended to the subcategories."""
        return self.model_copy(
            update={"sub_categories": [*self.sub_categories, name.strip()]}
        )


class Expense(DocumentModel):
    """
    A single spending transaction.

    account_id and category_id are plain references: nothing checks that
    they still exist, and display code resolves dangling ids to a fallback.
    """

    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Client-generated unique id"
    )
    amount: float = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    date: dt.date = Field(
        ...,
        description="Day of the expense (stored as YYYY-MM-DD)"
    )
    account_id: str = Field(
        ...,
        min_length=1,
        description="Account the money came from"
    )
    category_id: str = Field(
        ...,
        min_length=1,
        description="Category the expense belongs to"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Free-text note"
    )
    personal_expense: Optional[bool] = Field(
        default=None,
        description="True = personal, False = other; absent means personal"
    )
    sub_category: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Free-text subcategory (older records)"
    )

    @property
    def is_personal(self) -> bool:
        """Personal unless explicitly flagged otherwise."""
        return self.personal_expense if self.personal_expense is not None else True


# =============================================================================
# IDENTITY
# =============================================================================

class User(BaseModel):
    """The signed-in user, as reported by the identity provider."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    uid: str = Field(..., min_length=1)
    email: str
    display_name: Optional[str] = None

    @property
    def initial(self) -> str:
        """Avatar letter for the navigation chrome."""
        for source in (self.display_name, self.email):
            if source:
                return source[0].upper()
        return "U"


# =============================================================================
# AI PARSE RESULT
# =============================================================================

class ParsedExpense(BaseModel):
    """
    Structured result of a natural-language expense parse.

    CRITICAL: This is PROPOSED data from the model. Every field is
    optional and must be checked before an Expense is built from it.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    amount: Optional[float] = None
    date: Optional[dt.date] = None
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    sub_category: Optional[str] = None
    description: Optional[str] = None

    @field_validator('date', mode='before')
    @classmethod
    def drop_unparseable_date(cls, v: Any) -> Any:
        """A malformed date from the model falls back to the caller's default."""
        if v is None or isinstance(v, dt.date):
            return v
        try:
            return dt.date.fromisoformat(str(v).strip())
        except ValueError:
            return None

    @field_validator('account_id', 'category_id', 'sub_category', 'description', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def missing_required_fields(self) -> list[str]:
        """Names of the fields an Expense cannot be built without."""
        missing = []
        if self.amount is None:
            missing.append("amount")
        if not self.account_id:
            missing.append("accountId")
        if not self.category_id:
            missing.append("categoryId")
        return missing
