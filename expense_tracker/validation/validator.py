"""
Form Validation

DESIGN DECISION: Everything here runs BEFORE any network call.
Validators return a list of ValidationIssue objects, each tied to a form
field, so the page can show the message next to the input. They never
raise and never fix the input silently.

Checks:
- Presence of required fields (name, amount, account, category)
- Finite positive amounts and the models' length limits
- Category names unique per user (case-insensitive)
- Subcategory names unique within their category (case-insensitive)
- AI parse results: required fields present and, optionally, ids that
  exist in the user's catalog
"""

import datetime as dt
import math
import re
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from expense_tracker.config import get_settings
from expense_tracker.models import (
    Account,
    Category,
    ParsedExpense,
    ValidationIssue,
)


MAX_NAME_LENGTH = 100


def parse_amount(raw: Any) -> Optional[float]:
    """Parse a form amount; None when blank, not a number or not finite."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", "")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


def normalize_last_four(raw: Optional[str]) -> Optional[str]:
    """Keep digits only, at most four of them. Blank → None."""
    if not raw:
        return None
    digits = re.sub(r"\D", "", raw)[:4]
    return digits or None


def _missing(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type="missing", message=message)


def _too_long(field: str, label: str, value: Optional[str], limit: int = MAX_NAME_LENGTH) -> list[ValidationIssue]:
    if value and len(value.strip()) > limit:
        return [ValidationIssue(
            field=field,
            issue_type="too_long",
            message=f"{label} must be at most {limit} characters",
        )]
    return []


def issues_from_validation_error(error: ValidationError) -> list[ValidationIssue]:
    """
    Turn a model ValidationError into form issues.

    Last line of defence when a record fails a model constraint the
    form checks did not cover.
    """
    issues = []
    for detail in error.errors():
        location = detail.get("loc") or ("form",)
        issues.append(ValidationIssue(
            field=str(location[0]),
            issue_type="invalid_value",
            message=detail.get("msg", "Invalid value"),
        ))
    return issues or [ValidationIssue(
        field="form", issue_type="invalid_value", message="Please check the form"
    )]


class FormValidator:
    """
    Validates manager-page forms and AI parse results.

    Stateless apart from the `validate_ai_references` switch, which
    decides whether AI-suggested ids must exist in the live catalog.
    """

    def __init__(self, validate_ai_references: Optional[bool] = None):
        if validate_ai_references is None:
            validate_ai_references = get_settings().app.validate_ai_references
        self._validate_ai_references = validate_ai_references

    def validate_account(
        self,
        name: str,
        last_four: Optional[str] = None,
        nickname: Optional[str] = None,
    ) -> list[ValidationIssue]:
        issues = []
        if not name or not name.strip():
            issues.append(_missing("name", "Please enter the account name"))
        elif len(name.strip()) > MAX_NAME_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Account name must be at most {MAX_NAME_LENGTH} characters",
            ))

        if last_four and not re.fullmatch(r"\d{4}", last_four):
            issues.append(ValidationIssue(
                field="last_four",
                issue_type="invalid_format",
                message="Last four digits must be exactly 4 digits",
            ))
        issues.extend(_too_long("nickname", "Nickname", nickname))
        return issues

    def validate_category(
        self,
        name: str,
        existing: Sequence[Category],
    ) -> list[ValidationIssue]:
        """Require a name that no existing category already uses."""
        if not name or not name.strip():
            return [_missing("name", "Please enter a category name")]

        wanted = name.strip().lower()
        if any(category.name.strip().lower() == wanted for category in existing):
            return [ValidationIssue(
                field="name",
                issue_type="duplicate",
                message=f"A category named '{name.strip()}' already exists",
            )]

        if len(name.strip()) > MAX_NAME_LENGTH:
            return [ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Category name must be at most {MAX_NAME_LENGTH} characters",
            )]
        return []

    def validate_subcategory(
        self,
        category: Optional[Category],
        name: str,
    ) -> list[ValidationIssue]:
        """Require a target category and a name new to it."""
        if category is None:
            return [_missing("category", "Please select a category first")]
        if not name or not name.strip():
            return [_missing("sub_category", "Please enter a subcategory name")]
        if category.has_subcategory(name):
            return [ValidationIssue(
                field="sub_category",
                issue_type="duplicate",
                message=f"'{name.strip()}' already exists in {category.name}",
            )]
        return _too_long("sub_category", "Subcategory name", name)

    def validate_expense(
        self,
        amount: Any,
        account_id: Optional[str],
        category_id: Optional[str],
        expense_date: Optional[dt.date] = None,
        sub_category: Optional[str] = None,
    ) -> list[ValidationIssue]:
        issues = []
        value = parse_amount(amount)
        if value is None:
            issues.append(_missing("amount", "Please enter an amount"))
        elif value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
            ))

        if not account_id:
            issues.append(_missing("account_id", "Please select an account"))
        if not category_id:
            issues.append(_missing("category_id", "Please select a category"))
        if expense_date is None:
            issues.append(_missing("date", "Please pick a date"))
        issues.extend(_too_long("sub_category", "Subcategory", sub_category))
        return issues

    def validate_parsed_expense(
        self,
        parsed: Optional[ParsedExpense],
        accounts: Sequence[Account],
        categories: Sequence[Category],
    ) -> list[ValidationIssue]:
        """
        Decide whether an AI parse can become an Expense.

        Missing amount/accountId/categoryId is always a failure. Unknown
        ids are a failure only when reference validation is enabled.
        """
        if parsed is None:
            return [ValidationIssue(
                field="text",
                issue_type="unparseable",
                message="Couldn't understand that. Try something like '450 on lunch with HDFC card'.",
            )]

        issues = [
            _missing(field, f"The AI could not work out the {field}")
            for field in parsed.missing_required_fields()
        ]
        if parsed.amount is not None and not (math.isfinite(parsed.amount) and parsed.amount > 0):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="The AI returned an amount that is not positive",
            ))
        issues.extend(_too_long("subCategory", "The AI's subcategory", parsed.sub_category))

        if issues or not self._validate_ai_references:
            return issues

        if parsed.account_id not in {a.id for a in accounts}:
            issues.append(ValidationIssue(
                field="accountId",
                issue_type="unknown_reference",
                message="The AI picked an account that doesn't exist",
            ))
        if parsed.category_id not in {c.id for c in categories}:
            issues.append(ValidationIssue(
                field="categoryId",
                issue_type="unknown_reference",
                message="The AI picked a category that doesn't exist",
            ))
        return issues

    @staticmethod
    def get_user_friendly_summary(issues: Sequence[ValidationIssue]) -> str:
        """One-line message for an alert banner."""
        errors = [i for i in issues if i.severity == "error"]
        if not errors:
            return "Looks good"
        if len(errors) == 1:
            return errors[0].message
        return f"{errors[0].message} (and {len(errors) - 1} more)"
