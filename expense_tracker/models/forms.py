"""
Form Validation Models

Validation never raises: it reports issues so the page can show them
next to the offending field, before any network call is made.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'duplicate', 'unknown_reference')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class FormResult(BaseModel):
    """
    Outcome of a form submission on one of the manager pages.

    `record` carries the saved Account/Category/Expense on success.
    """

    success: bool
    message: str = ""
    issues: list[ValidationIssue] = Field(default_factory=list)
    record: Optional[Any] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    def issues_for(self, field: str) -> list[ValidationIssue]:
        """Issues attached to one form field."""
        return [issue for issue in self.issues if issue.field == field]

    @classmethod
    def invalid(cls, issues: list[ValidationIssue]) -> "FormResult":
        """Failed result built from validation issues."""
        message = issues[0].message if issues else "Please check the form"
        return cls(success=False, message=message, issues=issues)

    @classmethod
    def failed(cls, message: str) -> "FormResult":
        return cls(success=False, message=message)
