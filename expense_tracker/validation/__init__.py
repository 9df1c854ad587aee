"""Form validation package."""

from expense_tracker.validation.validator import (
    FormValidator,
    issues_from_validation_error,
    normalize_last_four,
    parse_amount,
)

__all__ = [
    "FormValidator",
    "issues_from_validation_error",
    "normalize_last_four",
    "parse_amount",
]
