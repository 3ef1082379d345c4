"""Input validation package."""

from smart_spend.validation.validator import (
    ExpenseValidator,
    ValidationError,
    ValidationIssue,
)

__all__ = ["ExpenseValidator", "ValidationError", "ValidationIssue"]
