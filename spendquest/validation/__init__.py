"""Validation package."""

from spendquest.validation.validator import (
    RecordValidator,
    ValidationIssue,
    ValidationRejectedError,
    ValidationResult,
    issues_from_error,
    parse_amount,
)

__all__ = [
    "RecordValidator",
    "ValidationIssue",
    "ValidationRejectedError",
    "ValidationResult",
    "issues_from_error",
    "parse_amount",
]
