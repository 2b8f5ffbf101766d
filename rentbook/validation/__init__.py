"""Validation package."""

from rentbook.validation.validator import (
    RecordValidator,
    ValidationError,
    ValidationIssue,
    check_month_key,
    parse_draft,
)

__all__ = [
    "RecordValidator",
    "ValidationError",
    "ValidationIssue",
    "check_month_key",
    "parse_draft",
]
