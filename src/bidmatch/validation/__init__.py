"""Validation module for checking roster input."""

from bidmatch.validation.validator import (
    RosterValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "RosterValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
