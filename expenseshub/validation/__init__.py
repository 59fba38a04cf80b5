"""Validation package."""

from expenseshub.validation.validator import (
    PayloadValidator,
    issues_from_pydantic,
    normalize_amount,
)

__all__ = ["PayloadValidator", "issues_from_pydantic", "normalize_amount"]
