"""
Error Taxonomy

Every failure the system reports to a caller is one of these.
The HTTP layer maps each class to a status code, and the client
maps status codes back to the same classes, so both sides of the
wire speak the same vocabulary.
"""

from typing import Optional

from expenseshub.models.finance import ValidationIssue


class ExpensesHubError(Exception):
    """Base exception for all reported failures."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "issues": []}


class ValidationError(ExpensesHubError):
    """
    Input violated one or more field constraints.

    Carries every violation found, not just the first.
    """

    code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str,
        issues: Optional[list[ValidationIssue]] = None,
    ):
        self.issues = issues or []
        super().__init__(message)

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "issues": [issue.model_dump() for issue in self.issues],
        }


class InvalidPeriodError(ValidationError):
    """Unrecognized period selector."""

    code = "invalid_period"

    def __init__(self, period: object):
        self.period = period
        super().__init__(
            f"Unknown period: {period!r}. Expected daily, weekly, monthly or yearly",
            [
                ValidationIssue(
                    field="period",
                    issue_type="invalid_choice",
                    message=f"Unknown period: {period!r}",
                )
            ],
        )


class NotFoundError(ExpensesHubError):
    """Entity not found in storage."""

    code = "not_found"
    status_code = 404


class ConflictError(ExpensesHubError):
    """Attempted to insert a duplicate entity."""

    code = "conflict"
    status_code = 409


class DependencyError(ExpensesHubError):
    """Storage backend is unreachable or not configured."""

    code = "dependency_unavailable"
    status_code = 503

