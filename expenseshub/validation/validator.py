"""
Payload Validation

DESIGN DECISION: Validation happens in two distinct steps:

STEP 1 - SCHEMA VALIDATION:
- Type checking
- Required field presence
- Length / range / pattern constraints
- Unknown field rejection on update payloads
All violations are collected, never just the first one.

STEP 2 - NORMALIZATION:
- Amounts rounded to 2 decimals (half-up)
- Naive dates interpreted in the configured time zone, stored as UTC
- Currency codes upper-cased
Normalization is an explicit step here, not a side effect of the
storage binding, so the rules are visible and testable on their own.

Uniqueness of (category name, type) is NOT checked here; it needs the
store and is reported by the persistence layer as a ConflictError.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from expenseshub.config import AppSettings, get_settings
from expenseshub.errors import ValidationError
from expenseshub.models import (
    CategoryCreate,
    SettingsUpdate,
    TransactionCreate,
    TransactionUpdate,
    ValidationIssue,
)


CENT = Decimal("0.01")


def normalize_amount(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def issues_from_pydantic(exc: PydanticValidationError) -> list[ValidationIssue]:
    """Flatten pydantic's error list into ValidationIssues."""
    issues = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        issues.append(ValidationIssue(
            field=loc or "body",
            issue_type=error.get("type", "invalid"),
            message=error.get("msg", "Invalid value"),
        ))
    return issues


class PayloadValidator:
    """
    Turns raw request payloads into normalized, typed values.

    Every public method either returns the normalized value or raises
    ValidationError carrying every violated constraint.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    @property
    def tz(self) -> ZoneInfo:
        return self._settings.tzinfo

    def normalize_date(self, value: datetime) -> datetime:
        """Attach the configured zone to naive values, then convert to UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.tz)
        return value.astimezone(timezone.utc)

    def _parse(
        self,
        model: type[BaseModel],
        payload: Any,
        message: str,
        extra_issues: Optional[list[ValidationIssue]] = None,
    ) -> BaseModel:
        if not isinstance(payload, Mapping):
            raise ValidationError(message, [
                ValidationIssue(
                    field="body",
                    issue_type="invalid_type",
                    message="Request body must be a JSON object",
                )
            ])
        extra_issues = extra_issues or []
        try:
            data = model.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise ValidationError(message, issues_from_pydantic(e) + extra_issues)
        if extra_issues:
            raise ValidationError(message, extra_issues)
        return data

    def _reject_nulls(self, changes: dict[str, Any], model: type[BaseModel], message: str) -> None:
        """Fields on partial updates may be omitted, but not explicitly nulled."""
        issues = [
            ValidationIssue(
                field=model.model_fields[name].alias or name,
                issue_type="null_value",
                message="Field may be omitted but not null",
            )
            for name, value in changes.items()
            if value is None
        ]
        if issues:
            raise ValidationError(message, issues)

    def _rounding_issues(self, payload: Any) -> list[ValidationIssue]:
        """Positive amounts that still round down to 0.00."""
        if not isinstance(payload, Mapping) or payload.get("amount") is None:
            return []
        try:
            amount = Decimal(str(payload["amount"]))
            if amount <= 0 or normalize_amount(amount) > 0:
                return []
        except (InvalidOperation, ValueError):
            return []
        return [
            ValidationIssue(
                field="amount",
                issue_type="greater_than",
                message="Amount must be at least 0.01 after rounding",
            )
        ]

    def validate_transaction_create(
        self,
        payload: Any,
        now: Optional[datetime] = None,
    ) -> TransactionCreate:
        """
        Validate a transaction creation payload.

        Args:
            payload: Raw JSON object
            now: Default for a missing `date` (current time if None)

        Returns:
            TransactionCreate with rounded amount and a UTC date
        """
        message = "Invalid transaction data"
        data: TransactionCreate = self._parse(
            TransactionCreate, payload, message, self._rounding_issues(payload)
        )

        amount = normalize_amount(data.amount)
        date = self.normalize_date(data.date) if data.date else (now or datetime.now(timezone.utc))

        return data.model_copy(update={
            "amount": amount,
            "date": date,
            "description": data.description or "",
        })

    def validate_transaction_update(self, payload: Any) -> dict[str, Any]:
        """
        Validate a partial transaction update.

        Returns:
            Change set keyed by field name; only fields the caller sent.
            An empty payload yields an empty change set.
        """
        message = "Invalid update data"
        data: TransactionUpdate = self._parse(
            TransactionUpdate, payload, message, self._rounding_issues(payload)
        )

        changes = data.model_dump(exclude_unset=True)
        self._reject_nulls(changes, TransactionUpdate, message)

        if "amount" in changes:
            changes["amount"] = normalize_amount(changes["amount"])
        if "date" in changes:
            changes["date"] = self.normalize_date(changes["date"])
        return changes

    def validate_category_create(self, payload: Any) -> CategoryCreate:
        """
        Validate a category creation payload.

        `order` stays None when omitted; the caller assigns it.
        """
        return self._parse(CategoryCreate, payload, "Invalid category data")

    def validate_settings_update(self, payload: Any) -> dict[str, Any]:
        """Validate a partial settings update."""
        message = "Invalid settings data"
        data: SettingsUpdate = self._parse(SettingsUpdate, payload, message)

        changes = data.model_dump(exclude_unset=True)
        self._reject_nulls(changes, SettingsUpdate, message)

        if "currency" in changes:
            changes["currency"] = changes["currency"].upper()
        return changes
