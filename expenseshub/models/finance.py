"""
Core Data Models for ExpensesHub

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and for the HTTP API

DESIGN DECISION: Stored records and request payloads are separate models.
Records (Transaction, Category, UserSettings) are what storage returns and
always carry an id and timestamps. Payload models (*Create, *Update) are
what the validation layer produces from raw input.

Wire format uses camelCase aliases; Python code uses snake_case names.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
)
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# Decimal in Python, JSON number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

MAX_TRANSACTION_AMOUNT = Decimal("1000000")
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
DEFAULT_CATEGORY_ICON = "🔷"
DEFAULT_CATEGORY_COLOR = "#8B5CF6"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money flow. Categories share the same two kinds."""
    EXPENSE = "expense"
    INCOME = "income"


class PeriodType(str, Enum):
    """Calendar unit used to window transactions."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ChartType(str, Enum):
    BAR = "bar"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    LINE = "line"


class DataView(str, Enum):
    """Which side of the ledger the dashboard shows by default."""
    EXPENSES = "expenses"
    INCOMES = "incomes"

    @property
    def transaction_type(self) -> TransactionType:
        if self is DataView.INCOMES:
            return TransactionType.INCOME
        return TransactionType.EXPENSE


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# STORED RECORDS
# =============================================================================

class Transaction(CamelModel):
    """
    A single expense or income entry.

    The amount is already normalized (2 decimals, positive) by the
    time a Transaction exists; see expenseshub.validation.
    """

    id: str = Field(
        ...,
        description="Opaque unique identifier"
    )
    type: TransactionType
    amount: Money = Field(
        ...,
        gt=0,
        description="Positive amount, 2 decimal places"
    )
    category_id: str = Field(
        ...,
        min_length=1,
        description="Weak reference to a Category id"
    )
    description: str = Field(
        default="",
        max_length=200,
    )
    date: datetime = Field(
        default_factory=utcnow,
        description="When the transaction happened"
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Category(CamelModel):
    """
    A named bucket for transactions of one type.

    (name, type) is unique across the collection.
    """

    id: str
    name: str = Field(
        ...,
        min_length=1,
        max_length=30,
    )
    icon: str = Field(
        default=DEFAULT_CATEGORY_ICON,
        min_length=1,
    )
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR,
        pattern=HEX_COLOR_PATTERN,
    )
    type: TransactionType
    is_default: bool = Field(
        default=False,
        description="True for system-seeded categories"
    )
    order: int = Field(
        default=0,
        ge=0,
        description="Display position within its type"
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class UserSettings(CamelModel):
    """Singleton preferences record."""

    id: str
    default_period: PeriodType = PeriodType.MONTHLY
    default_chart_type: ChartType = ChartType.BAR
    default_data_view: DataView = DataView.EXPENSES
    currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class TransactionView(Transaction):
    """Transaction with its category resolved, as listed by the API."""

    category: Optional[Category] = Field(
        default=None,
        description="Resolved category, None if it no longer exists"
    )


# =============================================================================
# PAYLOADS (produced by the validation layer)
# =============================================================================

class TransactionCreate(CamelModel):
    """Creation payload. Amount is rounded by the validation layer."""

    type: TransactionType
    amount: Decimal = Field(..., gt=0, le=MAX_TRANSACTION_AMOUNT)
    category_id: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None, max_length=200)
    date: Optional[datetime] = None


class TransactionUpdate(CamelModel):
    """
    Partial update payload.

    Unknown fields are rejected. Only fields the caller actually
    sent end up in the change set (see model_dump(exclude_unset=True)).
    """
    model_config = ConfigDict(extra="forbid")

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, le=MAX_TRANSACTION_AMOUNT)
    category_id: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, max_length=200)
    date: Optional[datetime] = None


class CategoryCreate(CamelModel):
    """Creation payload for a user category."""

    name: str = Field(..., min_length=1, max_length=30)
    icon: str = Field(default=DEFAULT_CATEGORY_ICON, min_length=1)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN)
    type: TransactionType
    order: Optional[int] = Field(default=None, ge=0, strict=True)


class SettingsUpdate(CamelModel):
    """Partial update of the preferences singleton."""
    model_config = ConfigDict(extra="forbid")

    default_period: Optional[PeriodType] = None
    default_chart_type: Optional[ChartType] = None
    default_data_view: Optional[DataView] = None
    currency: Optional[str] = Field(
        default=None,
        pattern=r"^[A-Za-z]{3}$",
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single violated field constraint."""

    field: str = Field(
        ...,
        description="Field with the issue (dotted path for nested input)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_long', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


# =============================================================================
# REPORTING MODELS
# =============================================================================

class PeriodRange(CamelModel):
    """
    Half-open time window [start, end).

    Both bounds are timezone-aware.
    """

    period: PeriodType
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


class ChartDataPoint(CamelModel):
    """One slice/bar of a category breakdown chart."""

    label: str
    value: Money
    color: str
    percentage: float = Field(..., ge=0)


class CategoryBreakdown(CamelModel):
    """Per-category total with transaction count."""

    category_id: str
    category_name: str
    category_color: str
    total: Money
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class PeriodSummary(CamelModel):
    """Income vs. expense totals for a set of transactions."""

    total_income: Money = Decimal("0")
    total_expenses: Money = Decimal("0")
    balance: Money = Decimal("0")
    transaction_count: int = 0


class BreakdownReport(CamelModel):
    """Everything the dashboard needs to draw one period."""

    range: PeriodRange
    type: TransactionType
    points: list[ChartDataPoint] = Field(default_factory=list)
    summary: PeriodSummary
