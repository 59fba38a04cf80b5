"""
Data Models Package

This package contains all Pydantic models used in ExpensesHub.
All data flowing through the system must conform to these schemas.
"""

from expenseshub.models.finance import (
    BreakdownReport,
    Category,
    CategoryBreakdown,
    CategoryCreate,
    ChartDataPoint,
    ChartType,
    DataView,
    PeriodRange,
    PeriodSummary,
    PeriodType,
    SettingsUpdate,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
    TransactionView,
    UserSettings,
    ValidationIssue,
    utcnow,
)

__all__ = [
    # Records
    "Category",
    "Transaction",
    "TransactionView",
    "UserSettings",
    # Payloads
    "CategoryCreate",
    "SettingsUpdate",
    "TransactionCreate",
    "TransactionUpdate",
    # Enums
    "ChartType",
    "DataView",
    "PeriodType",
    "TransactionType",
    # Reporting
    "BreakdownReport",
    "CategoryBreakdown",
    "ChartDataPoint",
    "PeriodRange",
    "PeriodSummary",
    # Validation
    "ValidationIssue",
    "utcnow",
]
