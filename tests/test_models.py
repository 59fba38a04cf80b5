"""
Tests for ExpensesHub models

Test strategy:
1. Unit tests for individual components (models, validators, queries)
2. Integration tests for flows and the HTTP API (in-memory storage)
3. No real database or network calls in tests
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from expenseshub.models import (
    Category,
    CategoryCreate,
    ChartDataPoint,
    DataView,
    PeriodRange,
    PeriodType,
    SettingsUpdate,
    Transaction,
    TransactionType,
    TransactionUpdate,
    TransactionView,
    UserSettings,
)


class TestTransactionModel:
    """Tests for the stored transaction record."""

    def test_transaction_creation(self):
        """Test Transaction model creation with defaults."""
        transaction = Transaction(
            id="t1",
            type=TransactionType.EXPENSE,
            amount=Decimal("12.50"),
            category_id="food",
        )
        assert transaction.description == ""
        assert transaction.date.tzinfo is not None
        assert transaction.amount == Decimal("12.50")

    def test_transaction_accepts_camel_case_input(self):
        """Test that wire names populate snake_case attributes."""
        transaction = Transaction.model_validate({
            "id": "t1",
            "type": "income",
            "amount": 100,
            "categoryId": "salary",
        })
        assert transaction.category_id == "salary"
        assert transaction.type is TransactionType.INCOME

    def test_transaction_json_uses_camel_case_and_numbers(self):
        """Test that JSON output has camelCase keys and numeric amounts."""
        transaction = Transaction(
            id="t1",
            type=TransactionType.EXPENSE,
            amount=Decimal("20.00"),
            category_id="food",
        )
        data = transaction.model_dump(mode="json", by_alias=True)
        assert data["categoryId"] == "food"
        assert data["amount"] == 20.0
        assert "createdAt" in data

    def test_transaction_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-5"):
            with pytest.raises(ValueError):
                Transaction(
                    id="t1",
                    type=TransactionType.EXPENSE,
                    amount=Decimal(amount),
                    category_id="food",
                )

    def test_transaction_rejects_long_description(self):
        with pytest.raises(ValueError):
            Transaction(
                id="t1",
                type=TransactionType.EXPENSE,
                amount=Decimal("1"),
                category_id="food",
                description="x" * 201,
            )

    def test_transaction_view_allows_missing_category(self):
        """Test that a dangling category reference resolves to None."""
        view = TransactionView(
            id="t1",
            type=TransactionType.EXPENSE,
            amount=Decimal("1"),
            category_id="gone",
        )
        assert view.category is None


class TestCategoryModel:
    """Tests for category records and payloads."""

    def test_category_defaults(self):
        category = Category(id="c1", name="Pets", type=TransactionType.EXPENSE)
        assert category.icon == "🔷"
        assert category.color == "#8B5CF6"
        assert category.is_default is False
        assert category.order == 0

    def test_category_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        category = Category(id="c1", name="  Pets  ", type=TransactionType.EXPENSE)
        assert category.name == "Pets"

    def test_category_rejects_bad_color(self):
        for color in ("red", "#12345", "#GGGGGG", "10B981"):
            with pytest.raises(ValueError):
                Category(id="c1", name="Pets", color=color, type=TransactionType.EXPENSE)

    def test_category_name_length(self):
        with pytest.raises(ValueError):
            Category(id="c1", name="x" * 31, type=TransactionType.EXPENSE)
        Category(id="c1", name="x" * 30, type=TransactionType.EXPENSE)

    def test_category_create_order_is_optional(self):
        data = CategoryCreate(name="Pets", type=TransactionType.EXPENSE)
        assert data.order is None


class TestSettingsModels:
    """Tests for the settings singleton."""

    def test_user_settings_defaults(self):
        settings = UserSettings(id="s1")
        assert settings.default_period is PeriodType.MONTHLY
        assert settings.default_chart_type.value == "bar"
        assert settings.default_data_view is DataView.EXPENSES
        assert settings.currency == "EUR"

    def test_settings_update_forbids_unknown_fields(self):
        with pytest.raises(ValueError):
            SettingsUpdate.model_validate({"theme": "dark"})

    def test_transaction_update_forbids_unknown_fields(self):
        with pytest.raises(ValueError):
            TransactionUpdate.model_validate({"amount": 5, "owner": "me"})


class TestEnums:
    """Tests for enum helpers."""

    def test_data_view_maps_to_transaction_type(self):
        assert DataView.EXPENSES.transaction_type is TransactionType.EXPENSE
        assert DataView.INCOMES.transaction_type is TransactionType.INCOME

    def test_enums_are_strings(self):
        assert TransactionType.EXPENSE == "expense"
        assert PeriodType("weekly") is PeriodType.WEEKLY


class TestReportingModels:
    """Tests for period ranges and chart points."""

    def test_period_range_is_half_open(self):
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        end = datetime(2024, 4, 1, tzinfo=timezone.utc)
        window = PeriodRange(period=PeriodType.MONTHLY, start=start, end=end)

        assert window.contains(start)
        assert window.contains(end - timedelta(microseconds=1))
        assert not window.contains(end)
        assert not window.contains(start - timedelta(seconds=1))

    def test_chart_point_serializes_value_as_number(self):
        point = ChartDataPoint(label="Food", value=Decimal("12.50"), color="#10B981", percentage=50.0)
        assert point.model_dump(mode="json")["value"] == 12.5
