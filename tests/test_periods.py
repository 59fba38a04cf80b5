"""Tests for period ranges and period filtering."""

import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from conftest import make_transaction
from expenseshub.errors import InvalidPeriodError, ValidationError
from expenseshub.models import PeriodType
from expenseshub.queries import filter_transactions, parse_period, period_range


UTC = timezone.utc
MADRID = ZoneInfo("Europe/Madrid")


class TestParsePeriod:
    """Tests for period selector parsing."""

    def test_known_periods(self):
        assert parse_period("daily") is PeriodType.DAILY
        assert parse_period(PeriodType.YEARLY) is PeriodType.YEARLY

    def test_unknown_period_raises(self):
        """Test that anything else is an InvalidPeriodError on field 'period'."""
        with pytest.raises(InvalidPeriodError) as exc_info:
            parse_period("fortnightly")

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.fields == ["period"]
        assert exc_info.value.status_code == 400


class TestPeriodRange:
    """Tests for calendar boundaries."""

    def test_daily(self):
        window = period_range("daily", datetime(2024, 3, 15, 10, 30, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 3, 15, tzinfo=UTC)
        assert window.end == datetime(2024, 3, 16, tzinfo=UTC)

    def test_weekly_starts_on_monday(self):
        """Test that a Thursday maps to the Monday-Sunday week around it."""
        window = period_range("weekly", datetime(2024, 3, 14, 9, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 3, 11, tzinfo=UTC)
        assert window.end == datetime(2024, 3, 18, tzinfo=UTC)

    def test_weekly_on_sunday(self):
        window = period_range("weekly", datetime(2024, 3, 17, 23, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 3, 11, tzinfo=UTC)

    def test_weekly_on_monday(self):
        window = period_range("weekly", datetime(2024, 3, 11, 0, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 3, 11, tzinfo=UTC)

    def test_monthly(self):
        window = period_range("monthly", datetime(2024, 2, 10, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 2, 1, tzinfo=UTC)
        assert window.end == datetime(2024, 3, 1, tzinfo=UTC)

    def test_monthly_december_rolls_into_next_year(self):
        window = period_range("monthly", datetime(2024, 12, 31, 18, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 12, 1, tzinfo=UTC)
        assert window.end == datetime(2025, 1, 1, tzinfo=UTC)

    def test_yearly(self):
        window = period_range(PeriodType.YEARLY, datetime(2024, 7, 4, tzinfo=UTC), UTC)
        assert window.start == datetime(2024, 1, 1, tzinfo=UTC)
        assert window.end == datetime(2025, 1, 1, tzinfo=UTC)

    def test_result_carries_period(self):
        window = period_range("weekly", datetime(2024, 3, 14, tzinfo=UTC), UTC)
        assert window.period is PeriodType.WEEKLY

    def test_invalid_period_raises(self):
        with pytest.raises(InvalidPeriodError):
            period_range("hourly", datetime(2024, 3, 14, tzinfo=UTC), UTC)

    def test_boundaries_use_configured_zone(self):
        """Test that 23:30 UTC on Mar 31 is already April in Madrid."""
        window = period_range("monthly", datetime(2024, 3, 31, 23, 30, tzinfo=UTC), MADRID)
        assert window.start.astimezone(UTC) == datetime(2024, 3, 31, 22, 0, tzinfo=UTC)
        assert window.end.astimezone(UTC) == datetime(2024, 4, 30, 22, 0, tzinfo=UTC)

    def test_dst_day_has_real_length(self):
        """Test that the spring-forward day is 23 hours long."""
        window = period_range("daily", datetime(2024, 3, 31, 12, tzinfo=UTC), MADRID)
        assert window.end.astimezone(UTC) - window.start.astimezone(UTC) == timedelta(hours=23)

    def test_naive_reference_is_read_in_zone(self):
        window = period_range("daily", datetime(2024, 3, 15, 0, 30), MADRID)
        assert window.start == datetime(2024, 3, 15, tzinfo=MADRID)

    def test_defaults_to_now(self):
        window = period_range("daily", tz=UTC)
        assert window.contains(datetime.now(UTC))


class TestFilterTransactions:
    """Tests for windowing a list of transactions."""

    def test_half_open_boundaries(self):
        window = period_range("daily", datetime(2024, 3, 15, tzinfo=UTC), UTC)
        at_start = make_transaction(1, date=window.start)
        before_end = make_transaction(2, date=window.end - timedelta(microseconds=1))
        at_end = make_transaction(3, date=window.end)
        before_start = make_transaction(4, date=window.start - timedelta(seconds=1))

        kept = filter_transactions([at_start, before_end, at_end, before_start], window)

        assert [t.id for t in kept] == [at_start.id, before_end.id]

    def test_empty_input(self):
        window = period_range("yearly", datetime(2024, 3, 15, tzinfo=UTC), UTC)
        assert filter_transactions([], window) == []
