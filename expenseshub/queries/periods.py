"""
Period Filter

Translates a period selector (daily/weekly/monthly/yearly) plus a
reference instant into a concrete half-open range [start, end).

TIME ZONE POLICY: boundaries are computed in one fixed, configured
zone (APP_TIMEZONE, default UTC), never the host's local time.
Naive reference instants are read as wall-clock time in that zone.
Weeks start on Monday.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from expenseshub.config import get_settings
from expenseshub.errors import InvalidPeriodError
from expenseshub.models import PeriodRange, PeriodType, Transaction


def parse_period(period: Union[str, PeriodType]) -> PeriodType:
    """
    Resolve a period selector.

    Raises:
        InvalidPeriodError: For anything other than the four known periods
    """
    if isinstance(period, PeriodType):
        return period
    try:
        return PeriodType(period)
    except ValueError:
        raise InvalidPeriodError(period)


def _local(reference: Optional[datetime], tz: ZoneInfo) -> datetime:
    if reference is None:
        return datetime.now(tz)
    if reference.tzinfo is None:
        return reference.replace(tzinfo=tz)
    return reference.astimezone(tz)


def _midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def period_range(
    period: Union[str, PeriodType],
    reference: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> PeriodRange:
    """
    Compute the calendar unit containing `reference`.

    Args:
        period: daily, weekly, monthly or yearly
        reference: Instant inside the wanted unit (now if None)
        tz: Zone for the boundaries (configured zone if None)

    Returns:
        PeriodRange with zone-aware start (inclusive) and end (exclusive)

    Raises:
        InvalidPeriodError: Unknown period selector
    """
    kind = parse_period(period)
    tz = tz or get_settings().app.tzinfo
    today = _local(reference, tz).date()

    if kind is PeriodType.DAILY:
        start_day = today
        end_day = today + timedelta(days=1)
    elif kind is PeriodType.WEEKLY:
        start_day = today - timedelta(days=today.weekday())
        end_day = start_day + timedelta(days=7)
    elif kind is PeriodType.MONTHLY:
        start_day = today.replace(day=1)
        if today.month == 12:
            end_day = date(today.year + 1, 1, 1)
        else:
            end_day = date(today.year, today.month + 1, 1)
    else:
        start_day = date(today.year, 1, 1)
        end_day = date(today.year + 1, 1, 1)

    # Building from wall-clock dates keeps DST days at their real length
    return PeriodRange(
        period=kind,
        start=_midnight(start_day, tz),
        end=_midnight(end_day, tz),
    )


def filter_transactions(
    transactions: Iterable[Transaction],
    window: PeriodRange,
) -> list[Transaction]:
    """Keep transactions whose date falls inside the window."""
    return [t for t in transactions if window.contains(t.date)]
