"""
CSV Export

One row per transaction, every field quoted:

    "Date","Type","Category","Description","Amount"
    "2024-03-05","expense","Food","Lunch","12.50"

Dates are rendered in the configured time zone so that a transaction
shows up on the same day it is counted in a daily/monthly breakdown.
"""

import csv
import io
from datetime import date, datetime
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from expenseshub.config import get_settings
from expenseshub.models import Category, PeriodType, Transaction


CSV_HEADERS = ["Date", "Type", "Category", "Description", "Amount"]


def generate_csv(
    transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
    tz: Optional[ZoneInfo] = None,
) -> str:
    """
    Render transactions as CSV text.

    Args:
        transactions: Rows to write, in the order given
        categories: Used to resolve category names; unknown ids give ""
        tz: Zone for the Date column (configured zone if None)
    """
    tz = tz or get_settings().app.tzinfo
    names = {category.id: category.name for category in categories}

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for transaction in transactions:
        writer.writerow([
            transaction.date.astimezone(tz).date().isoformat(),
            transaction.type.value,
            names.get(transaction.category_id, ""),
            transaction.description or "",
            f"{transaction.amount:.2f}",
        ])
    return buf.getvalue()


def export_filename(
    period: Union[str, PeriodType] = PeriodType.MONTHLY,
    today: Optional[date] = None,
    app_name: Optional[str] = None,
) -> str:
    """<app>-transactions-<period>-<YYYY-MM-DD>.csv"""
    if isinstance(period, PeriodType):
        period = period.value
    app_settings = get_settings().app
    today = today or datetime.now(app_settings.tzinfo).date()
    app_name = app_name or app_settings.app_name
    return f"{app_name}-transactions-{period}-{today.isoformat()}.csv"
