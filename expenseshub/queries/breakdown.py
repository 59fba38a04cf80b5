"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and PURE.
Given the same transactions (in the same order) and categories, the
output is always the same. Nothing here touches storage.

Grouping rules:
- Transactions are grouped by category id and their amounts summed.
- Groups whose category id matches no known category are dropped,
  and do not count toward the total.
- Percentages are relative to the total of the kept groups; all 0
  when that total is 0.
- Output is sorted by value, largest first. The sort is stable over
  first-appearance order, so ties keep input order.
"""

from decimal import Decimal
from typing import Iterable, Optional

from expenseshub.models import (
    Category,
    CategoryBreakdown,
    ChartDataPoint,
    PeriodSummary,
    Transaction,
    TransactionType,
)


def _group(transactions: Iterable[Transaction]) -> dict[str, tuple[Decimal, int]]:
    """category_id -> (sum, count), in first-appearance order."""
    groups: dict[str, tuple[Decimal, int]] = {}
    for transaction in transactions:
        total, count = groups.get(transaction.category_id, (Decimal("0"), 0))
        groups[transaction.category_id] = (total + transaction.amount, count + 1)
    return groups


def _percentage(value: Decimal, total: Decimal) -> float:
    if total == 0:
        return 0.0
    return float(value / total * 100)


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
) -> list[CategoryBreakdown]:
    """
    Per-category totals with counts and percentage share.

    Args:
        transactions: Transactions to aggregate (usually one period, one type)
        categories: Known categories; unmatched groups are dropped

    Returns:
        Breakdown rows sorted by total, descending
    """
    by_id = {category.id: category for category in categories}

    kept = [
        (by_id[category_id], total, count)
        for category_id, (total, count) in _group(transactions).items()
        if category_id in by_id
    ]
    grand_total = sum((total for _, total, _ in kept), Decimal("0"))

    rows = [
        CategoryBreakdown(
            category_id=category.id,
            category_name=category.name,
            category_color=category.color,
            total=total,
            count=count,
            percentage=_percentage(total, grand_total),
        )
        for category, total, count in kept
    ]
    rows.sort(key=lambda row: row.total, reverse=True)
    return rows


def breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
) -> list[ChartDataPoint]:
    """
    Chart-ready category breakdown.

    Returns:
        One {label, value, color, percentage} point per matched category,
        largest value first. Empty input gives an empty list.
    """
    return [
        ChartDataPoint(
            label=row.category_name,
            value=row.total,
            color=row.category_color,
            percentage=row.percentage,
        )
        for row in category_breakdown(transactions, categories)
    ]


def summarize(transactions: Iterable[Transaction]) -> PeriodSummary:
    """Income and expense totals plus the resulting balance."""
    income = Decimal("0")
    expenses = Decimal("0")
    count = 0
    for transaction in transactions:
        count += 1
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        else:
            expenses += transaction.amount

    return PeriodSummary(
        total_income=income,
        total_expenses=expenses,
        balance=income - expenses,
        transaction_count=count,
    )


def to_chart_dataset(
    points: list[ChartDataPoint],
    border_width: Optional[int] = 0,
) -> dict:
    """
    Reshape points into parallel series for chart libraries.

    Returns:
        {"labels": [...], "datasets": [{"data": [...], "backgroundColor": [...], ...}]}
    """
    return {
        "labels": [point.label for point in points],
        "datasets": [
            {
                "data": [float(point.value) for point in points],
                "backgroundColor": [point.color for point in points],
                "borderWidth": border_width,
            }
        ],
    }
