"""Period filtering and aggregation package."""

from expenseshub.queries.breakdown import (
    breakdown,
    category_breakdown,
    summarize,
    to_chart_dataset,
)
from expenseshub.queries.periods import (
    filter_transactions,
    parse_period,
    period_range,
)

__all__ = [
    "breakdown",
    "category_breakdown",
    "filter_transactions",
    "parse_period",
    "period_range",
    "summarize",
    "to_chart_dataset",
]
