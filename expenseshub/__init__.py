"""
ExpensesHub - Source Package

A personal finance tracker: record expenses and incomes, group them
into categories, and view per-period breakdowns as charts.

DESIGN PRINCIPLES:
1. Validate at the boundary, persist only normalized data
2. Fail early, fail visibly
3. Aggregation is a pure function of its inputs
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "ExpensesHub Team"
