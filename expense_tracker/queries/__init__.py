"""Expense summary package."""

from expense_tracker.queries.summary import (
    ALL_CATEGORIES,
    CHART_COLORS,
    CategorySlice,
    ExpenseSummary,
    build_summary,
    category_options,
    category_totals,
    chart_slices,
    expense_row_html,
    filter_by_category,
    format_amount,
    total_amount,
)

__all__ = [
    "ALL_CATEGORIES",
    "CHART_COLORS",
    "CategorySlice",
    "ExpenseSummary",
    "build_summary",
    "category_options",
    "category_totals",
    "chart_slices",
    "expense_row_html",
    "filter_by_category",
    "format_amount",
    "total_amount",
]
