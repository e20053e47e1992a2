"""
Expense Summaries

Pure functions over a collection of records: filter by category, total
the filtered subset, and break spending down by category for the pie
chart.

The list and its total follow the selected category filter. The chart
always covers the full collection.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from html import escape
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from expense_tracker.models.expense import ExpenseRecord


ALL_CATEGORIES = "All"

CHART_COLORS = ["#9b5cf6", "#f97316", "#22c55e", "#3b82f6", "#eab308"]

_CENT = Decimal("0.01")


class CategorySlice(BaseModel):
    """One wedge of the category pie chart."""

    category: str
    total: Decimal
    share: float = Field(ge=0.0, le=1.0)
    color: str


class ExpenseSummary(BaseModel):
    """Everything the list view needs for one render."""

    category: str = ALL_CATEGORIES
    records: list[ExpenseRecord] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    total_display: str = "0.00"
    slices: list[CategorySlice] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def record_count(self) -> int:
        return len(self.records)


def filter_by_category(
    expenses: Iterable[ExpenseRecord],
    category: Optional[str] = ALL_CATEGORIES,
) -> list[ExpenseRecord]:
    """
    Records matching `category` exactly, in their original order.

    "All" (or None) returns every record.
    """
    if category is None or category == ALL_CATEGORIES:
        return list(expenses)
    return [e for e in expenses if e.category == category]


def total_amount(expenses: Iterable[ExpenseRecord]) -> Decimal:
    """Sum of `amount` over the given records."""
    return sum((e.amount for e in expenses), Decimal("0"))


def format_amount(value: Decimal) -> str:
    """Two decimal places, no grouping: Decimal('50') -> '50.00'."""
    value = Decimal(value)
    # quantize needs room for every integer digit plus the two cents
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return str(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def expense_row_html(record: ExpenseRecord, currency_symbol: str = "") -> str:
    """Markdown/HTML for one list row. User text is HTML-escaped."""
    return (
        f"**{escape(currency_symbol)}{format_amount(record.amount)}** - "
        f"{escape(record.category)}<br/>"
        f"<span class='meta'>{escape(record.description)} • "
        f"{record.date.isoformat()}</span>"
    )


def category_totals(expenses: Iterable[ExpenseRecord]) -> dict[str, Decimal]:
    """Per-category sums, categories in the order they first appear."""
    totals: dict[str, Decimal] = {}
    for e in expenses:
        totals[e.category] = totals.get(e.category, Decimal("0")) + e.amount
    return totals


def chart_slices(expenses: Iterable[ExpenseRecord]) -> list[CategorySlice]:
    """Pie chart wedges; colors cycle through the palette."""
    totals = category_totals(expenses)
    grand_total = sum(totals.values(), Decimal("0"))

    slices = []
    for index, (category, total) in enumerate(totals.items()):
        share = float(total / grand_total) if grand_total else 0.0
        slices.append(
            CategorySlice(
                category=category,
                total=total,
                share=share,
                color=CHART_COLORS[index % len(CHART_COLORS)],
            )
        )
    return slices


def category_options(
    expenses: Iterable[ExpenseRecord],
    configured: Sequence[str] = (),
) -> list[str]:
    """
    Filter choices: "All", the configured categories, then any other
    category that appears in the data.
    """
    options = [ALL_CATEGORIES]
    for category in list(configured) + [e.category for e in expenses]:
        if category not in options:
            options.append(category)
    return options


def build_summary(
    expenses: Sequence[ExpenseRecord],
    category: Optional[str] = ALL_CATEGORIES,
) -> ExpenseSummary:
    """Filtered list, its total, and the chart over the full collection."""
    filtered = filter_by_category(expenses, category)
    total = total_amount(filtered)
    return ExpenseSummary(
        category=category or ALL_CATEGORIES,
        records=filtered,
        total=total,
        total_display=format_amount(total),
        slices=chart_slices(expenses),
    )
