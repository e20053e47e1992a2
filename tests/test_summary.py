"""Tests for filtering, totals and chart data."""

from decimal import Decimal

import pytest

from expense_tracker.models.expense import LocalRecord, RemoteRecord
from expense_tracker.queries import (
    ALL_CATEGORIES,
    CHART_COLORS,
    build_summary,
    category_options,
    category_totals,
    chart_slices,
    expense_row_html,
    filter_by_category,
    format_amount,
    total_amount,
)


def record(identifier, amount, category):
    return LocalRecord(id=identifier, amount=amount, category=category, date="2024-06-01")


@pytest.fixture
def expenses():
    return [
        record("1", "30", "Food"),
        record("2", "20", "Bills"),
        record("3", "10.25", "Food"),
        record("4", "5", "Travel"),
    ]


class TestFilter:
    """Tests for category filtering."""

    def test_all_returns_everything(self, expenses):
        assert filter_by_category(expenses, ALL_CATEGORIES) == expenses
        assert filter_by_category(expenses, None) == expenses

    def test_exact_match_keeps_order(self, expenses):
        assert [e.identifier for e in filter_by_category(expenses, "Food")] == ["1", "3"]

    def test_no_match(self, expenses):
        assert filter_by_category(expenses, "food") == []

    def test_mixed_record_variants(self):
        mixed = [
            record("1", "1", "Food"),
            RemoteRecord.model_validate({"_id": "r", "amount": 2, "category": "Food"}),
        ]
        assert len(filter_by_category(mixed, "Food")) == 2


class TestTotals:
    """Tests for sums and their display form."""

    def test_total(self, expenses):
        assert total_amount(expenses) == Decimal("65.25")

    def test_total_of_nothing(self):
        assert total_amount([]) == Decimal("0")
        assert format_amount(total_amount([])) == "0.00"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("50"), "50.00"),
            (Decimal("10.255"), "10.26"),
            (Decimal("1234567.5"), "1234567.50"),
        ],
    )
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected

    def test_format_amount_beyond_default_precision(self):
        assert format_amount(Decimal("1e27")) == "1000000000000000000000000000.00"

    def test_summary_with_very_large_amount(self):
        summary = build_summary([record("1", Decimal("1e27"), "Food")])
        assert summary.total_display == "1000000000000000000000000000.00"

    def test_category_totals_first_seen_order(self, expenses):
        totals = category_totals(expenses)
        assert list(totals) == ["Food", "Bills", "Travel"]
        assert totals["Food"] == Decimal("40.25")


class TestChart:
    """Tests for pie chart wedges."""

    def test_slices(self, expenses):
        slices = chart_slices(expenses)
        assert [s.category for s in slices] == ["Food", "Bills", "Travel"]
        assert slices[1].total == Decimal("20")
        assert slices[1].share == pytest.approx(20 / 65.25)
        assert sum(s.share for s in slices) == pytest.approx(1.0)

    def test_colors_cycle(self):
        many = [record(str(i), "1", f"C{i}") for i in range(len(CHART_COLORS) + 2)]
        colors = [s.color for s in chart_slices(many)]
        assert colors[: len(CHART_COLORS)] == CHART_COLORS
        assert colors[len(CHART_COLORS)] == CHART_COLORS[0]

    def test_zero_amounts(self):
        slices = chart_slices([record("1", "0", "Food")])
        assert slices[0].share == 0.0

    def test_empty(self):
        assert chart_slices([]) == []


class TestOptions:
    """Tests for category choices."""

    def test_configured_then_seen(self, expenses):
        options = category_options(expenses, ["Food", "Health"])
        assert options == [ALL_CATEGORIES, "Food", "Health", "Bills", "Travel"]

    def test_no_configured(self):
        assert category_options([]) == [ALL_CATEGORIES]


class TestRowMarkup:
    """Tests for the list row markup."""

    def test_user_text_is_escaped(self):
        row = LocalRecord(
            id="1",
            amount="5",
            category="<b>Food</b>",
            description="<script>alert(1)</script> & more",
            date="2024-06-01",
        )
        markup = expense_row_html(row, "$")

        assert "<script>" not in markup
        assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; more" in markup
        assert "&lt;b&gt;Food&lt;/b&gt;" in markup
        assert markup.startswith("**$5.00** - ")
        assert "2024-06-01" in markup


class TestBuildSummary:
    """Tests for the combined list view data."""

    def test_filtered_total_full_chart(self, expenses):
        summary = build_summary(expenses, "Food")

        assert summary.category == "Food"
        assert summary.record_count == 2
        assert summary.total_display == "40.25"
        assert [s.category for s in summary.slices] == ["Food", "Bills", "Travel"]

    def test_default_is_all(self, expenses):
        summary = build_summary(expenses)
        assert summary.category == ALL_CATEGORIES
        assert summary.total == Decimal("65.25")

    def test_empty_collection(self):
        summary = build_summary([])
        assert summary.is_empty
        assert summary.total_display == "0.00"
        assert summary.slices == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
