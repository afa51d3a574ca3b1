"""Tests for line-item pricing and the line-item editor."""

from decimal import Decimal

import pytest

from ranchhand.errors import ValidationError
from ranchhand.models import CatalogItem, LineItem
from ranchhand.pricing import (
    LineItemEditor,
    clamp_discount,
    coerce_quantity,
    compute_totals,
    describe_items,
    format_currency,
    parse_line_items,
    quantize_money,
    search_catalog,
)


def item(name: str, price: str, qty: int = 1) -> LineItem:
    return LineItem(catalog_ref=name.lower(), name=name, unit_price=Decimal(price), quantity=qty)


class TestComputeTotals:
    def test_empty_items(self):
        for discount in (0, 50, 100, 150):
            result = compute_totals([], discount)
            assert result.subtotal == 0
            assert result.discount_amount == 0
            assert result.total == 0

    def test_subtotal_is_sum_of_lines(self):
        result = compute_totals([item("Hay", "0.75", 2), item("Milk", "1.25", 3)])
        assert result.subtotal == Decimal("5.25")
        assert result.total == Decimal("5.25")

    def test_discount_applied(self):
        result = compute_totals([item("Lasso", "8.00")], 25)
        assert result.discount_amount == Decimal("2")
        assert result.total == Decimal("6")

    def test_discount_over_100_is_clamped(self):
        result = compute_totals([item("Lasso", "8.00")], 150)
        assert result.discount_percent == 100
        assert result.total == 0

    def test_negative_discount_is_clamped(self):
        result = compute_totals([item("Lasso", "8.00")], -10)
        assert result.discount_percent == 0
        assert result.total == Decimal("8.00")

    def test_total_non_increasing_in_discount(self):
        items = [item("Hay", "0.75", 7), item("Wool", "0.60", 3)]
        totals = [compute_totals(items, d).total for d in range(0, 101, 5)]
        assert totals == sorted(totals, reverse=True)

    def test_total_matches_formula(self):
        items = [item("Hay", "0.75", 7), item("Wool", "0.60", 3)]
        subtotal = Decimal("0.75") * 7 + Decimal("0.60") * 3
        for d in (0, 10, 33, 100):
            assert compute_totals(items, d).total == subtotal * (1 - Decimal(d) / 100)

    def test_no_float_drift(self):
        result = compute_totals([item("Cotton", "0.1", 3)])
        assert result.total == Decimal("0.3")

    def test_rounding_happens_only_at_to_dict(self):
        result = compute_totals([item("Sap", "0.20", 1)], "33.333")
        assert result.total != quantize_money(result.total)
        assert result.to_dict()["total"] == "0.13"


class TestHelpers:
    def test_describe_items(self):
        assert describe_items([item("Hay", "1", 2), item("Milk", "1")]) == "2x Hay, 1x Milk"

    def test_describe_empty(self):
        assert describe_items([]) == ""

    def test_format_currency(self):
        assert format_currency(Decimal("12.5")) == "$12.50"
        assert format_currency("0.125") == "$0.13"

    def test_clamp_discount_junk(self):
        assert clamp_discount("lots") == 0
        assert clamp_discount(None) == 0

    @pytest.mark.parametrize(
        "value,expected",
        [(3, 3), ("4", 4), ("2.7", 2), (0, 1), (-5, 1), ("abc", 1), (None, 1)],
    )
    def test_coerce_quantity(self, value, expected):
        assert coerce_quantity(value) == expected


class TestParseLineItems:
    def test_merges_same_catalog_ref(self):
        items = parse_line_items(
            [
                {"catalog_ref": "hay", "name": "Hay", "unit_price": "0.75", "quantity": 2},
                {"catalog_ref": "hay", "name": "Hay", "unit_price": "0.75", "quantity": 3},
            ]
        )
        assert len(items) == 1
        assert items[0].quantity == 5

    def test_catalog_ref_defaults_to_name(self):
        items = parse_line_items([{"name": "Custom saddle", "unit_price": 40}])
        assert items[0].catalog_ref == "Custom saddle"
        assert items[0].unit_price == Decimal("40")

    def test_bad_quantity_becomes_one(self):
        items = parse_line_items([{"name": "Hay", "unit_price": "1", "quantity": "many"}])
        assert items[0].quantity == 1

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            parse_line_items([{"name": "  ", "unit_price": "1"}])

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            parse_line_items([{"name": "Hay", "unit_price": "-1"}])

    def test_none_is_empty(self):
        assert parse_line_items(None) == []


class TestSearchCatalog:
    def test_case_insensitive_substring(self):
        catalog = [
            CatalogItem(id="1", name="Hay", price=Decimal("0.75")),
            CatalogItem(id="2", name="Haycube", price=Decimal("1.25")),
            CatalogItem(id="3", name="Milk", price=Decimal("0.75")),
        ]
        assert [e.id for e in search_catalog(catalog, "HAY")] == ["1", "2"]
        assert len(search_catalog(catalog, "")) == 3


class TestLineItemEditor:
    @pytest.fixture
    def hay(self):
        return CatalogItem(id="cat-hay", name="Hay", price=Decimal("0.75"))

    def test_add_twice_merges(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.add_from_catalog(hay)
        assert len(editor) == 1
        assert editor.items[0].quantity == 2

    def test_add_snapshots_price(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        hay.price = Decimal("5.00")
        assert editor.items[0].unit_price == Decimal("0.75")

    def test_set_quantity_invalid_becomes_one(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.set_quantity("cat-hay", "")
        assert editor.items[0].quantity == 1
        editor.set_quantity("cat-hay", 4)
        assert editor.items[0].quantity == 4

    def test_adjust_never_below_one(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.adjust_quantity("cat-hay", -3)
        assert editor.items[0].quantity == 1

    def test_remove(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.remove("cat-hay")
        assert len(editor) == 0

    def test_unknown_ref_is_ignored(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.set_quantity("nope", 9)
        editor.adjust_quantity("nope", 1)
        assert editor.items[0].quantity == 1

    def test_items_are_copies(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.items[0].quantity = 99
        assert editor.items[0].quantity == 1

    def test_totals_and_describe(self, hay):
        editor = LineItemEditor()
        editor.add_from_catalog(hay)
        editor.adjust_quantity("cat-hay", 3)
        assert editor.totals(50).total == Decimal("1.5")
        assert editor.describe() == "4x Hay"
