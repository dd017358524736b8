"""Unit tests for LineItem and LineItemSet"""

import pytest
from decimal import Decimal

from src.errors import ItemIndexError
from src.models.line_items import LineItem, LineItemSet


@pytest.mark.unit
class TestLineItemSet:
    """Test LineItemSet operations"""

    def test_new_set_has_one_blank_item(self):
        items = LineItemSet()
        assert len(items) == 1
        assert items[0] == LineItem(description="", price="")

    def test_empty_sequence_still_yields_one_item(self):
        assert len(LineItemSet([])) == 1

    def test_add_appends_blank_item(self):
        items = LineItemSet.of(("Oil change", "50"))
        items.add()
        assert len(items) == 2
        assert items[1].description == ""
        assert items[1].price == ""
        assert items[0].description == "Oil change"

    def test_update_sets_field_in_place(self):
        items = LineItemSet.of(("Oil change", "50"), ("Filter", "10"))
        items.update(1, "price", "12.50")
        items.update(0, "description", "Full oil change")
        assert items[0].description == "Full oil change"
        assert items[1].price == "12.50"

    def test_update_coerces_numbers_to_text(self):
        items = LineItemSet()
        items.update(0, "price", 15)
        assert items[0].price == "15"

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_update_invalid_index_raises(self, index):
        items = LineItemSet()
        with pytest.raises(ItemIndexError):
            items.update(index, "price", "1")

    def test_item_index_error_is_an_index_error(self):
        with pytest.raises(IndexError):
            LineItemSet().update(3, "description", "x")

    def test_update_unknown_field_raises(self):
        with pytest.raises(ValueError):
            LineItemSet().update(0, "quantity", "2")

    def test_remove_single_item_is_noop(self):
        items = LineItemSet.of(("Only", "5"))
        items.remove(0)
        assert len(items) == 1
        assert items[0].description == "Only"

    def test_remove_shifts_following_items(self):
        items = LineItemSet.of(("A", "1"), ("B", "2"), ("C", "3"))
        items.remove(1)
        assert [i.description for i in items] == ["A", "C"]

    def test_remove_invalid_index_raises(self):
        items = LineItemSet.of(("A", "1"), ("B", "2"))
        with pytest.raises(ItemIndexError):
            items.remove(2)
        assert len(items) == 2

    def test_length_never_drops_below_one(self):
        items = LineItemSet.of(("A", "1"), ("B", "2"))
        for _ in range(5):
            items.remove(0)
        assert len(items) == 1

    def test_total_sums_numeric_prices(self):
        items = LineItemSet.of(("Oil", "50"), ("Filter", "10.25"), ("Labor", "4.75"))
        assert items.total() == Decimal("65.00")

    def test_total_ignores_non_numeric_and_blank_prices(self):
        items = LineItemSet.of(("Oil", "50"), ("Check", "abc"), ("Note", ""), ("Bad", "NaN"))
        assert items.total() == Decimal("50")

    def test_total_clamps_negative_prices(self):
        items = LineItemSet.of(("Discount", "-20"), ("Oil", "30"))
        assert items.total() == Decimal("30")

    def test_filled_items_skips_blank_rows(self):
        items = LineItemSet.of(("Oil", "50"), ("", ""), ("", "5"), ("  ", " "))
        assert [i.price for i in items.filled_items()] == ["50", "5"]
        assert not items.is_blank()
        assert LineItemSet().is_blank()

