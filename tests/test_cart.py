"""
Tests for CartStore
"""

from decimal import Decimal

import pytest

from agrimart.cart import Cart, CartStore, LineItem
from agrimart.models import ProductSnapshot


class TestLineItem:
    """Tests for LineItem dataclass."""

    def test_create_line_item(self):
        item = LineItem(product_id="seeds-0", name="Hybrid Tomato Seeds", unit_price=100, quantity=2)

        assert item.unit_price == Decimal("100")
        assert item.total_price == Decimal("200")
        assert item.added_at != ""

    def test_to_dict(self):
        item = LineItem(product_id="seeds-0", name="Seeds", unit_price=120, quantity=3, category="seeds")

        data = item.to_dict()
        assert data["product_id"] == "seeds-0"
        assert data["unit_price"] == 120.0
        assert data["total"] == 360.0
        assert data["category"] == "seeds"


class TestCart:
    """Tests for Cart dataclass."""

    def test_empty_cart(self):
        cart = Cart()

        assert cart.total_items == 0
        assert cart.subtotal == 0

    def test_cart_with_items(self):
        cart = Cart(items=[
            LineItem(product_id="a", name="A", unit_price=100, quantity=2),
            LineItem(product_id="b", name="B", unit_price=250, quantity=1),
        ])

        assert cart.total_items == 3
        assert cart.subtotal == Decimal("450")
        assert cart.find("b").name == "B"
        assert cart.find("missing") is None


class TestAddToCart:
    """Tests for CartStore.add_to_cart."""

    def test_add_new_item(self, cart, seeds):
        assert cart.add_to_cart(seeds, 2) is True

        items = cart.items
        assert len(items) == 1
        assert items[0].product_id == "seeds-0"
        assert items[0].quantity == 2
        assert items[0].category == "seeds"
        assert items[0].image.startswith("https://")

    def test_repeated_adds_accumulate(self, cart, seeds):
        for quantity in (1, 4, 2, 3):
            cart.add_to_cart(seeds, quantity)

        assert cart.line_count == 1
        assert cart.get_item("seeds-0").quantity == 10

    def test_accepts_snapshot_model(self, cart):
        snapshot = ProductSnapshot(product_id="tools-1", name="Pruning Shears", unit_price=Decimal("399"))

        cart.add_to_cart(snapshot)

        assert cart.get_item("tools-1").quantity == 1
        assert cart.subtotal == Decimal("399")

    def test_display_fields_copied_at_add_time(self, cart, seeds):
        cart.add_to_cart(seeds, 1)
        cart.add_to_cart({**seeds, "name": "Renamed"}, 1)

        assert cart.get_item("seeds-0").name == "Hybrid Tomato Seeds"

    def test_insertion_order_preserved(self, cart, seeds, spade):
        cart.add_to_cart(spade, 1)
        cart.add_to_cart(seeds, 1)
        cart.add_to_cart(spade, 1)

        assert [item.product_id for item in cart.items] == ["tools-2", "seeds-0"]

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    def test_invalid_quantity_ignored(self, cart, seeds, quantity):
        assert cart.add_to_cart(seeds, quantity) is False
        assert cart.is_empty

    def test_empty_product_id_rejected(self, cart, seeds):
        with pytest.raises(ValueError):
            cart.add_to_cart({**seeds, "id": "  "}, 1)
        assert cart.is_empty

    def test_negative_price_rejected(self, cart, seeds):
        with pytest.raises(ValueError):
            cart.add_to_cart({**seeds, "price": -5}, 1)
        assert cart.is_empty


class TestUpdateAndRemove:
    """Tests for update_quantity / remove_from_cart / clear_cart."""

    def test_update_quantity(self, cart, seeds):
        cart.add_to_cart(seeds, 1)

        assert cart.update_quantity("seeds-0", 5) is True
        assert cart.get_item("seeds-0").quantity == 5
        assert cart.subtotal == Decimal("500")

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_update_to_non_positive_removes(self, cart, seeds, spade, quantity):
        cart.add_to_cart(seeds, 2)
        cart.add_to_cart(spade, 1)

        assert cart.update_quantity("seeds-0", quantity) is True
        assert cart.get_item("seeds-0") is None
        assert cart.line_count == 1

    def test_update_zero_equivalent_to_remove(self, seeds, spade):
        updated, removed = CartStore(), CartStore()
        for store in (updated, removed):
            store.add_to_cart(seeds, 2)
            store.add_to_cart(spade, 1)

        updated.update_quantity("seeds-0", 0)
        removed.remove_from_cart("seeds-0")

        assert [i.to_dict() for i in updated.items] == [i.to_dict() for i in removed.items]
        assert updated.update_quantity("seeds-0", 0) is removed.remove_from_cart("seeds-0") is False

    def test_update_absent_id_is_noop(self, cart, seeds):
        cart.add_to_cart(seeds, 1)

        assert cart.update_quantity("missing", 3) is False
        assert cart.get_item("missing") is None
        assert cart.item_count == 1

    def test_remove_absent_id_is_noop(self, cart):
        assert cart.remove_from_cart("missing") is False

    def test_clear_cart(self, cart, seeds, spade):
        cart.add_to_cart(seeds, 2)
        cart.add_to_cart(spade, 1)

        assert cart.clear_cart() is True
        assert cart.is_empty
        assert cart.item_count == 0
        assert cart.get_total_price() == 0


class TestDerivedTotals:
    """Totals track every mutation."""

    def test_totals_after_each_mutation(self, cart, seeds, spade):
        def expected():
            return sum(i.unit_price * i.quantity for i in cart.items)

        cart.add_to_cart(seeds, 2)
        assert cart.get_total_price() == expected() == Decimal("200")
        cart.add_to_cart(spade, 3)
        assert cart.get_total_price() == expected() == Decimal("950")
        cart.update_quantity("tools-2", 1)
        assert cart.get_total_price() == expected() == Decimal("450")
        cart.remove_from_cart("seeds-0")
        assert cart.get_total_price() == expected() == Decimal("250")
        assert cart.item_count == 1

    def test_items_are_copies(self, cart, seeds):
        cart.add_to_cart(seeds, 2)

        cart.items[0].quantity = 0
        cart.get_item("seeds-0").quantity = -4

        assert cart.get_item("seeds-0").quantity == 2
        assert cart.subtotal == Decimal("200")

    def test_cart_summary(self, cart, seeds):
        assert cart.get_cart_summary()["is_empty"] is True

        cart.add_to_cart(seeds, 3)
        summary = cart.get_cart_summary()

        assert summary["is_empty"] is False
        assert summary["total_items"] == 3
        assert summary["subtotal"] == 300.0
        assert summary["items"][0]["quantity"] == 3


class TestFreezeAndListeners:
    """Tests for freezing and change notification."""

    def test_frozen_cart_ignores_mutations(self, cart, seeds, spade):
        cart.add_to_cart(seeds, 2)
        cart.freeze()

        assert cart.add_to_cart(spade, 1) is False
        assert cart.update_quantity("seeds-0", 9) is False
        assert cart.update_quantity("seeds-0", 0) is False
        assert cart.remove_from_cart("seeds-0") is False
        assert cart.clear_cart() is False
        assert [(i.product_id, i.quantity) for i in cart.items] == [("seeds-0", 2)]

        cart.unfreeze()
        assert cart.add_to_cart(spade, 1) is True

    def test_listener_called_after_applied_mutations_only(self, cart, seeds):
        seen = []
        unsubscribe = cart.subscribe(lambda store: seen.append(store.item_count))

        cart.add_to_cart(seeds, 2)
        cart.update_quantity("missing", 4)
        cart.add_to_cart(seeds, 0)
        cart.update_quantity("seeds-0", 5)
        unsubscribe()
        cart.clear_cart()

        assert seen == [2, 5]

    def test_close_drops_items_and_listeners(self, seeds):
        store = CartStore()
        seen = []
        store.subscribe(lambda s: seen.append(s.item_count))
        store.add_to_cart(seeds, 1)
        store.freeze()

        store.close()
        store.add_to_cart(seeds, 1)

        assert seen == [1, 0]
        assert store.item_count == 1
        assert store.is_frozen is False
