"""Tests for derived cart views."""

from types import SimpleNamespace

from dining.cart.cart import Cart
from dining.cart.summary import estimated_prep_time, meets_minimum_order, summarize_cart


def _line(preparation_time):
    return SimpleNamespace(preparation_time=preparation_time)


class TestEstimatedPrepTime:
    def test_longest_line_wins(self):
        assert estimated_prep_time([_line(10), _line(25), _line(15)]) == 25

    def test_missing_times_count_as_default(self):
        assert estimated_prep_time([_line(None), _line(5)]) == 15

    def test_empty(self):
        assert estimated_prep_time([]) == 0


class TestMinimumOrder:
    def test_met_when_subtotal_reaches_minimum(self):
        assert meets_minimum_order(SimpleNamespace(subtotal=20.0, minimum_order_amount=20.0))

    def test_not_met_below_minimum(self):
        assert not meets_minimum_order(SimpleNamespace(subtotal=19.99, minimum_order_amount=20.0))

    def test_no_minimum(self):
        assert meets_minimum_order(SimpleNamespace(subtotal=0.0, minimum_order_amount=None))


class TestSummarizeCart:
    def test_summary_of_a_filled_cart(self):
        cart = Cart.create(owner_id="user-001")
        cart.add_item(
            menu_item_id="item-curry",
            restaurant_id="rest-002",
            restaurant_name="Saffron House",
            name="Lamb Curry",
            price=15.0,
            category="curry",
            quantity=2,
            preparation_time=20,
            delivery_fee=3.0,
            minimum_order_amount=25.0,
        )
        cart.apply_coupon("CURRY5", 5.0)

        summary = summarize_cart(cart)

        assert summary.item_count == 2
        assert summary.subtotal == 30.0
        assert summary.total == 28.0
        assert summary.meets_minimum_order is True
        assert summary.estimated_prep_time == 20
        assert summary.restaurant_id == "rest-002"
        assert summary.coupon_code == "CURRY5"
        assert summary.to_dict()["delivery_fee"] == 3.0

    def test_summary_of_an_empty_cart(self):
        summary = summarize_cart(Cart.create(owner_id="user-001"))
        assert summary.total == 0.0
        assert summary.restaurant_id is None
        assert summary.estimated_prep_time == 0
