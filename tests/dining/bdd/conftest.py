"""Shared BDD fixtures and step definitions for the dining domain."""

from datetime import UTC, datetime, timedelta

import pytest
from dining.cart.cart import Cart
from dining.config import DiningSettings
from dining.errors import DiningError
from dining.order.factory import PlacementDetails, build_order
from pytest_bdd import given, parsers, then

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip_code": "62701"}


@pytest.fixture()
def error():
    """Container for the business-rule error a When step ran into."""
    return {"exc": None}


@pytest.fixture()
def capture(error):
    """Run a When action, keeping a business-rule error for the Then steps."""

    def _capture(action):
        try:
            action()
        except DiningError as exc:
            error["exc"] = exc

    return _capture


def _add_to_cart(cart, quantity, name, price, restaurant_id, addon=None):
    return cart.add_item(
        menu_item_id=f"item-{name.lower().replace(' ', '-')}",
        restaurant_id=restaurant_id,
        name=name,
        price=price,
        category="mains",
        quantity=quantity,
        customizations=[{"name": "Extra", "value": "Yes", "additional_price": addon}] if addon else None,
    )


def _place(order_type):
    cart = Cart.create(owner_id="user-bdd")
    _add_to_cart(cart, 2, "Pho", 11.5, "rest-003")
    if order_type == "delivery":
        details = PlacementDetails(order_type="delivery", payment_method="card", delivery_address=ADDRESS)
    else:
        details = PlacementDetails(
            order_type=order_type,
            payment_method="cash",
            estimated_pickup_time=datetime.now(UTC) + timedelta(minutes=20),
        )
    return build_order(cart, details, "FS100000001", DiningSettings())


@pytest.fixture()
def cart_adder():
    return _add_to_cart


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    return Cart.create(owner_id="user-bdd")


@given(parsers.cfparse('a pending "{order_type}" order'), target_fixture="order")
def pending_order(order_type):
    return _place(order_type)


@given(parsers.cfparse('a delivered "{order_type}" order'), target_fixture="order")
def delivered_order(order_type):
    order = _place(order_type)
    order.confirm()
    order.start_preparing()
    order.mark_ready()
    if order_type == "delivery":
        order.dispatch()
    order.mark_delivered()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the add is rejected with "{code}"'))
@then(parsers.cfparse('the move is rejected with "{code}"'))
def rejected_with(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code
