"""BDD tests for the single-restaurant cart."""

from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/cart.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('{qty:d} "{name}" at {price:f} from "{restaurant_id}" are in the cart'))
def items_in_cart(cart, cart_adder, qty, name, price, restaurant_id):
    cart_adder(cart, qty, name, price, restaurant_id)


@given(parsers.cfparse('{qty:d} "{name}" at {price:f} with a {addon:f} add-on from "{restaurant_id}" are in the cart'))
def customized_items_in_cart(cart, cart_adder, qty, name, price, addon, restaurant_id):
    cart_adder(cart, qty, name, price, restaurant_id, addon=addon)


@given(parsers.cfparse('the coupon "{code}" worth {amount:f} is applied'))
def coupon_applied(cart, code, amount):
    cart.apply_coupon(code, amount)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('{qty:d} "{name}" at {price:f} from "{restaurant_id}" are added'))
def add_items(cart, qty, name, price, restaurant_id, capture, cart_adder):
    capture(lambda: cart_adder(cart, qty, name, price, restaurant_id))


@when(parsers.cfparse("line {index:d} is removed"))
def remove_line(cart, index):
    cart.remove_item(index)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart belongs to restaurant "{restaurant_id}"'))
def cart_restaurant(cart, restaurant_id):
    assert cart.restaurant_id == restaurant_id


@then("the cart has no restaurant")
def no_restaurant(cart):
    assert cart.restaurant_id is None


@then("the cart has no coupon")
def no_coupon(cart):
    assert cart.coupon_code is None
    assert cart.discount == 0.0


@then(parsers.cfparse("the cart has {count:d} line"))
@then(parsers.cfparse("the cart has {count:d} lines"))
def line_count(cart, count):
    assert len(cart.lines()) == count


@then(parsers.cfparse("line {index:d} has quantity {qty:d}"))
def line_quantity(cart, index, qty):
    assert cart.lines()[index].quantity == qty


@then(parsers.cfparse("the cart subtotal is {amount:f}"))
def cart_subtotal(cart, amount):
    assert cart.subtotal == round(amount, 2)


@then(parsers.cfparse("the cart item count is {count:d}"))
def cart_item_count(cart, count):
    assert cart.item_count == count
