"""Domain events for the Cart aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from dining.domain import dining


@dining.event(part_of="Cart")
class CartItemAdded:
    """A menu item was added to the cart, either as a new line or merged into an existing one."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    menu_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    merged = Boolean(default=False)
    subtotal = Float(required=True)


@dining.event(part_of="Cart")
class CartItemQuantityUpdated:
    """The quantity of a cart line was set to a new value."""

    __version__ = 1

    cart_id = Identifier(required=True)
    menu_item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    subtotal = Float(required=True)


@dining.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    menu_item_id = Identifier(required=True)
    remaining_lines = Integer(required=True)
    subtotal = Float(required=True)


@dining.event(part_of="Cart")
class CartCleared:
    """Every line was removed, e.g. after a successful checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    reason = String(required=True)
    cleared_lines = Integer(required=True)
    cleared_at = DateTime(required=True)


@dining.event(part_of="Cart")
class CartCouponApplied:
    """A coupon and the discount computed for it were recorded on the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount = Float(required=True)


@dining.event(part_of="Cart")
class CartCouponRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String()
