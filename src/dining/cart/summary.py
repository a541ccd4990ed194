"""Derived, read-only views of a cart.

Nothing here mutates or persists; the functions take whatever the aggregate
exposes (``lines()``, ``subtotal``, ``minimum_order_amount`` …) and compute.
"""

from dataclasses import asdict, dataclass

DEFAULT_PREPARATION_MINUTES = 15


def estimated_prep_time(lines) -> int:
    """Longest preparation time among the lines, or 0 for an empty cart.

    Lines without a preparation time count as the default 15 minutes.
    """
    times = [
        line.preparation_time if line.preparation_time is not None else DEFAULT_PREPARATION_MINUTES
        for line in lines
    ]
    return max(times, default=0)


def meets_minimum_order(cart) -> bool:
    return (cart.subtotal or 0.0) >= (cart.minimum_order_amount or 0.0)


@dataclass(frozen=True)
class CartSummary:
    item_count: int
    subtotal: float
    discount: float
    delivery_fee: float
    total: float
    meets_minimum_order: bool
    minimum_order_amount: float
    estimated_prep_time: int
    estimated_delivery_time: int
    restaurant_id: str | None
    restaurant_name: str | None
    coupon_code: str | None

    def to_dict(self) -> dict:
        return asdict(self)


def summarize_cart(cart) -> CartSummary:
    subtotal = cart.subtotal or 0.0
    discount = cart.discount or 0.0
    delivery_fee = cart.delivery_fee or 0.0
    return CartSummary(
        item_count=cart.item_count or 0,
        subtotal=subtotal,
        discount=discount,
        delivery_fee=delivery_fee,
        total=round(subtotal + delivery_fee - discount, 2),
        meets_minimum_order=meets_minimum_order(cart),
        minimum_order_amount=cart.minimum_order_amount or 0.0,
        estimated_prep_time=estimated_prep_time(cart.lines()),
        estimated_delivery_time=cart.estimated_delivery_time or 0,
        restaurant_id=str(cart.restaurant_id) if cart.restaurant_id else None,
        restaurant_name=cart.restaurant_name,
        coupon_code=cart.coupon_code,
    )
