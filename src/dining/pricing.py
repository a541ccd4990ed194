"""Pricing calculator — recomputes cart and order totals from line items.

The calculator is the only place money totals are derived. It never takes a
precomputed subtotal: every caller hands it the lines and gets the totals back,
so a stored total can always be reproduced from the stored lines.

    line total = (price + sum(customization.additional_price)) * quantity
    subtotal   = sum(line totals)
    item count = sum(quantities)
"""

from collections.abc import Iterable
from dataclasses import dataclass

from protean.exceptions import ValidationError


@dataclass(frozen=True)
class PricedLine:
    """The money-relevant view of a cart or order line."""

    price: float
    quantity: int
    addon_prices: tuple[float, ...] = ()


@dataclass(frozen=True)
class CartTotals:
    subtotal: float
    item_count: int


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: float
    tax: float
    delivery_fee: float
    service_fee: float
    discount: float
    tip: float
    total: float


def _cents(amount: float) -> float:
    return round(amount, 2)


def line_total(line: PricedLine) -> float:
    return (line.price * line.quantity) + sum(addon * line.quantity for addon in line.addon_prices)


def calculate_cart_totals(lines: Iterable[PricedLine]) -> CartTotals:
    lines = list(lines)
    return CartTotals(
        subtotal=_cents(sum(line_total(line) for line in lines)),
        item_count=sum(line.quantity for line in lines),
    )


def calculate_order_pricing(
    lines: Iterable[PricedLine],
    *,
    tax_rate: float,
    service_fee_rate: float,
    delivery_fee: float = 0.0,
    discount: float = 0.0,
    tip: float = 0.0,
) -> PricingBreakdown:
    """Price an order from its lines plus the fee/discount/tip inputs.

    total = subtotal + tax + delivery fee + service fee + tip - discount
    """
    errors = {}
    for name, value in (("delivery_fee", delivery_fee), ("discount", discount), ("tip", tip)):
        if value < 0:
            errors[name] = [f"{name.replace('_', ' ').capitalize()} cannot be negative"]
    if errors:
        raise ValidationError(errors)

    subtotal = calculate_cart_totals(lines).subtotal
    if discount > subtotal:
        raise ValidationError({"discount": ["Discount cannot exceed the order subtotal"]})

    tax = _cents(subtotal * tax_rate)
    service_fee = _cents(subtotal * service_fee_rate)
    total = _cents(subtotal + tax + delivery_fee + service_fee + tip - discount)

    return PricingBreakdown(
        subtotal=subtotal,
        tax=tax,
        delivery_fee=_cents(delivery_fee),
        service_fee=service_fee,
        discount=_cents(discount),
        tip=_cents(tip),
        total=total,
    )
