"""Order factory — turns a cart into an order snapshot.

The factory reads the cart and never writes it. Clearing the cart is the
caller's job once the order has been stored, so a failed write leaves the
customer's cart intact.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta

from protean.exceptions import ValidationError

from dining.cart.summary import estimated_prep_time
from dining.config import DiningSettings
from dining.errors import EmptyCart
from dining.order.order import DeliveryAddress, Order, OrderItem, OrderPricing, PaymentDetails, PaymentStatus
from dining.order.state_machine import OrderType
from dining.pricing import calculate_order_pricing
from dining.shared.clock import utc_now


@dataclass(frozen=True)
class PlacementDetails:
    """Checkout input besides the cart itself."""

    order_type: str
    payment_method: str
    delivery_address: dict | None = None
    estimated_delivery_time: datetime | None = None
    estimated_pickup_time: datetime | None = None
    tip: float = 0.0
    special_instructions: str | None = None


def _validate_placement(details: PlacementDetails) -> OrderType:
    try:
        order_type = OrderType(details.order_type)
    except ValueError as exc:
        raise ValidationError({"order_type": [f"Unknown order type: {details.order_type}"]}) from exc

    errors = {}
    if order_type == OrderType.DELIVERY and not details.delivery_address:
        errors["delivery_address"] = ["Delivery address is required for delivery orders"]
    if order_type == OrderType.PICKUP and details.estimated_pickup_time is None:
        errors["estimated_pickup_time"] = ["Estimated pickup time is required for pickup orders"]
    if errors:
        raise ValidationError(errors)
    return order_type


def _copy_lines(cart) -> list[OrderItem]:
    return [
        OrderItem(
            menu_item_id=line.menu_item_id,
            name=line.name,
            description=line.description,
            price=line.price,
            quantity=line.quantity,
            category=line.category,
            customizations=json.dumps(line.customization_list()),
            special_instructions=line.special_instructions,
            preparation_time=line.preparation_time,
            position=position,
        )
        for position, line in enumerate(cart.lines())
    ]


def build_order(cart, details: PlacementDetails, order_number: str, settings: DiningSettings) -> Order:
    """Snapshot ``cart`` into a pending order.

    Raises:
        EmptyCart: the cart has no lines.
        ValidationError: per-type fields are missing, or pricing inputs are invalid.
    """
    if cart.is_empty():
        raise EmptyCart("Cart is empty", cart_id=str(cart.id))
    order_type = _validate_placement(details)

    items = _copy_lines(cart)
    breakdown = calculate_order_pricing(
        (item.priced() for item in items),
        tax_rate=settings.tax_rate,
        service_fee_rate=settings.service_fee_rate,
        delivery_fee=(cart.delivery_fee or 0.0) if order_type == OrderType.DELIVERY else 0.0,
        discount=cart.discount or 0.0,
        tip=details.tip or 0.0,
    )

    prep_minutes = estimated_prep_time(cart.lines())
    estimated_delivery_time = None
    delivery_address = None
    if order_type == OrderType.DELIVERY:
        delivery_address = (
            details.delivery_address
            if isinstance(details.delivery_address, DeliveryAddress)
            else DeliveryAddress(**details.delivery_address)
        )
        estimated_delivery_time = details.estimated_delivery_time or (
            utc_now() + timedelta(minutes=prep_minutes + settings.delivery_minutes)
        )

    return Order.create(
        order_number=order_number,
        customer_id=cart.owner_id,
        restaurant_id=cart.restaurant_id,
        restaurant_name=cart.restaurant_name,
        order_type=order_type.value,
        items=items,
        pricing=OrderPricing(
            subtotal=breakdown.subtotal,
            tax=breakdown.tax,
            delivery_fee=breakdown.delivery_fee,
            service_fee=breakdown.service_fee,
            discount=breakdown.discount,
            tip=breakdown.tip,
            total=breakdown.total,
        ),
        payment=PaymentDetails(
            method=details.payment_method,
            status=PaymentStatus.PENDING.value,
            amount=breakdown.total,
            currency=settings.currency,
        ),
        delivery_address=delivery_address,
        estimated_delivery_time=estimated_delivery_time,
        estimated_pickup_time=details.estimated_pickup_time if order_type == OrderType.PICKUP else None,
        estimated_preparation_minutes=prep_minutes,
        special_instructions=details.special_instructions,
        coupon_code=cart.coupon_code,
    )
