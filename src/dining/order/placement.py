"""Order placement — checkout guards, order creation and cart clearing.

``PlaceOrder`` checks the owner's cart (non-empty, minimum order met, items
still on the menu), allocates a free order number and stores the order
snapshot. It does not touch the cart. ``checkout()`` is the application service
that places the order and only then clears the cart.
"""

import json

import structlog
from protean import handle
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from dining.cart.availability import validate_availability
from dining.cart.cart import Cart
from dining.cart.management import ClearCart
from dining.cart.summary import meets_minimum_order
from dining.concurrency import check_expected_revision, retry_on_conflict
from dining.config import get_settings
from dining.domain import dining
from dining.errors import EmptyCart, ItemsUnavailable, MinimumOrderNotMet
from dining.menu.port import CatalogUnavailableError
from dining.order.factory import PlacementDetails, build_order
from dining.order.numbering import allocate_order_number
from dining.order.order import Order, PaymentMethod
from dining.order.state_machine import OrderType

logger = structlog.get_logger(__name__)


@dining.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    order_type = String(required=True, choices=OrderType)
    payment_method = String(required=True, choices=PaymentMethod)
    delivery_address = Text()  # JSON: {street, city, state, zip_code, ...}
    estimated_delivery_time = DateTime()
    estimated_pickup_time = DateTime()
    tip = Float(default=0.0, min_value=0.0)
    special_instructions = String(max_length=500)
    expected_cart_revision = Integer()


def _check_availability(cart) -> None:
    try:
        report = validate_availability(cart)
    except CatalogUnavailableError as exc:
        logger.warning(
            "Menu catalog unavailable, skipping availability check",
            cart_id=str(cart.id),
            error=str(exc),
        )
        return
    if not report.all_available:
        raise ItemsUnavailable(
            "Some items in your cart are no longer available",
            items=[
                {"index": line.index, "menu_item_id": line.menu_item_id, "name": line.name, "reason": line.reason}
                for line in report.unavailable
            ],
        )


@dining.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        settings = get_settings()
        cart = current_domain.repository_for(Cart).find_by_owner(command.customer_id)
        if cart is None or cart.is_empty():
            raise EmptyCart("Cart is empty", customer_id=str(command.customer_id))
        check_expected_revision(cart, command.expected_cart_revision)
        if not meets_minimum_order(cart):
            raise MinimumOrderNotMet(
                f"Minimum order amount is {cart.minimum_order_amount:.2f}",
                subtotal=cart.subtotal,
                minimum_order_amount=cart.minimum_order_amount,
            )
        _check_availability(cart)

        repo = current_domain.repository_for(Order)
        order_number = allocate_order_number(
            repo.order_number_taken,
            prefix=settings.order_number_prefix,
            attempts=settings.order_number_attempts,
        )
        details = PlacementDetails(
            order_type=command.order_type,
            payment_method=command.payment_method,
            delivery_address=json.loads(command.delivery_address) if command.delivery_address else None,
            estimated_delivery_time=command.estimated_delivery_time,
            estimated_pickup_time=command.estimated_pickup_time,
            tip=command.tip or 0.0,
            special_instructions=command.special_instructions,
        )
        order = build_order(cart, details, order_number, settings)
        repo.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            restaurant_id=str(order.restaurant_id),
            total=order.pricing.total,
        )
        return str(order.id)


def checkout(command: PlaceOrder) -> str:
    """Place the order, then clear the customer's cart.

    The cart is cleared only after the order was stored; if clearing loses a
    race with another request it is retried, and the order stands regardless.
    """
    order_id = current_domain.process(command, asynchronous=False)
    retry_on_conflict(
        lambda: current_domain.process(
            ClearCart(owner_id=command.customer_id, reason="checked-out"),
            asynchronous=False,
        )
    )
    return order_id
