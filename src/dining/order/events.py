"""Domain events for the Order aggregate.

``OrderPlaced`` and ``OrderStatusChanged`` are the contract with the
notification service; the others are informational.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from dining.domain import dining


@dining.event(part_of="Order")
class OrderPlaced:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    order_type = String(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(max_length=3)
    placed_at = DateTime(required=True)


@dining.event(part_of="Order")
class OrderStatusChanged:
    """An accepted transition, written together with its tracking entry."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    order_type = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    description = String(max_length=500)
    changed_at = DateTime(required=True)


@dining.event(part_of="Order")
class OrderPaymentRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_status = String(required=True)
    transaction_id = String()
    amount = Float(required=True)
    recorded_at = DateTime(required=True)


@dining.event(part_of="Order")
class OrderRated:
    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    overall = Integer(required=True)
    food = Integer()
    delivery = Integer()
    rated_at = DateTime(required=True)
