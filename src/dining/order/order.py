"""Order aggregate (CQRS) — an immutable snapshot of a cart, driven through its lifecycle.

Items, pricing and the delivery address are captured once at checkout and never
change afterwards. What does change is the status, and only through
``_transition()``: it consults the static table in ``state_machine``, moves the
status and appends exactly one tracking entry in the same atomic change.
The tracking history is append-only; ``current_location`` is the one part of
tracking that may be overwritten freely (live courier position).
"""

import json
from datetime import timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from dining.cart.merging import MAX_LINE_QUANTITY
from dining.domain import dining
from dining.errors import IllegalTransition, RatingNotAllowed
from dining.order.events import OrderPaymentRecorded, OrderPlaced, OrderRated, OrderStatusChanged
from dining.order.state_machine import (
    OrderStatus,
    OrderType,
    allowed_transitions,
    can_cancel,
    can_rate,
    is_terminal,
)
from dining.pricing import PricedLine
from dining.shared.clock import as_utc, utc_now


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    DIGITAL_WALLET = "digital-wallet"
    ONLINE = "online"


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class CancellationActor(Enum):
    CUSTOMER = "customer"
    RESTAURANT = "restaurant"
    ADMIN = "admin"
    SYSTEM = "system"


_TRANSITION_DESCRIPTIONS = {
    OrderStatus.CONFIRMED: "Order confirmed by the restaurant",
    OrderStatus.PREPARING: "Order is being prepared",
    OrderStatus.READY: "Order is ready for {order_type}",
    OrderStatus.OUT_FOR_DELIVERY: "Order is out for delivery",
    OrderStatus.DELIVERED: "Order delivered",
    OrderStatus.REFUNDED: "Order refunded",
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dining.value_object(part_of="Order")
class DeliveryAddress:
    """Where a delivery order goes, captured at checkout."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    apartment_number = String(max_length=50)
    delivery_instructions = String(max_length=200)
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)


@dining.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked at checkout. ``total`` is derived by the pricing calculator."""

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    service_fee = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    tip = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)


@dining.value_object(part_of="Order")
class PaymentDetails:
    method = String(required=True, choices=PaymentMethod)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")
    transaction_id = String(max_length=255)
    paid_at = DateTime()
    refunded_at = DateTime()
    refund_amount = Float(min_value=0.0)


@dining.value_object(part_of="Order")
class OrderRating:
    overall = Integer(required=True, min_value=1, max_value=5)
    food = Integer(min_value=1, max_value=5)
    delivery = Integer(min_value=1, max_value=5)
    comment = String(max_length=500)
    rated_at = DateTime()


@dining.value_object(part_of="Order")
class Cancellation:
    reason = String(required=True, max_length=500)
    cancelled_by = String(required=True, choices=CancellationActor)
    cancelled_at = DateTime(required=True)
    refund_amount = Float(min_value=0.0)


@dining.value_object(part_of="Order")
class CurrentLocation:
    latitude = Float(required=True, min_value=-90.0, max_value=90.0)
    longitude = Float(required=True, min_value=-180.0, max_value=180.0)
    address = String(max_length=255)
    last_updated = DateTime()


@dining.value_object(part_of="Order")
class Courier:
    name = String(max_length=100)
    phone = String(max_length=30)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@dining.entity(part_of="Order")
class OrderItem:
    """A frozen copy of a cart line. Later menu edits never reach it."""

    menu_item_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    category = String(max_length=100)
    customizations = Text(default="[]")
    special_instructions = String(max_length=200, default="")
    preparation_time = Integer(min_value=0)
    position = Integer(required=True, min_value=0)

    def customization_list(self) -> list[dict]:
        return json.loads(self.customizations) if self.customizations else []

    def priced(self) -> PricedLine:
        return PricedLine(
            price=self.price,
            quantity=self.quantity,
            addon_prices=tuple(c["additional_price"] for c in self.customization_list()),
        )


@dining.entity(part_of="Order")
class TrackingEntry:
    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    description = String(max_length=500)
    location = String(max_length=255)
    sequence = Integer(required=True, min_value=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@dining.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    restaurant_name = String(max_length=255)
    items = HasMany(OrderItem)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    order_type = String(required=True, choices=OrderType)
    delivery_address = ValueObject(DeliveryAddress)
    pricing = ValueObject(OrderPricing)
    payment = ValueObject(PaymentDetails)
    coupon_code = String(max_length=50)
    special_instructions = String(max_length=500)
    estimated_preparation_minutes = Integer(min_value=0)
    estimated_delivery_time = DateTime()
    estimated_pickup_time = DateTime()
    actual_delivery_time = DateTime()
    tracking_history = HasMany(TrackingEntry)
    current_location = ValueObject(CurrentLocation)
    courier = ValueObject(Courier)
    rating = ValueObject(OrderRating)
    cancellation = ValueObject(Cancellation)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def delivery_orders_need_an_address_and_estimate(self):
        if self.order_type == OrderType.DELIVERY.value:
            errors = {}
            if self.delivery_address is None:
                errors["delivery_address"] = ["Delivery address is required for delivery orders"]
            if self.estimated_delivery_time is None:
                errors["estimated_delivery_time"] = ["Estimated delivery time is required for delivery orders"]
            if errors:
                raise ValidationError(errors)

    @invariant.post
    def pickup_orders_need_a_pickup_time(self):
        if self.order_type == OrderType.PICKUP.value and self.estimated_pickup_time is None:
            raise ValidationError({"estimated_pickup_time": ["Estimated pickup time is required for pickup orders"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        customer_id,
        restaurant_id,
        order_type,
        items,
        pricing,
        payment,
        restaurant_name=None,
        delivery_address=None,
        estimated_delivery_time=None,
        estimated_pickup_time=None,
        estimated_preparation_minutes=None,
        special_instructions=None,
        coupon_code=None,
    ):
        """Build a pending order with its first tracking entry.

        ``items`` are ``OrderItem`` instances already copied from the cart.
        Use ``dining.order.factory.build_order`` rather than calling this directly.
        """
        now = utc_now()
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            restaurant_id=restaurant_id,
            restaurant_name=restaurant_name,
            order_type=order_type,
            items=items,
            pricing=pricing,
            payment=payment,
            delivery_address=delivery_address,
            estimated_delivery_time=estimated_delivery_time,
            estimated_pickup_time=estimated_pickup_time,
            estimated_preparation_minutes=estimated_preparation_minutes,
            special_instructions=special_instructions,
            coupon_code=coupon_code,
            status=OrderStatus.PENDING.value,
            tracking_history=[
                TrackingEntry(
                    status=OrderStatus.PENDING.value,
                    timestamp=now,
                    description="Order pending",
                    location="System",
                    sequence=0,
                )
            ],
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer_id),
                restaurant_id=str(restaurant_id),
                order_type=order.order_type,
                item_count=sum(item.quantity for item in order.items),
                total=order.pricing.total,
                currency=order.payment.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def lines(self) -> list[OrderItem]:
        return sorted(self.items or [], key=lambda item: item.position)

    def history(self) -> list[TrackingEntry]:
        """Tracking entries, oldest first."""
        return sorted(self.tracking_history or [], key=lambda entry: entry.sequence)

    def can_cancel(self) -> bool:
        return can_cancel(self.status)

    def can_rate(self) -> bool:
        return can_rate(self.status, self.rating)

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target: OrderStatus):
        allowed = allowed_transitions(self.status, self.order_type)
        if target not in allowed:
            raise IllegalTransition(
                f"Cannot transition order from {self.status} to {target.value}",
                order_id=str(self.id),
                current_status=self.status,
                requested_status=target.value,
                allowed=sorted(status.value for status in allowed),
            )

    def _next_timestamp(self):
        """Now, but never earlier than the last tracking entry."""
        now = utc_now()
        history = self.history()
        if history:
            last = as_utc(history[-1].timestamp)
            if last > now:
                return last
        return now

    def _transition(self, target: OrderStatus, description=None, location=None, timestamp=None, **changes):
        """Move to ``target``, apply ``changes`` and append one tracking entry atomically."""
        self._assert_can_transition(target)

        previous = self.status
        timestamp = timestamp or self._next_timestamp()
        if target == OrderStatus.DELIVERED:
            changes["actual_delivery_time"] = timestamp
        description = description or _TRANSITION_DESCRIPTIONS[target].format(order_type=self.order_type)
        with atomic_change(self):
            self.status = target.value
            for name, value in changes.items():
                setattr(self, name, value)
            self.add_tracking_history(
                TrackingEntry(
                    status=target.value,
                    timestamp=timestamp,
                    description=description,
                    location=location,
                    sequence=len(self.tracking_history or []),
                )
            )
            self.updated_at = timestamp

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                restaurant_id=str(self.restaurant_id),
                order_type=self.order_type,
                previous_status=previous,
                new_status=target.value,
                description=description,
                changed_at=timestamp,
            )
        )
        return timestamp

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def advance_to(self, target, description=None, location=None, courier_name=None, courier_phone=None):
        """Move along the kitchen/handover path (confirmed … delivered).

        Cancellation and refunds carry extra data and go through ``cancel`` and
        ``refund``.
        """
        target = _coerce_status(target)
        if target == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Use cancel() with a reason to cancel an order"]})
        if target == OrderStatus.REFUNDED:
            return self.refund()

        changes = {}
        if target == OrderStatus.OUT_FOR_DELIVERY and (courier_name or courier_phone):
            changes["courier"] = Courier(name=courier_name, phone=courier_phone)
        return self._transition(target, description=description, location=location, **changes)

    def confirm(self):
        return self.advance_to(OrderStatus.CONFIRMED)

    def start_preparing(self):
        return self.advance_to(OrderStatus.PREPARING)

    def mark_ready(self):
        return self.advance_to(OrderStatus.READY)

    def dispatch(self, courier_name=None, courier_phone=None):
        return self.advance_to(OrderStatus.OUT_FOR_DELIVERY, courier_name=courier_name, courier_phone=courier_phone)

    def mark_delivered(self):
        return self.advance_to(OrderStatus.DELIVERED)

    def cancel(self, reason, cancelled_by=CancellationActor.CUSTOMER.value, refund_amount=None):
        """Cancel a non-terminal order, recording who cancelled it and why."""
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError({"reason": ["Cancellation reason is required"]})
        total = self.pricing.total if self.pricing else 0.0
        if refund_amount is not None and not 0 <= refund_amount <= total:
            raise ValidationError({"refund_amount": ["Refund amount must be between 0 and the order total"]})
        self._assert_can_transition(OrderStatus.CANCELLED)

        timestamp = self._next_timestamp()
        cancellation = Cancellation(
            reason=reason,
            cancelled_by=cancelled_by,
            cancelled_at=timestamp,
            refund_amount=refund_amount if refund_amount is not None else total,
        )
        return self._transition(
            OrderStatus.CANCELLED,
            description=f"Order cancelled by {cancelled_by}: {reason}",
            location="System",
            timestamp=timestamp,
            cancellation=cancellation,
        )

    def refund(self, refund_amount=None):
        """Refund a delivered order in full or in part."""
        total = self.pricing.total if self.pricing else 0.0
        amount = refund_amount if refund_amount is not None else total
        if not 0 <= amount <= total:
            raise ValidationError({"refund_amount": ["Refund amount must be between 0 and the order total"]})
        self._assert_can_transition(OrderStatus.REFUNDED)

        timestamp = self._next_timestamp()
        payment = self._payment_with(
            status=PaymentStatus.REFUNDED.value,
            refunded_at=timestamp,
            refund_amount=round(amount, 2),
        )
        return self._transition(OrderStatus.REFUNDED, location="System", timestamp=timestamp, payment=payment)

    # -------------------------------------------------------------------
    # Payment, rating, live tracking
    # -------------------------------------------------------------------
    def _payment_with(self, **changes) -> PaymentDetails:
        current = self.payment
        values = {
            "method": current.method,
            "status": current.status,
            "amount": current.amount,
            "currency": current.currency,
            "transaction_id": current.transaction_id,
            "paid_at": current.paid_at,
            "refunded_at": current.refunded_at,
            "refund_amount": current.refund_amount,
        }
        values.update(changes)
        return PaymentDetails(**values)

    def record_payment_result(self, status, transaction_id=None):
        """Store the gateway's answer as given."""
        now = utc_now()
        changes = {"status": status, "transaction_id": transaction_id}
        if status == PaymentStatus.COMPLETED.value:
            changes["paid_at"] = now
        self.payment = self._payment_with(**changes)
        self.updated_at = now

        self.raise_(
            OrderPaymentRecorded(
                order_id=str(self.id),
                payment_status=status,
                transaction_id=transaction_id,
                amount=self.payment.amount,
                recorded_at=now,
            )
        )

    def rate(self, overall, food=None, delivery=None, comment=None):
        if not self.can_rate():
            raise RatingNotAllowed(
                "Only delivered orders that have not been rated can be rated",
                order_id=str(self.id),
                status=self.status,
            )
        now = utc_now()
        self.rating = OrderRating(overall=overall, food=food, delivery=delivery, comment=comment, rated_at=now)
        self.updated_at = now

        self.raise_(
            OrderRated(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                overall=overall,
                food=food,
                delivery=delivery,
                rated_at=now,
            )
        )

    def update_current_location(self, latitude, longitude, address=None):
        """Overwrite the live position. The tracking history is not touched."""
        now = utc_now()
        self.current_location = CurrentLocation(
            latitude=latitude,
            longitude=longitude,
            address=address,
            last_updated=now,
        )
        self.updated_at = now

    def revise_preparation_time(self, minutes, delivery_minutes):
        if is_terminal(self.status):
            raise IllegalTransition(
                f"Cannot revise the preparation time of a {self.status} order",
                order_id=str(self.id),
                current_status=self.status,
            )
        if minutes is None or minutes <= 0:
            raise ValidationError({"minutes": ["Preparation time must be a positive number of minutes"]})

        now = utc_now()
        self.estimated_preparation_minutes = minutes
        if self.order_type == OrderType.DELIVERY.value:
            self.estimated_delivery_time = now + timedelta(minutes=minutes + delivery_minutes)
        self.updated_at = now


def _coerce_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise ValidationError({"status": [f"Unknown order status: {value}"]}) from exc
