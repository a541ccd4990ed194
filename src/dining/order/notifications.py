"""Outbound notifications — forwards order events to the notification service.

Publishing is fire-and-forget: the order change has already been committed
when these handlers run, so a failing notification service is logged and
never undoes or fails the transition.
"""

import structlog
from protean.utils.mixins import handle

from dining.domain import dining
from dining.notifier import get_notifier
from dining.notifier.port import OrderNotification
from dining.order.events import OrderPlaced, OrderStatusChanged
from dining.order.order import Order
from dining.order.state_machine import OrderStatus

logger = structlog.get_logger(__name__)

_STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: "Your order #{number} has been confirmed by the restaurant",
    OrderStatus.PREPARING: "Your order #{number} is now being prepared",
    OrderStatus.READY: "Your order #{number} is ready for {order_type}",
    OrderStatus.OUT_FOR_DELIVERY: "Your order #{number} is out for delivery",
    OrderStatus.DELIVERED: "Your order #{number} has been delivered. Enjoy your meal!",
    OrderStatus.CANCELLED: "Your order #{number} has been cancelled. {description}",
    OrderStatus.REFUNDED: "Your order #{number} has been refunded",
}


def _publish(notification: OrderNotification) -> None:
    try:
        get_notifier().publish(notification)
    except Exception as exc:  # noqa: BLE001 - notification delivery never fails the order
        logger.warning(
            "Order notification failed",
            kind=notification.kind,
            order_id=notification.order_id,
            error=str(exc),
        )
    else:
        logger.debug("Order notification published", kind=notification.kind, order_id=notification.order_id)


@dining.event_handler(part_of=Order)
class OrderNotificationEventHandler:
    """Turns order events into customer notifications."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        _publish(
            OrderNotification(
                kind="order-placed",
                order_id=str(event.order_id),
                order_number=event.order_number,
                customer_id=str(event.customer_id),
                restaurant_id=str(event.restaurant_id),
                status=OrderStatus.PENDING.value,
                message=f"Your order #{event.order_number} has been placed",
                occurred_at=event.placed_at,
                data={"order_type": event.order_type, "total": event.total, "item_count": event.item_count},
            )
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        message = _STATUS_MESSAGES[OrderStatus(event.new_status)].format(
            number=event.order_number,
            order_type=event.order_type,
            description=event.description or "",
        )
        _publish(
            OrderNotification(
                kind=f"order-{event.new_status}",
                order_id=str(event.order_id),
                order_number=event.order_number,
                customer_id=str(event.customer_id),
                restaurant_id=str(event.restaurant_id),
                status=event.new_status,
                message=message.strip(),
                occurred_at=event.changed_at,
                data={"previous_status": event.previous_status},
            )
        )
