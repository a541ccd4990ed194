"""Order status updates — restaurant/courier driven transitions.

The handler loads the order, lets the aggregate check the requested status
against the transition table, and saves under the aggregate version check. A request that
raced another transition on the same order fails instead of appending a second
tracking entry.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from dining.concurrency import check_expected_revision
from dining.config import get_settings
from dining.domain import dining
from dining.order.order import CancellationActor, Order
from dining.order.state_machine import OrderStatus

logger = structlog.get_logger(__name__)


@dining.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    description = String(max_length=500)
    location = String(max_length=255)
    courier_name = String(max_length=100)
    courier_phone = String(max_length=30)
    reason = String(max_length=500)  # required when status is "cancelled"
    cancelled_by = String(choices=CancellationActor, default=CancellationActor.RESTAURANT.value)
    expected_revision = Integer()


@dining.command(part_of="Order")
class RevisePreparationTime:
    order_id = Identifier(required=True)
    minutes = Integer(required=True, min_value=1)


@dining.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        check_expected_revision(order, command.expected_revision)

        previous = order.status
        if command.status == OrderStatus.CANCELLED.value:
            order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        else:
            order.advance_to(
                command.status,
                description=command.description,
                location=command.location,
                courier_name=command.courier_name,
                courier_phone=command.courier_phone,
            )
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous,
            new_status=order.status,
        )
        return str(order.id)

    @handle(RevisePreparationTime)
    def revise_preparation_time(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.revise_preparation_time(command.minutes, get_settings().delivery_minutes)
        repo.add(order)
        return str(order.id)
