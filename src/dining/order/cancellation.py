"""Order cancellation and refund — commands and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from dining.concurrency import check_expected_revision
from dining.domain import dining
from dining.order.order import CancellationActor, Order

logger = structlog.get_logger(__name__)


@dining.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    cancelled_by = String(choices=CancellationActor, default=CancellationActor.CUSTOMER.value)
    refund_amount = Float(min_value=0.0)
    expected_revision = Integer()


@dining.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    refund_amount = Float(min_value=0.0)  # Defaults to the order total
    expected_revision = Integer()


@dining.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        check_expected_revision(order, command.expected_revision)
        order.cancel(
            reason=command.reason,
            cancelled_by=command.cancelled_by,
            refund_amount=command.refund_amount,
        )
        repo.add(order)
        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            cancelled_by=command.cancelled_by,
            reason=command.reason,
        )
        return str(order.id)

    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        check_expected_revision(order, command.expected_revision)
        order.refund(refund_amount=command.refund_amount)
        repo.add(order)
        logger.info(
            "Order refunded",
            order_id=str(order.id),
            refund_amount=order.payment.refund_amount,
        )
        return str(order.id)
