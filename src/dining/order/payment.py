"""Payment results reported by the payment gateway.

The gateway owns charging. The order stores the status and transaction id it
reports, as given, so support staff can reconcile the two systems.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dining.domain import dining
from dining.order.order import Order, PaymentStatus

logger = structlog.get_logger(__name__)


@dining.command(part_of="Order")
class RecordPaymentResult:
    order_id = Identifier(required=True)
    status = String(required=True, choices=PaymentStatus)
    transaction_id = String(max_length=255)


@dining.command_handler(part_of=Order)
class PaymentResultHandler:
    @handle(RecordPaymentResult)
    def record_payment_result(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_result(status=command.status, transaction_id=command.transaction_id)
        repo.add(order)
        logger.info(
            "Payment result recorded",
            order_id=str(order.id),
            payment_status=command.status,
            transaction_id=command.transaction_id,
        )
        return str(order.id)
