"""Order rating — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from dining.domain import dining
from dining.order.order import Order


@dining.command(part_of="Order")
class RateOrder:
    order_id = Identifier(required=True)
    overall = Integer(required=True, min_value=1, max_value=5)
    food = Integer(min_value=1, max_value=5)
    delivery = Integer(min_value=1, max_value=5)
    comment = String(max_length=500)


@dining.command_handler(part_of=Order)
class RateOrderHandler:
    @handle(RateOrder)
    def rate_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.rate(
            overall=command.overall,
            food=command.food,
            delivery=command.delivery,
            comment=command.comment,
        )
        repo.add(order)
        return str(order.id)
