"""Order repository — order-number and customer lookups."""

from dining.domain import dining
from dining.order.order import Order
from dining.shared.clock import as_utc


@dining.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None

    def order_number_taken(self, order_number: str) -> bool:
        return self.find_by_number(order_number) is not None

    def find_for_customer(self, customer_id) -> list[Order]:
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return sorted(orders, key=lambda order: as_utc(order.created_at), reverse=True)
