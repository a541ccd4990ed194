"""Order notification port — abstract interface for the notification service.

The dining domain's only obligation is to hand over a well-formed event after
each accepted status change. Delivery is the notification service's concern.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class OrderNotification:
    kind: str  # "order-placed" | "order-<status>"
    order_id: str
    order_number: str
    customer_id: str
    restaurant_id: str
    status: str
    message: str
    occurred_at: datetime
    data: dict = field(default_factory=dict)


class OrderNotifier(ABC):
    """Abstract interface for publishing order notifications."""

    @abstractmethod
    def publish(self, notification: OrderNotification) -> None:
        """Hand the notification to the delivery service (fire-and-forget)."""
        ...
