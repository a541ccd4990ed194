"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. Nothing is shared across users.
"""

from dataclasses import dataclass


@dataclass
class CartState:
    """Tracks one simulated customer's cart."""

    user_id: str
    restaurant_id: str
    restaurant_name: str
    line_count: int = 0
    revision: int | None = None


@dataclass
class OrderState:
    """Tracks one placed order through its status lifecycle."""

    order_id: str | None = None
    order_number: str | None = None
    order_type: str = "delivery"
    status: str = "pending"
