"""Order status state machine — the allowed-transition table and its predicates.

Transitions are static data, one table per order type:

    pending → confirmed → preparing → ready → out-for-delivery → delivered   (delivery)
    pending → confirmed → preparing → ready → delivered                      (pickup, dine-in)
    any non-terminal state → cancelled
    delivered → refunded

``delivered``, ``cancelled`` and ``refunded`` are terminal; ``refunded`` is the
only state reachable from a terminal one. Pickup and dine-in orders reach
``delivered`` at handover, so every order type ends in the same terminal state.
"""

from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderType(Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"
    DINE_IN = "dine-in"


TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED})

_KITCHEN_PATH = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING},
    OrderStatus.PREPARING: {OrderStatus.READY},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
}

_HANDOVER_PATH = {
    OrderType.DELIVERY: {
        OrderStatus.READY: {OrderStatus.OUT_FOR_DELIVERY},
        OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    },
    OrderType.PICKUP: {OrderStatus.READY: {OrderStatus.DELIVERED}},
    OrderType.DINE_IN: {OrderStatus.READY: {OrderStatus.DELIVERED}},
}


def _build_table(order_type: OrderType) -> dict[OrderStatus, frozenset[OrderStatus]]:
    table = {}
    for status in OrderStatus:
        targets = set(_KITCHEN_PATH.get(status, set())) | _HANDOVER_PATH[order_type].get(status, set())
        if status not in TERMINAL_STATES:
            targets.add(OrderStatus.CANCELLED)
        table[status] = frozenset(targets)
    return table


TRANSITIONS: dict[OrderType, dict[OrderStatus, frozenset[OrderStatus]]] = {
    order_type: _build_table(order_type) for order_type in OrderType
}

_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready",
    OrderStatus.OUT_FOR_DELIVERY: "Out for delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.REFUNDED: "Refunded",
}


def allowed_transitions(status, order_type) -> frozenset[OrderStatus]:
    return TRANSITIONS[OrderType(order_type)][OrderStatus(status)]


def is_legal_transition(status, target, order_type) -> bool:
    return OrderStatus(target) in allowed_transitions(status, order_type)


def is_terminal(status) -> bool:
    return OrderStatus(status) in TERMINAL_STATES


def can_cancel(status) -> bool:
    return not is_terminal(status)


def can_rate(status, rating=None) -> bool:
    """Only delivered orders without an overall rating can be rated."""
    already_rated = rating is not None and getattr(rating, "overall", None) is not None
    return OrderStatus(status) == OrderStatus.DELIVERED and not already_rated


def status_label(status) -> str:
    return _LABELS[OrderStatus(status)]
