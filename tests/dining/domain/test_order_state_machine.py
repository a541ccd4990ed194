"""Tests for the static order transition table."""

import pytest
from dining.order.order import OrderRating
from dining.order.state_machine import (
    TERMINAL_STATES,
    OrderStatus,
    OrderType,
    allowed_transitions,
    can_cancel,
    can_rate,
    is_legal_transition,
    is_terminal,
    status_label,
)

DELIVERY_PATH = ["pending", "confirmed", "preparing", "ready", "out-for-delivery", "delivered"]
PICKUP_PATH = ["pending", "confirmed", "preparing", "ready", "delivered"]


class TestHappyPaths:
    @pytest.mark.parametrize("current,target", list(zip(DELIVERY_PATH, DELIVERY_PATH[1:])))
    def test_delivery_path(self, current, target):
        assert is_legal_transition(current, target, "delivery")

    @pytest.mark.parametrize("current,target", list(zip(PICKUP_PATH, PICKUP_PATH[1:])))
    def test_pickup_path(self, current, target):
        assert is_legal_transition(current, target, "pickup")

    def test_dine_in_follows_the_pickup_path(self):
        assert allowed_transitions("ready", "dine-in") == allowed_transitions("ready", "pickup")


class TestIllegalMoves:
    def test_preparing_cannot_jump_to_delivered(self):
        assert not is_legal_transition("preparing", "delivered", "delivery")

    def test_pickup_orders_never_go_out_for_delivery(self):
        assert not is_legal_transition("ready", "out-for-delivery", "pickup")

    def test_no_backwards_moves(self):
        assert not is_legal_transition("ready", "preparing", "delivery")

    def test_refund_only_after_delivery(self):
        assert not is_legal_transition("ready", "refunded", "delivery")
        assert is_legal_transition("delivered", "refunded", "delivery")

    @pytest.mark.parametrize("status", ["cancelled", "refunded"])
    def test_dead_ends(self, status):
        for order_type in OrderType:
            assert allowed_transitions(status, order_type.value) == frozenset()


class TestCancellation:
    @pytest.mark.parametrize("status", ["pending", "confirmed", "preparing", "ready", "out-for-delivery"])
    def test_every_non_terminal_state_can_cancel(self, status):
        assert can_cancel(status)
        assert is_legal_transition(status, "cancelled", "delivery")

    @pytest.mark.parametrize("status", ["delivered", "cancelled", "refunded"])
    def test_terminal_states_cannot_cancel(self, status):
        assert not can_cancel(status)
        assert is_terminal(status)

    def test_terminal_states(self):
        assert TERMINAL_STATES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}


class TestCanRate:
    def test_delivered_and_unrated(self):
        assert can_rate("delivered", None)

    def test_already_rated(self):
        assert not can_rate("delivered", OrderRating(overall=4))

    @pytest.mark.parametrize("status", ["pending", "ready", "out-for-delivery", "cancelled", "refunded"])
    def test_not_delivered(self, status):
        assert not can_rate(status, None)


class TestLabels:
    def test_status_label(self):
        assert status_label("out-for-delivery") == "Out for delivery"

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            status_label("lost")
