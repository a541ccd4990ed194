"""Tests for the Order aggregate: transitions, tracking, cancellation, refunds and ratings."""

from datetime import UTC, datetime, timedelta

import pytest
from dining.cart.cart import Cart
from dining.config import DiningSettings
from dining.errors import IllegalTransition, RatingNotAllowed
from dining.order.events import OrderPaymentRecorded, OrderRated, OrderStatusChanged
from dining.order.factory import PlacementDetails, build_order
from protean.exceptions import ValidationError

ADDRESS = {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip_code": "62701"}


def _make_order(order_type="delivery"):
    cart = Cart.create(owner_id="user-001")
    cart.add_item(
        menu_item_id="item-pad-thai",
        restaurant_id="rest-003",
        name="Pad Thai",
        price=14.0,
        category="noodles",
        quantity=2,
        delivery_fee=2.0,
    )
    if order_type == "delivery":
        details = PlacementDetails(order_type="delivery", payment_method="card", delivery_address=ADDRESS)
    else:
        details = PlacementDetails(
            order_type="pickup",
            payment_method="cash",
            estimated_pickup_time=datetime.now(UTC) + timedelta(minutes=25),
        )
    return build_order(cart, details, "FS123456789", DiningSettings())


def _delivered(order_type="delivery"):
    order = _make_order(order_type)
    order.confirm()
    order.start_preparing()
    order.mark_ready()
    if order_type == "delivery":
        order.dispatch()
    order.mark_delivered()
    return order


class TestTransitions:
    def test_full_delivery_lifecycle(self):
        order = _delivered()
        assert order.status == "delivered"
        assert [entry.status for entry in order.history()] == [
            "pending",
            "confirmed",
            "preparing",
            "ready",
            "out-for-delivery",
            "delivered",
        ]
        assert order.actual_delivery_time == order.history()[-1].timestamp

    def test_pickup_lifecycle_ends_at_delivered(self):
        order = _delivered("pickup")
        assert order.status == "delivered"
        assert "out-for-delivery" not in [entry.status for entry in order.history()]

    def test_each_transition_appends_one_entry(self):
        order = _make_order()
        order.confirm()
        assert len(order.history()) == 2
        order.start_preparing()
        assert len(order.history()) == 3

    def test_timestamps_never_go_backwards(self):
        order = _delivered()
        stamps = [entry.timestamp for entry in order.history()]
        assert stamps == sorted(stamps)

    def test_preparing_to_delivered_is_illegal(self):
        order = _make_order()
        order.confirm()
        order.start_preparing()

        with pytest.raises(IllegalTransition) as exc:
            order.advance_to("delivered")

        assert exc.value.code == "illegal_transition"
        assert order.status == "preparing"
        assert len(order.history()) == 3

    def test_repeating_a_transition_is_illegal(self):
        order = _make_order()
        order.confirm()
        with pytest.raises(IllegalTransition):
            order.confirm()
        assert len(order.history()) == 2

    def test_unknown_status_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.advance_to("teleported")

    def test_cancel_through_advance_is_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.advance_to("cancelled")

    def test_description_and_location_are_recorded(self):
        order = _make_order()
        order.advance_to("confirmed", description="Accepted by Luigi", location="Kitchen")
        entry = order.history()[-1]
        assert entry.description == "Accepted by Luigi"
        assert entry.location == "Kitchen"

    def test_dispatch_records_courier(self):
        order = _make_order()
        order.confirm()
        order.start_preparing()
        order.mark_ready()
        order.dispatch(courier_name="Sam", courier_phone="+1-555-0100")
        assert order.courier.name == "Sam"

    def test_raises_status_changed_events(self):
        order = _make_order()
        order.confirm()
        changed = [e for e in order._events if isinstance(e, OrderStatusChanged)]
        assert len(changed) == 1
        assert changed[0].previous_status == "pending"
        assert changed[0].new_status == "confirmed"
        assert changed[0].order_number == "FS123456789"


class TestCancellation:
    def test_cancel_pending_order(self):
        order = _make_order()
        order.cancel("Changed my mind")
        assert order.status == "cancelled"
        assert order.cancellation.reason == "Changed my mind"
        assert order.cancellation.cancelled_by == "customer"
        assert order.cancellation.refund_amount == order.pricing.total
        assert order.history()[-1].status == "cancelled"
        assert not order.can_cancel()

    def test_cancel_by_restaurant_with_partial_refund(self):
        order = _make_order()
        order.confirm()
        order.cancel("Out of noodles", cancelled_by="restaurant", refund_amount=10.0)
        assert order.cancellation.cancelled_by == "restaurant"
        assert order.cancellation.refund_amount == 10.0

    def test_cancel_after_delivery_is_illegal(self):
        order = _delivered()
        with pytest.raises(IllegalTransition):
            order.cancel("Too late")
        assert order.status == "delivered"
        assert order.cancellation is None

    def test_double_cancel_is_illegal(self):
        order = _make_order()
        order.cancel("Changed my mind")
        with pytest.raises(IllegalTransition):
            order.cancel("Again")
        assert len(order.history()) == 2

    def test_reason_required(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.cancel("  ")

    def test_refund_amount_cannot_exceed_total(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.cancel("Changed my mind", refund_amount=order.pricing.total + 1)


class TestRefund:
    def test_refund_delivered_order(self):
        order = _delivered()
        order.refund()
        assert order.status == "refunded"
        assert order.payment.status == "refunded"
        assert order.payment.refund_amount == order.pricing.total
        assert order.payment.refunded_at is not None
        assert order.history()[-1].status == "refunded"

    def test_partial_refund(self):
        order = _delivered()
        order.refund(refund_amount=5.0)
        assert order.payment.refund_amount == 5.0

    def test_refund_before_delivery_is_illegal(self):
        order = _make_order()
        with pytest.raises(IllegalTransition):
            order.refund()

    def test_refund_through_advance(self):
        order = _delivered()
        order.advance_to("refunded")
        assert order.status == "refunded"


class TestRating:
    def test_rate_delivered_order(self):
        order = _delivered()
        assert order.can_rate()
        order.rate(overall=5, food=4, comment="Great")
        assert order.rating.overall == 5
        assert not order.can_rate()
        assert isinstance(order._events[-1], OrderRated)

    def test_rate_twice_rejected(self):
        order = _delivered()
        order.rate(overall=5)
        with pytest.raises(RatingNotAllowed):
            order.rate(overall=1)
        assert order.rating.overall == 5

    def test_rate_before_delivery_rejected(self):
        order = _make_order()
        assert not order.can_rate()
        with pytest.raises(RatingNotAllowed):
            order.rate(overall=4)

    def test_out_of_range_rating_rejected(self):
        order = _delivered()
        with pytest.raises(ValidationError):
            order.rate(overall=6)


class TestPaymentAndTracking:
    def test_record_completed_payment(self):
        order = _make_order()
        order.record_payment_result("completed", transaction_id="txn-001")
        assert order.payment.status == "completed"
        assert order.payment.transaction_id == "txn-001"
        assert order.payment.paid_at is not None
        assert order.payment.method == "card"
        assert isinstance(order._events[-1], OrderPaymentRecorded)

    def test_record_failed_payment(self):
        order = _make_order()
        order.record_payment_result("failed")
        assert order.payment.status == "failed"
        assert order.payment.paid_at is None

    def test_live_location_leaves_history_alone(self):
        order = _make_order()
        order.update_current_location(41.88, -87.63, address="Near the river")
        order.update_current_location(41.89, -87.62)
        assert order.current_location.latitude == 41.89
        assert len(order.history()) == 1

    def test_revise_preparation_time(self):
        order = _make_order()
        before = datetime.now(UTC)
        order.revise_preparation_time(40, delivery_minutes=20)
        assert order.estimated_preparation_minutes == 40
        assert order.estimated_delivery_time >= before + timedelta(minutes=60)
        assert len(order.history()) == 1

    def test_revise_preparation_time_of_finished_order_rejected(self):
        order = _delivered()
        with pytest.raises(IllegalTransition):
            order.revise_preparation_time(10, delivery_minutes=20)

    def test_revise_preparation_time_must_be_positive(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.revise_preparation_time(0, delivery_minutes=20)
