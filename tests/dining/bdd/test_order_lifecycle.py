"""BDD tests for the order lifecycle."""

from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the order has moved to "{status}"'))
def order_has_moved(order, status):
    order.advance_to(status)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order moves to "{status}"'))
def order_moves(order, status, capture):
    capture(lambda: order.advance_to(status))


@when(parsers.cfparse('the customer cancels because "{reason}"'))
def customer_cancels(order, reason, capture):
    capture(lambda: order.cancel(reason))


@when(parsers.cfparse("the customer rates the order {overall:d}"))
def customer_rates(order, overall):
    order.rate(overall=overall)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status(order, status):
    assert order.status == status


@then(parsers.cfparse("the tracking history has {count:d} entries"))
def history_length(order, count):
    history = order.history()
    assert len(history) == count
    assert [entry.timestamp for entry in history] == sorted(entry.timestamp for entry in history)


@then("the order can be rated")
def can_be_rated(order):
    assert order.can_rate()


@then("the order cannot be rated")
def cannot_be_rated(order):
    assert not order.can_rate()


@then("the order cannot be cancelled")
def cannot_be_cancelled(order):
    assert not order.can_cancel()
