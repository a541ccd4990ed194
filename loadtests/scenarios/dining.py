"""Dining load test scenarios.

Three users: a browsing customer who builds and abandons a cart, a customer
who checks out, drives the order to delivery and rates it, and a reader
polling order history.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    cancellation_data,
    cart_item_data,
    place_order_data,
    rating_data,
    restaurant,
    user_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CartState, OrderState

_NEXT_STATUS = {
    "delivery": ["confirmed", "preparing", "ready", "out-for-delivery", "delivered"],
    "pickup": ["confirmed", "preparing", "ready", "delivered"],
}


def _new_cart_state() -> CartState:
    restaurant_id, restaurant_name = restaurant()
    return CartState(user_id=user_id(), restaurant_id=restaurant_id, restaurant_name=restaurant_name)


class _CartTasks(SequentialTaskSet):
    """Shared cart steps; every request carries the caller in X-User-Id."""

    def on_start(self):
        self.state = _new_cart_state()

    @property
    def headers(self):
        return {"X-User-Id": self.state.user_id}

    def add_item(self, label: str):
        with self.client.post(
            "/cart/items",
            json=cart_item_data(self.state.restaurant_id, self.state.restaurant_name),
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code == 200:
                body = resp.json()
                self.state.line_count = len(body["items"])
                self.state.revision = body["revision"]
            else:
                resp.failure(f"Add {label} failed: {resp.status_code} - {extract_error_detail(resp)}")


class CartBrowsingJourney(_CartTasks):
    """Open cart -> Add items -> Change quantity -> Remove a line -> Abandon.

    The abandoned cart is left for the expiry sweep.
    """

    @task
    def open_cart(self):
        with self.client.get("/cart", headers=self.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"Open cart failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_items(self):
        for n in range(random.randint(2, 4)):
            self.add_item(f"item {n + 1}")

    @task
    def update_quantity(self):
        if not self.state.line_count:
            return
        with self.client.put(
            "/cart/items/0",
            json={"quantity": random.randint(1, 5), "expected_revision": self.state.revision},
            headers=self.headers,
            catch_response=True,
            name="PUT /cart/items/{index}",
        ) as resp:
            if resp.status_code == 200:
                self.state.revision = resp.json()["revision"]
            elif resp.status_code != 409:
                resp.failure(f"Update quantity failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def remove_last_line(self):
        if not self.state.line_count:
            return
        with self.client.delete(
            f"/cart/items/{self.state.line_count - 1}",
            headers=self.headers,
            catch_response=True,
            name="DELETE /cart/items/{index}",
        ) as resp:
            if resp.status_code == 200:
                self.state.line_count = len(resp.json()["items"])
            else:
                resp.failure(f"Remove line failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutJourney(_CartTasks):
    """Add items -> Apply coupon -> Check availability -> Place order -> Cancel or rate."""

    def on_start(self):
        super().on_start()
        self.order = OrderState()

    @task
    def fill_cart(self):
        for n in range(random.randint(1, 3)):
            self.add_item(f"item {n + 1}")
        if not self.state.line_count:
            self.interrupt()

    @task
    def apply_coupon(self):
        if random.random() > 0.3:
            return
        with self.client.post(
            "/cart/coupon",
            json={"coupon_code": "lunch10", "discount_amount": 1.0},
            headers=self.headers,
            catch_response=True,
            name="POST /cart/coupon",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Apply coupon failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def check_availability(self):
        with self.client.get(
            "/cart/availability", headers=self.headers, catch_response=True, name="GET /cart/availability"
        ) as resp:
            if resp.status_code not in (200, 503):
                resp.failure(f"Availability failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def place_order(self):
        payload = place_order_data()
        with self.client.post(
            "/orders", json=payload, headers=self.headers, catch_response=True, name="POST /orders"
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.order.order_id = body["order_id"]
                self.order.order_number = body["order_number"]
                self.order.order_type = body["order_type"]
            elif resp.status_code == 422 and resp.json().get("error") == "minimum_order_not_met":
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Place order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def cancel_some(self):
        if random.random() > 0.2:
            return
        with self.client.post(
            f"/orders/{self.order.order_id}/cancel",
            json=cancellation_data(),
            catch_response=True,
            name="POST /orders/{id}/cancel",
        ) as resp:
            if resp.status_code == 200:
                self.order.status = "cancelled"
            else:
                resp.failure(f"Cancel order failed: {resp.status_code} - {extract_error_detail(resp)}")
        self.interrupt()

    @task
    def deliver_and_rate(self):
        for status in _NEXT_STATUS[self.order.order_type]:
            with self.client.put(
                f"/orders/{self.order.order_id}/status",
                json={"status": status},
                catch_response=True,
                name="PUT /orders/{id}/status",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Move to {status} failed: {resp.status_code} - {extract_error_detail(resp)}")
                    self.interrupt()
                self.order.status = status
        with self.client.post(
            f"/orders/{self.order.order_id}/rating",
            json=rating_data(),
            catch_response=True,
            name="POST /orders/{id}/rating",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Rate order failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderHistoryJourney(SequentialTaskSet):
    """Read-heavy polling of a customer's order list, like a tracking screen."""

    def on_start(self):
        self.state = _new_cart_state()

    @task
    def list_orders(self):
        with self.client.get(
            "/orders",
            headers={"X-User-Id": self.state.user_id},
            catch_response=True,
            name="GET /orders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class BrowsingUser(HttpUser):
    wait_time = between(1, 3)
    tasks = [CartBrowsingJourney]


class CheckoutUser(HttpUser):
    wait_time = between(1, 3)
    tasks = [CheckoutJourney]


class OrderHistoryUser(HttpUser):
    """Low-weight reader polling order history."""

    weight = 1
    wait_time = between(2, 5)
    tasks = [OrderHistoryJourney]
