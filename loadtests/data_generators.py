"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the dining API's Pydantic request schemas
and stay inside the domain limits (quantity 1..10 per line, one restaurant
per cart, instructions up to 200 characters).
"""

import random
import uuid

from faker import Faker

fake = Faker()

# ---------- Menu ----------

RESTAURANTS = [
    ("rest-lt-001", "Luigi's Trattoria"),
    ("rest-lt-002", "Saffron House"),
    ("rest-lt-003", "Noodle Bar 88"),
]

CATEGORIES = ["pizza", "pasta", "curry", "noodles", "salad", "dessert", "drinks"]

CUSTOMIZATIONS = [
    {"name": "Size", "value": "Large", "additional_price": 2.5},
    {"name": "Spice", "value": "Hot", "additional_price": 0.0},
    {"name": "Extra", "value": "Cheese", "additional_price": 1.5},
]


def user_id() -> str:
    """Generate a unique caller identity like 'user-lt-a1b2c3d4'."""
    return f"user-lt-{uuid.uuid4().hex[:8]}"


def restaurant() -> tuple[str, str]:
    return random.choice(RESTAURANTS)


def cart_item_data(restaurant_id: str, restaurant_name: str) -> dict:
    """Generate an AddCartItemRequest payload for the given restaurant."""
    payload = {
        "menu_item_id": f"item-{random.randint(1, 40):03d}",
        "restaurant_id": restaurant_id,
        "restaurant_name": restaurant_name,
        "name": fake.word().title() + " " + random.choice(["Special", "Bowl", "Plate", "Combo"]),
        "price": round(random.uniform(4.0, 24.0), 2),
        "quantity": random.randint(1, 3),
        "category": random.choice(CATEGORIES),
        "preparation_time": random.choice([10, 15, 20, 25]),
        "delivery_fee": 2.99,
        "minimum_order_amount": 10.0,
    }
    if random.random() < 0.4:
        payload["customizations"] = random.sample(CUSTOMIZATIONS, k=random.randint(1, 2))
    if random.random() < 0.2:
        payload["special_instructions"] = fake.sentence(nb_words=6)[:200]
    return payload


def delivery_address_data() -> dict:
    return {
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "latitude": float(fake.latitude()),
        "longitude": float(fake.longitude()),
    }


def place_order_data(order_type: str | None = None) -> dict:
    """Generate a PlaceOrderRequest payload (delivery or pickup)."""
    order_type = order_type or random.choice(["delivery", "delivery", "pickup"])
    payload = {
        "order_type": order_type,
        "payment_method": random.choice(["card", "cash", "digital-wallet", "online"]),
        "tip": round(random.choice([0.0, 1.0, 2.5, 5.0]), 2),
    }
    if order_type == "delivery":
        payload["delivery_address"] = delivery_address_data()
    else:
        payload["estimated_pickup_time"] = fake.future_datetime(end_date="+1h").isoformat()
    return payload


def cancellation_data() -> dict:
    return {"reason": random.choice(["Changed my mind", "Ordered by mistake", "Taking too long"])}


def rating_data() -> dict:
    return {
        "overall": random.randint(1, 5),
        "food": random.randint(1, 5),
        "delivery": random.randint(1, 5),
        "comment": fake.sentence(nb_words=8)[:500],
    }
