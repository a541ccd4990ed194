"""Pydantic request/response schemas for the dining API.

These are external contracts (anti-corruption layer) — separate from the
internal Protean commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from dining.cart.summary import summarize_cart
from dining.concurrency import revision_of
from dining.order.state_machine import status_label


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CustomizationSchema(BaseModel):
    name: str = Field(min_length=1)
    value: str = Field(min_length=1)
    additional_price: float = Field(ge=0, default=0.0)


class DeliveryAddressSchema(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str
    apartment_number: str | None = None
    delivery_instructions: str | None = Field(default=None, max_length=200)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    menu_item_id: str
    restaurant_id: str
    restaurant_name: str | None = None
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    quantity: int = Field(ge=1, default=1)
    category: str
    customizations: list[CustomizationSchema] = Field(default_factory=list)
    special_instructions: str | None = Field(default=None, max_length=200)
    preparation_time: int | None = Field(default=None, ge=0)
    is_available: bool = True
    delivery_fee: float | None = Field(default=None, ge=0)
    minimum_order_amount: float | None = Field(default=None, ge=0)
    expected_revision: int | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "menu_item_id": "item-margherita",
                    "restaurant_id": "rest-001",
                    "restaurant_name": "Luigi's",
                    "name": "Margherita",
                    "price": 12.99,
                    "quantity": 2,
                    "category": "pizza",
                    "customizations": [{"name": "Crust", "value": "Thin", "additional_price": 3.0}],
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int
    expected_revision: int | None = None


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(min_length=1, max_length=50)
    discount_amount: float = Field(ge=0)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    order_type: str
    payment_method: str
    delivery_address: DeliveryAddressSchema | None = None
    estimated_delivery_time: datetime | None = None
    estimated_pickup_time: datetime | None = None
    tip: float = Field(ge=0, default=0.0)
    special_instructions: str | None = Field(default=None, max_length=500)
    expected_cart_revision: int | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    description: str | None = None
    location: str | None = None
    courier_name: str | None = None
    courier_phone: str | None = None
    reason: str | None = None
    cancelled_by: str = "restaurant"
    expected_revision: int | None = None


class CancelOrderRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)
    cancelled_by: str = "customer"
    refund_amount: float | None = Field(default=None, ge=0)
    expected_revision: int | None = None


class RefundOrderRequest(BaseModel):
    refund_amount: float | None = Field(default=None, ge=0)


class RateOrderRequest(BaseModel):
    overall: int = Field(ge=1, le=5)
    food: int | None = Field(default=None, ge=1, le=5)
    delivery: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=500)


class UpdateLocationRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str | None = None


class RevisePreparationTimeRequest(BaseModel):
    minutes: int = Field(ge=1)


class RecordPaymentResultRequest(BaseModel):
    status: str
    transaction_id: str | None = None


class ExpireCartsRequest(BaseModel):
    as_of: datetime | None = None
    batch_size: int | None = Field(default=None, ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartLineResponse(BaseModel):
    index: int
    menu_item_id: str
    name: str
    description: str | None = None
    price: float
    quantity: int
    category: str
    customizations: list[CustomizationSchema]
    special_instructions: str = ""
    preparation_time: int | None = None
    is_available: bool = True


class CartSummaryResponse(BaseModel):
    item_count: int
    subtotal: float
    discount: float
    delivery_fee: float
    total: float
    meets_minimum_order: bool
    minimum_order_amount: float
    estimated_prep_time: int
    estimated_delivery_time: int
    restaurant_id: str | None = None
    restaurant_name: str | None = None
    coupon_code: str | None = None


class CartResponse(BaseModel):
    cart_id: str
    owner_id: str
    revision: int
    items: list[CartLineResponse]
    summary: CartSummaryResponse
    expires_at: datetime | None = None
    last_updated: datetime | None = None

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        return cls(
            cart_id=str(cart.id),
            owner_id=str(cart.owner_id),
            revision=revision_of(cart),
            items=[
                CartLineResponse(
                    index=index,
                    menu_item_id=str(line.menu_item_id),
                    name=line.name,
                    description=line.description,
                    price=line.price,
                    quantity=line.quantity,
                    category=line.category,
                    customizations=line.customization_list(),
                    special_instructions=line.special_instructions or "",
                    preparation_time=line.preparation_time,
                    is_available=line.is_available,
                )
                for index, line in enumerate(cart.lines())
            ],
            summary=CartSummaryResponse(**summarize_cart(cart).to_dict()),
            expires_at=cart.expires_at,
            last_updated=cart.last_updated,
        )


class UnavailableLineResponse(BaseModel):
    index: int
    menu_item_id: str
    name: str
    reason: str


class AvailabilityResponse(BaseModel):
    all_available: bool
    checked: bool
    unavailable: list[UnavailableLineResponse]


class TrackingEntryResponse(BaseModel):
    status: str
    timestamp: datetime
    description: str | None = None
    location: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    restaurant_id: str
    restaurant_name: str | None = None
    status: str
    status_label: str
    order_type: str
    revision: int
    items: list[dict]
    pricing: dict
    payment: dict
    delivery_address: dict | None = None
    estimated_delivery_time: datetime | None = None
    estimated_pickup_time: datetime | None = None
    actual_delivery_time: datetime | None = None
    tracking: list[TrackingEntryResponse]
    current_location: dict | None = None
    courier: dict | None = None
    rating: dict | None = None
    cancellation: dict | None = None
    can_cancel: bool
    can_rate: bool
    created_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        def _vo(value):
            return value.to_dict() if value is not None else None

        return cls(
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            restaurant_id=str(order.restaurant_id),
            restaurant_name=order.restaurant_name,
            status=order.status,
            status_label=status_label(order.status),
            order_type=order.order_type,
            revision=revision_of(order),
            items=[
                {
                    "menu_item_id": str(item.menu_item_id),
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                    "category": item.category,
                    "customizations": item.customization_list(),
                    "special_instructions": item.special_instructions or "",
                }
                for item in order.lines()
            ],
            pricing=_vo(order.pricing),
            payment=_vo(order.payment),
            delivery_address=_vo(order.delivery_address),
            estimated_delivery_time=order.estimated_delivery_time,
            estimated_pickup_time=order.estimated_pickup_time,
            actual_delivery_time=order.actual_delivery_time,
            tracking=[
                TrackingEntryResponse(
                    status=entry.status,
                    timestamp=entry.timestamp,
                    description=entry.description,
                    location=entry.location,
                )
                for entry in order.history()
            ],
            current_location=_vo(order.current_location),
            courier=_vo(order.courier),
            rating=_vo(order.rating),
            cancellation=_vo(order.cancellation),
            can_cancel=order.can_cancel(),
            can_rate=order.can_rate(),
            created_at=order.created_at,
        )


class ExpireCartsResponse(BaseModel):
    deleted: int
