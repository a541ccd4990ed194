"""FastAPI routes for the dining domain — cart, orders and maintenance.

The caller's identity arrives in the ``X-User-Id`` header, already
authenticated upstream; it is used as the cart owner and order customer.
"""

import json
from collections.abc import Callable

from fastapi import APIRouter, Header
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from dining.api.schemas import (
    AddCartItemRequest,
    ApplyCouponRequest,
    AvailabilityResponse,
    CancelOrderRequest,
    CartResponse,
    ExpireCartsRequest,
    ExpireCartsResponse,
    OrderResponse,
    PlaceOrderRequest,
    RateOrderRequest,
    RecordPaymentResultRequest,
    RefundOrderRequest,
    RevisePreparationTimeRequest,
    UnavailableLineResponse,
    UpdateCartItemRequest,
    UpdateLocationRequest,
    UpdateOrderStatusRequest,
)
from dining.cart.availability import validate_availability
from dining.cart.cart import Cart
from dining.cart.coupons import ApplyCoupon, RemoveCoupon
from dining.cart.expiry import ExpireAbandonedCarts
from dining.cart.items import AddItemToCart, RemoveCartItem, UpdateCartItemQuantity
from dining.cart.management import ClearCart, OpenCart
from dining.concurrency import retry_on_conflict
from dining.order.cancellation import CancelOrder, RefundOrder
from dining.order.order import Order
from dining.order.payment import RecordPaymentResult
from dining.order.placement import PlaceOrder, checkout
from dining.order.rating import RateOrder
from dining.order.status import RevisePreparationTime, UpdateOrderStatus
from dining.order.tracking import UpdateCurrentLocation


def _process(build: Callable, expected_revision: int | None = None):
    """Process the command ``build()`` returns, retrying once on a lost race.

    Callers that pinned a revision asked to fail on conflict, so they are not retried.
    """
    if expected_revision is not None:
        return current_domain.process(build(), asynchronous=False)
    return retry_on_conflict(lambda: current_domain.process(build(), asynchronous=False))


def _cart_response(owner_id: str) -> CartResponse:
    cart = current_domain.repository_for(Cart).require_for_owner(owner_id)
    return CartResponse.from_cart(cart)


def _order_response(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(x_user_id: str = Header(alias="X-User-Id")) -> CartResponse:
    current_domain.process(OpenCart(owner_id=x_user_id), asynchronous=False)
    return _cart_response(x_user_id)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddCartItemRequest, x_user_id: str = Header(alias="X-User-Id")) -> CartResponse:
    _process(
        lambda: AddItemToCart(
            owner_id=x_user_id,
            menu_item_id=body.menu_item_id,
            restaurant_id=body.restaurant_id,
            restaurant_name=body.restaurant_name,
            name=body.name,
            description=body.description,
            price=body.price,
            quantity=body.quantity,
            category=body.category,
            customizations=json.dumps([c.model_dump() for c in body.customizations]),
            special_instructions=body.special_instructions,
            preparation_time=body.preparation_time,
            is_available=body.is_available,
            delivery_fee=body.delivery_fee,
            minimum_order_amount=body.minimum_order_amount,
            expected_revision=body.expected_revision,
        ),
        body.expected_revision,
    )
    return _cart_response(x_user_id)


@cart_router.put("/items/{index}", response_model=CartResponse)
async def update_cart_item(
    index: int, body: UpdateCartItemRequest, x_user_id: str = Header(alias="X-User-Id")
) -> CartResponse:
    _process(
        lambda: UpdateCartItemQuantity(
            owner_id=x_user_id,
            index=index,
            quantity=body.quantity,
            expected_revision=body.expected_revision,
        ),
        body.expected_revision,
    )
    return _cart_response(x_user_id)


@cart_router.delete("/items/{index}", response_model=CartResponse)
async def remove_cart_item(index: int, x_user_id: str = Header(alias="X-User-Id")) -> CartResponse:
    _process(lambda: RemoveCartItem(owner_id=x_user_id, index=index))
    return _cart_response(x_user_id)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(x_user_id: str = Header(alias="X-User-Id")) -> CartResponse:
    _process(lambda: ClearCart(owner_id=x_user_id))
    return _cart_response(x_user_id)


@cart_router.post("/coupon", response_model=CartResponse)
async def apply_coupon(body: ApplyCouponRequest, x_user_id: str = Header(alias="X-User-Id")) -> CartResponse:
    _process(
        lambda: ApplyCoupon(
            owner_id=x_user_id,
            coupon_code=body.coupon_code,
            discount_amount=body.discount_amount,
        )
    )
    return _cart_response(x_user_id)


@cart_router.delete("/coupon", response_model=CartResponse)
async def remove_coupon(x_user_id: str = Header(alias="X-User-Id")) -> CartResponse:
    _process(lambda: RemoveCoupon(owner_id=x_user_id))
    return _cart_response(x_user_id)


@cart_router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(x_user_id: str = Header(alias="X-User-Id")) -> AvailabilityResponse:
    cart = current_domain.repository_for(Cart).require_for_owner(x_user_id)
    report = validate_availability(cart)
    return AvailabilityResponse(
        all_available=report.all_available,
        checked=report.checked,
        unavailable=[
            UnavailableLineResponse(index=u.index, menu_item_id=u.menu_item_id, name=u.name, reason=u.reason)
            for u in report.unavailable
        ],
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, x_user_id: str = Header(alias="X-User-Id")) -> OrderResponse:
    order_id = checkout(
        PlaceOrder(
            customer_id=x_user_id,
            order_type=body.order_type,
            payment_method=body.payment_method,
            delivery_address=body.delivery_address.model_dump_json() if body.delivery_address else None,
            estimated_delivery_time=body.estimated_delivery_time,
            estimated_pickup_time=body.estimated_pickup_time,
            tip=body.tip,
            special_instructions=body.special_instructions,
            expected_cart_revision=body.expected_cart_revision,
        )
    )
    return _order_response(order_id)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(x_user_id: str = Header(alias="X-User-Id")) -> list[OrderResponse]:
    orders = current_domain.repository_for(Order).find_for_customer(x_user_id)
    return [OrderResponse.from_order(order) for order in orders]


@order_router.get("/number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(order_number: str) -> OrderResponse:
    order = current_domain.repository_for(Order).find_by_number(order_number)
    if order is None:
        raise ObjectNotFoundError(f"Order {order_number} not found")
    return OrderResponse.from_order(order)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(order_id)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    _process(
        lambda: UpdateOrderStatus(
            order_id=order_id,
            status=body.status,
            description=body.description,
            location=body.location,
            courier_name=body.courier_name,
            courier_phone=body.courier_phone,
            reason=body.reason,
            cancelled_by=body.cancelled_by,
            expected_revision=body.expected_revision,
        ),
        body.expected_revision,
    )
    return _order_response(order_id)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> OrderResponse:
    _process(
        lambda: CancelOrder(
            order_id=order_id,
            reason=body.reason,
            cancelled_by=body.cancelled_by,
            refund_amount=body.refund_amount,
            expected_revision=body.expected_revision,
        ),
        body.expected_revision,
    )
    return _order_response(order_id)


@order_router.post("/{order_id}/refund", response_model=OrderResponse)
async def refund_order(order_id: str, body: RefundOrderRequest) -> OrderResponse:
    _process(lambda: RefundOrder(order_id=order_id, refund_amount=body.refund_amount))
    return _order_response(order_id)


@order_router.post("/{order_id}/rating", response_model=OrderResponse)
async def rate_order(order_id: str, body: RateOrderRequest) -> OrderResponse:
    _process(
        lambda: RateOrder(
            order_id=order_id,
            overall=body.overall,
            food=body.food,
            delivery=body.delivery,
            comment=body.comment,
        )
    )
    return _order_response(order_id)


@order_router.put("/{order_id}/location", response_model=OrderResponse)
async def update_location(order_id: str, body: UpdateLocationRequest) -> OrderResponse:
    _process(
        lambda: UpdateCurrentLocation(
            order_id=order_id,
            latitude=body.latitude,
            longitude=body.longitude,
            address=body.address,
        )
    )
    return _order_response(order_id)


@order_router.put("/{order_id}/preparation-time", response_model=OrderResponse)
async def revise_preparation_time(order_id: str, body: RevisePreparationTimeRequest) -> OrderResponse:
    _process(lambda: RevisePreparationTime(order_id=order_id, minutes=body.minutes))
    return _order_response(order_id)


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
async def record_payment_result(order_id: str, body: RecordPaymentResultRequest) -> OrderResponse:
    _process(
        lambda: RecordPaymentResult(
            order_id=order_id,
            status=body.status,
            transaction_id=body.transaction_id,
        )
    )
    return _order_response(order_id)


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/expire-carts", response_model=ExpireCartsResponse)
async def expire_carts(body: ExpireCartsRequest) -> ExpireCartsResponse:
    """Delete abandoned carts past their expiry (for an external scheduler)."""
    deleted = current_domain.process(
        ExpireAbandonedCarts(as_of=body.as_of, batch_size=body.batch_size),
        asynchronous=False,
    )
    return ExpireCartsResponse(deleted=deleted)
