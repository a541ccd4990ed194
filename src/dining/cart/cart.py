"""Cart aggregate (CQRS) — one active cart per owner, scoped to a single restaurant.

The cart is a standard CQRS aggregate. Every mutation goes through a method
here, and every method ends in ``_refresh()``: totals are recomputed from the
lines by the pricing calculator and the expiry window slides forward. Line
order is insertion order, kept explicit through ``position``; indexes handed to
``update_item_quantity``/``remove_item`` refer to that order.
"""

import json
from datetime import timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from dining.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from dining.cart.merging import (
    MAX_LINE_QUANTITY,
    line_signature,
    normalize_customizations,
    plan_merge,
)
from dining.cart.summary import DEFAULT_PREPARATION_MINUTES, estimated_prep_time
from dining.config import get_settings
from dining.domain import dining
from dining.errors import CrossRestaurantConflict, InvalidIndex, QuantityLimitExceeded
from dining.pricing import PricedLine, calculate_cart_totals
from dining.shared.clock import as_utc, utc_now

DEFAULT_DELIVERY_ESTIMATE = 30


class DevicePlatform(Enum):
    WEB = "web"
    IOS = "ios"
    ANDROID = "android"


@dining.value_object(part_of="Cart")
class DeviceInfo:
    platform = String(choices=DevicePlatform)
    user_agent = String(max_length=500)


@dining.entity(part_of="Cart")
class CartItem:
    menu_item_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    category = String(required=True, max_length=100)
    customizations = Text(default="[]")  # JSON list of {name, value, additional_price}
    special_instructions = String(max_length=200, default="")
    is_available = Boolean(default=True)
    preparation_time = Integer(default=DEFAULT_PREPARATION_MINUTES, min_value=0)
    position = Integer(required=True, min_value=0)
    added_at = DateTime()

    def customization_list(self) -> list[dict]:
        return json.loads(self.customizations) if self.customizations else []

    def signature(self):
        return line_signature(self.menu_item_id, self.customization_list(), self.special_instructions)

    def priced(self) -> PricedLine:
        return PricedLine(
            price=self.price,
            quantity=self.quantity,
            addon_prices=tuple(c["additional_price"] for c in self.customization_list()),
        )


@dining.aggregate
class Cart:
    owner_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    restaurant_id = Identifier()
    restaurant_name = String(max_length=255)
    subtotal = Float(default=0.0, min_value=0.0)
    item_count = Integer(default=0, min_value=0)
    coupon_code = String(max_length=50)
    discount = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    minimum_order_amount = Float(default=0.0, min_value=0.0)
    estimated_delivery_time = Integer(default=DEFAULT_DELIVERY_ESTIMATE, min_value=0)
    is_active = Boolean(default=True)
    session_id = String(max_length=255)
    device_info = ValueObject(DeviceInfo)
    created_at = DateTime()
    last_updated = DateTime()
    expires_at = DateTime()

    @invariant.post
    def lines_belong_to_the_cart_restaurant(self):
        for line in self.items or []:
            if str(line.restaurant_id) != str(self.restaurant_id):
                raise ValidationError({"items": ["All cart items must come from the cart's restaurant"]})

    @invariant.post
    def lines_have_distinct_signatures(self):
        signatures = [line.signature() for line in self.items or []]
        if len(signatures) != len(set(signatures)):
            raise ValidationError({"items": ["Identical cart items must be merged into one line"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id, session_id=None, device_info=None):
        now = utc_now()
        return cls(
            owner_id=owner_id,
            session_id=session_id,
            device_info=device_info,
            is_active=True,
            created_at=now,
            last_updated=now,
            expires_at=now + timedelta(hours=get_settings().cart_ttl_hours),
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def lines(self) -> list[CartItem]:
        """Lines in insertion order."""
        return sorted(self.items or [], key=lambda line: line.position)

    def is_empty(self) -> bool:
        return not self.items

    def is_expired(self, as_of=None) -> bool:
        if self.expires_at is None:
            return False
        return as_utc(self.expires_at) < as_utc(as_of or utc_now())

    def _line_at(self, index) -> CartItem:
        lines = self.lines()
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(lines):
            raise InvalidIndex("Invalid item index", index=index, line_count=len(lines))
        return lines[index]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(
        self,
        menu_item_id,
        restaurant_id,
        name,
        price,
        category,
        quantity=1,
        description=None,
        customizations=None,
        special_instructions=None,
        preparation_time=None,
        is_available=True,
        restaurant_name=None,
        delivery_fee=None,
        minimum_order_amount=None,
    ):
        """Add a menu item, merging it into an identical line when one exists.

        Raises:
            CrossRestaurantConflict: the cart already holds another restaurant's items.
            QuantityLimitExceeded: the resulting line quantity would pass the cap.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.restaurant_id and self.items and str(self.restaurant_id) != str(restaurant_id):
            raise CrossRestaurantConflict(
                "Cannot add items from different restaurants. Please clear your cart first.",
                cart_restaurant_id=str(self.restaurant_id),
                requested_restaurant_id=str(restaurant_id),
            )

        normalized = normalize_customizations(customizations)
        instructions = (special_instructions or "").strip()
        signature = line_signature(menu_item_id, normalized, instructions)
        plan = plan_merge(self.items or [], signature, quantity)

        now = utc_now()
        if plan.merges:
            line = plan.existing
            line.quantity = plan.quantity
        else:
            line = CartItem(
                menu_item_id=menu_item_id,
                restaurant_id=restaurant_id,
                name=name,
                description=description,
                price=price,
                quantity=plan.quantity,
                category=category,
                customizations=json.dumps(normalized),
                special_instructions=instructions,
                is_available=is_available,
                preparation_time=(
                    preparation_time if preparation_time is not None else DEFAULT_PREPARATION_MINUTES
                ),
                position=max((item.position for item in self.items or []), default=-1) + 1,
                added_at=now,
            )
            with atomic_change(self):
                if not self.items:
                    self.restaurant_id = restaurant_id
                    self.restaurant_name = restaurant_name
                self.add_items(line)

        if delivery_fee is not None:
            self.delivery_fee = delivery_fee
        if minimum_order_amount is not None:
            self.minimum_order_amount = minimum_order_amount

        self._refresh(now)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                restaurant_id=str(restaurant_id),
                menu_item_id=str(menu_item_id),
                quantity=quantity,
                line_quantity=line.quantity,
                merged=plan.merges,
                subtotal=self.subtotal,
            )
        )
        return line

    def update_item_quantity(self, index, quantity):
        """Set the quantity of the line at ``index`` (insertion order)."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > MAX_LINE_QUANTITY:
            raise QuantityLimitExceeded(
                f"Maximum {MAX_LINE_QUANTITY} items allowed per menu item",
                requested_quantity=quantity,
                max_quantity=MAX_LINE_QUANTITY,
            )

        line = self._line_at(index)
        previous_quantity = line.quantity
        line.quantity = quantity
        self._refresh(utc_now())

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                menu_item_id=str(line.menu_item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                subtotal=self.subtotal,
            )
        )
        return line

    def remove_item(self, index):
        """Remove the line at ``index``; removing the last line resets the restaurant and coupon."""
        line = self._line_at(index)
        with atomic_change(self):
            self.remove_items(line)
            if not self.items:
                self._reset_scope()
        self._refresh(utc_now())

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                menu_item_id=str(line.menu_item_id),
                remaining_lines=len(self.items or []),
                subtotal=self.subtotal,
            )
        )

    def clear(self, reason="cleared"):
        cleared_lines = len(self.items or [])
        with atomic_change(self):
            for line in list(self.items or []):
                self.remove_items(line)
            self._reset_scope()
        now = utc_now()
        self._refresh(now)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                reason=reason,
                cleared_lines=cleared_lines,
                cleared_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code, discount_amount):
        """Record a coupon code and the discount amount computed for it."""
        code = (coupon_code or "").strip().upper()
        if not code:
            raise ValidationError({"coupon_code": ["Coupon code is required"]})
        if discount_amount is None or discount_amount < 0:
            raise ValidationError({"discount": ["Discount cannot be negative"]})

        self.coupon_code = code
        self.discount = round(float(discount_amount), 2)
        self._refresh(utc_now())

        self.raise_(CartCouponApplied(cart_id=str(self.id), coupon_code=code, discount=self.discount))

    def remove_coupon(self):
        previous = self.coupon_code
        self.coupon_code = None
        self.discount = 0.0
        self._refresh(utc_now())

        self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=previous))

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _reset_scope(self):
        self.restaurant_id = None
        self.restaurant_name = None
        self.delivery_fee = 0.0
        self.minimum_order_amount = 0.0
        self.coupon_code = None
        self.discount = 0.0

    def _refresh(self, now):
        lines = self.lines()
        totals = calculate_cart_totals(line.priced() for line in lines)
        self.subtotal = totals.subtotal
        self.item_count = totals.item_count
        self.estimated_delivery_time = (
            estimated_prep_time(lines) + get_settings().delivery_minutes if lines else DEFAULT_DELIVERY_ESTIMATE
        )
        self.last_updated = now
        self.expires_at = now + timedelta(hours=get_settings().cart_ttl_hours)
