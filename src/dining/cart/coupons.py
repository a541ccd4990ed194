"""Coupon application — commands and handler.

Coupon validation and discount computation belong to the promotions service;
the cart only records the code and the amount it was given.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from dining.cart.cart import Cart
from dining.domain import dining


@dining.command(part_of="Cart")
class ApplyCoupon:
    owner_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)
    discount_amount = Float(required=True, min_value=0.0)


@dining.command(part_of="Cart")
class RemoveCoupon:
    owner_id = Identifier(required=True)


@dining.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCoupon)
    def apply_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_owner(command.owner_id)
        cart.apply_coupon(command.coupon_code, command.discount_amount)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveCoupon)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_owner(command.owner_id)
        cart.remove_coupon()
        repo.add(cart)
        return str(cart.id)
