"""Cart repository — owner lookups and expiry queries."""

import structlog

from dining.cart.cart import Cart
from dining.domain import dining
from dining.errors import CartNotFound
from dining.shared.clock import as_utc

logger = structlog.get_logger(__name__)


@dining.repository(part_of=Cart)
class CartRepository:
    def find_by_owner(self, owner_id) -> Cart | None:
        carts = self._dao.query.filter(owner_id=str(owner_id)).all().items
        return carts[0] if carts else None

    def require_for_owner(self, owner_id) -> Cart:
        cart = self.find_by_owner(owner_id)
        if cart is None:
            raise CartNotFound("Cart not found", owner_id=str(owner_id))
        return cart

    def get_or_create(self, owner_id, session_id=None, device_info=None) -> Cart:
        """Return the owner's cart, creating and persisting an empty one if absent."""
        cart = self.find_by_owner(owner_id)
        if cart is None:
            cart = self.add(Cart.create(owner_id=owner_id, session_id=session_id, device_info=device_info))
            logger.info("Created cart", cart_id=str(cart.id), owner_id=str(owner_id))
        return cart

    # -------------------------------------------------------------------
    # Expiry
    # -------------------------------------------------------------------
    def find_expired(self, as_of, limit: int | None = None) -> list[Cart]:
        """Carts whose expiry is before ``as_of``, oldest first, at most ``limit`` of them."""
        return (
            self._dao.query.filter(expires_at__lt=as_utc(as_of))
            .order_by("expires_at")
            .limit(limit)
            .all()
            .items
        )

    def delete_if_expired(self, cart_id, as_of) -> bool:
        """Delete the cart only if it is still expired when re-read.

        A cart refreshed (or already deleted) since it was selected is left alone.
        """
        stored = self._dao.query.filter(id=str(cart_id)).all().items
        if not stored:
            return False
        cart = stored[0]
        if cart.expires_at is None or as_utc(cart.expires_at) >= as_utc(as_of):
            return False
        self._dao.delete(cart)
        return True
