"""Abandoned cart expiry — command and handler for the periodic sweep.

Triggered by ``src/reaper.py`` on a timer, or by an external scheduler through
the maintenance API endpoint. Selects carts whose sliding expiry has
passed and deletes them one by one. Each delete re-reads the cart first, so a
cart refreshed after it was selected survives, and a cart already gone is
skipped; running the sweep twice is harmless.
"""

import structlog
from protean import handle
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from dining.cart.cart import Cart
from dining.config import get_settings
from dining.domain import dining
from dining.shared.clock import as_utc, utc_now

logger = structlog.get_logger(__name__)


@dining.command(part_of="Cart")
class ExpireAbandonedCarts:
    """Delete carts whose expiry is before ``as_of`` (defaults to now)."""

    as_of = DateTime()
    batch_size = Integer(min_value=1)


@dining.command_handler(part_of=Cart)
class ExpireAbandonedCartsHandler:
    @handle(ExpireAbandonedCarts)
    def expire_abandoned_carts(self, command):
        as_of = as_utc(command.as_of) if command.as_of else utc_now()
        batch_size = command.batch_size or get_settings().reaper_batch_size

        repo = current_domain.repository_for(Cart)
        expired = repo.find_expired(as_of, limit=batch_size)
        if not expired:
            logger.info("No expired carts found", as_of=as_of.isoformat())
            return 0

        deleted = 0
        for cart in expired:
            if repo.delete_if_expired(cart.id, as_of):
                deleted += 1
                logger.info(
                    "Deleted expired cart",
                    cart_id=str(cart.id),
                    owner_id=str(cart.owner_id),
                    expired_at=str(cart.expires_at),
                )
            else:
                logger.info("Cart no longer expired or already gone, skipping", cart_id=str(cart.id))

        logger.info("Expired cart sweep finished", deleted=deleted, selected=len(expired), as_of=as_of.isoformat())
        return deleted
