"""Cart lifecycle — opening (get-or-create) and clearing an owner's cart."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from dining.cart.cart import Cart, DeviceInfo
from dining.concurrency import check_expected_revision
from dining.domain import dining

logger = structlog.get_logger(__name__)


@dining.command(part_of="Cart")
class OpenCart:
    """Fetch the owner's active cart, creating an empty one if there is none."""

    owner_id = Identifier(required=True)
    session_id = String(max_length=255)
    device_platform = String(max_length=20)
    device_user_agent = String(max_length=500)


@dining.command(part_of="Cart")
class ClearCart:
    owner_id = Identifier(required=True)
    reason = String(max_length=50, default="cleared")
    expected_revision = Integer()


@dining.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        device_info = None
        if command.device_platform or command.device_user_agent:
            device_info = DeviceInfo(
                platform=command.device_platform,
                user_agent=command.device_user_agent,
            )
        cart = current_domain.repository_for(Cart).get_or_create(
            command.owner_id,
            session_id=command.session_id,
            device_info=device_info,
        )
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_owner(command.owner_id)
        check_expected_revision(cart, command.expected_revision)
        cart.clear(reason=command.reason or "cleared")
        repo.add(cart)
        logger.info("Cleared cart", cart_id=str(cart.id), reason=command.reason)
        return str(cart.id)
