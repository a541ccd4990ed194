"""Advisory availability check of a cart against the restaurant's live menu.

The check is read-only: it reports lines whose menu item has disappeared or
been marked unavailable, and leaves correcting the cart to the customer.
"""

from dataclasses import dataclass, field

import structlog

from dining.menu import get_catalog
from dining.menu.port import MenuCatalog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UnavailableLine:
    index: int
    menu_item_id: str
    name: str
    reason: str  # "missing" | "unavailable"


@dataclass(frozen=True)
class AvailabilityReport:
    unavailable: list[UnavailableLine] = field(default_factory=list)
    checked: bool = True  # False when the catalog has no menu for the restaurant

    @property
    def all_available(self) -> bool:
        return not self.unavailable


def validate_availability(cart, catalog: MenuCatalog | None = None) -> AvailabilityReport:
    """List the cart lines that can no longer be ordered.

    Raises:
        CatalogUnavailableError: the catalog could not be reached. Callers decide
            whether that blocks them; checkout treats it as advisory.
    """
    lines = cart.lines()
    if not lines or not cart.restaurant_id:
        return AvailabilityReport()

    catalog = catalog or get_catalog()
    menu = catalog.get_menu(str(cart.restaurant_id))
    if menu is None:
        logger.warning(
            "Restaurant menu not found, availability not checked",
            restaurant_id=str(cart.restaurant_id),
            cart_id=str(cart.id),
        )
        return AvailabilityReport(checked=False)

    unavailable = []
    for index, line in enumerate(lines):
        entry = menu.find(str(line.menu_item_id))
        if entry is None:
            unavailable.append(UnavailableLine(index, str(line.menu_item_id), line.name, "missing"))
        elif not entry.is_available:
            unavailable.append(UnavailableLine(index, str(line.menu_item_id), line.name, "unavailable"))

    if unavailable:
        logger.info(
            "Cart has unavailable items",
            cart_id=str(cart.id),
            menu_item_ids=[u.menu_item_id for u in unavailable],
        )
    return AvailabilityReport(unavailable=unavailable)
