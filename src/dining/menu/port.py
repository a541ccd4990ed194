"""Menu catalog port (abstract interface).

The dining domain never owns the menu. It asks the catalog service for a
restaurant's current menu when it needs an advisory availability check.
Answers may be stale; cart correctness never depends on them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MenuEntry:
    """Current price and availability of one menu item."""

    menu_item_id: str
    name: str
    price: float
    is_available: bool = True


@dataclass(frozen=True)
class RestaurantMenu:
    restaurant_id: str
    name: str
    entries: dict[str, MenuEntry] = field(default_factory=dict)

    def find(self, menu_item_id: str) -> MenuEntry | None:
        return self.entries.get(str(menu_item_id))


class CatalogUnavailableError(Exception):
    """The catalog could not be reached or answered with an error."""


class MenuCatalog(ABC):
    """Abstract read-only menu catalog."""

    @abstractmethod
    def get_menu(self, restaurant_id: str) -> RestaurantMenu | None:
        """Return the restaurant's current menu, or None if the restaurant is unknown.

        Raises:
            CatalogUnavailableError: the catalog could not answer.
        """
        ...
