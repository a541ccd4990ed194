"""In-memory menu catalog for development and testing."""

from dining.menu.port import CatalogUnavailableError, MenuCatalog, MenuEntry, RestaurantMenu


class FakeMenuCatalog(MenuCatalog):
    """Menu catalog backed by a dict, with a switch to simulate outages."""

    def __init__(self) -> None:
        self.menus: dict[str, RestaurantMenu] = {}
        self.should_fail: bool = False
        self.calls: list[str] = []

    def configure(self, should_fail: bool) -> None:
        self.should_fail = should_fail

    def register(self, restaurant_id: str, name: str, entries: list[MenuEntry]) -> RestaurantMenu:
        menu = RestaurantMenu(
            restaurant_id=str(restaurant_id),
            name=name,
            entries={str(entry.menu_item_id): entry for entry in entries},
        )
        self.menus[str(restaurant_id)] = menu
        return menu

    def get_menu(self, restaurant_id: str) -> RestaurantMenu | None:
        self.calls.append(str(restaurant_id))
        if self.should_fail:
            raise CatalogUnavailableError("Menu catalog is unavailable")
        return self.menus.get(str(restaurant_id))

    def reset(self) -> None:
        self.menus.clear()
        self.calls.clear()
        self.should_fail = False
