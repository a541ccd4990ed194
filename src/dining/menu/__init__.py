"""Menu catalog factory.

Provides get_catalog() / set_catalog() to swap implementations. Defaults to
the in-memory FakeMenuCatalog.
"""

from dining.menu.fake_adapter import FakeMenuCatalog
from dining.menu.port import MenuCatalog

_current_catalog: MenuCatalog | None = None


def get_catalog() -> MenuCatalog:
    """Return the current menu catalog. Defaults to FakeMenuCatalog."""
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = FakeMenuCatalog()
    return _current_catalog


def set_catalog(catalog: MenuCatalog) -> None:
    """Override the active menu catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to the default catalog."""
    global _current_catalog
    _current_catalog = None
