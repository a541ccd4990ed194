"""Application tests for the advisory menu availability check."""

import pytest
from dining.cart.availability import validate_availability
from dining.cart.cart import Cart
from dining.cart.items import AddItemToCart
from dining.concurrency import revision_of
from dining.menu.port import CatalogUnavailableError, MenuEntry
from protean import current_domain


def _cart_with(*items):
    for menu_item_id, name in items:
        current_domain.process(
            AddItemToCart(
                owner_id="user-001",
                menu_item_id=menu_item_id,
                restaurant_id="rest-001",
                name=name,
                price=10.0,
                category="mains",
            ),
            asynchronous=False,
        )
    return current_domain.repository_for(Cart).require_for_owner("user-001")


class TestValidateAvailability:
    def test_everything_available(self, catalog):
        catalog.register("rest-001", "Luigi's", [MenuEntry("item-1", "Lasagne", 10.0)])
        report = validate_availability(_cart_with(("item-1", "Lasagne")))
        assert report.all_available
        assert report.checked

    def test_missing_and_unavailable_lines(self, catalog):
        catalog.register(
            "rest-001",
            "Luigi's",
            [MenuEntry("item-1", "Lasagne", 10.0), MenuEntry("item-2", "Tiramisu", 6.0, is_available=False)],
        )
        cart = _cart_with(("item-1", "Lasagne"), ("item-2", "Tiramisu"), ("item-3", "Gnocchi"))

        report = validate_availability(cart)

        assert not report.all_available
        assert [(u.index, u.reason) for u in report.unavailable] == [(1, "unavailable"), (2, "missing")]

    def test_check_does_not_modify_the_cart(self, catalog):
        catalog.register("rest-001", "Luigi's", [])
        cart = _cart_with(("item-1", "Lasagne"))
        revision = revision_of(cart)
        validate_availability(cart)
        assert revision_of(current_domain.repository_for(Cart).require_for_owner("user-001")) == revision

    def test_unknown_restaurant_is_not_checked(self, catalog):
        report = validate_availability(_cart_with(("item-1", "Lasagne")))
        assert report.all_available
        assert not report.checked

    def test_empty_cart_skips_the_catalog(self, catalog):
        report = validate_availability(Cart.create(owner_id="user-002"))
        assert report.all_available
        assert catalog.calls == []

    def test_outage_propagates(self, catalog):
        catalog.configure(should_fail=True)
        with pytest.raises(CatalogUnavailableError):
            validate_availability(_cart_with(("item-1", "Lasagne")))
