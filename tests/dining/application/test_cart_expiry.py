"""Application tests for the abandoned cart sweep."""

from datetime import timedelta

from dining.cart.cart import Cart
from dining.cart.expiry import ExpireAbandonedCarts
from dining.cart.items import AddItemToCart
from dining.shared.clock import as_utc, utc_now
from protean import current_domain


def _add(owner_id):
    current_domain.process(
        AddItemToCart(
            owner_id=owner_id,
            menu_item_id="item-1",
            restaurant_id="rest-001",
            name="Lasagne",
            price=10.0,
            category="mains",
        ),
        asynchronous=False,
    )
    return current_domain.repository_for(Cart).require_for_owner(owner_id)


def _sweep(as_of, batch_size=None):
    return current_domain.process(ExpireAbandonedCarts(as_of=as_of, batch_size=batch_size), asynchronous=False)


class TestExpireAbandonedCarts:
    def test_nothing_expired(self):
        cart = _add("user-001")
        assert _sweep(as_utc(cart.expires_at) - timedelta(minutes=1)) == 0
        assert current_domain.repository_for(Cart).find_by_owner("user-001") is not None

    def test_expired_carts_are_deleted(self):
        cart = _add("user-001")
        _add("user-002")
        as_of = as_utc(cart.expires_at) + timedelta(hours=1)

        assert _sweep(as_of) == 2
        repo = current_domain.repository_for(Cart)
        assert repo.find_by_owner("user-001") is None
        assert repo.find_by_owner("user-002") is None

    def test_sweep_is_idempotent(self):
        cart = _add("user-001")
        as_of = as_utc(cart.expires_at) + timedelta(seconds=1)
        assert _sweep(as_of) == 1
        assert _sweep(as_of) == 0

    def test_batch_size_limits_one_sweep(self):
        carts = [_add(f"user-{n}") for n in range(3)]
        as_of = max(as_utc(cart.expires_at) for cart in carts) + timedelta(seconds=1)
        assert _sweep(as_of, batch_size=2) == 2
        assert _sweep(as_of, batch_size=2) == 1

    def test_refreshed_cart_survives_deletion(self):
        cart = _add("user-001")
        as_of = as_utc(cart.expires_at) + timedelta(seconds=1)
        repo = current_domain.repository_for(Cart)
        selected = repo.find_expired(as_of)
        assert [c.id for c in selected] == [cart.id]

        refreshed = repo.require_for_owner("user-001")
        refreshed.expires_at = as_of + timedelta(hours=24)
        repo.add(refreshed)

        assert repo.delete_if_expired(cart.id, as_of) is False
        assert repo.find_by_owner("user-001") is not None

    def test_deleting_a_missing_cart_is_a_no_op(self):
        repo = current_domain.repository_for(Cart)
        assert repo.delete_if_expired("no-such-cart", as_of=utc_now()) is False

    def test_owner_gets_a_fresh_cart_after_expiry(self):
        cart = _add("user-001")
        _sweep(as_utc(cart.expires_at) + timedelta(seconds=1))
        fresh = _add("user-001")
        assert fresh.id != cart.id
        assert len(fresh.items) == 1


class TestFindExpired:
    def _expire(self, owner_id, hours_ago):
        repo = current_domain.repository_for(Cart)
        cart = _add(owner_id)
        cart.expires_at = utc_now() - timedelta(hours=hours_ago)
        repo.add(cart)

    def test_oldest_expired_carts_come_first(self):
        self._expire("user-recent", hours_ago=1)
        self._expire("user-oldest", hours_ago=48)
        self._expire("user-middle", hours_ago=12)
        _add("user-fresh")

        expired = current_domain.repository_for(Cart).find_expired(utc_now())

        assert [cart.owner_id for cart in expired] == ["user-oldest", "user-middle", "user-recent"]

    def test_limit_caps_the_selection(self):
        self._expire("user-recent", hours_ago=1)
        self._expire("user-oldest", hours_ago=48)

        expired = current_domain.repository_for(Cart).find_expired(utc_now(), limit=1)

        assert [cart.owner_id for cart in expired] == ["user-oldest"]
