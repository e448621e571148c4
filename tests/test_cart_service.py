"""
Tests for the cart store: add/update/remove/clear semantics, price
snapshots and the version guard.
"""
from decimal import Decimal

import pytest

from app.domain.errors import InvalidState, NotFound
from app.repos.cart_repo import CartRepo
from app.services.cart_service import CartService


@pytest.fixture
def svc(db, product_client):
    return CartService(db=db, product_client=product_client)


def entry_for(cart, product_id):
    return next(i for i in cart["items"] if i["product_id"] == product_id)


class TestGetCart:

    def test_user_without_cart_gets_empty_cart(self, svc):
        cart = svc.get_cart(1)

        assert cart["items"] == []
        assert cart["total_items"] == 0
        assert cart["total_price"] == Decimal("0")

    def test_entries_joined_with_live_product_data(self, svc):
        svc.add_product(1, 1, 2)

        item = svc.get_cart(1)["items"][0]

        assert item["product"].name == "Margherita Pizza"
        assert item["quantity"] == 2

    def test_catalog_outage_keeps_cart_readable(self, svc, product_client):
        svc.add_product(1, 1, 2)
        product_client.down = True

        cart = svc.get_cart(1)

        assert cart["items"][0]["product"] is None
        assert cart["total_price"] == Decimal("10.00")


class TestAddProduct:

    def test_add_creates_entry_with_current_price(self, svc):
        cart = svc.add_product(1, 1, 2)

        item = entry_for(cart, 1)
        assert item["quantity"] == 2
        assert item["price"] == Decimal("5.00")
        assert cart["total_price"] == Decimal("10.00")

    def test_adding_same_product_increments_quantity(self, svc):
        svc.add_product(1, 1, 2)
        cart = svc.add_product(1, 1, 3)

        assert len(cart["items"]) == 1
        assert entry_for(cart, 1)["quantity"] == 5

    def test_price_snapshot_survives_catalog_price_change(self, svc, product_client):
        svc.add_product(1, 1, 2)
        product_client.set_price(1, "7.00")

        cart = svc.add_product(1, 1, 1)

        item = entry_for(cart, 1)
        assert item["quantity"] == 3
        assert item["price"] == Decimal("5.00")
        assert cart["total_price"] == Decimal("15.00")

    def test_default_quantity_is_one(self, svc):
        cart = svc.add_product(1, 3)

        assert entry_for(cart, 3)["quantity"] == 1

    def test_unknown_product_is_not_found(self, svc):
        with pytest.raises(NotFound):
            svc.add_product(1, 404, 1)

        assert svc.get_cart(1)["items"] == []

    def test_non_positive_quantity_rejected(self, svc):
        with pytest.raises(InvalidState):
            svc.add_product(1, 1, 0)

    def test_carts_are_per_user(self, svc):
        svc.add_product(1, 1, 2)
        svc.add_product(2, 2, 1)

        assert [i["product_id"] for i in svc.get_cart(1)["items"]] == [1]
        assert [i["product_id"] for i in svc.get_cart(2)["items"]] == [2]


class TestUpdateQuantity:

    def test_positive_quantity_overwrites(self, svc, product_client):
        entry_id = svc.add_product(1, 1, 2)["items"][0]["id"]
        product_client.set_price(1, "9.00")

        cart = svc.update_quantity(1, entry_id, 4)

        item = entry_for(cart, 1)
        assert item["quantity"] == 4
        assert item["price"] == Decimal("5.00")

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_zero_or_below_removes_entry(self, svc, quantity):
        entry_id = svc.add_product(1, 1, 2)["items"][0]["id"]

        cart = svc.update_quantity(1, entry_id, quantity)

        assert cart["items"] == []

    def test_unknown_entry_is_not_found(self, svc):
        svc.add_product(1, 1, 2)

        with pytest.raises(NotFound):
            svc.update_quantity(1, 12345, 3)

    def test_cannot_update_another_users_entry(self, svc):
        entry_id = svc.add_product(2, 1, 2)["items"][0]["id"]

        with pytest.raises(NotFound):
            svc.update_quantity(1, entry_id, 3)


class TestRemoveAndClear:

    def test_remove_deletes_entry(self, svc):
        cart = svc.add_product(1, 1, 2)
        svc.add_product(1, 2, 1)

        cart = svc.remove_product(1, cart["items"][0]["id"])

        assert [i["product_id"] for i in cart["items"]] == [2]

    def test_remove_absent_entry_is_idempotent(self, svc):
        before = svc.add_product(1, 1, 2)

        after = svc.remove_product(1, 999)

        assert after["items"] == before["items"]

    def test_remove_without_cart_returns_empty_cart(self, svc):
        assert svc.remove_product(1, 1)["items"] == []

    def test_clear_then_get_is_empty(self, svc):
        svc.add_product(1, 1, 2)
        svc.add_product(1, 2, 5)

        svc.clear_cart(1)

        assert svc.get_cart(1)["items"] == []

    def test_clear_without_cart_is_not_an_error(self, svc):
        svc.clear_cart(1)

        assert svc.get_cart(1)["items"] == []


def test_net_quantity_after_mixed_operations(svc):
    entry_id = svc.add_product(1, 1, 2)["items"][0]["id"]
    svc.add_product(1, 1, 3)
    svc.update_quantity(1, entry_id, 1)
    svc.add_product(1, 1, 4)

    assert entry_for(svc.get_cart(1), 1)["quantity"] == 5

    svc.update_quantity(1, entry_id, -1)
    assert svc.get_cart(1)["items"] == []


def test_each_mutation_bumps_cart_version(db, svc):
    repo = CartRepo(db)
    svc.add_product(1, 1, 1)
    first = repo.get_cart_by_user(1).version

    svc.add_product(1, 1, 1)
    db.expire_all()

    assert repo.get_cart_by_user(1).version == first + 1


def test_stale_version_update_matches_no_rows(db, svc):
    repo = CartRepo(db)
    svc.add_product(1, 1, 1)
    cart = repo.get_cart_by_user(1)
    stale = cart.version - 1

    assert repo.update_cart_version(cart.id, stale, {"version": stale + 1}) == 0
    repo.rollback()


def test_display_lookup_is_single_attempt(svc, product_client):
    svc.add_product(1, 1, 2)

    # add: pelny retry; dane do wyswietlenia: jedna proba
    assert product_client.retries == [True, False]
