"""Application tests for the repository-backed ledger store."""

import pytest
from checkout.cart.cart import ShoppingCart
from checkout.cart.management import AddToCart
from checkout.catalogue.seed import MAIN_PRODUCT_ID
from checkout.ledger import DomainLedgerStore
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


@pytest.fixture()
def store():
    return DomainLedgerStore()


class TestProducts:
    def test_get_product(self, store, catalogue):
        assert store.get_product(MAIN_PRODUCT_ID).stock == 47

    def test_missing_product_is_none(self, store):
        assert store.get_product("nope") is None

    def test_adjust_stock_persists(self, store, catalogue):
        store.adjust_stock(MAIN_PRODUCT_ID, -5)
        assert store.get_product(MAIN_PRODUCT_ID).stock == 42

    def test_adjust_stock_for_missing_product(self, store):
        with pytest.raises(ObjectNotFoundError):
            store.adjust_stock("nope", -1)


class TestOrders:
    def test_find_by_reference(self, store, pending_order):
        order = store.find_order_by_reference(pending_order.reference)
        assert str(order.id) == pending_order.order_id

    def test_unknown_reference_is_none(self, store):
        assert store.find_order_by_reference("order_0_missing") is None

    def test_save_order_persists_transition(self, store, pending_order):
        order = store.find_order_by_reference(pending_order.reference)
        order.complete(processor_payment_id="1089250")
        store.save_order(order)
        assert store.get_order(pending_order.order_id).status == "completed"


class TestCarts:
    def test_clear_cart_empties_it(self, store, catalogue):
        current_domain.process(
            AddToCart(session_id="sess-ledger", product_id=MAIN_PRODUCT_ID, quantity=2),
            asynchronous=False,
        )
        store.clear_cart("sess-ledger")
        assert len(current_domain.repository_for(ShoppingCart).for_session("sess-ledger").items) == 0

    def test_clear_missing_cart_is_harmless(self, store):
        store.clear_cart("sess-none")
        assert current_domain.repository_for(ShoppingCart).for_session("sess-none") is None
