"""Ledger store backed by the checkout domain's Protean repositories.

Each write goes through ``repository.add`` outside any surrounding unit of
work, so it commits on its own. Product stock updates run under a per-product
lock; all writes additionally share one store-wide lock because the memory
provider commits a whole-database snapshot per unit of work.
"""

import threading

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from checkout.cart.management import ClearCart
from checkout.catalogue.product import Product
from checkout.ledger.locks import KeyedLocks
from checkout.ledger.port import LedgerStore
from checkout.order.order import Order

logger = structlog.get_logger(__name__)


class DomainLedgerStore(LedgerStore):
    def __init__(self) -> None:
        self._product_locks = KeyedLocks()
        self._write_lock = threading.RLock()

    @staticmethod
    def _get_or_none(aggregate_cls, identifier):
        try:
            return current_domain.repository_for(aggregate_cls).get(identifier)
        except ObjectNotFoundError:
            return None

    # -------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------
    def get_product(self, product_id: str) -> Product | None:
        return self._get_or_none(Product, product_id)

    def adjust_stock(self, product_id: str, delta: int) -> Product:
        with self._product_locks.hold(product_id), self._write_lock:
            repo = current_domain.repository_for(Product)
            product = repo.get(product_id)
            moved = product.adjust_stock(delta)
            repo.add(product)

        logger.info(
            "Stock adjusted",
            product_id=str(product_id),
            requested=delta,
            applied=moved,
            stock=product.stock,
        )
        return product

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def get_order(self, order_id: str) -> Order | None:
        return self._get_or_none(Order, order_id)

    def find_order_by_reference(self, external_reference: str) -> Order | None:
        found = current_domain.repository_for(Order).find_by_reference(external_reference)
        if found is None:
            return None
        # Reload through the repository so the aggregate is tracked for update
        return self.get_order(str(found.id))

    def add_order(self, order: Order) -> Order:
        with self._write_lock:
            current_domain.repository_for(Order).add(order)
        return order

    def save_order(self, order: Order) -> Order:
        with self._write_lock:
            current_domain.repository_for(Order).add(order)
        return order

    # -------------------------------------------------------------------
    # Carts
    # -------------------------------------------------------------------
    def clear_cart(self, session_id: str) -> None:
        with self._write_lock:
            current_domain.process(ClearCart(session_id=session_id), asynchronous=False)
