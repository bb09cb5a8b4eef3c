"""Ledger store port (abstract interface).

Settlement code talks to this interface rather than to repositories
directly, so a persistent backend can be swapped in without touching the
state machine. Every operation is atomic with respect to a single key;
there are no cross-key transactions.
"""

from abc import ABC, abstractmethod

from checkout.catalogue.product import Product
from checkout.order.order import Order


class LedgerStore(ABC):
    @abstractmethod
    def get_product(self, product_id: str) -> Product | None: ...

    @abstractmethod
    def adjust_stock(self, product_id: str, delta: int) -> Product:
        """Atomically apply ``delta`` to a product's stock.

        Raises ObjectNotFoundError when the product does not exist.
        """
        ...

    @abstractmethod
    def get_order(self, order_id: str) -> Order | None: ...

    @abstractmethod
    def find_order_by_reference(self, external_reference: str) -> Order | None: ...

    @abstractmethod
    def add_order(self, order: Order) -> Order: ...

    @abstractmethod
    def save_order(self, order: Order) -> Order: ...

    @abstractmethod
    def clear_cart(self, session_id: str) -> None:
        """Empty the cart owned by ``session_id``; a missing cart is not an error."""
        ...
