"""Repository for the Order aggregate."""

from checkout.domain import checkout
from checkout.order.order import Order


@checkout.repository(part_of=Order)
class OrderRepository:
    def find_by_reference(self, external_reference: str) -> Order | None:
        """Find the order created for a merchant payment id."""
        return self._dao.query.filter(external_reference=external_reference).all().first
