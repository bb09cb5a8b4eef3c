"""Repository for the ShoppingCart aggregate."""

from checkout.cart.cart import ShoppingCart
from checkout.domain import checkout


@checkout.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_session(self, session_id: str) -> ShoppingCart | None:
        """Return the cart owned by ``session_id``, if one was ever created."""
        return self._dao.query.filter(session_id=session_id).all().first
