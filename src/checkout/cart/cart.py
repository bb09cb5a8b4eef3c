"""Shopping cart aggregate — one cart per browser session.

The cart is ordinary mutable state. At checkout it is frozen into a
``CartSnapshot`` so the settlement attempt works on an immutable copy even
if the shopper keeps editing the live cart.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from checkout.domain import checkout


@dataclass(frozen=True)
class CartLine:
    """A single frozen cart line: what was in the cart when payment started."""

    product_id: str
    quantity: int
    variant: str | None = None


CartSnapshot = tuple[CartLine, ...]


@checkout.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    color = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@checkout.aggregate
class ShoppingCart:
    session_id = String(required=True, max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, session_id):
        now = datetime.now(UTC)
        return cls(session_id=session_id, created_at=now, updated_at=now)

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    def add_item(self, product_id, quantity=1, color=None) -> str:
        """Add a product line, merging with an existing line of the same colour."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = next(
            (i for i in self.items if str(i.product_id) == str(product_id) and i.color == color),
            None,
        )
        if existing:
            existing.quantity += quantity
            item_id = str(existing.id)
        else:
            item = CartItem(product_id=product_id, color=color, quantity=quantity, added_at=now)
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now
        return item_id

    def update_item_quantity(self, item_id, new_quantity):
        """Set a line's quantity; zero or less removes the line."""
        item = self._find_item(item_id)
        if new_quantity <= 0:
            self.remove_items(item)
        else:
            item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

    def remove_item(self, item_id):
        self.remove_items(self._find_item(item_id))
        self.updated_at = datetime.now(UTC)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def snapshot(self) -> CartSnapshot:
        return tuple(
            CartLine(product_id=str(item.product_id), quantity=item.quantity, variant=item.color)
            for item in self.items
        )
