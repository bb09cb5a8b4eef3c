"""Product aggregate — the catalogue items the storefront sells.

Prices are stored as two-decimal strings and exposed as ``Decimal`` so that
order totals never pick up float drift. Stock is a non-negative counter that
only a completed settlement decrements.
"""

import json
from decimal import Decimal

import structlog
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Integer, String, Text

from checkout.domain import checkout
from checkout.shared.money import format_amount, to_money

logger = structlog.get_logger(__name__)


@checkout.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = String(required=True, max_length=20)
    original_price = String(max_length=20)
    stock = Integer(default=0, min_value=0)
    colors = Text()  # JSON array of colour names
    is_active = Boolean(default=True)

    @invariant.post
    def price_must_be_a_valid_amount(self):
        to_money(self.price, field="price")

    @classmethod
    def create(cls, product_id, name, price, stock=0, description="", original_price=None, colors=None):
        return cls(
            id=product_id,
            name=name,
            description=description,
            price=format_amount(to_money(price, field="price")),
            original_price=format_amount(to_money(original_price, field="original_price"))
            if original_price is not None
            else None,
            stock=stock,
            colors=json.dumps(colors or []),
            is_active=True,
        )

    @property
    def unit_price(self) -> Decimal:
        return to_money(self.price, field="price")

    @property
    def color_list(self) -> list[str]:
        return json.loads(self.colors) if self.colors else []

    def adjust_stock(self, delta: int) -> int:
        """Apply ``delta`` to the stock counter and return the units actually moved.

        A decrement that would take stock below zero is clamped at zero;
        the shortfall is an oversell and is logged, not raised.
        """
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError({"delta": ["Stock adjustment must be an integer"]})

        current = self.stock or 0
        new_stock = current + delta
        if new_stock < 0:
            logger.warning(
                "Stock decrement exceeds available units, clamping at zero",
                product_id=str(self.id),
                available=current,
                requested=-delta,
            )
            new_stock = 0

        self.stock = new_stock
        return new_stock - current
