"""Checkout bounded context — catalogue, cart, and PayFast order settlement.

Holds the Product, ShoppingCart and Order aggregates and the settlement
machinery that turns a cart snapshot into a pending order, a signed
redirect, and finally a verified, completed (or failed) order.
"""

from protean.domain import Domain

from checkout.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

checkout = Domain(name="checkout")
