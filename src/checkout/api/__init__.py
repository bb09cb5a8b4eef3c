"""Storefront API package."""

from checkout.api.routes import cart_router, payment_router, product_router, redirect_router

__all__ = ["cart_router", "payment_router", "product_router", "redirect_router"]
