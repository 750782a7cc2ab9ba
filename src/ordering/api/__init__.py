"""Ordering domain API package."""

from ordering.api.errors import register_error_handlers
from ordering.api.routes import cart_router, order_router, product_router

__all__ = ["order_router", "cart_router", "product_router", "register_error_handlers"]
