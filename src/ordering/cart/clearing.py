"""Cart clearing after a successful order."""

import structlog
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart

logger = structlog.get_logger(__name__)


class CartClearer:
    def clear(self, customer_id) -> None:
        """Empty the purchaser's cart. A missing or already empty cart is left alone."""
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(customer_id)
        if cart is None or not cart.clear():
            logger.debug("cart_already_empty", customer_id=str(customer_id))
            return

        repo.add(cart)
        logger.info("cart_cleared", customer_id=str(customer_id), cart_id=str(cart.id))
