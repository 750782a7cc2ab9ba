"""Order lookups for purchasers and admins."""

from protean.utils.globals import current_domain

from ordering.errors import NotAuthorized
from ordering.order.order import Order
from ordering.purchaser import Purchaser


def list_orders(customer_id) -> list[Order]:
    """The purchaser's orders, newest first."""
    return current_domain.repository_for(Order).for_customer(customer_id)


def get_order(order_id, purchaser: Purchaser) -> Order:
    """Load an order the purchaser is allowed to see.

    Raises:
        ObjectNotFoundError: no order has this identifier.
        NotAuthorized: the purchaser neither owns the order nor is an admin.
    """
    order = current_domain.repository_for(Order).get(str(order_id))
    if not purchaser.can_view(order):
        raise NotAuthorized("Not authorized to view this order")
    return order
