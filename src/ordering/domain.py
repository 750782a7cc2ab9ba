"""Ordering bounded context — catalog stock, shopping carts and order placement.

Places orders against live product stock: every line item is reserved with
an atomic conditional update, pricing is locked into an immutable order
record, and the purchaser's cart is emptied once the order is committed.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
ordering = Domain(name="ordering")
