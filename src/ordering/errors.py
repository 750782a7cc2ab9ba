"""Failure taxonomy for order placement.

Input problems (unknown product, insufficient stock, malformed line items)
extend Protean's own exceptions so that they are handled exactly like the
framework's ``ObjectNotFoundError`` and ``ValidationError``. Operational
failures extend ``OrderingError``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class OrderingError(Exception):
    """Base class for ordering failures that are not caused by bad input."""

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ProductNotFound(ObjectNotFoundError):
    def __init__(self, product_id):
        self.product_id = str(product_id)
        self.message = f"Product not found: {self.product_id}"
        super().__init__(self.message)


class OutOfStock(ValidationError):
    """The product cannot cover the requested quantity. No stock was taken."""

    def __init__(self, product_id, requested, available, product_name=None):
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        self.message = f"Insufficient stock for {product_name or self.product_id}"
        super().__init__(
            {
                "quantity": [
                    f"{self.message}: requested {requested}, available {available}",
                ]
            }
        )


class InvalidLineItem(ValidationError):
    """A line item carries a malformed quantity or price."""

    def __init__(self, messages):
        self.message = "Invalid line item"
        super().__init__(messages)


class StockContention(OrderingError):
    """The conditional stock update kept losing to concurrent writers."""

    def __init__(self, product_id, attempts):
        self.product_id = str(product_id)
        self.attempts = attempts
        super().__init__(f"Stock for product {self.product_id} is changing too quickly, please retry")


class CompensationFailure(OrderingError):
    """Releasing a reservation failed, leaving the product under-stocked."""

    def __init__(self, product_id, quantity, reason):
        self.product_id = str(product_id)
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Could not release {quantity} unit(s) of product {self.product_id}: {reason}")


class CartClearFailure(OrderingError):
    """The order was committed but the purchaser's cart could not be emptied."""

    def __init__(self, customer_id, reason):
        self.customer_id = str(customer_id)
        self.reason = reason
        super().__init__(f"Order placed, but the cart could not be cleared: {reason}")


class NotAuthorized(OrderingError):
    pass


class NotAuthenticated(OrderingError):
    """No purchaser identity accompanied the request."""
