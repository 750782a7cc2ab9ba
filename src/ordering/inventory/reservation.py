"""Stock reservation — atomic per-product stock decrements and their reversal.

A reservation reads the product, checks availability, then commits
``stock -= quantity; sold += quantity`` with a conditional update that only
matches if the counters are still the ones that were read. Losing that race
means another order changed the product in between; the reservation re-reads
and decides again, so two orders can never both take the last units.

Releases go through the same conditional update and reverse exactly the
quantity recorded on the ReservedItem, at most once.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from ordering.catalog.product import Product
from ordering.catalog.reader import CatalogReader
from ordering.errors import CompensationFailure, InvalidLineItem, OutOfStock, ProductNotFound, StockContention

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 5


@dataclass
class ReservedItem:
    """Stock taken for one line item, with the catalog data seen at that instant."""

    product_id: str
    quantity: int
    name: str
    image: str | None
    unit_price: int
    released: bool = False

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity

    def snapshot(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "image": self.image,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


class StockReservation:
    def __init__(self, catalog: CatalogReader | None = None, max_attempts: int = MAX_ATTEMPTS):
        self.catalog = catalog or CatalogReader()
        self.max_attempts = max_attempts

    @property
    def _products(self):
        return current_domain.repository_for(Product)

    def reserve(self, product_id, quantity: int) -> ReservedItem:
        """Take ``quantity`` units of the product.

        Raises:
            ProductNotFound: the product does not exist.
            OutOfStock: fewer than ``quantity`` units are available.
            StockContention: every conditional update lost to a concurrent writer.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidLineItem({"quantity": ["Quantity must be at least 1"]})

        for attempt in range(1, self.max_attempts + 1):
            product = self.catalog.get(product_id)
            if product.stock < quantity:
                raise OutOfStock(product.id, quantity, product.stock, product_name=product.name)

            if self._products.compare_and_set_stock(
                product.id,
                expected_stock=product.stock,
                expected_sold=product.sold,
                stock=product.stock - quantity,
                sold=product.sold + quantity,
            ):
                logger.info(
                    "stock_reserved",
                    product_id=str(product.id),
                    quantity=quantity,
                    remaining=product.stock - quantity,
                )
                return ReservedItem(
                    product_id=str(product.id),
                    quantity=quantity,
                    name=product.name,
                    image=product.image,
                    unit_price=product.price,
                )

            logger.debug("stock_reservation_conflict", product_id=str(product.id), attempt=attempt)

        raise StockContention(product_id, self.max_attempts)

    def release(self, reservation: ReservedItem) -> None:
        """Give back the stock taken by ``reservation``. A second call is a no-op.

        Raises:
            CompensationFailure: the stock could not be given back.
        """
        if reservation.released:
            return

        for attempt in range(1, self.max_attempts + 1):
            try:
                product = self.catalog.get(reservation.product_id, include_inactive=True)
            except ProductNotFound:
                raise CompensationFailure(
                    reservation.product_id, reservation.quantity, "product no longer exists"
                ) from None

            if product.sold < reservation.quantity:
                raise CompensationFailure(
                    reservation.product_id,
                    reservation.quantity,
                    f"sold counter is {product.sold}, below the reserved quantity",
                )

            if self._products.compare_and_set_stock(
                product.id,
                expected_stock=product.stock,
                expected_sold=product.sold,
                stock=product.stock + reservation.quantity,
                sold=product.sold - reservation.quantity,
            ):
                reservation.released = True
                logger.info(
                    "stock_released",
                    product_id=reservation.product_id,
                    quantity=reservation.quantity,
                )
                return

            logger.debug("stock_release_conflict", product_id=reservation.product_id, attempt=attempt)

        raise CompensationFailure(
            reservation.product_id,
            reservation.quantity,
            f"conditional update lost {self.max_attempts} times",
        )

    def restock(self, product_id, quantity: int) -> int:
        """Add ``quantity`` units of fresh stock; returns the new stock level."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidLineItem({"quantity": ["Quantity must be at least 1"]})

        for attempt in range(1, self.max_attempts + 1):
            product = self.catalog.get(product_id, include_inactive=True)
            if self._products.compare_and_set_stock(
                product.id,
                expected_stock=product.stock,
                expected_sold=product.sold,
                stock=product.stock + quantity,
                sold=product.sold,
            ):
                logger.info("stock_restocked", product_id=str(product.id), quantity=quantity)
                return product.stock + quantity

            logger.debug("stock_restock_conflict", product_id=str(product.id), attempt=attempt)

        raise StockContention(product_id, self.max_attempts)
