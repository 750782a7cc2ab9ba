"""Product aggregate (CQRS) — the catalog view the ordering workflow depends on.

Only the attributes order placement needs are modelled: a display name and
image for the order snapshot, the current price, and the stock/sold counters.
Stock is never written through the aggregate once the product exists; all
stock movements go through ProductRepository.compare_and_set_stock so that
concurrent orders cannot overwrite each other's decrements.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String
from protean.utils.query import Q

from ordering.catalog.events import ProductAdded
from ordering.domain import ordering


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    image = String(max_length=1000)
    price = Integer(required=True, min_value=0)  # minor units
    stock = Integer(default=0, min_value=0)
    sold = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, stock=0, image=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            image=image,
            price=price,
            stock=stock,
            sold=0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                stock=stock,
                added_at=now,
            )
        )
        return product


@ordering.repository(part_of=Product)
class ProductRepository:
    def compare_and_set_stock(self, product_id, expected_stock, expected_sold, stock, sold) -> bool:
        """Write new stock/sold counters only if both still hold their expected values.

        The filter and the write are a single storage-level update, so of two
        writers that read the same counters exactly one succeeds. Returns
        whether this call won.
        """
        updated = self._dao._update_all(
            Q(id=str(product_id), stock=expected_stock, sold=expected_sold),
            stock=stock,
            sold=sold,
            updated_at=datetime.now(UTC),
        )
        return updated == 1

    def set_active(self, product_id, active: bool) -> bool:
        """Flip the product's availability without touching its stock counters."""
        updated = self._dao._update_all(
            Q(id=str(product_id)),
            is_active=active,
            updated_at=datetime.now(UTC),
        )
        return updated == 1
