"""Read access to the catalog for the ordering workflow."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalog.product import Product
from ordering.errors import ProductNotFound


class CatalogReader:
    def get(self, product_id, include_inactive=False) -> Product:
        """Load the product's current price and stock.

        Inactive products cannot be bought, so they are reported as missing
        unless ``include_inactive`` is set (releasing stock still needs them).

        Raises:
            ProductNotFound: if no product has this identifier.
        """
        if not product_id:
            raise ProductNotFound(product_id)
        try:
            product = current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            raise ProductNotFound(product_id) from None

        if not include_inactive and not product.is_active:
            raise ProductNotFound(product_id)
        return product
