"""Catalog management — commands and handler.

Seeds products and adjusts stock for the ordering workflow. Stock changes go
through StockReservation so they share the same conditional update as
order placement.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.catalog.product import Product
from ordering.catalog.reader import CatalogReader
from ordering.domain import ordering
from ordering.inventory.reservation import StockReservation

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    price = Integer(required=True, min_value=0)  # minor units
    stock = Integer(default=0, min_value=0)
    image = String(max_length=1000)


@ordering.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Product")
class SetProductAvailability:
    product_id = Identifier(required=True)
    active = Boolean(required=True)


@ordering.command_handler(part_of=Product)
class ManageCatalogHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            image=command.image,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_added", product_id=str(product.id), stock=product.stock)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        return StockReservation().restock(command.product_id, command.quantity)

    @handle(SetProductAvailability)
    def set_product_availability(self, command):
        product = CatalogReader().get(command.product_id, include_inactive=True)
        current_domain.repository_for(Product).set_active(product.id, command.active)
        logger.info("product_availability_changed", product_id=str(product.id), active=command.active)
