"""Cart item management — commands and handler.

Adding or resizing an item checks the catalog first: the product must exist
and have enough stock for the resulting cart quantity. Nothing is reserved;
stock is only taken when the order is placed.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.catalog.reader import CatalogReader
from ordering.domain import ordering
from ordering.errors import OutOfStock


@ordering.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


def _ensure_available(product_id, quantity):
    product = CatalogReader().get(product_id)
    if product.stock < quantity:
        raise OutOfStock(product.id, quantity, product.stock, product_name=product.name)


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)
        _ensure_available(command.product_id, cart.quantity_of(command.product_id) + command.quantity)

        cart.add_item(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)
        _ensure_available(command.product_id, command.quantity)

        cart.update_item_quantity(product_id=command.product_id, new_quantity=command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)
        return str(cart.id)
