"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import Cart
from ordering.catalog.product import Product
from ordering.order.order import Order
from ordering.purchaser import Purchaser
from ordering.shared.money import to_minor_units
from protean import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Products created in the scenario, by name."""
    return {}


@pytest.fixture()
def customer():
    return Purchaser(id="cust-bdd-001")


@pytest.fixture()
def shipping_address():
    return {
        "first_name": "Asha",
        "address_line1": "12 MG Road",
        "city": "Bengaluru",
        "country": "India",
        "postal_code": "560001",
    }


@pytest.fixture()
def outcome():
    """Container for the result or error of the When step."""
    return {"result": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at {price} with {stock:d} in stock'))
def _(products, name, price, stock):
    product = Product.create(name=name, price=to_minor_units(price), stock=stock)
    current_domain.repository_for(Product).add(product)
    products[name] = str(product.id)


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in the cart'))
def _(products, customer, quantity, name):
    repo = current_domain.repository_for(Cart)
    cart = repo.get_or_create(customer.id)
    cart.add_item(products[name], quantity)
    repo.add(cart)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock and {sold:d} sold'))
def _(products, name, stock, sold):
    product = current_domain.repository_for(Product).get(products[name])
    assert (product.stock, product.sold) == (stock, sold)


@then("no order exists")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().items == []
