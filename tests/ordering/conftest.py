import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db, setup_db

    bed = DomainFixture(ordering)
    bed.setup()
    setup_db(ordering)
    yield bed
    drop_db(ordering)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Clean every store and restore the default pricing rules after each test."""
    yield

    from ordering.pricing.policy import reset_policy
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()
    reset_policy()


@pytest.fixture()
def make_product():
    """Factory: persist a product and return it. ``price`` is in minor units."""
    from ordering.catalog.product import Product
    from protean import current_domain

    def _make(name="Widget", price=10000, stock=10, image=None):
        product = Product.create(name=name, price=price, stock=stock, image=image)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def address():
    return {
        "first_name": "Asha",
        "last_name": "Rao",
        "phone": "+91-9800000000",
        "address_line1": "12 MG Road",
        "city": "Bengaluru",
        "state": "KA",
        "country": "India",
        "postal_code": "560001",
    }


@pytest.fixture()
def purchaser():
    from ordering.purchaser import Purchaser

    return Purchaser(id="cust-001")


@pytest.fixture()
def stock_of():
    """Read a product's current (stock, sold) counters from storage."""
    from ordering.catalog.product import Product
    from protean import current_domain

    def _read(product_id):
        product = current_domain.repository_for(Product).get(str(product_id))
        return product.stock, product.sold

    return _read
