import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import cart_router, order_router, product_router, register_error_handlers

CUSTOMER = {"X-Customer-Id": "cust-api-001", "X-Customer-Role": "customer"}
ADMIN = {"X-Customer-Id": "admin-001", "X-Customer-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(cart_router)
    app.include_router(product_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer_headers():
    return dict(CUSTOMER)


@pytest.fixture()
def admin_headers():
    return dict(ADMIN)


@pytest.fixture()
def shipping_address():
    return {
        "firstName": "Asha",
        "lastName": "Rao",
        "phone": "+91-9800000000",
        "addressLine1": "12 MG Road",
        "city": "Bengaluru",
        "state": "KA",
        "country": "India",
        "postalCode": "560001",
    }


@pytest.fixture()
def create_product(client, admin_headers):
    """Helper: POST /products as an admin and return the product id."""

    def _create(name="Widget", price="100.00", stock=10):
        response = client.post(
            "/products",
            json={"name": name, "price": price, "stock": stock},
            headers=admin_headers,
        )
        assert response.status_code == 201
        return response.json()["id"]

    return _create
