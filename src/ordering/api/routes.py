"""FastAPI routes for the Ordering domain — orders, carts and catalog seeding.

The purchaser is authenticated upstream; the auth layer forwards the
identity as ``X-Customer-Id`` and ``X-Customer-Role`` headers.
"""

from fastapi import APIRouter, Depends, Header
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    AvailabilityRequest,
    CancelOrderRequest,
    CartResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductResponse,
    RecordPaymentRequest,
    RestockRequest,
    ShipOrderRequest,
    UpdateCartItemRequest,
)
from ordering.cart.cart import Cart
from ordering.cart.clearing import CartClearer
from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartItem
from ordering.catalog.management import AddProduct, RestockProduct, SetProductAvailability
from ordering.catalog.reader import CatalogReader
from ordering.errors import NotAuthenticated, NotAuthorized
from ordering.order.fulfillment import (
    CancelOrder,
    ConfirmOrder,
    DeliverOrder,
    MarkProcessing,
    RecordPayment,
    ShipOrder,
)
from ordering.order.order import Order
from ordering.order.placement import OrderPlacement
from ordering.order.queries import get_order, list_orders
from ordering.purchaser import ROLES, Purchaser
from ordering.shared.money import to_minor_units


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
def current_purchaser(
    x_customer_id: str | None = Header(default=None),
    x_customer_role: str = Header(default="customer"),
) -> Purchaser:
    if not x_customer_id:
        raise NotAuthenticated("Authentication required")
    if x_customer_role not in ROLES:
        raise NotAuthenticated(f"Unknown role: {x_customer_role}")
    return Purchaser(id=x_customer_id, role=x_customer_role)


def require_admin(purchaser: Purchaser = Depends(current_purchaser)) -> Purchaser:
    if not purchaser.is_admin:
        raise NotAuthorized("Admin access required")
    return purchaser


def _order_response(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, purchaser: Purchaser = Depends(current_purchaser)) -> OrderResponse:
    result = OrderPlacement().place_order(
        purchaser,
        items=[{"product_id": line.product_id, "quantity": line.quantity} for line in body.items],
        shipping_address=body.shipping_address.model_dump(),
        billing_address=body.billing_address.model_dump() if body.billing_address else None,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return OrderResponse.from_order(result.order, result.warnings)


@order_router.get("", response_model=OrderListResponse)
async def my_orders(purchaser: Purchaser = Depends(current_purchaser)) -> OrderListResponse:
    orders = [OrderResponse.from_order(order) for order in list_orders(purchaser.id)]
    return OrderListResponse(orders=orders, count=len(orders))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, purchaser: Purchaser = Depends(current_purchaser)) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id, purchaser))


@order_router.put("/{order_id}/confirm", response_model=OrderResponse)
async def confirm_order(order_id: str, _: Purchaser = Depends(require_admin)) -> OrderResponse:
    current_domain.process(ConfirmOrder(order_id=order_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/payment", response_model=OrderResponse)
async def record_payment(
    order_id: str, body: RecordPaymentRequest, _: Purchaser = Depends(require_admin)
) -> OrderResponse:
    current_domain.process(RecordPayment(order_id=order_id, payment_id=body.payment_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/processing", response_model=OrderResponse)
async def mark_processing(order_id: str, _: Purchaser = Depends(require_admin)) -> OrderResponse:
    current_domain.process(MarkProcessing(order_id=order_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/ship", response_model=OrderResponse)
async def ship_order(order_id: str, body: ShipOrderRequest, _: Purchaser = Depends(require_admin)) -> OrderResponse:
    command = ShipOrder(
        order_id=order_id,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/deliver", response_model=OrderResponse)
async def deliver_order(order_id: str, _: Purchaser = Depends(require_admin)) -> OrderResponse:
    current_domain.process(DeliverOrder(order_id=order_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest, _: Purchaser = Depends(require_admin)
) -> OrderResponse:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return _order_response(order_id)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(customer_id) -> CartResponse:
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    return CartResponse.from_cart(customer_id, cart)


@cart_router.get("", response_model=CartResponse)
async def view_cart(purchaser: Purchaser = Depends(current_purchaser)) -> CartResponse:
    return _cart_response(purchaser.id)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, purchaser: Purchaser = Depends(current_purchaser)) -> CartResponse:
    command = AddToCart(
        customer_id=purchaser.id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(purchaser.id)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, purchaser: Purchaser = Depends(current_purchaser)
) -> CartResponse:
    command = UpdateCartItem(
        customer_id=purchaser.id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(purchaser.id)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, purchaser: Purchaser = Depends(current_purchaser)) -> CartResponse:
    current_domain.process(RemoveFromCart(customer_id=purchaser.id, product_id=product_id), asynchronous=False)
    return _cart_response(purchaser.id)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(purchaser: Purchaser = Depends(current_purchaser)) -> CartResponse:
    CartClearer().clear(purchaser.id)
    return _cart_response(purchaser.id)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductResponse)
async def add_product(body: AddProductRequest, _: Purchaser = Depends(require_admin)) -> ProductResponse:
    command = AddProduct(
        name=body.name,
        price=to_minor_units(body.price),
        stock=body.stock,
        image=body.image,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(CatalogReader().get(product_id))


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str) -> ProductResponse:
    return ProductResponse.from_product(CatalogReader().get(product_id))


@product_router.put("/{product_id}/stock", response_model=ProductResponse)
async def restock_product(
    product_id: str, body: RestockRequest, _: Purchaser = Depends(require_admin)
) -> ProductResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return ProductResponse.from_product(CatalogReader().get(product_id, include_inactive=True))


@product_router.put("/{product_id}/availability", response_model=ProductResponse)
async def set_availability(
    product_id: str, body: AvailabilityRequest, _: Purchaser = Depends(require_admin)
) -> ProductResponse:
    current_domain.process(SetProductAvailability(product_id=product_id, active=body.active), asynchronous=False)
    return ProductResponse.from_product(CatalogReader().get(product_id, include_inactive=True))
