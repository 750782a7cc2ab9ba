"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. The storefront speaks camelCase, so every schema
aliases its fields; snake_case names are accepted on input as well.
Amounts travel as two-decimal strings in major units (``"286.00"``).
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ordering.shared.money import format_amount


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str | None = None
    country: str
    postal_code: str


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class OrderLineRequest(CamelModel):
    product_id: str = Field(alias="product")
    quantity: int


class PlaceOrderRequest(CamelModel):
    items: list[OrderLineRequest]
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str = "cod"
    notes: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "items": [{"product": "prod-001", "quantity": 2}],
                    "shippingAddress": {
                        "firstName": "Asha",
                        "lastName": "Rao",
                        "addressLine1": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "KA",
                        "country": "India",
                        "postalCode": "560001",
                    },
                    "paymentMethod": "upi",
                }
            ]
        },
    )


class ShipOrderRequest(CamelModel):
    tracking_number: str
    estimated_delivery: str | None = None  # ISO date


class CancelOrderRequest(CamelModel):
    reason: str


class RecordPaymentRequest(CamelModel):
    payment_id: str


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class OrderItemResponse(CamelModel):
    product_id: str
    name: str
    image: str | None = None
    unit_price: str
    quantity: int
    subtotal: str


class OrderResponse(CamelModel):
    id: str
    order_number: str
    customer_id: str
    items: list[OrderItemResponse]
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    payment_status: str
    payment_id: str | None = None
    order_status: str
    subtotal: str
    tax: str
    shipping_cost: str
    total: str
    currency: str
    notes: str | None = None
    tracking_number: str | None = None
    estimated_delivery: date | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_order(cls, order, warnings=None) -> "OrderResponse":
        pricing = order.pricing
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    image=item.image,
                    unit_price=format_amount(item.unit_price),
                    quantity=item.quantity,
                    subtotal=format_amount(item.subtotal),
                )
                for item in order.items
            ],
            shipping_address=_address(order.shipping_address),
            billing_address=_address(order.billing_address) if order.billing_address else None,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment_id=order.payment_id,
            order_status=order.status,
            subtotal=format_amount(pricing.subtotal),
            tax=format_amount(pricing.tax),
            shipping_cost=format_amount(pricing.shipping_cost),
            total=format_amount(pricing.total),
            currency=pricing.currency,
            notes=order.notes,
            tracking_number=order.tracking_number,
            estimated_delivery=order.estimated_delivery,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            cancellation_reason=order.cancellation_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            warnings=list(warnings or []),
        )


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]
    count: int


def _address(address) -> AddressSchema:
    return AddressSchema(
        first_name=address.first_name,
        last_name=address.last_name,
        phone=address.phone,
        address_line1=address.address_line1,
        address_line2=address.address_line2,
        city=address.city,
        state=address.state,
        country=address.country,
        postal_code=address.postal_code,
    )


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(CamelModel):
    quantity: int = Field(ge=1)


class CartItemResponse(CamelModel):
    product_id: str
    quantity: int


class CartResponse(CamelModel):
    customer_id: str
    items: list[CartItemResponse]
    item_count: int

    @classmethod
    def from_cart(cls, customer_id, cart) -> "CartResponse":
        items = [
            CartItemResponse(product_id=str(item.product_id), quantity=item.quantity)
            for item in (cart.items if cart else [])
        ]
        return cls(customer_id=str(customer_id), items=items, item_count=sum(i.quantity for i in items))


# ---------------------------------------------------------------------------
# Catalog Schemas
# ---------------------------------------------------------------------------
class AddProductRequest(CamelModel):
    name: str
    price: Decimal = Field(ge=0)  # major units
    stock: int = Field(ge=0, default=0)
    image: str | None = None


class RestockRequest(CamelModel):
    quantity: int = Field(ge=1)


class AvailabilityRequest(CamelModel):
    active: bool


class ProductResponse(CamelModel):
    id: str
    name: str
    image: str | None = None
    price: str
    stock: int
    sold: int
    is_active: bool

    @classmethod
    def from_product(cls, product) -> "ProductResponse":
        return cls(
            id=str(product.id),
            name=product.name,
            image=product.image,
            price=format_amount(product.price),
            stock=product.stock,
            sold=product.sold,
            is_active=product.is_active,
        )


class StatusResponse(CamelModel):
    status: str = "ok"
