"""Order aggregate (CQRS) — the immutable record of a placed order.

An order is created once, by order placement, with line items and pricing
copied from the catalog at that instant. Prices and totals never change
afterwards. Only the lifecycle fields move, driven by fulfillment.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    any non-terminal state → CANCELLED
    Terminal: DELIVERED, CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CARD = "card"
    COD = "cod"
    UPI = "upi"
    WALLET = "wallet"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class Address:
    """A delivery or billing address captured at checkout time.

    Copied into the order, so later changes to the purchaser's address book
    do not affect where an existing order ships.
    """

    first_name = String(max_length=100)
    last_name = String(max_length=100)
    phone = String(max_length=30)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    country = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked at placement, in minor units of ``currency``."""

    subtotal = Integer(required=True, min_value=0)
    tax = Integer(required=True, min_value=0)
    shipping_cost = Integer(required=True, min_value=0)
    total = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="INR")

    @invariant.post
    def total_must_equal_sum_of_parts(self):
        if self.total != self.subtotal + self.tax + self.shipping_cost:
            raise ValidationError({"total": ["Total must equal subtotal + tax + shipping cost"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """Snapshot of a product as it was bought: name, image, price and quantity."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image = String(max_length=1000)
    unit_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Integer(required=True, min_value=0)

    @invariant.post
    def subtotal_must_match_price_and_quantity(self):
        if self.subtotal != self.unit_price * self.quantity:
            raise ValidationError({"subtotal": ["Line subtotal must equal unit price times quantity"]})


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, unique=True, max_length=40)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_id = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    pricing = ValueObject(OrderPricing, required=True)
    notes = Text()
    tracking_number = String(max_length=255)
    estimated_delivery = Date()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        items,
        shipping_address,
        pricing,
        billing_address=None,
        payment_method=PaymentMethod.COD.value,
        notes=None,
    ):
        """Create a pending order from reserved line items.

        Args:
            order_number: Externally visible, unique order number.
            customer_id: The purchaser placing the order.
            items: List of dicts with product_id, name, image, unit_price,
                   quantity and subtotal.
            shipping_address: Address or dict of address fields.
            pricing: Object with subtotal, tax, shipping_cost, total, currency.
            billing_address: Address or dict; defaults to the shipping address.
        """
        now = datetime.now(UTC)
        shipping = shipping_address if isinstance(shipping_address, Address) else Address(**shipping_address)
        if billing_address is None:
            billing = shipping
        elif isinstance(billing_address, Address):
            billing = billing_address
        else:
            billing = Address(**billing_address)

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            items=[OrderItem(**item) for item in items],
            shipping_address=shipping,
            billing_address=billing,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            pricing=OrderPricing(
                subtotal=pricing.subtotal,
                tax=pricing.tax,
                shipping_cost=pricing.shipping_cost,
                total=pricing.total,
                currency=pricing.currency,
            ),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                item_count=len(items),
                subtotal=pricing.subtotal,
                tax=pricing.tax,
                shipping_cost=pricing.shipping_cost,
                total=pricing.total,
                currency=pricing.currency,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if not self.can_transition_to(target_status):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _move_to(self, target_status, now):
        self.status = target_status.value
        self.updated_at = now

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def confirm(self):
        self._assert_can_transition(OrderStatus.CONFIRMED)
        now = datetime.now(UTC)
        self._move_to(OrderStatus.CONFIRMED, now)
        self.raise_(OrderConfirmed(order_id=str(self.id), confirmed_at=now))

    def mark_processing(self):
        """Fulfillment has started picking and packing."""
        self._assert_can_transition(OrderStatus.PROCESSING)
        now = datetime.now(UTC)
        self._move_to(OrderStatus.PROCESSING, now)
        self.raise_(OrderProcessing(order_id=str(self.id), started_at=now))

    def ship(self, tracking_number, estimated_delivery=None):
        self._assert_can_transition(OrderStatus.SHIPPED)
        now = datetime.now(UTC)
        self.tracking_number = tracking_number
        self.estimated_delivery = estimated_delivery
        self._move_to(OrderStatus.SHIPPED, now)
        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                tracking_number=tracking_number,
                estimated_delivery=estimated_delivery,
                shipped_at=now,
            )
        )

    def deliver(self):
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        self.delivered_at = now
        self._move_to(OrderStatus.DELIVERED, now)
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    def cancel(self, reason):
        current = OrderStatus(self.status)
        if current in TERMINAL_STATES:
            raise ValidationError({"status": [f"Cannot cancel an order that is already {current.value}"]})

        now = datetime.now(UTC)
        self.cancelled_at = now
        self.cancellation_reason = reason
        self._move_to(OrderStatus.CANCELLED, now)
        self.raise_(OrderCancelled(order_id=str(self.id), reason=reason, cancelled_at=now))

    def record_payment(self, payment_id):
        """Mark the order paid. Allowed once, on an order that is not cancelled."""
        if PaymentStatus(self.payment_status) != PaymentStatus.PENDING:
            raise ValidationError({"payment_status": [f"Payment is already {self.payment_status}"]})
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Cannot record payment for a cancelled order"]})

        now = datetime.now(UTC)
        self.payment_id = payment_id
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = now
        self.raise_(OrderPaid(order_id=str(self.id), payment_id=payment_id, paid_at=now))


@ordering.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        """The purchaser's orders, newest first."""
        return (
            self._dao.query.filter(customer_id=str(customer_id))
            .order_by("-created_at")
            .limit(None)
            .all()
            .items
        )

    def find_by_order_number(self, order_number) -> Order | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None
