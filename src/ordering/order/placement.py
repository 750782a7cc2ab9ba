"""Order placement — reserve stock, price, persist, clear the cart.

Placement deliberately does not run inside one Unit of Work: each stock
reservation is its own committed conditional update on its product. If a
later step fails, the reservations already taken by this request are
released in reverse order before the original error is re-raised, so a
failed attempt leaves stock exactly where it was.

Known gap: a process crash between a reservation and its release leaves the
product under-stocked until it is reconciled by hand.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

import structlog
from protean import UnitOfWork
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.clearing import CartClearer
from ordering.errors import CartClearFailure, InvalidLineItem
from ordering.inventory.reservation import ReservedItem, StockReservation
from ordering.order.numbering import generate_order_number
from ordering.order.order import Address, Order, PaymentMethod
from ordering.pricing.engine import compute_totals
from ordering.pricing.policy import PricingPolicy
from ordering.purchaser import Purchaser

logger = structlog.get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 3


@dataclass(frozen=True)
class LineItemRequest:
    product_id: str
    quantity: int


@dataclass
class PlacementResult:
    order: Order
    warnings: list[str] = field(default_factory=list)


def _as_request(item) -> LineItemRequest:
    if isinstance(item, LineItemRequest):
        return item
    if isinstance(item, Mapping):
        return LineItemRequest(product_id=item.get("product_id"), quantity=item.get("quantity"))
    return LineItemRequest(product_id=getattr(item, "product_id", None), quantity=getattr(item, "quantity", None))


def _as_address(value, field_name) -> Address:
    if isinstance(value, Address):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError({field_name: ["Address is required"]})
    try:
        return Address(**value)
    except ValidationError as exc:
        raise ValidationError({f"{field_name}.{key}": messages for key, messages in exc.messages.items()}) from None


class OrderPlacement:
    def __init__(
        self,
        reservation: StockReservation | None = None,
        cart_clearer: CartClearer | None = None,
        policy: PricingPolicy | None = None,
        number_generator: Callable[[], str] = generate_order_number,
    ):
        self.reservation = reservation or StockReservation()
        self.cart_clearer = cart_clearer or CartClearer()
        self.policy = policy
        self.number_generator = number_generator

    def place_order(
        self,
        purchaser: Purchaser,
        items: Iterable,
        shipping_address,
        billing_address=None,
        payment_method: str = PaymentMethod.COD.value,
        notes: str | None = None,
    ) -> PlacementResult:
        """Turn a purchaser's line items into a committed order.

        Stock is reserved per item, in request order. Nothing is persisted
        and no stock stays reserved unless every item could be reserved and
        the order was saved.

        Raises:
            InvalidLineItem: no items, or a quantity that is not a positive integer.
            ValidationError: unknown payment method or incomplete address.
            ProductNotFound: an item references a product that does not exist.
            OutOfStock: an item asks for more units than are available.
            StockContention: a product's stock kept changing under us.
        """
        requests = self._validate_items(items)
        if payment_method not in {method.value for method in PaymentMethod}:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]})
        shipping = _as_address(shipping_address, "shipping_address")
        billing = _as_address(billing_address, "billing_address") if billing_address is not None else shipping

        reserved: list[ReservedItem] = []
        try:
            for request in requests:
                reserved.append(self.reservation.reserve(request.product_id, request.quantity))

            snapshots = [item.snapshot() for item in reserved]
            totals = compute_totals(snapshots, self.policy)
            order = self._persist(purchaser, snapshots, totals, shipping, billing, payment_method, notes)
        except Exception as exc:
            self._compensate(reserved, exc)
            raise

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(purchaser.id),
            item_count=len(reserved),
            total=totals.total,
        )

        warnings = []
        try:
            self.cart_clearer.clear(purchaser.id)
        except Exception as exc:
            failure = CartClearFailure(purchaser.id, str(exc))
            logger.warning("cart_clear_failed", customer_id=str(purchaser.id), order_id=str(order.id), error=str(exc))
            warnings.append(failure.message)

        return PlacementResult(order=order, warnings=warnings)

    def _validate_items(self, items) -> list[LineItemRequest]:
        requests = [_as_request(item) for item in (items or [])]
        if not requests:
            raise InvalidLineItem({"items": ["Order must contain at least one item"]})

        for position, request in enumerate(requests):
            quantity = request.quantity
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise InvalidLineItem({f"items[{position}].quantity": ["Quantity must be a positive integer"]})
        return requests

    def _persist(self, purchaser, snapshots, totals, shipping, billing, payment_method, notes) -> Order:
        repo = current_domain.repository_for(Order)
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            order = Order.place(
                order_number=self.number_generator(),
                customer_id=str(purchaser.id),
                items=snapshots,
                shipping_address=shipping,
                billing_address=billing,
                pricing=totals,
                payment_method=payment_method,
                notes=notes,
            )
            try:
                with UnitOfWork():
                    repo.add(order)
                return order
            except ValidationError as exc:
                if "order_number" not in exc.messages or attempt == ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.warning("order_number_collision", order_number=order.order_number, attempt=attempt)

    def _compensate(self, reserved: list[ReservedItem], original: Exception) -> None:
        if not reserved:
            return

        logger.info("order_placement_compensating", reservations=len(reserved), error=type(original).__name__)
        for item in reversed(reserved):
            try:
                self.reservation.release(item)
            except Exception as failure:
                logger.critical(
                    "stock_compensation_failed",
                    product_id=item.product_id,
                    quantity=item.quantity,
                    error=str(failure),
                )
                original.add_note(f"Compensation failed for product {item.product_id}: {failure}")
