"""Order totals computation.

A pure function over line items: no repository access, no clock. All amounts
are integer minor units, so the only rounding step is the tax.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from ordering.errors import InvalidLineItem
from ordering.pricing.policy import PricingPolicy, get_policy
from ordering.shared.money import round_half_up


@dataclass(frozen=True)
class OrderTotals:
    subtotal: int
    tax: int
    shipping_cost: int
    total: int
    currency: str


def _read(item, name):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def compute_totals(line_items: Iterable, policy: PricingPolicy | None = None) -> OrderTotals:
    """Compute subtotal, tax, shipping cost and grand total.

    Each line item exposes ``unit_price`` (minor units, >= 0) and ``quantity``
    (>= 1), either as attributes or as mapping keys.

    Raises:
        InvalidLineItem: if any price or quantity is malformed.
    """
    policy = policy or get_policy()

    subtotal = 0
    for position, item in enumerate(line_items):
        unit_price = _read(item, "unit_price")
        quantity = _read(item, "quantity")

        if not _is_integer(unit_price) or unit_price < 0:
            raise InvalidLineItem({f"items[{position}].unit_price": ["Unit price must be a non-negative amount"]})
        if not _is_integer(quantity) or quantity < 1:
            raise InvalidLineItem({f"items[{position}].quantity": ["Quantity must be at least 1"]})

        subtotal += unit_price * quantity

    tax = round_half_up(Decimal(subtotal) * policy.tax_rate)
    shipping_cost = 0 if subtotal > policy.free_shipping_threshold else policy.shipping_fee

    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping_cost=shipping_cost,
        total=subtotal + tax + shipping_cost,
        currency=policy.currency,
    )
