"""Pricing policy — tax rate and shipping rules, read from the environment.

Provides get_policy() / set_policy() / reset_policy() so tests can pin the
rules without touching environment variables.
"""

import os
from dataclasses import dataclass
from decimal import Decimal

from ordering.shared.money import VALID_CURRENCIES, to_minor_units


@dataclass(frozen=True)
class PricingPolicy:
    """Rates and thresholds applied to every order.

    ``free_shipping_threshold`` and ``shipping_fee`` are in minor units.
    Shipping is free only when the subtotal is strictly above the threshold.
    """

    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: int = 50000
    shipping_fee: int = 5000
    currency: str = "INR"

    def __post_init__(self):
        if self.tax_rate < 0:
            raise ValueError("Tax rate must not be negative")
        if self.free_shipping_threshold < 0 or self.shipping_fee < 0:
            raise ValueError("Shipping amounts must not be negative")
        if self.currency not in VALID_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def from_env(cls) -> "PricingPolicy":
        defaults = cls()
        threshold = os.getenv("ORDERING_FREE_SHIPPING_THRESHOLD")
        fee = os.getenv("ORDERING_SHIPPING_FEE")
        return cls(
            tax_rate=Decimal(os.getenv("ORDERING_TAX_RATE", str(defaults.tax_rate))),
            free_shipping_threshold=(
                to_minor_units(threshold) if threshold is not None else defaults.free_shipping_threshold
            ),
            shipping_fee=to_minor_units(fee) if fee is not None else defaults.shipping_fee,
            currency=os.getenv("ORDERING_CURRENCY", defaults.currency).upper(),
        )


_current_policy: PricingPolicy | None = None


def get_policy() -> PricingPolicy:
    """Return the active pricing policy, loading it from the environment on first use."""
    global _current_policy
    if _current_policy is None:
        _current_policy = PricingPolicy.from_env()
    return _current_policy


def set_policy(policy: PricingPolicy) -> None:
    global _current_policy
    _current_policy = policy


def reset_policy() -> None:
    global _current_policy
    _current_policy = None
