"""Monetary amounts in integer minor units.

Every amount stored by the ordering domain is an integer count of the
currency's minor unit (cents, paise). Decimal arithmetic is used only where a
fractional rate is applied, and the result is rounded half-up back to whole
minor units.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

VALID_CURRENCIES = frozenset(
    {
        "USD",
        "EUR",
        "GBP",
        "INR",
        "CAD",
        "AUD",
        "SGD",
    }
)

MINOR_UNITS_PER_MAJOR = 100

_CENT = Decimal("0.01")
_WHOLE = Decimal("1")


def round_half_up(value: Decimal) -> int:
    """Round a fractional count of minor units to a whole one."""
    return int(value.quantize(_WHOLE, rounding=ROUND_HALF_UP))


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (``"499.99"``, ``500``, ``Decimal``) to minor units.

    Floats go through ``str`` first so that ``0.1`` converts as written.
    """
    if isinstance(amount, bool):
        raise ValueError(f"Not a monetary amount: {amount!r}")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Not a monetary amount: {amount!r}") from None
    return round_half_up(value * MINOR_UNITS_PER_MAJOR)


def to_major_units(minor: int) -> Decimal:
    return (Decimal(minor) / MINOR_UNITS_PER_MAJOR).quantize(_CENT)


def format_amount(minor: int) -> str:
    """Render minor units as a two-decimal string, e.g. ``28600`` -> ``"286.00"``."""
    return str(to_major_units(minor))
