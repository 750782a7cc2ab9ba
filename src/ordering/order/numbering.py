"""Order number generation.

Order numbers are ``ORD-<epoch milliseconds>-<8 uppercase hex chars>``. The
random suffix makes collisions within the same millisecond unlikely; the
storage-level uniqueness constraint on ``Order.order_number`` makes them
impossible, and placement retries with a fresh number when it trips.
"""

import secrets
from datetime import UTC, datetime

PREFIX = "ORD"


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    millis = int(now.timestamp() * 1000)
    return f"{PREFIX}-{millis}-{secrets.token_hex(4).upper()}"
