"""Order Numbers — human-facing identifiers derived from the millisecond clock.

Invariants:
    - Format is ORDER_NUMBER_PREFIX + exactly 8 digits
    - Digits are the last 8 of the epoch-millisecond counter

Design Decisions:
    - Uniqueness is probabilistic only (two orders in the same millisecond
      collide); orders.order_number carries no unique constraint
"""

import time

ORDER_NUMBER_PREFIX = "CR"
ORDER_NUMBER_DIGITS = 8


def generate_order_number(now_ms: int | None = None) -> str:
    """Build an order number from the given (or current) epoch milliseconds."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    digits = str(now_ms)[-ORDER_NUMBER_DIGITS:].rjust(ORDER_NUMBER_DIGITS, "0")
    return f"{ORDER_NUMBER_PREFIX}{digits}"
