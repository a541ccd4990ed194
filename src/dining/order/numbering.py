"""Client-facing order numbers.

    <prefix><last 6 digits of the epoch-millisecond clock><3 random digits>

e.g. ``FS482913057``. The format only makes collisions unlikely; uniqueness is
enforced by the repository (unique field plus a lookup before the write).
"""

import random
from collections.abc import Callable

import structlog

from dining.errors import OrderNumberUnavailable
from dining.shared.clock import utc_now

logger = structlog.get_logger(__name__)


def generate_order_number(prefix: str = "FS", now=None, rng: random.Random | None = None) -> str:
    now = now or utc_now()
    millis = str(int(now.timestamp() * 1000))
    suffix = (rng or random).randint(0, 999)
    return f"{prefix}{millis[-6:]}{suffix:03d}"


def allocate_order_number(
    is_taken: Callable[[str], bool],
    prefix: str = "FS",
    attempts: int = 5,
    generator: Callable[[str], str] | None = None,
) -> str:
    """Draw order numbers until one is free.

    Raises:
        OrderNumberUnavailable: every candidate within ``attempts`` was taken.
    """
    generator = generator or generate_order_number
    for attempt in range(1, attempts + 1):
        candidate = generator(prefix)
        if not is_taken(candidate):
            return candidate
        logger.warning("Order number already taken, drawing another", order_number=candidate, attempt=attempt)
    raise OrderNumberUnavailable(f"Could not allocate a free order number in {attempts} attempts", prefix=prefix)
