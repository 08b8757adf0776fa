"""Human-readable order numbers: ``PREFIX-YYYYMMDD-NNNN``.

The four-digit suffix is random. When it collides with a number already
issued that day the generator probes forward (wrapping at 9999) until it
finds a free one, so a day can hold at most 10,000 orders.
"""

import random
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from libs.common.datetime_utils import utc_now

SUFFIX_SPACE = 10_000


class OrderNumberExhaustedError(RuntimeError):
    """Every suffix for the day has been used."""


def order_date_stamp(now: Optional[datetime] = None, tz: str = "Asia/Kolkata") -> str:
    """Date part of the order number, in the store's local timezone."""
    return (now or utc_now()).astimezone(ZoneInfo(tz)).strftime("%Y%m%d")


def order_number_pattern(prefix: str, date_stamp: str) -> str:
    """SQL LIKE pattern matching every order number for one day."""
    return f"{prefix}-{date_stamp}-%"


def generate_order_number(
    prefix: str,
    *,
    now: Optional[datetime] = None,
    tz: str = "Asia/Kolkata",
    is_taken: Optional[Callable[[str], bool]] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Return an order number not rejected by ``is_taken``.

    Raises OrderNumberExhaustedError once all suffixes for the day are taken.
    """
    date_stamp = order_date_stamp(now, tz)
    start = (rng or random).randrange(SUFFIX_SPACE)

    for offset in range(SUFFIX_SPACE):
        suffix = (start + offset) % SUFFIX_SPACE
        candidate = f"{prefix}-{date_stamp}-{suffix:04d}"
        if is_taken is None or not is_taken(candidate):
            return candidate

    raise OrderNumberExhaustedError(
        f"All {SUFFIX_SPACE} order numbers for {date_stamp} are in use"
    )
