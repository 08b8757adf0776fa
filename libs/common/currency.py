"""Currency conversion utilities for the storefront.

Internal storage unit: rupees as ``Decimal`` with two places (₹1 = 100 paise).
Gateway unit: paise as ``int`` (Razorpay amounts are always in the smallest
subunit).

Conversion chain
----------------
Rupees × 100 → Paise   (rounded half-up to the nearest paisa)
Paise  ÷ 100 → Rupees
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

PAISE_PER_RUPEE: int = 100
CURRENCY_QUANTUM = Decimal("0.01")

Amount = Union[Decimal, int, float, str]


# ─── conversion helpers ───────────────────────────────────────────────────────


def to_decimal(value: Amount) -> Decimal:
    """Coerce a numeric value to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_rupees(value: Amount) -> Decimal:
    """Round a rupee amount to paise precision (half-up). Used at persistence."""
    return to_decimal(value).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def rupees_to_paise(rupees: Amount) -> int:
    """Convert rupees to paise (round half-up). ₹1 = 100 paise."""
    paise = to_decimal(rupees) * PAISE_PER_RUPEE
    return int(paise.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def paise_to_rupees(paise: int) -> Decimal:
    """Convert paise to rupees. 100 paise = ₹1."""
    return (Decimal(paise) / PAISE_PER_RUPEE).quantize(CURRENCY_QUANTUM)


def format_inr(value: Amount) -> str:
    """Render an amount for messages, e.g. ``₹1,085.60``."""
    return f"₹{quantize_rupees(value):,}"
