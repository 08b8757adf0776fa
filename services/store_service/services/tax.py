"""GST computation.

Clothing ships at a flat 18% GST. Intrastate sales split the tax evenly into
CGST and SGST; interstate sales carry it all as IGST. Amounts are not rounded
here; callers quantise at the persistence boundary.
"""

from dataclasses import dataclass
from decimal import Decimal

from libs.common.currency import Amount, to_decimal

GST_RATE = Decimal("0.18")
GST_RATE_PERCENT = 18


@dataclass(frozen=True)
class TaxResult:
    tax_amount: Decimal
    breakdown: dict

    @property
    def is_intrastate(self) -> bool:
        return "igst" not in self.breakdown


def _normalise_state(state: str) -> str:
    return (state or "").strip().casefold()


def is_intrastate(destination_state: str, business_state: str) -> bool:
    return _normalise_state(destination_state) == _normalise_state(business_state)


def compute_tax(
    amount_before_tax: Amount, destination_state: str, business_state: str
) -> TaxResult:
    """Return the GST on ``amount_before_tax`` and its CGST/SGST or IGST split.

    Exactly one of the two breakdown shapes is produced:
    ``{"cgst", "sgst", "rate"}`` or ``{"igst", "rate"}``.
    """
    tax_amount = to_decimal(amount_before_tax) * GST_RATE

    if is_intrastate(destination_state, business_state):
        half = tax_amount / 2
        breakdown = {"cgst": half, "sgst": half, "rate": GST_RATE_PERCENT}
    else:
        breakdown = {"igst": tax_amount, "rate": GST_RATE_PERCENT}

    return TaxResult(tax_amount=tax_amount, breakdown=breakdown)
