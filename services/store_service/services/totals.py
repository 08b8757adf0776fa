"""Order total calculation.

Steps run in a fixed order: subtotal, discount, shipping, custom charges,
then GST on the resulting taxable amount.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from libs.common.currency import Amount, quantize_rupees, to_decimal
from services.store_service.services.config_provider import (
    CustomCharge,
    StoreConfigSnapshot,
)
from services.store_service.services.tax import compute_tax

ZERO = Decimal("0")


@dataclass(frozen=True)
class PricedItem:
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return to_decimal(self.unit_price) * self.quantity


@dataclass
class OrderCalculation:
    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    custom_charges: list[CustomCharge] = field(default_factory=list)
    custom_charges_total: Decimal = ZERO
    amount_before_tax: Decimal = ZERO
    tax_amount: Decimal = ZERO
    tax_breakdown: dict = field(default_factory=dict)
    total_amount: Decimal = ZERO

    def tax_breakdown_for_storage(self) -> dict:
        """Breakdown with amounts rounded to paise, ready for a JSON column."""
        stored = {}
        for key, value in self.tax_breakdown.items():
            stored[key] = value if key == "rate" else float(quantize_rupees(value))
        return stored

    def custom_charges_for_storage(self) -> list[dict]:
        return [
            {"label": charge.label, "amount": float(quantize_rupees(charge.amount))}
            for charge in self.custom_charges
        ]


ChargeInput = Union[CustomCharge, dict]


def _coerce_charges(charges: Iterable[ChargeInput]) -> list[CustomCharge]:
    return [
        charge if isinstance(charge, CustomCharge) else CustomCharge(**charge)
        for charge in charges
    ]


def calculate_total(
    items: Sequence[PricedItem],
    destination_state: str,
    discount_amount: Amount = ZERO,
    custom_charges: Optional[Iterable[ChargeInput]] = None,
    config: Optional[StoreConfigSnapshot] = None,
) -> OrderCalculation:
    """Compute the payable amount for ``items`` shipped to ``destination_state``.

    ``custom_charges`` defaults to the charges configured on the store. The
    whole category is skipped when ``extra_charges_enabled`` is off. A
    discount larger than the order clamps the taxable amount to zero.
    """
    config = config or StoreConfigSnapshot()
    discount = to_decimal(discount_amount)

    subtotal = sum((item.line_total for item in items), ZERO)

    shipping_cost = (
        ZERO if config.free_shipping_enabled else to_decimal(config.default_shipping_cost)
    )

    if config.extra_charges_enabled:
        applied = _coerce_charges(
            config.custom_charges if custom_charges is None else custom_charges
        )
    else:
        applied = []
    charges_total = sum((charge.amount for charge in applied), ZERO)

    amount_before_tax = subtotal - discount + shipping_cost + charges_total
    if amount_before_tax < ZERO:
        amount_before_tax = ZERO

    tax = compute_tax(amount_before_tax, destination_state, config.business_state)

    return OrderCalculation(
        subtotal=subtotal,
        discount_amount=discount,
        shipping_cost=shipping_cost,
        custom_charges=applied,
        custom_charges_total=charges_total,
        amount_before_tax=amount_before_tax,
        tax_amount=tax.tax_amount,
        tax_breakdown=tax.breakdown,
        total_amount=amount_before_tax + tax.tax_amount,
    )
