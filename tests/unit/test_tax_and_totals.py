"""Unit tests for GST computation and the order totals calculator."""

from decimal import Decimal

import pytest
from services.store_service.services.config_provider import (
    CustomCharge,
    StoreConfigSnapshot,
)
from services.store_service.services.tax import compute_tax, is_intrastate
from services.store_service.services.totals import PricedItem, calculate_total

# ---------------------------------------------------------------------------
# compute_tax
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_intrastate_sale_splits_cgst_and_sgst():
    result = compute_tax(Decimal("1000"), "Karnataka", "Karnataka")

    assert result.tax_amount == Decimal("180")
    assert result.breakdown == {
        "cgst": Decimal("90"),
        "sgst": Decimal("90"),
        "rate": 18,
    }
    assert result.is_intrastate


@pytest.mark.unit
def test_interstate_sale_is_all_igst():
    result = compute_tax(Decimal("1000"), "Maharashtra", "Karnataka")

    assert result.tax_amount == Decimal("180")
    assert result.breakdown == {"igst": Decimal("180"), "rate": 18}
    assert not result.is_intrastate


@pytest.mark.unit
def test_state_match_ignores_case_and_whitespace():
    assert is_intrastate("  karnataka ", "Karnataka")
    assert not is_intrastate("Kerala", "Karnataka")


@pytest.mark.unit
def test_cgst_and_sgst_add_up_to_tax():
    result = compute_tax(Decimal("333.33"), "Karnataka", "Karnataka")
    assert result.breakdown["cgst"] + result.breakdown["sgst"] == result.tax_amount


@pytest.mark.unit
def test_zero_amount_has_zero_tax():
    result = compute_tax(0, "Delhi", "Karnataka")
    assert result.tax_amount == 0
    assert result.breakdown["igst"] == 0


# ---------------------------------------------------------------------------
# calculate_total
# ---------------------------------------------------------------------------


def _config(**overrides) -> StoreConfigSnapshot:
    return StoreConfigSnapshot(**overrides)


@pytest.mark.unit
def test_reference_order_with_discount_and_packaging_charge():
    config = _config(
        extra_charges_enabled=True,
        custom_charges=[CustomCharge(label="Packaging", amount=Decimal("20"))],
    )

    calc = calculate_total(
        [PricedItem(Decimal("500"), 2)], "Karnataka", Decimal("100"), config=config
    )

    assert calc.subtotal == Decimal("1000")
    assert calc.custom_charges_total == Decimal("20")
    assert calc.amount_before_tax == Decimal("920")
    assert calc.tax_amount == Decimal("165.6")
    assert calc.tax_breakdown["cgst"] == Decimal("82.8")
    assert calc.tax_breakdown["sgst"] == Decimal("82.8")
    assert calc.total_amount == Decimal("1085.6")


@pytest.mark.unit
def test_discount_is_applied_before_tax():
    calc = calculate_total(
        [PricedItem(Decimal("1000"), 1)], "Karnataka", Decimal("100"), config=_config()
    )

    # 900 taxed, not 1000 taxed then 100 off
    assert calc.total_amount == Decimal("1062")
    assert calc.total_amount != Decimal("1080")


@pytest.mark.unit
def test_discount_larger_than_order_clamps_to_zero():
    calc = calculate_total(
        [PricedItem(Decimal("1000"), 1)], "Karnataka", Decimal("2000"), config=_config()
    )

    assert calc.amount_before_tax == 0
    assert calc.tax_amount == 0
    assert calc.total_amount == 0


@pytest.mark.unit
def test_custom_charges_ignored_when_extra_charges_disabled():
    config = _config(extra_charges_enabled=False)

    calc = calculate_total(
        [PricedItem(Decimal("1000"), 1)],
        "Karnataka",
        custom_charges=[{"label": "Packaging", "amount": 20}],
        config=config,
    )

    assert calc.custom_charges == []
    assert calc.total_amount == Decimal("1180")


@pytest.mark.unit
def test_explicit_custom_charges_override_configured_ones():
    config = _config(
        extra_charges_enabled=True,
        custom_charges=[CustomCharge(label="Packaging", amount=Decimal("20"))],
    )

    calc = calculate_total(
        [PricedItem(Decimal("1000"), 1)],
        "Karnataka",
        custom_charges=[{"label": "Gift wrap", "amount": 50}],
        config=config,
    )

    assert [c.label for c in calc.custom_charges] == ["Gift wrap"]
    assert calc.amount_before_tax == Decimal("1050")


@pytest.mark.unit
def test_shipping_cost_added_when_free_shipping_disabled():
    config = _config(free_shipping_enabled=False, default_shipping_cost=Decimal("50"))

    calc = calculate_total([PricedItem(Decimal("1000"), 1)], "Karnataka", config=config)

    assert calc.shipping_cost == Decimal("50")
    assert calc.total_amount == Decimal("1239.00")


@pytest.mark.unit
def test_free_shipping_ignores_default_cost():
    config = _config(free_shipping_enabled=True, default_shipping_cost=Decimal("50"))

    calc = calculate_total([PricedItem(Decimal("1000"), 1)], "Karnataka", config=config)

    assert calc.shipping_cost == 0


@pytest.mark.unit
def test_interstate_total_uses_igst():
    calc = calculate_total(
        [PricedItem(Decimal("799"), 1), PricedItem(Decimal("1299"), 2)],
        "Tamil Nadu",
        config=_config(),
    )

    assert calc.subtotal == Decimal("3397")
    assert set(calc.tax_breakdown) == {"igst", "rate"}
    assert calc.total_amount == calc.amount_before_tax + calc.tax_amount


@pytest.mark.unit
def test_storage_helpers_round_to_paise():
    config = _config(
        extra_charges_enabled=True,
        custom_charges=[CustomCharge(label="Packaging", amount=Decimal("19.999"))],
    )
    calc = calculate_total(
        [PricedItem(Decimal("333.33"), 1)], "Karnataka", config=config
    )

    stored = calc.tax_breakdown_for_storage()
    assert stored["rate"] == 18
    assert stored["cgst"] == round(stored["cgst"], 2)
    assert calc.custom_charges_for_storage() == [{"label": "Packaging", "amount": 20.0}]
