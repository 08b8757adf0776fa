"""Unit tests for rupee/paise conversion."""

from decimal import Decimal

import pytest
from libs.common.currency import (
    format_inr,
    paise_to_rupees,
    quantize_rupees,
    rupees_to_paise,
    to_decimal,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "rupees, paise",
    [
        (Decimal("1085.60"), 108560),
        (Decimal("1085.6"), 108560),
        (Decimal("0.005"), 1),
        (Decimal("0.004"), 0),
        (19.99, 1999),
        (1180, 118000),
        ("499.50", 49950),
    ],
)
def test_rupees_to_paise_rounds_half_up(rupees, paise):
    assert rupees_to_paise(rupees) == paise


@pytest.mark.unit
def test_paise_to_rupees():
    assert paise_to_rupees(108560) == Decimal("1085.60")
    assert paise_to_rupees(1) == Decimal("0.01")


@pytest.mark.unit
def test_float_input_has_no_binary_artefacts():
    assert to_decimal(0.1) == Decimal("0.1")
    assert quantize_rupees(2.675) == Decimal("2.68")


@pytest.mark.unit
def test_format_inr():
    assert format_inr(Decimal("1085.6")) == "₹1,085.60"
    assert format_inr(0) == "₹0.00"
