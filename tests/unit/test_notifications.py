"""Unit tests for the WhatsApp COD verification link."""

from decimal import Decimal

import pytest
from services.store_service.services.notifications import (
    cod_verification_link,
    cod_verification_message,
    whatsapp_link,
)
from tests.factories import OrderFactory, address


@pytest.mark.unit
def test_whatsapp_link_strips_number_and_encodes_message():
    url = whatsapp_link("+91 98765-43210", "Hi there & thanks")

    assert url == "https://wa.me/919876543210?text=Hi%20there%20%26%20thanks"


@pytest.mark.unit
def test_cod_message_mentions_order_total_and_pincode():
    order = OrderFactory.create(
        order_number="INTRU-20261019-0042",
        total_amount=Decimal("1178.82"),
        shipping_address=address(pincode="560034"),
    )

    message = cod_verification_message(order)

    assert "INTRU-20261019-0042" in message
    assert "₹1,178.82" in message
    assert "560034" in message


@pytest.mark.unit
def test_cod_link_points_at_store_number():
    order = OrderFactory.create(order_number="INTRU-20261019-0042")

    url = cod_verification_link("919876543210", order)

    assert url.startswith("https://wa.me/919876543210?text=")
    assert "INTRU-20261019-0042" in url
