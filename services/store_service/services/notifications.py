"""COD verification over WhatsApp.

The store confirms cash-on-delivery orders by hand. Customers are sent to a
``wa.me`` link with a pre-filled message; nothing is sent from here.
"""

import re
from urllib.parse import quote

from libs.common.currency import format_inr
from services.store_service.models import Order

WHATSAPP_BASE_URL = "https://wa.me"


def cod_verification_message(order: Order) -> str:
    return (
        f"Hi! I'd like to confirm my COD order {order.order_number} "
        f"for {format_inr(order.total_amount)}. "
        f"Delivery pincode: {order.shipping_address.get('pincode')}."
    )


def whatsapp_link(number: str, message: str) -> str:
    digits = re.sub(r"\D", "", number or "")
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"


def cod_verification_link(number: str, order: Order) -> str:
    return whatsapp_link(number, cod_verification_message(order))
