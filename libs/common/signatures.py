"""HMAC-SHA256 signing and verification for gateway callbacks.

Razorpay signs two different things:

* payment confirmations: ``HMAC(key_secret, "<order_id>|<payment_id>")``
* webhook deliveries: ``HMAC(webhook_secret, <raw request body>)``

Webhook bodies must be verified as received. Re-serialising parsed JSON can
change whitespace or key order and break the signature.
"""

import hashlib
import hmac
from typing import Union

Message = Union[str, bytes]


def _to_bytes(value: Message) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def sign(secret: Message, message: Message) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``message`` under ``secret``."""
    return hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).hexdigest()


def verify(secret: Message, message: Message, candidate: Message) -> bool:
    """Check ``candidate`` against the expected signature in constant time."""
    if not secret or not candidate:
        return False
    expected = sign(secret, message)
    return hmac.compare_digest(expected.encode("ascii"), _to_bytes(candidate))


def payment_confirmation_message(gateway_order_id: str, gateway_payment_id: str) -> str:
    return f"{gateway_order_id}|{gateway_payment_id}"


def verify_payment_signature(
    key_secret: str,
    gateway_order_id: str,
    gateway_payment_id: str,
    signature: str,
) -> bool:
    """Verify the signature returned by the checkout widget after payment."""
    return verify(
        key_secret,
        payment_confirmation_message(gateway_order_id, gateway_payment_id),
        signature,
    )


def verify_webhook_signature(webhook_secret: str, raw_body: bytes, signature: str) -> bool:
    """Verify an ``X-Razorpay-Signature`` header against the raw body."""
    return verify(webhook_secret, raw_body, signature)
