"""
Razorpay API client.

Provides async methods for:
- Creating orders that the checkout widget collects payment against
- Fetching order and payment state for reconciliation

Amounts crossing this boundary are integer paise.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

import httpx
from libs.common.config import get_settings
from libs.common.errors import ConfigurationError, UpstreamError, ValidationError
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GatewayOrder:
    """A Razorpay order."""

    id: str
    amount: int  # in paise
    currency: str
    receipt: Optional[str]
    status: str  # created, attempted, paid
    amount_paid: int = 0


@dataclass
class GatewayPayment:
    """A Razorpay payment attempt."""

    id: str
    order_id: Optional[str]
    amount: int  # in paise
    currency: str
    status: str  # created, authorized, captured, refunded, failed
    method: Optional[str] = None
    captured: bool = False


class PaymentGateway(Protocol):
    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Optional[dict] = None,
    ) -> GatewayOrder: ...


GatewayFactory = Callable[[], PaymentGateway]


class RazorpayClient:
    """Async client for the Razorpay Orders and Payments APIs."""

    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        if not (self.key_id and self.key_secret):
            raise ConfigurationError("Razorpay credentials are not configured")
        self.base_url = (base_url or settings.RAZORPAY_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict = None,
        json_data: dict = None,
    ) -> dict[str, Any]:
        """Make an authenticated request to the Razorpay API."""
        url = f"{self.base_url}{endpoint}"

        async with httpx.AsyncClient(
            timeout=self.timeout, auth=(self.key_id, self.key_secret)
        ) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_data,
                )
            except httpx.HTTPError as exc:
                logger.error("Razorpay request to %s failed: %s", endpoint, exc)
                raise UpstreamError("Payment gateway is unreachable") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = data.get("error") or {}
            logger.error(
                "Razorpay API error: %s - %s",
                response.status_code,
                error.get("description"),
                extra={"extra_fields": {"endpoint": endpoint}},
            )
            raise UpstreamError(
                error.get("description") or "Payment gateway request failed",
                upstream_status=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Optional[dict] = None,
    ) -> GatewayOrder:
        """
        Create an order for the checkout widget to collect payment against.

        Args:
            amount_paise: Amount in paise (must be positive)
            currency: ISO currency code, INR for this store
            receipt: Our order number, echoed back in webhooks
            notes: Up to 15 key/value pairs stored on the Razorpay order

        Raises:
            UpstreamError: If Razorpay rejects the request or is unreachable
        """
        if amount_paise <= 0:
            raise ValidationError("Order amount must be positive")

        data = await self._request(
            "POST",
            "/orders",
            json_data={
                "amount": amount_paise,
                "currency": currency,
                "receipt": receipt,
                "notes": notes or {},
            },
        )
        return _gateway_order(data)

    async def fetch_order(self, razorpay_order_id: str) -> GatewayOrder:
        data = await self._request("GET", f"/orders/{razorpay_order_id}")
        return _gateway_order(data)

    # =========================================================================
    # Payments
    # =========================================================================

    async def fetch_payment(self, razorpay_payment_id: str) -> GatewayPayment:
        data = await self._request("GET", f"/payments/{razorpay_payment_id}")
        return GatewayPayment(
            id=data["id"],
            order_id=data.get("order_id"),
            amount=int(data.get("amount") or 0),
            currency=data.get("currency", "INR"),
            status=data.get("status", ""),
            method=data.get("method"),
            captured=bool(data.get("captured")),
        )


def _gateway_order(data: dict) -> GatewayOrder:
    return GatewayOrder(
        id=data["id"],
        amount=int(data.get("amount") or 0),
        currency=data.get("currency", "INR"),
        receipt=data.get("receipt"),
        status=data.get("status", "created"),
        amount_paid=int(data.get("amount_paid") or 0),
    )
