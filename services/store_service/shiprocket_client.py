"""
Shiprocket API client.

Provides async methods for:
- Logging in for an API token (cached per account until it expires)
- Courier serviceability and rate lookup
- Creating ad-hoc orders and assigning an AWB (tracking number)

Shipment creation runs after payment or COD verification. Failures here never
change payment state.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, List, Optional

import httpx
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import ConfigurationError, UpstreamError
from libs.common.logging import get_logger
from services.store_service.models import Order, PaymentType

logger = get_logger(__name__)

# Per-garment defaults used when the admin does not pass package dimensions
DEFAULT_WEIGHT_KG = 0.5
DEFAULT_DIMENSIONS_CM = {"length": 30, "breadth": 25, "height": 5}

# Shiprocket tokens are valid for 10 days; renew a day early
TOKEN_TTL = timedelta(days=9)


@dataclass
class _CachedToken:
    token: str
    expires_at: datetime


# Shared by every client in the process, keyed by (base_url, email)
_token_cache: dict[tuple[str, str], _CachedToken] = {}


def clear_token_cache() -> None:
    _token_cache.clear()


@dataclass
class CourierRate:
    courier_company_id: int
    courier_name: str
    rate: Decimal
    estimated_delivery_days: Optional[str]
    cod_available: bool


@dataclass
class ShipmentResult:
    shiprocket_order_id: str
    shipment_id: str
    awb_code: Optional[str]
    courier_name: Optional[str]


class ShiprocketClient:
    """Async client for the Shiprocket external API."""

    def __init__(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.email = email or settings.SHIPROCKET_EMAIL
        self.password = password or settings.SHIPROCKET_PASSWORD
        if not (self.email and self.password):
            raise ConfigurationError("Shiprocket credentials are not configured")
        self.base_url = (base_url or settings.SHIPROCKET_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS
        self.pickup_location = settings.SHIPROCKET_PICKUP_LOCATION
        self.pickup_pincode = settings.SHIPROCKET_PICKUP_PINCODE

    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        headers: dict = None,
        params: dict = None,
        json_data: dict = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=params,
                    json=json_data,
                )
            except httpx.HTTPError as exc:
                logger.error("Shiprocket request to %s failed: %s", endpoint, exc)
                raise UpstreamError("Shipping carrier is unreachable") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            logger.error(
                "Shiprocket API error: %s - %s",
                response.status_code,
                data.get("message"),
                extra={"extra_fields": {"endpoint": endpoint}},
            )
            raise UpstreamError(
                data.get("message") or "Shipping carrier request failed",
                upstream_status=response.status_code,
                response_data=data,
            )
        return data

    async def authenticate(self) -> str:
        data = await self._send(
            "POST",
            "/auth/login",
            json_data={"email": self.email, "password": self.password},
        )
        token = data.get("token")
        if not token:
            raise UpstreamError("Shiprocket login returned no token", response_data=data)
        _token_cache[self._cache_key] = _CachedToken(token, utc_now() + TOKEN_TTL)
        return token

    @property
    def _cache_key(self) -> tuple[str, str]:
        return (self.base_url, self.email.lower())

    def _cached_token(self) -> Optional[str]:
        cached = _token_cache.get(self._cache_key)
        if cached is None or cached.expires_at <= utc_now():
            return None
        return cached.token

    async def _request(
        self, method: str, endpoint: str, params: dict = None, json_data: dict = None
    ) -> dict[str, Any]:
        token = self._cached_token() or await self.authenticate()
        try:
            return await self._send(
                method,
                endpoint,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
                json_data=json_data,
            )
        except UpstreamError as exc:
            if exc.upstream_status != 401:
                raise
        # Token revoked or rotated before its expiry
        logger.info("Shiprocket token rejected, logging in again")
        _token_cache.pop(self._cache_key, None)
        token = await self.authenticate()
        return await self._send(
            method,
            endpoint,
            headers={"Authorization": f"Bearer {token}"},
            params=params,
            json_data=json_data,
        )

    # =========================================================================
    # Rates
    # =========================================================================

    async def get_rates(
        self,
        delivery_pincode: str,
        *,
        weight_kg: float = DEFAULT_WEIGHT_KG,
        cod: bool = False,
    ) -> List[CourierRate]:
        """List couriers serving ``delivery_pincode`` from the pickup pincode."""
        data = await self._request(
            "GET",
            "/courier/serviceability/",
            params={
                "pickup_postcode": self.pickup_pincode,
                "delivery_postcode": delivery_pincode,
                "weight": weight_kg,
                "cod": 1 if cod else 0,
            },
        )

        rates = []
        companies = (data.get("data") or {}).get("available_courier_companies") or []
        for company in companies:
            rates.append(
                CourierRate(
                    courier_company_id=int(company.get("courier_company_id") or 0),
                    courier_name=company.get("courier_name", ""),
                    rate=Decimal(str(company.get("rate") or 0)),
                    estimated_delivery_days=(
                        str(company["estimated_delivery_days"])
                        if company.get("estimated_delivery_days") is not None
                        else None
                    ),
                    cod_available=bool(company.get("cod")),
                )
            )
        return rates

    # =========================================================================
    # Orders & shipments
    # =========================================================================

    def build_order_payload(
        self,
        order: Order,
        *,
        weight_kg: float = DEFAULT_WEIGHT_KG,
        dimensions: Optional[dict] = None,
    ) -> dict:
        shipping = order.shipping_address
        billing = order.billing_address
        dims = dimensions or DEFAULT_DIMENSIONS_CM
        return {
            "order_id": order.order_number,
            "order_date": order.created_at.strftime("%Y-%m-%d %H:%M"),
            "pickup_location": self.pickup_location,
            "billing_customer_name": billing.get("name") or order.customer_name,
            "billing_last_name": "",
            "billing_address": billing.get("line1"),
            "billing_address_2": billing.get("line2") or "",
            "billing_city": billing.get("city"),
            "billing_pincode": billing.get("pincode"),
            "billing_state": billing.get("state"),
            "billing_country": billing.get("country") or "India",
            "billing_email": billing.get("email") or order.customer_email,
            "billing_phone": billing.get("phone") or order.customer_phone,
            "shipping_is_billing": shipping == billing,
            "shipping_customer_name": shipping.get("name"),
            "shipping_last_name": "",
            "shipping_address": shipping.get("line1"),
            "shipping_address_2": shipping.get("line2") or "",
            "shipping_city": shipping.get("city"),
            "shipping_pincode": shipping.get("pincode"),
            "shipping_state": shipping.get("state"),
            "shipping_country": shipping.get("country") or "India",
            "shipping_email": shipping.get("email") or order.customer_email,
            "shipping_phone": shipping.get("phone") or order.customer_phone,
            "order_items": [
                {
                    "name": f"{item.title} ({item.size})",
                    "sku": f"{item.product_id}-{item.size}",
                    "units": item.quantity,
                    "selling_price": float(item.unit_price),
                }
                for item in order.items
            ],
            "payment_method": "COD" if order.payment_type == PaymentType.COD else "Prepaid",
            "sub_total": float(order.total_amount),
            "weight": weight_kg,
            **dims,
        }

    async def create_shipment(
        self,
        order: Order,
        *,
        weight_kg: float = DEFAULT_WEIGHT_KG,
        dimensions: Optional[dict] = None,
    ) -> ShipmentResult:
        """Create the Shiprocket order and assign an AWB to its shipment."""
        created = await self._request(
            "POST",
            "/orders/create/adhoc",
            json_data=self.build_order_payload(
                order, weight_kg=weight_kg, dimensions=dimensions
            ),
        )
        shiprocket_order_id = str(created.get("order_id") or "")
        shipment_id = str(created.get("shipment_id") or "")
        if not shipment_id:
            raise UpstreamError(
                "Shiprocket did not return a shipment id", response_data=created
            )

        assigned = await self._request(
            "POST", "/courier/assign/awb", json_data={"shipment_id": shipment_id}
        )
        awb_data = (assigned.get("response") or {}).get("data") or {}

        return ShipmentResult(
            shiprocket_order_id=shiprocket_order_id,
            shipment_id=shipment_id,
            awb_code=awb_data.get("awb_code"),
            courier_name=awb_data.get("courier_name"),
        )


CarrierFactory = Callable[[], ShiprocketClient]
