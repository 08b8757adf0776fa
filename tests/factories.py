"""
Model factories and test doubles.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(price=Decimal("1499"))
    db_session.add(product)
    await db_session.commit()
"""

import itertools
import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from libs.common.errors import UpstreamError
from libs.common.signatures import sign

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


_order_seq = itertools.count(1)


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


def address(**overrides) -> dict:
    defaults = {
        "name": "Asha Rao",
        "phone": "9876543210",
        "email": "asha@example.com",
        "line1": "12 MG Road",
        "line2": None,
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
        "country": "India",
    }
    defaults.update(overrides)
    return defaults


def order_payload(items: list[dict], **overrides) -> dict:
    """JSON body for POST /store/orders."""
    defaults = {
        "customer_email": _unique_email(),
        "customer_name": "Asha Rao",
        "customer_phone": "9876543210",
        "shipping_address": address(),
        "items": items,
        "payment_type": "prepaid",
    }
    defaults.update(overrides)
    return defaults


def webhook_body(event: str, **entities) -> bytes:
    """Serialised Razorpay webhook, e.g. ``webhook_body("payment.captured", payment={...})``."""
    payload = {
        "entity": "event",
        "event": event,
        "payload": {kind: {"entity": entity} for kind, entity in entities.items()},
    }
    return json.dumps(payload).encode("utf-8")


def signed(secret: str, body: bytes) -> dict:
    return {"X-Razorpay-Signature": sign(secret, body)}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product

        defaults = {
            "id": _uuid(),
            "title": "Oversized Tee - Black",
            "description": "Heavyweight cotton tee",
            "price": Decimal("999.00"),
            "hsn_code": "6109",
            "image_url": "https://cdn.intru.in/tee-black.jpg",
            "is_live": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


class ProductVariantFactory:
    @staticmethod
    def create(product_id=None, **overrides):
        from services.store_service.models import ProductVariant

        defaults = {
            "id": _uuid(),
            "product_id": product_id or _uuid(),
            "size": "M",
            "stock": 10,
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return ProductVariant(**defaults)


async def seed_product(db, *, price="1000.00", stock=5, sizes=("M",), **overrides):
    """Insert a live product with one variant per size and return it."""
    product = ProductFactory.create(price=Decimal(price), **overrides)
    product.variants = [
        ProductVariantFactory.create(product_id=product.id, size=size, stock=stock)
        for size in sizes
    ]
    db.add(product)
    await db.commit()
    return product


async def variant_stock(db, product_id, size="M") -> int:
    from services.store_service.models import ProductVariant
    from sqlalchemy import select

    result = await db.execute(
        select(ProductVariant.stock).where(
            ProductVariant.product_id == product_id, ProductVariant.size == size
        )
    )
    return result.scalar_one()


def line(product, size="M", quantity=1) -> dict:
    return {"product_id": str(product.id), "size": size, "quantity": quantity}


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class StoreConfigFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import DiscountType, StoreConfig

        defaults = {
            "id": _uuid(),
            "business_name": "Intru",
            "business_state": "Karnataka",
            "state_code": "29",
            "gstin": "29ABCDE1234F1Z5",
            "extra_charges_enabled": False,
            "custom_charges": [],
            "free_shipping_enabled": True,
            "default_shipping_cost": Decimal("0"),
            "is_referral_enabled": True,
            "referral_discount_type": DiscountType.PERCENTAGE,
            "referral_discount_value": Decimal("10"),
            "referral_credit_amount": Decimal("100"),
            "min_order_for_referral": Decimal("0"),
            "require_unboxing_video": False,
            "abandoned_order_timeout_minutes": 15,
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return StoreConfig(**defaults)


class BlockedPincodeFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import BlockedPincode

        defaults = {
            "id": _uuid(),
            "pincode": "110001",
            "reason": "High RTO rate",
            "blocked_by": "admin@intru.in",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return BlockedPincode(**defaults)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderItemFactory:
    @staticmethod
    def create(product_id=None, **overrides):
        from services.store_service.models import OrderItem

        defaults = {
            "id": _uuid(),
            "position": 0,
            "product_id": product_id or _uuid(),
            "title": "Oversized Tee - Black",
            "size": "M",
            "quantity": 1,
            "unit_price": Decimal("999.00"),
            "line_total": Decimal("999.00"),
            "image_url": None,
        }
        defaults.update(overrides)
        return OrderItem(**defaults)


class OrderFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import (
            Order,
            PaymentStatus,
            PaymentType,
            ShippingStatus,
            VerificationStatus,
        )

        defaults = {
            "id": _uuid(),
            "order_number": f"INTRU-20261019-{next(_order_seq):04d}",
            "customer_email": _unique_email(),
            "customer_name": "Asha Rao",
            "customer_phone": "9876543210",
            "shipping_address": address(),
            "billing_address": address(),
            "subtotal": Decimal("999.00"),
            "discount_amount": Decimal("0"),
            "shipping_cost": Decimal("0"),
            "custom_charges": [],
            "tax_amount": Decimal("179.82"),
            "tax_breakdown": {"cgst": 89.91, "sgst": 89.91, "rate": 18},
            "total_amount": Decimal("1178.82"),
            "payment_type": PaymentType.PREPAID,
            "payment_status": PaymentStatus.PENDING,
            "shipping_status": ShippingStatus.PENDING,
            "verification_status": VerificationStatus.PENDING,
            "razorpay_order_id": f"order_{uuid.uuid4().hex[:14]}",
            "created_at": _now(),
            "updated_at": _now(),
            "items": [],
        }
        defaults.update(overrides)
        return Order(**defaults)


# ---------------------------------------------------------------------------
# Referrals
# ---------------------------------------------------------------------------


class ReferralCodeFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import ReferralCode

        defaults = {
            "id": _uuid(),
            "code": f"INTRU{uuid.uuid4().hex[:6].upper()}",
            "owner_email": _unique_email(),
            "owner_name": "Ravi Kumar",
            "uses_count": 0,
            "max_uses": 50,
            "is_active": True,
            "expires_at": None,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return ReferralCode(**defaults)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class StaticConfigProvider:
    """Config provider returning a fixed snapshot."""

    def __init__(self, config=None, blocked_pincodes=()):
        from services.store_service.services.config_provider import (
            StoreConfigSnapshot,
        )

        self.config = config or StoreConfigSnapshot()
        self.blocked_pincodes = set(blocked_pincodes)

    async def get_config(self):
        return self.config

    async def is_pincode_blocked(self, pincode: str) -> bool:
        return pincode in self.blocked_pincodes


class FakeGateway:
    """Stands in for RazorpayClient; records every order it is asked to create."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[dict] = []

    async def create_order(
        self,
        amount_paise: int,
        currency: str,
        receipt: str,
        notes: Optional[dict] = None,
    ):
        from services.store_service.razorpay_client import GatewayOrder

        self.calls.append(
            {
                "amount_paise": amount_paise,
                "currency": currency,
                "receipt": receipt,
                "notes": notes,
            }
        )
        if self.fail:
            raise UpstreamError("Payment gateway is unreachable", upstream_status=503)
        return GatewayOrder(
            id=f"order_{uuid.uuid4().hex[:14]}",
            amount=amount_paise,
            currency=currency,
            receipt=receipt,
            status="created",
        )


class FakeCarrier:
    """Stands in for ShiprocketClient."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.shipments: list[str] = []

    async def get_rates(self, delivery_pincode: str, *, weight_kg=0.5, cod=False):
        from services.store_service.shiprocket_client import CourierRate

        return [
            CourierRate(
                courier_company_id=10,
                courier_name="Delhivery Surface",
                rate=Decimal("65.00"),
                estimated_delivery_days="4",
                cod_available=True,
            )
        ]

    async def create_shipment(self, order, *, weight_kg=0.5, dimensions=None):
        from services.store_service.shiprocket_client import ShipmentResult

        if self.fail:
            raise UpstreamError("Shipping carrier is unreachable", upstream_status=502)
        self.shipments.append(order.order_number)
        return ShipmentResult(
            shiprocket_order_id="SR-1001",
            shipment_id="SHIP-2002",
            awb_code="AWB123456789",
            courier_name="Delhivery Surface",
        )
