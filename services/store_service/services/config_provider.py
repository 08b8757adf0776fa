"""Store configuration access.

The lifecycle controller receives a ``ConfigProvider`` rather than reading
a module-level object, so each request sees the latest admin settings and
tests can pass a fixed configuration.
"""

from decimal import Decimal
from typing import Optional, Protocol

from libs.common.errors import ConfigurationError
from pydantic import BaseModel, ConfigDict, Field
from services.store_service.models import BlockedPincode, DiscountType, StoreConfig
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


class CustomCharge(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0)


class StoreConfigSnapshot(BaseModel):
    """Immutable view of the ``store_config`` row for one request."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    business_name: str = "Intru"
    business_email: Optional[str] = None
    business_phone: Optional[str] = None
    gstin: Optional[str] = None
    business_state: str = "Karnataka"
    state_code: str = "29"

    extra_charges_enabled: bool = False
    custom_charges: list[CustomCharge] = []
    free_shipping_enabled: bool = True
    default_shipping_cost: Decimal = Decimal("0")

    is_referral_enabled: bool = False
    referral_discount_type: DiscountType = DiscountType.PERCENTAGE
    referral_discount_value: Decimal = Decimal("10")
    referral_credit_amount: Decimal = Decimal("100")
    min_order_for_referral: Decimal = Decimal("0")

    require_unboxing_video: bool = False
    abandoned_order_timeout_minutes: int = 15


class ConfigProvider(Protocol):
    async def get_config(self) -> StoreConfigSnapshot: ...

    async def is_pincode_blocked(self, pincode: str) -> bool: ...


class DatabaseConfigProvider:
    """Reads configuration from the database on every call."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_config(self) -> StoreConfigSnapshot:
        result = await self.db.execute(select(StoreConfig).limit(1))
        row = result.scalar_one_or_none()
        if row is None:
            raise ConfigurationError("Store configuration has not been set up")
        return StoreConfigSnapshot.model_validate(row)

    async def is_pincode_blocked(self, pincode: str) -> bool:
        result = await self.db.execute(
            select(BlockedPincode.id).where(BlockedPincode.pincode == pincode.strip())
        )
        return result.first() is not None
