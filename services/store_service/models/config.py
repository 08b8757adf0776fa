"""Store configuration models: the settings singleton and COD-blocked pincodes."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from services.store_service.models.enums import DiscountType, enum_values
from sqlalchemy import Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, Numeric, String, Uuid, false, true
from sqlalchemy.orm import Mapped, mapped_column


class StoreConfig(Base):
    """Singleton row holding business identity, feature flags and referral terms.

    Edited from the admin settings page and read on every order creation.
    """

    __tablename__ = "store_config"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Business identity (tax invoices)
    business_name: Mapped[str] = mapped_column(
        String(255), default="Intru", server_default="Intru"
    )
    business_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    business_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    gstin: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    business_state: Mapped[str] = mapped_column(
        String(100), default="Karnataka", server_default="Karnataka"
    )
    state_code: Mapped[str] = mapped_column(
        String(4), default="29", server_default="29"
    )

    # Charges and shipping
    extra_charges_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    custom_charges: Mapped[list] = mapped_column(
        JSONType, default=list
    )  # [{"label": "Packaging", "amount": 20}]
    free_shipping_enabled: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    default_shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )

    # Referral programme
    is_referral_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    referral_discount_type: Mapped[DiscountType] = mapped_column(
        SAEnum(
            DiscountType,
            values_callable=enum_values,
            name="store_discount_type_enum",
        ),
        default=DiscountType.PERCENTAGE,
        server_default="percentage",
    )
    referral_discount_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("10"), server_default="10"
    )
    referral_credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("100"), server_default="100"
    )
    min_order_for_referral: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )

    require_unboxing_video: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    abandoned_order_timeout_minutes: Mapped[int] = mapped_column(
        Integer, default=15, server_default="15"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<StoreConfig {self.business_name} ({self.business_state})>"


class BlockedPincode(Base):
    """Postal codes where cash on delivery is not offered."""

    __tablename__ = "store_blocked_pincodes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    pincode: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    blocked_by: Mapped[str] = mapped_column(
        String(100), default="admin", server_default="admin"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def __repr__(self):
        return f"<BlockedPincode {self.pincode}>"
