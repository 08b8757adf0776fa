"""Store commerce models: orders and their line-item snapshots."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from services.store_service.models.enums import (
    PaymentStatus,
    PaymentType,
    ShippingStatus,
    VerificationStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Order(Base):
    """Orders.

    Customer details, addresses and line items are snapshots taken at
    creation time and are never rewritten afterwards.
    """

    __tablename__ = "store_orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )

    # Customer snapshot
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    shipping_address: Mapped[dict] = mapped_column(JSONType, nullable=False)
    billing_address: Mapped[dict] = mapped_column(JSONType, nullable=False)

    # Pricing (in INR)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )
    shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )
    custom_charges: Mapped[list] = mapped_column(JSONType, default=list)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax_breakdown: Mapped[dict] = mapped_column(
        JSONType, nullable=False
    )  # {"cgst": .., "sgst": .., "rate": 18} or {"igst": .., "rate": 18}
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    referral_code_used: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )

    # Payment
    payment_type: Mapped[PaymentType] = mapped_column(
        SAEnum(
            PaymentType,
            values_callable=enum_values,
            name="store_payment_type_enum",
        ),
        nullable=False,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            values_callable=enum_values,
            name="store_payment_status_enum",
        ),
        default=PaymentStatus.PENDING,
        server_default="pending",
    )
    razorpay_order_id: Mapped[Optional[str]] = mapped_column(
        String(100), unique=True, nullable=True
    )
    razorpay_payment_id: Mapped[Optional[str]] = mapped_column(
        String(100), index=True, nullable=True
    )
    razorpay_signature: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Fulfillment
    shipping_status: Mapped[ShippingStatus] = mapped_column(
        SAEnum(
            ShippingStatus,
            values_callable=enum_values,
            name="store_shipping_status_enum",
        ),
        default=ShippingStatus.PENDING,
        server_default="pending",
    )
    shiprocket_order_id: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    shiprocket_shipment_id: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    courier_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Verification (COD orders are confirmed out-of-band over WhatsApp)
    verification_status: Mapped[VerificationStatus] = mapped_column(
        SAEnum(
            VerificationStatus,
            values_callable=enum_values,
            name="store_verification_status_enum",
        ),
        default=VerificationStatus.PENDING,
        server_default="pending",
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    requires_unboxing_video: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )

    # Set when a post-payment stock decrement could not be applied
    stock_reconciliation_required: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    stock_reconciliation_notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
    abandoned_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="non_negative_total"),
        Index("ix_store_orders_payment_status_created", "payment_status", "created_at"),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order {self.order_number}>"


class OrderItem(Base):
    """Order line items (snapshot at order time)."""

    __tablename__ = "store_order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("store_orders.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Snapshot at order time (products may change or disappear)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (CheckConstraint("quantity > 0", name="positive_quantity"),)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.title} ({self.size}) qty={self.quantity}>"
