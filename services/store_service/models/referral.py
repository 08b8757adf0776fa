"""Referral models: codes, customer wallets and wallet ledger entries."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import WalletTransactionType, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, Numeric, String, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column, relationship


class ReferralCode(Base):
    """A shareable code. Deactivated, never deleted."""

    __tablename__ = "store_referral_codes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    owner_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    uses_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    max_uses: Mapped[int] = mapped_column(Integer, default=50, server_default="50")
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (CheckConstraint("uses_count >= 0", name="non_negative_uses"),)

    def __repr__(self):
        return f"<ReferralCode {self.code} {self.uses_count}/{self.max_uses}>"


class CustomerWallet(Base):
    """Referral credit wallet, one per customer email."""

    __tablename__ = "store_customer_wallets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )
    total_earned: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )
    total_spent: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), server_default="0"
    )

    referral_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    successful_referrals: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    transactions = relationship(
        "WalletTransaction",
        back_populates="wallet",
        cascade="all, delete-orphan",
        order_by="WalletTransaction.created_at",
    )

    def __repr__(self):
        return f"<CustomerWallet {self.customer_email} balance={self.balance}>"


class WalletTransaction(Base):
    """Wallet ledger entry. ``idempotency_key`` prevents double crediting."""

    __tablename__ = "store_wallet_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    wallet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("store_customer_wallets.id", ondelete="CASCADE"),
        nullable=False,
    )
    transaction_type: Mapped[WalletTransactionType] = mapped_column(
        SAEnum(
            WalletTransactionType,
            values_callable=enum_values,
            name="store_wallet_transaction_type_enum",
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    referral_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    idempotency_key: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    wallet = relationship("CustomerWallet", back_populates="transactions")

    def __repr__(self):
        return f"<WalletTransaction {self.transaction_type.value} {self.amount}>"
