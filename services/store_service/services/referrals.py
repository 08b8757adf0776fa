"""Referral codes, customer wallets and referrer rewards.

Validation is read-only. Usage is counted by ``redeem_referral_code`` inside
the order-creation transaction, and the referrer is credited later by
``process_referral_reward`` once the order is paid or verified.
"""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import Amount, quantize_rupees, to_decimal
from libs.common.datetime_utils import ensure_aware, utc_now
from libs.common.logging import get_logger
from services.store_service.models import (
    CustomerWallet,
    DiscountType,
    Order,
    ReferralCode,
    WalletTransaction,
    WalletTransactionType,
)
from services.store_service.services.config_provider import StoreConfigSnapshot
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

REFERRAL_CODE_PREFIX = "INTRU"
REFERRAL_CODE_LENGTH = 6
_CODE_ALPHABET = string.ascii_uppercase + string.digits


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ReferralValidation:
    valid: bool
    code: str
    discount_amount: Decimal = Decimal("0")
    owner_email: Optional[str] = None
    owner_name: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def rejected(cls, code: str, reason: str, error: str) -> "ReferralValidation":
        return cls(valid=False, code=code, reason=reason, error=error)


def normalise_code(code: str) -> str:
    return (code or "").strip().upper()


def compute_referral_discount(
    order_amount: Amount, config: StoreConfigSnapshot
) -> Decimal:
    value = to_decimal(config.referral_discount_value)
    if config.referral_discount_type == DiscountType.PERCENTAGE:
        return quantize_rupees(to_decimal(order_amount) * value / 100)
    return quantize_rupees(value)


def check_code_usable(
    referral: Optional[ReferralCode], now: datetime
) -> Optional[tuple[str, str]]:
    """Return ``(reason, message)`` when the code cannot be used, else None."""
    if referral is None or not referral.is_active:
        return "not_found", "Invalid referral code"
    if referral.uses_count >= referral.max_uses:
        return "capacity_exceeded", "This referral code has reached its usage limit"
    expires_at = ensure_aware(referral.expires_at)
    if expires_at is not None and expires_at <= now:
        return "expired", "This referral code has expired"
    return None


async def get_referral_code(db: AsyncSession, code: str) -> Optional[ReferralCode]:
    result = await db.execute(
        select(ReferralCode).where(ReferralCode.code == normalise_code(code))
    )
    return result.scalar_one_or_none()


async def validate_referral_code(
    db: AsyncSession,
    code: str,
    order_amount: Amount,
    config: StoreConfigSnapshot,
    *,
    now: Optional[datetime] = None,
) -> ReferralValidation:
    """Check whether ``code`` can be applied to an order of ``order_amount``.

    Nothing is written; the usage counter only moves on redemption.
    """
    code = normalise_code(code)
    now = now or utc_now()

    if not config.is_referral_enabled:
        return ReferralValidation.rejected(
            code, "disabled", "Referral programme is not active"
        )
    if to_decimal(order_amount) < to_decimal(config.min_order_for_referral):
        return ReferralValidation.rejected(
            code,
            "below_minimum",
            f"Minimum order of ₹{config.min_order_for_referral} required for referral discount",
        )

    referral = await get_referral_code(db, code) if code else None
    problem = check_code_usable(referral, now)
    if problem:
        reason, message = problem
        return ReferralValidation.rejected(code, reason, message)

    return ReferralValidation(
        valid=True,
        code=code,
        discount_amount=compute_referral_discount(order_amount, config),
        owner_email=referral.owner_email,
        owner_name=referral.owner_name,
    )


async def redeem_referral_code(
    db: AsyncSession, code: str, *, now: Optional[datetime] = None
) -> bool:
    """Count one use of ``code`` if it is still usable.

    A single conditional UPDATE, so concurrent redemptions cannot push
    ``uses_count`` past ``max_uses``. Does not commit.
    """
    now = now or utc_now()
    result = await db.execute(
        update(ReferralCode)
        .where(
            ReferralCode.code == normalise_code(code),
            ReferralCode.is_active.is_(True),
            ReferralCode.uses_count < ReferralCode.max_uses,
            or_(ReferralCode.expires_at.is_(None), ReferralCode.expires_at > now),
        )
        .values(uses_count=ReferralCode.uses_count + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


# ---------------------------------------------------------------------------
# Wallets
# ---------------------------------------------------------------------------


def generate_referral_code() -> str:
    suffix = "".join(
        secrets.choice(_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH)
    )
    return f"{REFERRAL_CODE_PREFIX}{suffix}"


async def _unused_referral_code(db: AsyncSession) -> str:
    while True:
        code = generate_referral_code()
        if await get_referral_code(db, code) is None:
            return code


async def get_wallet(db: AsyncSession, email: str) -> Optional[CustomerWallet]:
    result = await db.execute(
        select(CustomerWallet).where(
            CustomerWallet.customer_email == email.strip().lower()
        )
    )
    return result.scalar_one_or_none()


async def get_or_create_wallet(
    db: AsyncSession,
    *,
    email: str,
    name: Optional[str] = None,
) -> CustomerWallet:
    """Return the customer's wallet, creating it and its referral code if needed."""
    email = email.strip().lower()
    existing = await get_wallet(db, email)
    if existing:
        return existing

    code = await _unused_referral_code(db)
    wallet = CustomerWallet(
        customer_email=email,
        customer_name=name,
        balance=Decimal("0"),
        total_earned=Decimal("0"),
        total_spent=Decimal("0"),
        referral_code=code,
        successful_referrals=0,
    )
    db.add(wallet)
    db.add(ReferralCode(code=code, owner_email=email, owner_name=name))
    await db.commit()
    await db.refresh(wallet)

    logger.info(
        "Created wallet for %s with referral code %s",
        email,
        code,
        extra={"extra_fields": {"wallet_id": str(wallet.id)}},
    )
    return wallet


async def credit_wallet(
    db: AsyncSession,
    wallet: CustomerWallet,
    amount: Amount,
    *,
    idempotency_key: str,
    description: str,
    order_id=None,
    referral_code: Optional[str] = None,
) -> bool:
    """Add ``amount`` to the wallet once per ``idempotency_key``. Does not commit.

    Returns False when the key has already been used.
    """
    existing = await db.execute(
        select(WalletTransaction.id).where(
            WalletTransaction.idempotency_key == idempotency_key
        )
    )
    if existing.first() is not None:
        return False

    amount = quantize_rupees(amount)
    db.add(
        WalletTransaction(
            wallet_id=wallet.id,
            transaction_type=WalletTransactionType.CREDIT,
            amount=amount,
            description=description,
            order_id=order_id,
            referral_code=referral_code,
            idempotency_key=idempotency_key,
        )
    )
    wallet.balance = quantize_rupees(wallet.balance + amount)
    wallet.total_earned = quantize_rupees(wallet.total_earned + amount)
    await db.flush()
    return True


async def process_referral_reward(
    db: AsyncSession, order: Order, config: StoreConfigSnapshot
) -> bool:
    """Credit the owner of the code used on ``order``. At most once per order."""
    if not order.referral_code_used or not config.is_referral_enabled:
        return False
    credit = to_decimal(config.referral_credit_amount)
    if credit <= 0:
        return False

    referral = await get_referral_code(db, order.referral_code_used)
    if referral is None:
        logger.warning(
            "Referral code %s on order %s no longer exists",
            order.referral_code_used,
            order.order_number,
        )
        return False

    wallet = await get_or_create_wallet(
        db, email=referral.owner_email, name=referral.owner_name
    )
    credited = await credit_wallet(
        db,
        wallet,
        credit,
        idempotency_key=f"referral-reward-{order.id}",
        description=f"Referral reward for order {order.order_number}",
        order_id=order.id,
        referral_code=referral.code,
    )
    if not credited:
        return False

    wallet.successful_referrals += 1
    await db.commit()

    logger.info(
        "Credited referral reward for order %s to %s",
        order.order_number,
        referral.owner_email,
        extra={"extra_fields": {"amount": str(credit), "order_id": str(order.id)}},
    )
    return True
