"""Unit tests for referral validation, redemption and referrer rewards.

Tests call the referral functions directly with the db_session fixture.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from libs.common.datetime_utils import utc_now
from services.store_service.models import DiscountType, WalletTransaction
from services.store_service.services.config_provider import StoreConfigSnapshot
from services.store_service.services.referrals import (
    get_or_create_wallet,
    get_wallet,
    process_referral_reward,
    redeem_referral_code,
    validate_referral_code,
)
from sqlalchemy import func, select
from tests.factories import OrderFactory, ReferralCodeFactory

ENABLED = StoreConfigSnapshot(is_referral_enabled=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _make_code(db, **overrides):
    referral = ReferralCodeFactory.create(**overrides)
    db.add(referral)
    await db.commit()
    return referral


# ---------------------------------------------------------------------------
# validate_referral_code
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_valid_percentage_code(db_session):
    referral = await _make_code(db_session, code="INTRUABC123")

    result = await validate_referral_code(
        db_session, "intruabc123", Decimal("1000"), ENABLED
    )

    assert result.valid
    assert result.code == "INTRUABC123"
    assert result.discount_amount == Decimal("100.00")
    assert result.owner_email == referral.owner_email


@pytest.mark.asyncio
@pytest.mark.unit
async def test_valid_fixed_code(db_session):
    await _make_code(db_session, code="INTRUFIX001")
    config = StoreConfigSnapshot(
        is_referral_enabled=True,
        referral_discount_type=DiscountType.FIXED,
        referral_discount_value=Decimal("150"),
    )

    result = await validate_referral_code(
        db_session, "INTRUFIX001", Decimal("1000"), config
    )

    assert result.discount_amount == Decimal("150.00")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_programme_disabled(db_session):
    await _make_code(db_session, code="INTRUOFF001")

    result = await validate_referral_code(
        db_session, "INTRUOFF001", Decimal("1000"), StoreConfigSnapshot()
    )

    assert not result.valid
    assert result.reason == "disabled"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_below_minimum_order(db_session):
    await _make_code(db_session, code="INTRUMIN001")
    config = StoreConfigSnapshot(
        is_referral_enabled=True, min_order_for_referral=Decimal("1500")
    )

    result = await validate_referral_code(
        db_session, "INTRUMIN001", Decimal("1000"), config
    )

    assert not result.valid
    assert result.reason == "below_minimum"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_or_inactive_code(db_session):
    await _make_code(db_session, code="INTRUOLD001", is_active=False)

    unknown = await validate_referral_code(
        db_session, "NOPE", Decimal("1000"), ENABLED
    )
    inactive = await validate_referral_code(
        db_session, "INTRUOLD001", Decimal("1000"), ENABLED
    )

    assert unknown.reason == "not_found"
    assert inactive.reason == "not_found"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_code_at_capacity_is_rejected(db_session):
    await _make_code(db_session, code="INTRUFULL01", uses_count=50, max_uses=50)

    result = await validate_referral_code(
        db_session, "INTRUFULL01", Decimal("1000"), ENABLED
    )

    assert not result.valid
    assert result.reason == "capacity_exceeded"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expired_code_is_rejected_even_when_unused(db_session):
    await _make_code(
        db_session,
        code="INTRUEXP001",
        uses_count=0,
        expires_at=utc_now() - timedelta(days=1),
    )

    result = await validate_referral_code(
        db_session, "INTRUEXP001", Decimal("1000"), ENABLED
    )

    assert not result.valid
    assert result.reason == "expired"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_validation_does_not_count_a_use(db_session):
    referral = await _make_code(db_session, code="INTRUREAD01")

    for _ in range(3):
        await validate_referral_code(db_session, "INTRUREAD01", Decimal("1000"), ENABLED)

    await db_session.refresh(referral)
    assert referral.uses_count == 0


# ---------------------------------------------------------------------------
# redeem_referral_code
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_stops_at_max_uses(db_session):
    referral = await _make_code(db_session, code="INTRUTWO001", max_uses=2)

    outcomes = []
    for _ in range(3):
        outcomes.append(await redeem_referral_code(db_session, "INTRUTWO001"))
        await db_session.commit()

    await db_session.refresh(referral)
    assert outcomes == [True, True, False]
    assert referral.uses_count == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_redeem_refuses_expired_code(db_session):
    await _make_code(
        db_session, code="INTRUEXP002", expires_at=utc_now() - timedelta(minutes=1)
    )

    assert await redeem_referral_code(db_session, "INTRUEXP002") is False


# ---------------------------------------------------------------------------
# Wallets and rewards
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_wallet_is_created_once_with_a_referral_code(db_session):
    wallet = await get_or_create_wallet(db_session, email="Ravi@Example.com", name="Ravi")
    again = await get_or_create_wallet(db_session, email="ravi@example.com")

    assert wallet.id == again.id
    assert wallet.customer_email == "ravi@example.com"
    assert wallet.referral_code.startswith("INTRU")
    assert len(wallet.referral_code) == 11
    assert wallet.balance == 0

    validation = await validate_referral_code(
        db_session, wallet.referral_code, Decimal("1000"), ENABLED
    )
    assert validation.valid
    assert validation.owner_email == "ravi@example.com"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_referral_reward_is_credited_once_per_order(db_session):
    referral = await _make_code(
        db_session, code="INTRUREW001", owner_email="owner@example.com"
    )
    order = OrderFactory.create(referral_code_used=referral.code)

    first = await process_referral_reward(db_session, order, ENABLED)
    second = await process_referral_reward(db_session, order, ENABLED)

    wallet = await get_wallet(db_session, "owner@example.com")
    count = await db_session.execute(
        select(func.count(WalletTransaction.id)).where(
            WalletTransaction.wallet_id == wallet.id
        )
    )

    assert first is True
    assert second is False
    assert wallet.balance == Decimal("100.00")
    assert wallet.total_earned == Decimal("100.00")
    assert wallet.successful_referrals == 1
    assert count.scalar_one() == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_no_reward_when_programme_disabled(db_session):
    referral = await _make_code(db_session, code="INTRUREW002")
    order = OrderFactory.create(referral_code_used=referral.code)

    assert await process_referral_reward(db_session, order, StoreConfigSnapshot()) is False
    assert await get_wallet(db_session, referral.owner_email) is None
