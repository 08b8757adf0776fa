"""Referral code validation and customer wallets."""

from fastapi import APIRouter, Depends, Request
from libs.common.rate_limit import api_limit
from libs.db.session import get_async_db
from services.store_service.dependencies import get_config_provider
from services.store_service.schemas import (
    ReferralValidateRequest,
    ReferralValidateResponse,
    WalletRequest,
    WalletResponse,
)
from services.store_service.services.config_provider import ConfigProvider
from services.store_service.services.referrals import (
    get_or_create_wallet,
    validate_referral_code,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store-referrals"])


@router.post("/referrals/validate", response_model=ReferralValidateResponse)
@api_limit
async def validate_referral(
    request: Request,
    payload: ReferralValidateRequest,
    config_provider: ConfigProvider = Depends(get_config_provider),
    db: AsyncSession = Depends(get_async_db),
):
    """Check a referral code against a cart total. Does not use up the code."""
    config = await config_provider.get_config()
    result = await validate_referral_code(db, payload.code, payload.order_amount, config)
    return ReferralValidateResponse(
        valid=result.valid,
        code=result.code,
        discount_amount=result.discount_amount if result.valid else None,
        owner_name=result.owner_name,
        error=result.error,
        reason=result.reason,
    )


@router.post("/referrals/wallet", response_model=WalletResponse)
@api_limit
async def get_wallet(
    request: Request,
    payload: WalletRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Return the customer's wallet and referral code, creating them on first use."""
    return await get_or_create_wallet(db, email=payload.email, name=payload.name)
