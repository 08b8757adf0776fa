"""Public store configuration and COD pincode check."""

from fastapi import APIRouter, Depends, Query
from services.store_service.dependencies import get_config_provider
from services.store_service.schemas import (
    PINCODE_PATTERN,
    PincodeCheckResponse,
    PublicStoreConfig,
)
from services.store_service.services.config_provider import ConfigProvider

router = APIRouter(tags=["store-config"])


@router.get("/config", response_model=PublicStoreConfig)
async def get_public_config(
    config_provider: ConfigProvider = Depends(get_config_provider),
):
    """Settings the checkout page needs (charges, shipping, referral terms)."""
    return await config_provider.get_config()


@router.get("/config/check-pincode", response_model=PincodeCheckResponse)
async def check_pincode(
    pincode: str = Query(..., pattern=PINCODE_PATTERN),
    config_provider: ConfigProvider = Depends(get_config_provider),
):
    """Whether cash on delivery can be offered for ``pincode``.

    Checkout calls this before showing the COD option; order creation does
    not repeat the check.
    """
    blocked = await config_provider.is_pincode_blocked(pincode)
    return PincodeCheckResponse(pincode=pincode, cod_available=not blocked)
