"""Courier rate lookup."""

from fastapi import APIRouter, Depends, Request
from libs.common.rate_limit import api_limit
from services.store_service.dependencies import get_carrier_factory
from services.store_service.schemas import CourierRateResponse, ShippingRateRequest
from services.store_service.shiprocket_client import CarrierFactory

router = APIRouter(tags=["store-shipping"])


@router.post("/shipping/rates", response_model=list[CourierRateResponse])
@api_limit
async def get_shipping_rates(
    request: Request,
    payload: ShippingRateRequest,
    carrier_factory: CarrierFactory = Depends(get_carrier_factory),
):
    """Couriers and rates for a delivery pincode, passed through from Shiprocket."""
    carrier = carrier_factory()
    return await carrier.get_rates(
        payload.pincode, weight_kg=payload.weight_kg, cod=payload.cod
    )
