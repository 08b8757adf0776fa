"""Razorpay webhook endpoint."""

from fastapi import APIRouter, Depends, Request
from services.store_service.dependencies import get_lifecycle_controller
from services.store_service.services.lifecycle import OrderLifecycleController

router = APIRouter(tags=["store-webhooks"])


@router.post("/webhooks/razorpay")
async def razorpay_webhook(
    request: Request,
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """
    Razorpay webhook endpoint (no auth; verified by X-Razorpay-Signature).

    The signature covers the raw body, so the body is passed on unparsed.
    """
    raw = await request.body()
    signature = request.headers.get("X-Razorpay-Signature")
    return await controller.process_webhook(raw, signature)
