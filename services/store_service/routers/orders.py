"""Store orders router: checkout, payment confirmation and order lookup."""

from fastapi import APIRouter, Depends, Query, Request, status
from libs.common.config import get_settings
from libs.common.errors import NotFoundError
from libs.common.rate_limit import api_limit, checkout_limit
from libs.db.session import get_async_db
from services.store_service.dependencies import get_lifecycle_controller
from services.store_service.models import PaymentType
from services.store_service.routers._helpers import confirmation_response
from services.store_service.schemas import (
    CODVerificationLinkResponse,
    OrderConfirmationResponse,
    OrderCreate,
    OrderCreateResponse,
    OrderResponse,
    VerifyPaymentRequest,
)
from services.store_service.services.lifecycle import OrderLifecycleController
from services.store_service.services.notifications import (
    cod_verification_link,
    cod_verification_message,
)
from services.store_service.services.order_repository import OrderRepository
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "/orders",
    response_model=OrderCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
@checkout_limit
async def create_order(
    request: Request,
    payload: OrderCreate,
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """Create an order. Prepaid orders come back with a Razorpay order to pay against."""
    settings = get_settings()
    result = await controller.create_order(payload)
    order = result.order

    cod_url = None
    if order.payment_type == PaymentType.COD:
        cod_url = cod_verification_link(settings.WHATSAPP_NUMBER, order)

    return OrderCreateResponse(
        order_id=order.id,
        order_number=order.order_number,
        payment_type=order.payment_type,
        total_amount=order.total_amount,
        amount_paise=result.amount_paise,
        currency=result.currency,
        razorpay_order_id=result.razorpay_order_id,
        razorpay_key_id=settings.RAZORPAY_KEY_ID if result.razorpay_order_id else None,
        cod_verification_url=cod_url,
    )


@router.post("/orders/verify-payment", response_model=OrderConfirmationResponse)
@checkout_limit
async def verify_payment(
    request: Request,
    payload: VerifyPaymentRequest,
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """Confirm a payment returned by the checkout widget."""
    outcome = await controller.verify_prepaid_payment(
        payload.order_id,
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    )
    return confirmation_response(outcome)


# ============================================================================
# LOOKUP
# ============================================================================


@router.get("/orders/{order_number}", response_model=OrderResponse)
@api_limit
async def get_order(
    request: Request,
    order_number: str,
    email: str = Query(..., min_length=3),
    db: AsyncSession = Depends(get_async_db),
):
    """Fetch an order for the order-success page. The email must match."""
    order = await OrderRepository(db).get_by_number(order_number, email=email)
    if order is None:
        raise NotFoundError("Order not found")
    return order


@router.get(
    "/orders/{order_number}/cod-verification",
    response_model=CODVerificationLinkResponse,
)
@api_limit
async def get_cod_verification_link(
    request: Request,
    order_number: str,
    email: str = Query(..., min_length=3),
    db: AsyncSession = Depends(get_async_db),
):
    """WhatsApp link the customer uses to confirm a COD order."""
    order = await OrderRepository(db).get_by_number(order_number, email=email)
    if order is None or order.payment_type != PaymentType.COD:
        raise NotFoundError("COD order not found")

    number = get_settings().WHATSAPP_NUMBER
    return CODVerificationLinkResponse(
        order_number=order.order_number,
        message=cod_verification_message(order),
        whatsapp_url=cod_verification_link(number, order),
    )
