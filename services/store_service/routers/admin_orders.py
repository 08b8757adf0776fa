"""Admin order management: COD verification, shipments, abandoned sweep."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.dependencies import get_lifecycle_controller
from services.store_service.models import (
    PaymentStatus,
    PaymentType,
    ShippingStatus,
    VerificationStatus,
)
from services.store_service.routers._helpers import confirmation_response
from services.store_service.schemas import (
    AbandonedSweepResponse,
    OrderConfirmationResponse,
    OrderResponse,
    ShipmentCreate,
)
from services.store_service.services.lifecycle import OrderLifecycleController
from services.store_service.services.order_repository import OrderRepository
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])
logger = get_logger(__name__)


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(
    payment_status: Optional[PaymentStatus] = None,
    shipping_status: Optional[ShippingStatus] = None,
    verification_status: Optional[VerificationStatus] = None,
    payment_type: Optional[PaymentType] = None,
    needs_reconciliation: Optional[bool] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List orders, newest first."""
    return await OrderRepository(db).list_orders(
        payment_status=payment_status,
        shipping_status=shipping_status,
        verification_status=verification_status,
        payment_type=payment_type,
        needs_reconciliation=needs_reconciliation,
        limit=limit,
        offset=offset,
    )


@router.post("/orders/mark-abandoned", response_model=AbandonedSweepResponse)
async def mark_abandoned_orders(
    current_user: AuthUser = Depends(require_admin),
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """Run the abandoned-order sweep now instead of waiting for the worker."""
    config = await controller.config_provider.get_config()
    marked = await controller.mark_abandoned_orders()
    return AbandonedSweepResponse(
        marked=marked, timeout_minutes=config.abandoned_order_timeout_minutes
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    order = await OrderRepository(db).get_by_id(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


@router.post("/orders/{order_id}/verify-cod", response_model=OrderConfirmationResponse)
async def verify_cod_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """Mark a COD order as confirmed by the customer over WhatsApp."""
    outcome = await controller.verify_cod_order(order_id)
    logger.info(
        "COD order %s verified by %s",
        outcome.order.order_number,
        current_user.email or current_user.user_id,
    )
    return confirmation_response(outcome)


@router.post("/orders/{order_id}/cancel-cod", response_model=OrderResponse)
async def cancel_cod_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """Cancel a COD order the customer never confirmed."""
    return await controller.cancel_cod_order(order_id)


@router.post("/orders/{order_id}/shipment", response_model=OrderResponse)
async def create_shipment(
    order_id: uuid.UUID,
    payload: ShipmentCreate,
    current_user: AuthUser = Depends(require_admin),
    controller: OrderLifecycleController = Depends(get_lifecycle_controller),
):
    """Book the order with Shiprocket and assign a tracking number."""
    dimensions = None
    if payload.length_cm and payload.breadth_cm and payload.height_cm:
        dimensions = {
            "length": payload.length_cm,
            "breadth": payload.breadth_cm,
            "height": payload.height_cm,
        }
    return await controller.create_shipment(
        order_id, weight_kg=payload.weight_kg, dimensions=dimensions
    )
