"""Admin store settings and COD-blocked pincodes."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.models import BlockedPincode, StoreConfig
from services.store_service.schemas import (
    BlockedPincodeCreate,
    BlockedPincodeResponse,
    StoreConfigResponse,
    StoreConfigUpdate,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])
logger = get_logger(__name__)


async def _get_or_create_config(db: AsyncSession) -> StoreConfig:
    result = await db.execute(select(StoreConfig).limit(1))
    config = result.scalar_one_or_none()
    if config is None:
        config = StoreConfig(custom_charges=[])
        db.add(config)
        await db.flush()
    return config


# ============================================================================
# SETTINGS
# ============================================================================


@router.get("/config", response_model=StoreConfigResponse)
async def get_store_config(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    config = await _get_or_create_config(db)
    await db.commit()
    await db.refresh(config)
    return config


@router.put("/config", response_model=StoreConfigResponse)
async def update_store_config(
    payload: StoreConfigUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update store settings. Takes effect on the next order."""
    config = await _get_or_create_config(db)

    changes = payload.model_dump(exclude_unset=True, mode="json")
    typed = payload.model_dump(exclude_unset=True)
    for field, value in typed.items():
        if field == "custom_charges":
            # JSON column: store plain numbers
            value = [
                {"label": c["label"], "amount": float(c["amount"])}
                for c in changes["custom_charges"] or []
            ]
        setattr(config, field, value)

    await db.commit()
    await db.refresh(config)

    logger.info(
        "Store config updated by %s",
        current_user.email or current_user.user_id,
        extra={"extra_fields": {"fields": sorted(changes)}},
    )
    return config


# ============================================================================
# BLOCKED PINCODES
# ============================================================================


@router.get("/blocked-pincodes", response_model=list[BlockedPincodeResponse])
async def list_blocked_pincodes(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(BlockedPincode).order_by(BlockedPincode.pincode))
    return result.scalars().all()


@router.post(
    "/blocked-pincodes",
    response_model=BlockedPincodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def block_pincode(
    payload: BlockedPincodeCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Stop offering cash on delivery for a pincode."""
    existing = await db.execute(
        select(BlockedPincode).where(BlockedPincode.pincode == payload.pincode)
    )
    if existing.scalar_one_or_none():
        raise ValidationError(
            f"Pincode {payload.pincode} is already blocked", code="already_blocked"
        )

    entry = BlockedPincode(
        pincode=payload.pincode,
        reason=payload.reason,
        blocked_by=current_user.email or current_user.user_id,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


@router.delete("/blocked-pincodes/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_pincode(
    entry_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    entry = await db.get(BlockedPincode, entry_id)
    if entry is None:
        raise NotFoundError("Blocked pincode not found")
    await db.delete(entry)
    await db.commit()
