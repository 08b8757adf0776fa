"""Persistence of orders and their status changes."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import minutes_before, utc_now
from services.store_service.models import (
    Order,
    PaymentStatus,
    PaymentType,
    ShippingStatus,
    VerificationStatus,
)
from services.store_service.services.order_numbers import order_number_pattern
from services.store_service.services.transitions import (
    check_payment,
    check_shipping,
    check_verification,
)
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession


class OrderRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # -- lookups ------------------------------------------------------------

    async def get_by_id(
        self, order_id: uuid.UUID, *, fresh: bool = False
    ) -> Optional[Order]:
        query = select(Order).where(Order.id == order_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_number(
        self, order_number: str, *, email: Optional[str] = None
    ) -> Optional[Order]:
        query = select(Order).where(Order.order_number == order_number.strip().upper())
        if email is not None:
            query = query.where(
                func.lower(Order.customer_email) == email.strip().lower()
            )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_gateway_order_id(self, razorpay_order_id: str) -> Optional[Order]:
        result = await self.db.execute(
            select(Order).where(Order.razorpay_order_id == razorpay_order_id)
        )
        return result.scalar_one_or_none()

    async def get_by_gateway_payment_id(
        self, razorpay_payment_id: str
    ) -> Optional[Order]:
        result = await self.db.execute(
            select(Order).where(Order.razorpay_payment_id == razorpay_payment_id)
        )
        return result.scalars().first()

    async def list_orders(
        self,
        *,
        payment_status: Optional[PaymentStatus] = None,
        shipping_status: Optional[ShippingStatus] = None,
        verification_status: Optional[VerificationStatus] = None,
        payment_type: Optional[PaymentType] = None,
        needs_reconciliation: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        query = select(Order)
        if payment_status:
            query = query.where(Order.payment_status == payment_status)
        if shipping_status:
            query = query.where(Order.shipping_status == shipping_status)
        if verification_status:
            query = query.where(Order.verification_status == verification_status)
        if payment_type:
            query = query.where(Order.payment_type == payment_type)
        if needs_reconciliation is not None:
            query = query.where(
                Order.stock_reconciliation_required.is_(needs_reconciliation)
            )
        query = query.order_by(Order.created_at.desc()).offset(offset).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def taken_order_numbers(self, prefix: str, date_stamp: str) -> set[str]:
        result = await self.db.execute(
            select(Order.order_number).where(
                Order.order_number.like(order_number_pattern(prefix, date_stamp))
            )
        )
        return set(result.scalars().all())

    # -- writes -------------------------------------------------------------

    def add(self, order: Order) -> None:
        self.db.add(order)

    def planned_changes(
        self,
        order: Order,
        *,
        payment: Optional[PaymentStatus] = None,
        shipping: Optional[ShippingStatus] = None,
        verification: Optional[VerificationStatus] = None,
    ) -> dict:
        """Status columns that would change, keyed by column name.

        Raises InvalidTransitionError when any requested move is not allowed,
        so either all of the changes apply or none do. Does not touch ``order``.
        """
        if payment is not None:
            check_payment(order.payment_status, payment)
        if shipping is not None:
            check_shipping(order.shipping_status, shipping)
        if verification is not None:
            check_verification(order.verification_status, verification)

        changes = {}
        if payment is not None and order.payment_status != payment:
            changes["payment_status"] = payment
        if shipping is not None and order.shipping_status != shipping:
            changes["shipping_status"] = shipping
        if verification is not None and order.verification_status != verification:
            changes["verification_status"] = verification
        return changes

    async def claim_transition(
        self,
        order: Order,
        *,
        payment: Optional[PaymentStatus] = None,
        shipping: Optional[ShippingStatus] = None,
        verification: Optional[VerificationStatus] = None,
        values: Optional[dict] = None,
    ) -> bool:
        """Move ``order`` out of the statuses it was read with, and commit.

        One conditional UPDATE: it only matches while every status being
        changed still holds the value seen on ``order``, which is reloaded
        afterwards. Returns False when nothing needed changing or another
        writer moved the row first.
        """
        changes = self.planned_changes(
            order, payment=payment, shipping=shipping, verification=verification
        )
        if not changes:
            return False

        conditions = [Order.id == order.id]
        for column in changes:
            conditions.append(getattr(Order, column) == getattr(order, column))

        result = await self.db.execute(
            update(Order)
            .where(*conditions)
            .values(**changes, **(values or {}), updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        await self.get_by_id(order.id, fresh=True)
        return result.rowcount == 1

    async def save(self, order: Order) -> Order:
        await self.db.commit()
        await self.db.refresh(order)
        return order

    async def mark_abandoned(
        self, timeout_minutes: int, *, now: Optional[datetime] = None
    ) -> int:
        """Flag prepaid orders still pending after ``timeout_minutes``. Returns the count."""
        now = now or utc_now()
        cutoff = minutes_before(timeout_minutes, now)
        result = await self.db.execute(
            update(Order)
            .where(
                Order.payment_type == PaymentType.PREPAID,
                Order.payment_status == PaymentStatus.PENDING,
                Order.created_at < cutoff,
            )
            .values(
                payment_status=PaymentStatus.ABANDONED,
                abandoned_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount or 0
