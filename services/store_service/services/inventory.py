"""Stock decrement after a confirmed payment or COD verification."""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.models import Order, ProductVariant
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class StockDecrement:
    product_id: uuid.UUID
    size: str
    quantity: int
    applied: bool
    error: Optional[str] = None


@dataclass
class InventoryResult:
    """Per-item outcome of the stock step. ``skipped`` means nothing was attempted."""

    decrements: list[StockDecrement] = field(default_factory=list)
    skipped: bool = False

    @property
    def failures(self) -> list[StockDecrement]:
        return [d for d in self.decrements if not d.applied]

    @property
    def succeeded(self) -> bool:
        return not self.skipped and not self.failures

    def summary(self) -> str:
        return "; ".join(
            f"{d.product_id} size {d.size} x{d.quantity}: {d.error}"
            for d in self.failures
        )


async def decrement_variant_stock(
    db: AsyncSession, product_id: uuid.UUID, size: str, quantity: int
) -> bool:
    """Take ``quantity`` off a variant only if that much stock is left.

    One conditional UPDATE; of two concurrent callers racing for the last
    unit exactly one sees a matched row. Does not commit.
    """
    result = await db.execute(
        update(ProductVariant)
        .where(
            ProductVariant.product_id == product_id,
            ProductVariant.size == size,
            ProductVariant.stock >= quantity,
        )
        .values(stock=ProductVariant.stock - quantity, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def decrement_order_stock(db: AsyncSession, order: Order) -> InventoryResult:
    """Decrement stock for every line of ``order``, committing each line on its own."""
    outcome = InventoryResult()
    order_number = order.order_number
    # Read before the loop: a rollback expires every loaded instance
    lines = [(item.product_id, item.size, item.quantity) for item in order.items]

    for product_id, size, quantity in lines:
        try:
            applied = await decrement_variant_stock(db, product_id, size, quantity)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "Stock decrement failed for order %s: %s",
                order_number,
                exc,
                extra={"extra_fields": {"product_id": str(product_id)}},
            )
            outcome.decrements.append(
                StockDecrement(product_id, size, quantity, False, "database error")
            )
            continue

        if not applied:
            logger.warning(
                "Insufficient stock for %s size %s on order %s",
                product_id,
                size,
                order_number,
            )
        outcome.decrements.append(
            StockDecrement(
                product_id,
                size,
                quantity,
                applied,
                None if applied else "insufficient stock",
            )
        )

    return outcome
