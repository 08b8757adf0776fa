"""Scheduled store housekeeping."""

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.config import AsyncSessionLocal
from services.store_service.razorpay_client import RazorpayClient
from services.store_service.services.config_provider import DatabaseConfigProvider
from services.store_service.services.lifecycle import OrderLifecycleController

logger = get_logger(__name__)


async def mark_abandoned_orders() -> int:
    """Flag prepaid orders left unpaid past the configured timeout."""
    async with AsyncSessionLocal() as db:
        controller = OrderLifecycleController(
            db,
            DatabaseConfigProvider(db),
            RazorpayClient,
            get_settings(),
        )
        count = await controller.mark_abandoned_orders()

    logger.info("Abandoned-order sweep finished: %d marked", count)
    return count
