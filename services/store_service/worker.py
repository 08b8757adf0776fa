"""ARQ worker for scheduled store jobs."""

from arq import cron
from libs.common.arq_config import get_redis_settings
from libs.common.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def startup(ctx: dict):
    configure_logging()


async def task_mark_abandoned_orders(ctx: dict):
    from services.store_service.tasks import mark_abandoned_orders

    logger.info("Running: mark_abandoned_orders")
    await mark_abandoned_orders()


class WorkerSettings:
    redis_settings = get_redis_settings()

    on_startup = startup

    functions = [task_mark_abandoned_orders]

    cron_jobs = [
        cron(
            task_mark_abandoned_orders,
            minute={0, 5, 10, 15, 20, 25, 30, 35, 40, 45, 50, 55},
            run_at_startup=True,
        ),
    ]
