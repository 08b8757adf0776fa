"""Store service routers package."""

from services.store_service.routers.admin_config import router as admin_config_router
from services.store_service.routers.admin_orders import router as admin_orders_router
from services.store_service.routers.config import router as config_router
from services.store_service.routers.orders import router as orders_router
from services.store_service.routers.referrals import router as referrals_router
from services.store_service.routers.shipping import router as shipping_router
from services.store_service.routers.webhooks import router as webhooks_router

__all__ = [
    "admin_config_router",
    "admin_orders_router",
    "config_router",
    "orders_router",
    "referrals_router",
    "shipping_router",
    "webhooks_router",
]
