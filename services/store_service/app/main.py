"""FastAPI application for the Store Service."""

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.errors import register_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.store_service.routers import (
    admin_config_router,
    admin_orders_router,
    config_router,
    orders_router,
    referrals_router,
    shipping_router,
    webhooks_router,
)
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="Intru Store Service",
        version="0.1.0",
        description="Storefront order pipeline - checkout, GST, Razorpay payments, COD verification, referrals.",
    )

    add_observability_middleware(app)
    register_exception_handlers(app)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Public store routes (checkout, orders, referrals, config, webhooks)
    app.include_router(orders_router, prefix="/store")
    app.include_router(referrals_router, prefix="/store")
    app.include_router(config_router, prefix="/store")
    app.include_router(shipping_router, prefix="/store")
    app.include_router(webhooks_router, prefix="/store")

    # Admin routes (order management, settings)
    app.include_router(admin_orders_router, prefix="/admin/store")
    app.include_router(admin_config_router, prefix="/admin/store")

    return app


app = create_app()
