"""FastAPI dependencies that assemble the order lifecycle controller per request."""

from fastapi import Depends
from libs.common.config import get_settings
from libs.db.session import get_async_db
from services.store_service.razorpay_client import GatewayFactory, RazorpayClient
from services.store_service.services.config_provider import (
    ConfigProvider,
    DatabaseConfigProvider,
)
from services.store_service.services.lifecycle import OrderLifecycleController
from services.store_service.shiprocket_client import CarrierFactory, ShiprocketClient
from sqlalchemy.ext.asyncio import AsyncSession


def get_gateway_factory() -> GatewayFactory:
    return RazorpayClient


def get_carrier_factory() -> CarrierFactory:
    return ShiprocketClient


async def get_config_provider(
    db: AsyncSession = Depends(get_async_db),
) -> ConfigProvider:
    return DatabaseConfigProvider(db)


async def get_lifecycle_controller(
    db: AsyncSession = Depends(get_async_db),
    config_provider: ConfigProvider = Depends(get_config_provider),
    gateway_factory: GatewayFactory = Depends(get_gateway_factory),
    carrier_factory: CarrierFactory = Depends(get_carrier_factory),
) -> OrderLifecycleController:
    return OrderLifecycleController(
        db,
        config_provider,
        gateway_factory,
        get_settings(),
        carrier_factory=carrier_factory,
    )
