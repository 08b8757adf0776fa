"""Store Service models package."""

from services.store_service.models.catalog import Product, ProductVariant
from services.store_service.models.commerce import Order, OrderItem
from services.store_service.models.config import BlockedPincode, StoreConfig
from services.store_service.models.enums import (
    DiscountType,
    PaymentStatus,
    PaymentType,
    ShippingStatus,
    VerificationStatus,
    WalletTransactionType,
)
from services.store_service.models.referral import (
    CustomerWallet,
    ReferralCode,
    WalletTransaction,
)

__all__ = [
    "BlockedPincode",
    "CustomerWallet",
    "DiscountType",
    "Order",
    "OrderItem",
    "PaymentStatus",
    "PaymentType",
    "Product",
    "ProductVariant",
    "ReferralCode",
    "ShippingStatus",
    "StoreConfig",
    "VerificationStatus",
    "WalletTransaction",
    "WalletTransactionType",
]
