"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from services.store_service.models import (
    DiscountType,
    PaymentStatus,
    PaymentType,
    ShippingStatus,
    VerificationStatus,
)
from services.store_service.services.config_provider import CustomCharge

PINCODE_PATTERN = r"^[1-9][0-9]{5}$"

# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class Address(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=10, max_length=15)
    email: Optional[EmailStr] = None
    line1: str = Field(..., min_length=1, max_length=255)
    line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    country: str = "India"

    @field_validator("name", "line1", "city", "state", "pincode")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()


class OrderItemCreate(BaseModel):
    product_id: uuid.UUID
    size: str = Field(..., min_length=1, max_length=20)
    quantity: int = Field(..., ge=1, le=20)


class OrderCreate(BaseModel):
    customer_email: EmailStr
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: str = Field(..., min_length=10, max_length=15)
    shipping_address: Address
    billing_address: Optional[Address] = None  # Defaults to shipping address
    items: list[OrderItemCreate] = []
    payment_type: PaymentType
    referral_code: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderCreateResponse(BaseModel):
    success: bool = True
    order_id: uuid.UUID
    order_number: str
    payment_type: PaymentType
    total_amount: Decimal
    amount_paise: int
    currency: str
    razorpay_order_id: Optional[str] = None
    razorpay_key_id: Optional[str] = None
    cod_verification_url: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    order_id: uuid.UUID
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: uuid.UUID
    title: str
    size: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    image_url: Optional[str] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    customer_email: str
    customer_name: str
    customer_phone: str
    shipping_address: dict[str, Any]
    billing_address: dict[str, Any]
    items: list[OrderItemResponse] = []

    subtotal: Decimal
    discount_amount: Decimal
    shipping_cost: Decimal
    custom_charges: list[dict[str, Any]] = []
    tax_amount: Decimal
    tax_breakdown: dict[str, Any]
    total_amount: Decimal
    referral_code_used: Optional[str] = None

    payment_type: PaymentType
    payment_status: PaymentStatus
    shipping_status: ShippingStatus
    verification_status: VerificationStatus
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None

    shiprocket_order_id: Optional[str] = None
    shiprocket_shipment_id: Optional[str] = None
    courier_name: Optional[str] = None
    tracking_number: Optional[str] = None

    requires_unboxing_video: bool = False
    stock_reconciliation_required: bool = False
    stock_reconciliation_notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime
    paid_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    abandoned_at: Optional[datetime] = None


class StockDecrementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: uuid.UUID
    size: str
    quantity: int
    applied: bool
    error: Optional[str] = None


class InventoryResultResponse(BaseModel):
    skipped: bool
    succeeded: bool
    decrements: list[StockDecrementResponse] = []


class OrderConfirmationResponse(BaseModel):
    """Result of a payment or COD confirmation: order state plus stock outcome."""

    success: bool = True
    order: OrderResponse
    payment_changed: bool
    inventory: InventoryResultResponse


class CODVerificationLinkResponse(BaseModel):
    order_number: str
    message: str
    whatsapp_url: str


class ShipmentCreate(BaseModel):
    weight_kg: float = Field(0.5, gt=0, le=30)
    length_cm: Optional[int] = Field(None, gt=0)
    breadth_cm: Optional[int] = Field(None, gt=0)
    height_cm: Optional[int] = Field(None, gt=0)


class AbandonedSweepResponse(BaseModel):
    marked: int
    timeout_minutes: int


# ============================================================================
# REFERRAL SCHEMAS
# ============================================================================


class ReferralValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    order_amount: Decimal = Field(..., ge=0)


class ReferralValidateResponse(BaseModel):
    valid: bool
    code: str
    discount_amount: Optional[Decimal] = None
    owner_name: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None


class WalletRequest(BaseModel):
    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)


class WalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_email: str
    customer_name: Optional[str] = None
    balance: Decimal
    total_earned: Decimal
    total_spent: Decimal
    referral_code: str
    successful_referrals: int


# ============================================================================
# CONFIG SCHEMAS
# ============================================================================


class PublicStoreConfig(BaseModel):
    """Checkout-facing subset of the store configuration."""

    model_config = ConfigDict(from_attributes=True)

    business_name: str
    business_state: str
    extra_charges_enabled: bool
    custom_charges: list[CustomCharge] = []
    free_shipping_enabled: bool
    default_shipping_cost: Decimal
    is_referral_enabled: bool
    referral_discount_type: DiscountType
    referral_discount_value: Decimal
    min_order_for_referral: Decimal
    require_unboxing_video: bool


class StoreConfigResponse(PublicStoreConfig):
    business_email: Optional[str] = None
    business_phone: Optional[str] = None
    gstin: Optional[str] = None
    state_code: str
    referral_credit_amount: Decimal
    abandoned_order_timeout_minutes: int


class StoreConfigUpdate(BaseModel):
    business_name: Optional[str] = Field(None, max_length=255)
    business_email: Optional[EmailStr] = None
    business_phone: Optional[str] = Field(None, max_length=20)
    gstin: Optional[str] = Field(None, max_length=20)
    business_state: Optional[str] = Field(None, min_length=1, max_length=100)
    state_code: Optional[str] = Field(None, max_length=4)
    extra_charges_enabled: Optional[bool] = None
    custom_charges: Optional[list[CustomCharge]] = None
    free_shipping_enabled: Optional[bool] = None
    default_shipping_cost: Optional[Decimal] = Field(None, ge=0)
    is_referral_enabled: Optional[bool] = None
    referral_discount_type: Optional[DiscountType] = None
    referral_discount_value: Optional[Decimal] = Field(None, ge=0)
    referral_credit_amount: Optional[Decimal] = Field(None, ge=0)
    min_order_for_referral: Optional[Decimal] = Field(None, ge=0)
    require_unboxing_video: Optional[bool] = None
    abandoned_order_timeout_minutes: Optional[int] = Field(None, ge=1, le=1440)


class PincodeCheckResponse(BaseModel):
    pincode: str
    cod_available: bool


class BlockedPincodeCreate(BaseModel):
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    reason: Optional[str] = Field(None, max_length=255)


class BlockedPincodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    pincode: str
    reason: Optional[str] = None
    blocked_by: str
    created_at: datetime


# ============================================================================
# SHIPPING SCHEMAS
# ============================================================================


class ShippingRateRequest(BaseModel):
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    weight_kg: float = Field(0.5, gt=0, le=30)
    cod: bool = False


class CourierRateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    courier_company_id: int
    courier_name: str
    rate: Decimal
    estimated_delivery_days: Optional[str] = None
    cod_available: bool
