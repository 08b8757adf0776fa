"""Order lifecycle: creation, payment and COD confirmation, gateway webhooks.

Stock is only taken after money is captured (prepaid) or the customer has
confirmed over WhatsApp (COD). A stock failure at that point never undoes the
payment; the order is flagged for manual reconciliation instead.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from libs.common.config import Settings
from libs.common.currency import quantize_rupees, rupees_to_paise
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    AuthenticityError,
    ConfigurationError,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.common.signatures import verify_payment_signature, verify_webhook_signature
from services.store_service.models import (
    Order,
    OrderItem,
    PaymentStatus,
    PaymentType,
    Product,
    ShippingStatus,
    VerificationStatus,
)
from services.store_service.razorpay_client import GatewayFactory
from services.store_service.schemas import OrderCreate
from services.store_service.services.config_provider import (
    ConfigProvider,
    StoreConfigSnapshot,
)
from services.store_service.services.inventory import (
    InventoryResult,
    decrement_order_stock,
)
from services.store_service.services.order_numbers import (
    generate_order_number,
    order_date_stamp,
)
from services.store_service.services.order_repository import OrderRepository
from services.store_service.services.referrals import (
    process_referral_reward,
    redeem_referral_code,
    validate_referral_code,
)
from services.store_service.services.totals import PricedItem, calculate_total
from services.store_service.services.transitions import (
    PAYMENT_TRANSITIONS,
    SHIPPING_TRANSITIONS,
    can_transition,
)
from services.store_service.shiprocket_client import CarrierFactory
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 3
CLAIM_ATTEMPTS = 3


@dataclass
class CreateOrderResult:
    order: Order
    amount_paise: int
    currency: str
    razorpay_order_id: Optional[str] = None


@dataclass
class ConfirmationOutcome:
    """Two-phase result: the payment/verification step and the stock step."""

    order: Order
    payment_changed: bool
    inventory: InventoryResult = field(
        default_factory=lambda: InventoryResult(skipped=True)
    )


WebhookHandler = Callable[[dict], Awaitable[str]]


def _address_snapshot(address) -> dict:
    return address.model_dump(mode="json")


class OrderLifecycleController:
    def __init__(
        self,
        db: AsyncSession,
        config_provider: ConfigProvider,
        gateway_factory: GatewayFactory,
        settings: Settings,
        carrier_factory: Optional[CarrierFactory] = None,
    ):
        self.db = db
        self.orders = OrderRepository(db)
        self.config_provider = config_provider
        self.gateway_factory = gateway_factory
        self.carrier_factory = carrier_factory
        self.settings = settings
        self._webhook_handlers: dict[str, WebhookHandler] = {
            "payment.captured": self._on_payment_captured,
            "payment.failed": self._on_payment_failed,
            "payment.authorized": self._on_payment_authorized,
            "refund.created": self._on_refund_created,
            "refund.processed": self._on_refund_processed,
        }

    # =========================================================================
    # Create
    # =========================================================================

    async def create_order(
        self, request: OrderCreate, *, now: Optional[datetime] = None
    ) -> CreateOrderResult:
        """Validate, price and persist an order; prepaid orders also get a Razorpay order.

        Nothing is written when validation, configuration or the gateway fails.
        """
        now = now or utc_now()
        self._validate_request(request)

        if request.payment_type == PaymentType.PREPAID and not (
            self.settings.razorpay_configured
        ):
            raise ConfigurationError("Payment gateway credentials are not configured")

        config = await self.config_provider.get_config()
        items = await self._snapshot_items(request)
        subtotal = sum((item.line_total for item in items), Decimal("0"))

        referral_code = None
        discount = Decimal("0")
        if request.referral_code and request.referral_code.strip():
            referral_code, discount = await self._apply_referral(
                request, subtotal, config, now
            )

        calc = calculate_total(
            [PricedItem(item.unit_price, item.quantity) for item in items],
            request.shipping_address.state,
            discount,
            None,
            config,
        )
        total = quantize_rupees(calc.total_amount)
        amount_paise = rupees_to_paise(total)

        order_number = await self._new_order_number(now)

        razorpay_order_id = None
        if request.payment_type == PaymentType.PREPAID:
            gateway = self.gateway_factory()
            gateway_order = await gateway.create_order(
                amount_paise,
                self.settings.CURRENCY,
                order_number,
                notes={
                    "order_number": order_number,
                    "customer_email": str(request.customer_email),
                },
            )
            razorpay_order_id = gateway_order.id

        billing = request.billing_address or request.shipping_address
        order = Order(
            id=uuid.uuid4(),
            order_number=order_number,
            customer_email=str(request.customer_email).lower(),
            customer_name=request.customer_name.strip(),
            customer_phone=request.customer_phone.strip(),
            shipping_address=_address_snapshot(request.shipping_address),
            billing_address=_address_snapshot(billing),
            subtotal=quantize_rupees(calc.subtotal),
            discount_amount=quantize_rupees(calc.discount_amount),
            shipping_cost=quantize_rupees(calc.shipping_cost),
            custom_charges=calc.custom_charges_for_storage(),
            tax_amount=quantize_rupees(calc.tax_amount),
            tax_breakdown=calc.tax_breakdown_for_storage(),
            total_amount=total,
            referral_code_used=referral_code,
            payment_type=request.payment_type,
            payment_status=PaymentStatus.PENDING,
            shipping_status=ShippingStatus.PENDING,
            verification_status=VerificationStatus.PENDING,
            razorpay_order_id=razorpay_order_id,
            requires_unboxing_video=config.require_unboxing_video,
            notes=request.notes,
            created_at=now,
            updated_at=now,
            items=items,
        )

        await self._persist_new_order(order, referral_code, now)

        logger.info(
            "Created %s order %s",
            order.payment_type.value,
            order.order_number,
            extra={
                "extra_fields": {
                    "order_id": str(order.id),
                    "total_amount": str(order.total_amount),
                    "razorpay_order_id": razorpay_order_id,
                }
            },
        )
        return CreateOrderResult(
            order=order,
            amount_paise=amount_paise,
            currency=self.settings.CURRENCY,
            razorpay_order_id=razorpay_order_id,
        )

    def _validate_request(self, request: OrderCreate) -> None:
        if not request.customer_name.strip() or not request.customer_phone.strip():
            raise ValidationError("Customer name and phone are required")
        address = request.shipping_address
        if not address.state or not address.pincode:
            raise ValidationError("Shipping state and pincode are required")
        if not request.items:
            raise ValidationError("Order must contain at least one item")
        if request.payment_type not in (PaymentType.PREPAID, PaymentType.COD):
            raise ValidationError("Invalid payment type")

    async def _snapshot_items(self, request: OrderCreate) -> list[OrderItem]:
        """Price each line from the catalog. Client-side prices are never used."""
        product_ids = {item.product_id for item in request.items}
        result = await self.db.execute(
            select(Product).where(Product.id.in_(product_ids))
        )
        products = {product.id: product for product in result.scalars().all()}

        snapshots = []
        for position, item in enumerate(request.items):
            product = products.get(item.product_id)
            if product is None or not product.is_live:
                raise ValidationError(f"Product {item.product_id} is not available")
            variant = next(
                (v for v in product.variants if v.size == item.size.strip()), None
            )
            if variant is None:
                raise ValidationError(
                    f"Size {item.size} is not available for {product.title}"
                )
            if variant.stock < item.quantity:
                raise ValidationError(
                    f"Only {variant.stock} left in size {variant.size} for {product.title}"
                )
            unit_price = quantize_rupees(product.price)
            snapshots.append(
                OrderItem(
                    position=position,
                    product_id=product.id,
                    title=product.title,
                    size=variant.size,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    line_total=quantize_rupees(unit_price * item.quantity),
                    image_url=product.image_url,
                )
            )
        return snapshots

    async def _apply_referral(
        self,
        request: OrderCreate,
        subtotal: Decimal,
        config: StoreConfigSnapshot,
        now: datetime,
    ) -> tuple[str, Decimal]:
        validation = await validate_referral_code(
            self.db, request.referral_code, subtotal, config, now=now
        )
        if not validation.valid:
            raise ValidationError(validation.error, code=f"referral_{validation.reason}")
        if (validation.owner_email or "").lower() == str(request.customer_email).lower():
            raise ValidationError(
                "You cannot use your own referral code", code="referral_self_use"
            )
        return validation.code, validation.discount_amount

    async def _new_order_number(
        self, now: datetime, exclude: frozenset = frozenset()
    ) -> str:
        prefix = self.settings.ORDER_NUMBER_PREFIX
        taken = await self.orders.taken_order_numbers(
            prefix, order_date_stamp(now, self.settings.TIMEZONE)
        )
        taken |= exclude
        return generate_order_number(
            prefix, now=now, tz=self.settings.TIMEZONE, is_taken=taken.__contains__
        )

    async def _persist_new_order(
        self, order: Order, referral_code: Optional[str], now: datetime
    ) -> None:
        """Insert the order and count the referral use in one transaction.

        A concurrent insert of the same order number is retried with a fresh
        number; the Razorpay receipt keeps the first number in that case.
        """
        tried: set[str] = set()
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            if referral_code and not await redeem_referral_code(
                self.db, referral_code, now=now
            ):
                await self.db.rollback()
                raise ValidationError(
                    "This referral code is no longer available",
                    code="referral_capacity_exceeded",
                )

            self.orders.add(order)
            try:
                await self.db.commit()
                return
            except IntegrityError:
                await self.db.rollback()
                if attempt == ORDER_NUMBER_ATTEMPTS:
                    raise
                tried.add(order.order_number)
                logger.warning(
                    "Order number %s already taken, retrying", order.order_number
                )
                order.order_number = await self._new_order_number(
                    now, frozenset(tried)
                )

    # =========================================================================
    # Prepaid confirmation
    # =========================================================================

    async def verify_prepaid_payment(
        self,
        order_id: uuid.UUID,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
    ) -> ConfirmationOutcome:
        """Confirm a checkout-widget payment and take stock for the order."""
        key_secret = self.settings.RAZORPAY_KEY_SECRET
        if not key_secret:
            raise ConfigurationError("Payment gateway credentials are not configured")

        if not verify_payment_signature(
            key_secret, razorpay_order_id, razorpay_payment_id, razorpay_signature
        ):
            logger.warning(
                "Rejected payment confirmation with invalid signature",
                extra={
                    "extra_fields": {
                        "order_id": str(order_id),
                        "razorpay_order_id": razorpay_order_id,
                        "razorpay_payment_id": razorpay_payment_id,
                    }
                },
            )
            raise AuthenticityError("Payment signature verification failed")

        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if order.payment_type != PaymentType.PREPAID:
            raise ValidationError("Order is not a prepaid order")
        if order.razorpay_order_id != razorpay_order_id:
            raise ValidationError(
                "Payment does not belong to this order", code="order_mismatch"
            )

        return await self._confirm_payment(
            order, razorpay_payment_id, razorpay_signature
        )

    async def _confirm_payment(
        self,
        order: Order,
        razorpay_payment_id: str,
        razorpay_signature: Optional[str],
    ) -> ConfirmationOutcome:
        """Claim the move into ``success``; only the claiming caller takes stock."""
        for _ in range(CLAIM_ATTEMPTS):
            if order.payment_status == PaymentStatus.SUCCESS:
                # Already confirmed by the widget callback or an earlier webhook
                if razorpay_signature and not order.razorpay_signature:
                    order.razorpay_signature = razorpay_signature
                    await self.orders.save(order)
                return ConfirmationOutcome(order=order, payment_changed=False)

            now = utc_now()
            values = {
                "razorpay_payment_id": razorpay_payment_id,
                "paid_at": now,
                "verified_at": order.verified_at or now,
            }
            if razorpay_signature:
                values["razorpay_signature"] = razorpay_signature
            if await self.orders.claim_transition(
                order,
                payment=PaymentStatus.SUCCESS,
                shipping=ShippingStatus.READY_TO_SHIP,
                verification=VerificationStatus.VERIFIED,
                values=values,
            ):
                break
        else:
            raise InvalidTransitionError(
                f"Order {order.order_number} kept changing during confirmation"
            )

        logger.info(
            "Payment confirmed for order %s",
            order.order_number,
            extra={"extra_fields": {"razorpay_payment_id": razorpay_payment_id}},
        )
        return await self._after_confirmation(order)

    async def _after_confirmation(self, order: Order) -> ConfirmationOutcome:
        order_id = order.id
        inventory = await decrement_order_stock(self.db, order)
        order = await self.orders.get_by_id(order_id, fresh=True)

        if inventory.failures:
            order.stock_reconciliation_required = True
            order.stock_reconciliation_notes = inventory.summary()
            await self.orders.save(order)
            logger.error(
                "Order %s confirmed but stock could not be decremented",
                order.order_number,
                extra={"extra_fields": {"failures": inventory.summary()}},
            )

        await self._reward_referrer(order)
        return ConfirmationOutcome(order=order, payment_changed=True, inventory=inventory)

    async def _reward_referrer(self, order: Order) -> None:
        if not order.referral_code_used:
            return
        order_id = order.id
        try:
            config = await self.config_provider.get_config()
            await process_referral_reward(self.db, order, config)
        except (StoreError, SQLAlchemyError) as exc:
            await self.db.rollback()
            await self.orders.get_by_id(order_id, fresh=True)
            logger.error(
                "Referral reward failed for order %s: %s", order.order_number, exc
            )

    # =========================================================================
    # COD
    # =========================================================================

    async def verify_cod_order(self, order_id: uuid.UUID) -> ConfirmationOutcome:
        """Mark a COD order confirmed by the customer and take stock for it."""
        order = await self._get_cod_order(order_id)
        for _ in range(CLAIM_ATTEMPTS):
            if order.verification_status == VerificationStatus.VERIFIED:
                return ConfirmationOutcome(order=order, payment_changed=False)
            if await self.orders.claim_transition(
                order,
                shipping=ShippingStatus.READY_TO_SHIP,
                verification=VerificationStatus.VERIFIED,
                values={"verified_at": utc_now()},
            ):
                break
        else:
            raise InvalidTransitionError(
                f"Order {order.order_number} kept changing during verification"
            )

        logger.info("COD order %s verified", order.order_number)
        return await self._after_confirmation(order)

    async def cancel_cod_order(self, order_id: uuid.UUID) -> Order:
        """Cancel a COD order the customer did not confirm. Stock is untouched."""
        order = await self._get_cod_order(order_id)
        for _ in range(CLAIM_ATTEMPTS):
            if order.verification_status == VerificationStatus.CANCELLED:
                return order
            if await self.orders.claim_transition(
                order,
                shipping=ShippingStatus.CANCELLED,
                verification=VerificationStatus.CANCELLED,
            ):
                logger.info("COD order %s cancelled", order.order_number)
                return order
        raise InvalidTransitionError(
            f"Order {order.order_number} kept changing during cancellation"
        )

    async def _get_cod_order(self, order_id: uuid.UUID) -> Order:
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if order.payment_type != PaymentType.COD:
            raise ValidationError("Order is not a cash-on-delivery order")
        return order

    # =========================================================================
    # Webhooks
    # =========================================================================

    async def process_webhook(
        self, raw_body: bytes, signature: Optional[str]
    ) -> dict:
        """Verify and apply a Razorpay webhook delivery.

        Raises AuthenticityError for a bad signature. Everything after that is
        acknowledged; processing failures come back as ``success: false``.
        """
        secret = self.settings.RAZORPAY_WEBHOOK_SECRET
        if secret:
            if not signature or not verify_webhook_signature(
                secret, raw_body, signature
            ):
                logger.warning("Rejected webhook with invalid signature")
                raise AuthenticityError("Invalid webhook signature")
        else:
            logger.warning(
                "RAZORPAY_WEBHOOK_SECRET is not set: webhook signature NOT verified. "
                "Configure the secret before accepting live payments."
            )

        try:
            payload = json.loads(raw_body.decode("utf-8") or "{}")
        except ValueError:
            logger.error("Webhook body is not valid JSON")
            return {
                "success": False,
                "error": "Malformed payload",
                "note": "Acknowledged to prevent retries",
            }

        if not isinstance(payload, dict):
            logger.error("Webhook body is not a JSON object")
            return {
                "success": False,
                "error": "Malformed payload",
                "note": "Acknowledged to prevent retries",
            }

        event = payload.get("event")
        handler = self._webhook_handlers.get(event)
        if handler is None:
            logger.info("Ignoring unhandled webhook event %s", event)
            return {"success": True, "event": event, "handled": False}

        try:
            result = await handler(payload)
        except Exception as exc:
            await self.db.rollback()
            logger.exception(
                "Webhook processing failed for %s",
                event,
                extra={"extra_fields": {"error": str(exc)}},
            )
            return {
                "success": False,
                "event": event,
                "error": "Processing failed",
                "note": "Acknowledged to prevent retries",
            }

        return {"success": True, "event": event, "handled": True, "result": result}

    @staticmethod
    def _entity(payload: dict, kind: str) -> dict:
        return ((payload.get("payload") or {}).get(kind) or {}).get("entity") or {}

    async def _order_for_payment(self, payment: dict) -> Optional[Order]:
        order = None
        if payment.get("order_id"):
            order = await self.orders.get_by_gateway_order_id(payment["order_id"])
        if order is None and payment.get("id"):
            order = await self.orders.get_by_gateway_payment_id(payment["id"])
        if order is None:
            logger.warning(
                "Webhook for unknown order",
                extra={
                    "extra_fields": {
                        "razorpay_order_id": payment.get("order_id"),
                        "razorpay_payment_id": payment.get("id"),
                    }
                },
            )
        return order

    async def _order_for_refund(self, payload: dict) -> Optional[Order]:
        refund = self._entity(payload, "refund")
        payment = self._entity(payload, "payment")
        payment_id = refund.get("payment_id") or payment.get("id")
        order = None
        if payment_id:
            order = await self.orders.get_by_gateway_payment_id(payment_id)
        if order is None and payment.get("order_id"):
            order = await self.orders.get_by_gateway_order_id(payment["order_id"])
        if order is None:
            logger.warning(
                "Refund webhook for unknown payment %s", payment_id
            )
        return order

    async def _set_payment_status(
        self,
        order: Order,
        target: PaymentStatus,
        event: str,
        values: Optional[dict] = None,
    ) -> str:
        for _ in range(CLAIM_ATTEMPTS):
            if order.payment_status == target:
                return "unchanged"
            if not can_transition(PAYMENT_TRANSITIONS, order.payment_status, target):
                logger.warning(
                    "Ignoring %s for order %s in payment state %s",
                    event,
                    order.order_number,
                    order.payment_status.value,
                )
                return "ignored"
            if await self.orders.claim_transition(order, payment=target, values=values):
                return "applied"
        raise InvalidTransitionError(
            f"Order {order.order_number} kept changing while applying {event}"
        )

    async def _on_payment_captured(self, payload: dict) -> str:
        payment = self._entity(payload, "payment")
        order = await self._order_for_payment(payment)
        if order is None:
            return "order_not_found"
        if order.payment_status != PaymentStatus.SUCCESS and not can_transition(
            PAYMENT_TRANSITIONS, order.payment_status, PaymentStatus.SUCCESS
        ):
            logger.warning(
                "Ignoring capture for order %s in payment state %s",
                order.order_number,
                order.payment_status.value,
            )
            return "ignored"
        outcome = await self._confirm_payment(order, payment.get("id"), None)
        return "applied" if outcome.payment_changed else "unchanged"

    async def _on_payment_failed(self, payload: dict) -> str:
        order = await self._order_for_payment(self._entity(payload, "payment"))
        if order is None:
            return "order_not_found"
        return await self._set_payment_status(
            order, PaymentStatus.FAILED, "payment.failed"
        )

    async def _on_payment_authorized(self, payload: dict) -> str:
        payment = self._entity(payload, "payment")
        order = await self._order_for_payment(payment)
        if order is None:
            return "order_not_found"
        values = None
        if payment.get("id") and not order.razorpay_payment_id:
            values = {"razorpay_payment_id": payment["id"]}
        return await self._set_payment_status(
            order, PaymentStatus.AUTHORIZED, "payment.authorized", values
        )

    async def _on_refund_created(self, payload: dict) -> str:
        order = await self._order_for_refund(payload)
        if order is None:
            return "order_not_found"
        return await self._set_payment_status(
            order, PaymentStatus.REFUNDING, "refund.created"
        )

    async def _on_refund_processed(self, payload: dict) -> str:
        order = await self._order_for_refund(payload)
        if order is None:
            return "order_not_found"
        for _ in range(CLAIM_ATTEMPTS):
            if not can_transition(
                PAYMENT_TRANSITIONS, order.payment_status, PaymentStatus.REFUNDED
            ):
                logger.warning(
                    "Ignoring refund.processed for order %s in payment state %s",
                    order.order_number,
                    order.payment_status.value,
                )
                return "ignored"

            shipping = None
            if can_transition(
                SHIPPING_TRANSITIONS, order.shipping_status, ShippingStatus.CANCELLED
            ):
                shipping = ShippingStatus.CANCELLED
            if not self.orders.planned_changes(
                order, payment=PaymentStatus.REFUNDED, shipping=shipping
            ):
                return "unchanged"
            if await self.orders.claim_transition(
                order, payment=PaymentStatus.REFUNDED, shipping=shipping
            ):
                return "applied"
        raise InvalidTransitionError(
            f"Order {order.order_number} kept changing while applying refund.processed"
        )

    # =========================================================================
    # Fulfillment & housekeeping
    # =========================================================================

    async def create_shipment(
        self,
        order_id: uuid.UUID,
        *,
        weight_kg: float,
        dimensions: Optional[dict] = None,
    ) -> Order:
        """Book the order with Shiprocket and store the AWB.

        Carrier failures propagate as UpstreamError and leave the order as is.
        """
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        confirmed = (
            order.payment_status == PaymentStatus.SUCCESS
            if order.payment_type == PaymentType.PREPAID
            else order.verification_status == VerificationStatus.VERIFIED
        )
        if not confirmed:
            raise ValidationError("Order must be paid or verified before shipping")
        if order.shiprocket_shipment_id:
            return order
        if self.carrier_factory is None:
            raise ConfigurationError("Shipping carrier is not configured")
        # Raises before the carrier is called when the order can no longer ship
        needs_move = bool(
            self.orders.planned_changes(order, shipping=ShippingStatus.PROCESSING)
        )

        carrier = self.carrier_factory()
        try:
            shipment = await carrier.create_shipment(
                order, weight_kg=weight_kg, dimensions=dimensions
            )
        except StoreError as exc:
            logger.error(
                "Shipment creation failed for order %s: %s",
                order.order_number,
                exc.message,
            )
            raise

        carrier_ids = {
            "shiprocket_order_id": shipment.shiprocket_order_id,
            "shiprocket_shipment_id": shipment.shipment_id,
            "tracking_number": shipment.awb_code,
            "courier_name": shipment.courier_name,
        }
        if needs_move:
            booked = await self.orders.claim_transition(
                order, shipping=ShippingStatus.PROCESSING, values=carrier_ids
            )
        else:
            for column, value in carrier_ids.items():
                setattr(order, column, value)
            order.updated_at = utc_now()
            await self.orders.save(order)
            booked = True
        if not booked:
            logger.error(
                "Order %s changed while shipment %s was booked; carrier ids not stored",
                order.order_number,
                shipment.shipment_id,
                extra={"extra_fields": {"awb": shipment.awb_code}},
            )
            raise InvalidTransitionError(
                f"Order {order.order_number} changed while the shipment was booked"
            )

        logger.info(
            "Shipment %s created for order %s",
            shipment.shipment_id,
            order.order_number,
            extra={"extra_fields": {"awb": shipment.awb_code}},
        )
        return order

    async def mark_abandoned_orders(self, *, now: Optional[datetime] = None) -> int:
        config = await self.config_provider.get_config()
        count = await self.orders.mark_abandoned(
            config.abandoned_order_timeout_minutes, now=now
        )
        if count:
            logger.info(
                "Marked %d prepaid orders abandoned after %d minutes",
                count,
                config.abandoned_order_timeout_minutes,
            )
        return count
