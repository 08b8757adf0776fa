"""Allowed status transitions for orders.

Setting a status to its current value is always accepted as a no-op so that
replayed webhooks and repeated verifications stay idempotent.
"""

from enum import Enum
from typing import Mapping, TypeVar

from libs.common.errors import InvalidTransitionError
from services.store_service.models import (
    PaymentStatus,
    ShippingStatus,
    VerificationStatus,
)

S = TypeVar("S", bound=Enum)

PAYMENT_TRANSITIONS: Mapping[PaymentStatus, frozenset] = {
    PaymentStatus.PENDING: frozenset(
        {
            PaymentStatus.SUCCESS,
            PaymentStatus.FAILED,
            PaymentStatus.AUTHORIZED,
            PaymentStatus.ABANDONED,
        }
    ),
    # A retried checkout can still succeed after a failure or a timeout
    PaymentStatus.FAILED: frozenset({PaymentStatus.SUCCESS}),
    PaymentStatus.ABANDONED: frozenset({PaymentStatus.SUCCESS}),
    PaymentStatus.AUTHORIZED: frozenset({PaymentStatus.SUCCESS, PaymentStatus.FAILED}),
    PaymentStatus.SUCCESS: frozenset({PaymentStatus.REFUNDING, PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDING: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}

SHIPPING_TRANSITIONS: Mapping[ShippingStatus, frozenset] = {
    ShippingStatus.PENDING: frozenset(
        {
            ShippingStatus.PROCESSING,
            ShippingStatus.READY_TO_SHIP,
            ShippingStatus.CANCELLED,
        }
    ),
    ShippingStatus.PROCESSING: frozenset(
        {
            ShippingStatus.READY_TO_SHIP,
            ShippingStatus.SHIPPED,
            ShippingStatus.CANCELLED,
        }
    ),
    ShippingStatus.READY_TO_SHIP: frozenset(
        {
            ShippingStatus.PROCESSING,
            ShippingStatus.SHIPPED,
            ShippingStatus.CANCELLED,
        }
    ),
    ShippingStatus.SHIPPED: frozenset(
        {ShippingStatus.DELIVERED, ShippingStatus.CANCELLED}
    ),
    ShippingStatus.DELIVERED: frozenset(),
    ShippingStatus.CANCELLED: frozenset(),
}

VERIFICATION_TRANSITIONS: Mapping[VerificationStatus, frozenset] = {
    VerificationStatus.PENDING: frozenset(
        {VerificationStatus.VERIFIED, VerificationStatus.CANCELLED}
    ),
    VerificationStatus.VERIFIED: frozenset(),
    VerificationStatus.CANCELLED: frozenset(),
}


def can_transition(table: Mapping[S, frozenset], current: S, target: S) -> bool:
    return current == target or target in table.get(current, frozenset())


def check_transition(table: Mapping[S, frozenset], current: S, target: S) -> S:
    """Return ``target`` if the move is allowed, else raise InvalidTransitionError."""
    if not can_transition(table, current, target):
        raise InvalidTransitionError(
            f"Cannot move {type(current).__name__} from "
            f"'{current.value}' to '{target.value}'"
        )
    return target


def check_payment(current: PaymentStatus, target: PaymentStatus) -> PaymentStatus:
    return check_transition(PAYMENT_TRANSITIONS, current, target)


def check_shipping(current: ShippingStatus, target: ShippingStatus) -> ShippingStatus:
    return check_transition(SHIPPING_TRANSITIONS, current, target)


def check_verification(
    current: VerificationStatus, target: VerificationStatus
) -> VerificationStatus:
    return check_transition(VERIFICATION_TRANSITIONS, current, target)
