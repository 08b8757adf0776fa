"""Unit tests for order status transition tables."""

import pytest
from libs.common.errors import InvalidTransitionError
from services.store_service.models import (
    PaymentStatus,
    ShippingStatus,
    VerificationStatus,
)
from services.store_service.services.order_repository import OrderRepository
from services.store_service.services.transitions import (
    PAYMENT_TRANSITIONS,
    SHIPPING_TRANSITIONS,
    VERIFICATION_TRANSITIONS,
    can_transition,
    check_payment,
    check_shipping,
    check_verification,
)
from tests.factories import OrderFactory


@pytest.mark.unit
@pytest.mark.parametrize(
    "table", [PAYMENT_TRANSITIONS, SHIPPING_TRANSITIONS, VERIFICATION_TRANSITIONS]
)
def test_every_state_can_stay_where_it_is(table):
    for state in table:
        assert can_transition(table, state, state)


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, target, allowed",
    [
        (PaymentStatus.PENDING, PaymentStatus.SUCCESS, True),
        (PaymentStatus.PENDING, PaymentStatus.ABANDONED, True),
        (PaymentStatus.FAILED, PaymentStatus.SUCCESS, True),
        (PaymentStatus.ABANDONED, PaymentStatus.SUCCESS, True),
        (PaymentStatus.SUCCESS, PaymentStatus.REFUNDING, True),
        (PaymentStatus.REFUNDING, PaymentStatus.REFUNDED, True),
        (PaymentStatus.SUCCESS, PaymentStatus.FAILED, False),
        (PaymentStatus.SUCCESS, PaymentStatus.PENDING, False),
        (PaymentStatus.REFUNDED, PaymentStatus.SUCCESS, False),
        (PaymentStatus.PENDING, PaymentStatus.REFUNDED, False),
    ],
)
def test_payment_transitions(current, target, allowed):
    assert can_transition(PAYMENT_TRANSITIONS, current, target) is allowed


@pytest.mark.unit
def test_terminal_states_reject_moves():
    with pytest.raises(InvalidTransitionError):
        check_shipping(ShippingStatus.DELIVERED, ShippingStatus.CANCELLED)
    with pytest.raises(InvalidTransitionError):
        check_verification(VerificationStatus.VERIFIED, VerificationStatus.CANCELLED)
    with pytest.raises(InvalidTransitionError) as exc_info:
        check_payment(PaymentStatus.REFUNDED, PaymentStatus.SUCCESS)

    assert "refunded" in exc_info.value.message
    assert exc_info.value.status_code == 409


@pytest.mark.unit
def test_planned_changes_are_all_or_nothing():
    order = OrderFactory.create(shipping_status=ShippingStatus.DELIVERED)
    repo = OrderRepository(db=None)

    with pytest.raises(InvalidTransitionError):
        repo.planned_changes(
            order,
            payment=PaymentStatus.SUCCESS,
            shipping=ShippingStatus.PROCESSING,
        )

    assert order.payment_status == PaymentStatus.PENDING
    assert order.shipping_status == ShippingStatus.DELIVERED


@pytest.mark.unit
def test_planned_changes_skip_unchanged_columns():
    order = OrderFactory.create(verification_status=VerificationStatus.VERIFIED)
    repo = OrderRepository(db=None)

    changes = repo.planned_changes(
        order,
        payment=PaymentStatus.SUCCESS,
        verification=VerificationStatus.VERIFIED,
    )

    assert changes == {"payment_status": PaymentStatus.SUCCESS}
    assert order.payment_status == PaymentStatus.PENDING
