"""Shared response builders for store routers."""

from services.store_service.schemas import (
    InventoryResultResponse,
    OrderConfirmationResponse,
    OrderResponse,
    StockDecrementResponse,
)
from services.store_service.services.lifecycle import ConfirmationOutcome


def confirmation_response(outcome: ConfirmationOutcome) -> OrderConfirmationResponse:
    inventory = outcome.inventory
    return OrderConfirmationResponse(
        order=OrderResponse.model_validate(outcome.order),
        payment_changed=outcome.payment_changed,
        inventory=InventoryResultResponse(
            skipped=inventory.skipped,
            succeeded=inventory.succeeded,
            decrements=[
                StockDecrementResponse.model_validate(d) for d in inventory.decrements
            ],
        ),
    )
