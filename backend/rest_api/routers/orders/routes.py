"""
Orders router.
Placing orders, moving them between participants and through statuses.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    CreateOrderRequest,
    ErrorResponse,
    OrderOutput,
    TransferOrderRequest,
    UpdateOrderStatusRequest,
)
from rest_api.services.domain import GroupOrderService, OrderService


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderOutput,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_order(
    body: CreateOrderRequest,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Place an order for a participant of an active session."""
    return OrderService(db).create_order(body.participant_id, body.items, notes=body.notes)


@router.get(
    "/{order_id}",
    response_model=OrderOutput,
    responses={404: {"model": ErrorResponse}},
)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Get an order with its items."""
    return OrderService(db).get_order(order_id)


@router.post(
    "/{order_id}/transfer",
    response_model=OrderOutput,
    responses={409: {"model": ErrorResponse}},
)
def transfer_order(
    order_id: int,
    body: TransferOrderRequest,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Hand a pending or confirmed order to another participant of the same session."""
    return GroupOrderService(db).transfer_order(
        order_id,
        body.from_participant_id,
        body.to_participant_id,
    )


@router.patch(
    "/{order_id}/status",
    response_model=OrderOutput,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Move an order to another status."""
    return OrderService(db).update_status(order_id, body.status)
