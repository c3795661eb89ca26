"""
Order Domain Service.

The minimum order lifecycle the group-ordering flow depends on: placing an
order for a participant, reading orders, and moving them through statuses.
Menu catalog, kitchen and payment flows live elsewhere.

Also defines OrderLookup, the narrow read interface the group coordinator
consumes, so it can be backed by another component.
"""

from collections.abc import Sequence
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

from sqlalchemy.orm import Session

from shared.config.constants import Limits, OrderStatus
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import transaction
from shared.utils.exceptions import (
    ConflictError,
    OrderNotFoundError,
    ParticipantNotFoundError,
    ValidationError,
)
from shared.utils.schemas import OrderItemInput, OrderItemOutput, OrderOutput
from rest_api.models import Order, OrderItem
from rest_api.repositories import OrderRepository, ParticipantRepository, TableSessionRepository

logger = get_logger(__name__)

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round to cents."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class OrderLookup(Protocol):
    """Order reads used by the group-ordering coordinator."""

    def get_orders_by_session(self, session_id: int) -> Sequence[Order]: ...

    def count_pending(self, participant_id: int) -> int: ...


def build_order_output(order: Order) -> OrderOutput:
    """Build the API view of an order and its items."""
    return OrderOutput(
        id=order.id,
        session_id=order.session_id,
        participant_id=order.participant_id,
        status=order.status,
        notes=order.notes,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        total_amount=order.total_amount,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemOutput(
                id=item.id,
                menu_item_id=item.menu_item_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
                notes=item.notes,
            )
            for item in order.items
        ],
    )


class OrderService:
    """
    Domain service for Order operations.

    Read methods run in the caller's transaction and never commit, so the
    group coordinator can call them inside its own unit of work.
    """

    def __init__(self, db: Session):
        self._db = db
        self._orders = OrderRepository(db)
        self._participants = ParticipantRepository(db)
        self._sessions = TableSessionRepository(db)

    # =========================================================================
    # OrderLookup
    # =========================================================================

    def get_orders_by_session(self, session_id: int) -> Sequence[Order]:
        """All orders of a session (any status) with their items."""
        return self._orders.find_for_session(session_id)

    def count_pending(self, participant_id: int) -> int:
        """Number of the participant's orders that are not finished yet."""
        return self._orders.count_for_participant(participant_id, OrderStatus.UNFINISHED)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create_order(
        self,
        participant_id: int,
        items: Sequence[OrderItemInput],
        notes: str | None = None,
    ) -> OrderOutput:
        """
        Place an order for a participant of an active session.

        Raises:
            ValidationError: No items, too many items or bad quantities
            ParticipantNotFoundError: Participant does not exist
            ConflictError: The participant's session is closed
        """
        if not items:
            raise ValidationError("Order must contain at least one item", participant_id=participant_id)
        if len(items) > Limits.MAX_ITEMS_PER_ORDER:
            raise ValidationError(
                f"Order cannot contain more than {Limits.MAX_ITEMS_PER_ORDER} items",
                participant_id=participant_id,
            )
        for item in items:
            if item.quantity < 1 or item.quantity > Limits.MAX_ITEM_QUANTITY:
                raise ValidationError("Invalid item quantity", menu_item_id=item.menu_item_id)
            if item.unit_price < 0:
                raise ValidationError("Invalid item price", menu_item_id=item.menu_item_id)

        with transaction(self._db, "create order"):
            # Locked so a concurrent leave cannot remove the owner mid-order
            participant = self._participants.find_by_id(participant_id, lock=True)
            if participant is None:
                raise ParticipantNotFoundError(participant_id)

            session = self._sessions.find_by_id(participant.session_id)
            if session is None or not session.is_active:
                raise ConflictError(
                    "Table session is not active",
                    session_id=participant.session_id,
                )

            order = Order(
                session_id=session.id,
                participant_id=participant.id,
                status=OrderStatus.PENDING,
                notes=notes,
            )
            subtotal = Decimal("0")
            for item in items:
                line_total = to_money(item.unit_price * item.quantity)
                subtotal += line_total
                order.items.append(
                    OrderItem(
                        menu_item_id=item.menu_item_id,
                        quantity=item.quantity,
                        unit_price=to_money(item.unit_price),
                        total_price=line_total,
                        notes=item.notes,
                    )
                )

            order.subtotal = to_money(subtotal)
            order.tax_amount = to_money(order.subtotal * settings.tax_rate)
            order.total_amount = order.subtotal + order.tax_amount
            self._orders.save(order)

            logger.info(
                "Order created",
                order_id=order.id,
                session_id=session.id,
                participant_id=participant.id,
                item_count=len(items),
                total_amount=str(order.total_amount),
            )
            return build_order_output(order)

    def get_order(self, order_id: int) -> OrderOutput:
        """Get an order with its items."""
        order = self._orders.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return build_order_output(order)

    def update_status(self, order_id: int, status: str) -> OrderOutput:
        """
        Move an order to another status.

        Delivered and cancelled orders are final.

        Raises:
            ValidationError: Unknown status
            OrderNotFoundError: Order does not exist
            ConflictError: Order is already in a final status
        """
        if status not in OrderStatus.ALL:
            raise ValidationError(f"Invalid order status: {status}", order_id=order_id)

        with transaction(self._db, "update order status"):
            order = self._orders.find_by_id(order_id, lock=True)
            if order is None:
                raise OrderNotFoundError(order_id)

            previous = order.status
            if previous != status and previous in OrderStatus.FINAL:
                raise ConflictError(
                    f"Order is already {previous}",
                    order_id=order_id,
                    requested_status=status,
                )

            order.status = status
            order.touch()
            self._db.flush()

            logger.info(
                "Order status updated",
                order_id=order_id,
                from_status=previous,
                to_status=status,
            )
            return build_order_output(order)
