"""
Group Order Domain Service.

Keeps participants and their orders consistent while a session is open:
diners leave (blocked while they still have unfinished orders), the session
closes when its last diner leaves, orders change hands between diners of the
same session, and the whole table's orders are summarized for the bill.
"""

from decimal import Decimal

from sqlalchemy.orm import Session

from shared.config.constants import OrderStatus
from shared.config.logging import group_logger as logger
from shared.infrastructure.db import transaction
from shared.utils.exceptions import (
    PendingOrdersError,
    SessionNotFoundError,
    TableNotFoundError,
    TransferNotAllowedError,
)
from shared.utils.schemas import (
    GroupOrderSummary,
    OrderOutput,
    ParticipantOutput,
    TableSessionOutput,
)
from rest_api.repositories import (
    OrderRepository,
    ParticipantRepository,
    TableRepository,
    TableSessionRepository,
)
from .checkin_service import build_participant_output
from .order_service import OrderLookup, OrderService, build_order_output, to_money


class GroupOrderService:
    """
    Domain service for leaving sessions, transferring orders and group summaries.

    Order reads go through an OrderLookup (OrderService on the same database
    session by default), so they share this service's transaction.
    """

    def __init__(self, db: Session, orders: OrderLookup | None = None):
        self._db = db
        self._orders = orders or OrderService(db)
        self._order_repo = OrderRepository(db)
        self._tables = TableRepository(db)
        self._sessions = TableSessionRepository(db)
        self._participants = ParticipantRepository(db)

    # =========================================================================
    # Leave
    # =========================================================================

    def leave_session(self, participant_id: int) -> bool:
        """
        Remove a participant from its session.

        Closes the session when the last participant leaves.

        Returns:
            True if the participant left, False if it did not exist

        Raises:
            PendingOrdersError: Participant still has unfinished orders
        """
        with transaction(self._db, "leave session"):
            participant = self._participants.find_by_id(participant_id, lock=True)
            if participant is None:
                self._db.rollback()
                return False

            session = self._sessions.find_by_id(participant.session_id)
            # Check-ins lock the table first; taking the same lock keeps a
            # joiner out of a session that is about to close
            self._tables.find_by_id(session.table_id, lock=True)

            pending = self._orders.count_pending(participant.id)
            if pending > 0:
                raise PendingOrdersError(participant.id, pending, session_id=session.id)

            self._participants.delete(participant)
            remaining = self._participants.count_for_session(session.id)

            logger.info(
                "Participant left",
                participant_id=participant_id,
                session_id=session.id,
                remaining=remaining,
            )

            if remaining == 0:
                session.close()
                self._db.flush()
                logger.info("Table session closed", session_id=session.id, table_id=session.table_id)

            return True

    # =========================================================================
    # Transfer
    # =========================================================================

    def transfer_order(
        self,
        order_id: int,
        from_participant_id: int,
        to_participant_id: int,
    ) -> OrderOutput:
        """
        Hand an order to another participant of the same session.

        Only orders the kitchen has not started (pending, confirmed) can move.

        Raises:
            TransferNotAllowedError: Participants missing or in different
                sessions, order not owned by the sender, not transferable,
                or sender and receiver are the same participant
        """
        if from_participant_id == to_participant_id:
            raise TransferNotAllowedError(
                "Cannot transfer an order to the same participant",
                order_id,
                participant_id=from_participant_id,
            )

        with transaction(self._db, "transfer order"):
            # Leave locks the participant first; holding both rows keeps either
            # side from leaving mid-transfer. Ascending id order avoids deadlock.
            locked = {
                pid: self._participants.find_by_id(pid, lock=True)
                for pid in sorted((from_participant_id, to_participant_id))
            }
            sender = locked[from_participant_id]
            receiver = locked[to_participant_id]
            if sender is None or receiver is None or sender.session_id != receiver.session_id:
                raise TransferNotAllowedError(
                    "Participants are not in the same session",
                    order_id,
                    from_participant_id=from_participant_id,
                    to_participant_id=to_participant_id,
                )

            order = self._order_repo.find_by_id(order_id, lock=True)
            if (
                order is None
                or order.participant_id != sender.id
                or order.status not in OrderStatus.TRANSFERABLE
            ):
                raise TransferNotAllowedError(
                    "Order not found or cannot be transferred",
                    order_id,
                    from_participant_id=from_participant_id,
                    status=order.status if order else None,
                )

            order.participant_id = receiver.id
            order.touch()
            self._db.flush()

            order = self._order_repo.reload(order_id)

            logger.info(
                "Order transferred",
                order_id=order_id,
                session_id=sender.session_id,
                from_participant_id=sender.id,
                to_participant_id=receiver.id,
            )
            return build_order_output(order)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_group_order_summary(self, session_id: int) -> GroupOrderSummary:
        """
        All orders of a session with the overall and per-participant totals.

        Cancelled orders are listed but not counted. Orders of participants who
        already left still count and keep their own entry.

        Raises:
            SessionNotFoundError: Session does not exist
        """
        session = self._sessions.find_by_id(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        participants = self._participants.find_for_session(session.id)
        orders = self._orders.get_orders_by_session(session.id)

        individual_totals: dict[int, Decimal] = {p.id: Decimal("0.00") for p in participants}
        total = Decimal("0.00")
        for order in orders:
            if order.status in OrderStatus.NOT_BILLABLE:
                continue
            individual_totals[order.participant_id] = (
                individual_totals.get(order.participant_id, Decimal("0.00")) + order.total_amount
            )
            total += order.total_amount

        return GroupOrderSummary(
            session_id=session.id,
            table_number=session.table.number,
            participants=[build_participant_output(p) for p in participants],
            orders=[build_order_output(o) for o in orders],
            total_amount=to_money(total),
            individual_totals={pid: to_money(amount) for pid, amount in individual_totals.items()},
        )

    def list_participants(self, session_id: int) -> list[ParticipantOutput]:
        """Participants of a session in join order."""
        if not self._sessions.exists(session_id):
            raise SessionNotFoundError(session_id)
        return [build_participant_output(p) for p in self._participants.find_for_session(session_id)]

    def get_active_session(self, table_id: int) -> TableSessionOutput | None:
        """
        The table's active session with its participants, or None.

        Raises:
            TableNotFoundError: Table does not exist
        """
        table = self._tables.find_by_id(table_id)
        if table is None:
            raise TableNotFoundError(table_id)

        session = self._sessions.find_active_for_table(table.id)
        if session is None:
            return None

        return TableSessionOutput(
            id=session.id,
            table_id=table.id,
            table_number=table.number,
            start_time=session.start_time,
            end_time=session.end_time,
            is_active=session.is_active,
            participants=[
                build_participant_output(p)
                for p in self._participants.find_for_session(session.id)
            ],
        )
