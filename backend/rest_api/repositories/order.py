"""
Order Repository - Data access for orders.
Eager loading of items prevents N+1 queries in summaries.
"""

from typing import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Order
from .base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """
    Repository for Order entities.

    Guarantees eager loading of items.
    """

    @property
    def model(self) -> type[Order]:
        return Order

    def _base_query(self) -> Select:
        return select(Order).options(selectinload(Order.items))

    def find_for_session(self, session_id: int) -> Sequence[Order]:
        """All orders of a session, oldest first."""
        query = (
            self._base_query()
            .where(Order.session_id == session_id)
            .order_by(Order.created_at, Order.id)
        )
        return self._db.execute(query).scalars().unique().all()

    def count_for_participant(self, participant_id: int, statuses: Sequence[str]) -> int:
        return self._db.scalar(
            select(func.count(Order.id)).where(
                Order.participant_id == participant_id,
                Order.status.in_(statuses),
            )
        ) or 0

    def reload(self, order_id: int) -> Order | None:
        """Re-read an order with fresh items (after an update in this transaction)."""
        query = (
            self._base_query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return self._db.scalar(query)


def get_order_repository(db: Session) -> OrderRepository:
    """Factory function for dependency injection."""
    return OrderRepository(db)
