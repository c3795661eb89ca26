"""
Table Repository - Data access for tables and their active sessions.
"""

from typing import Sequence

from sqlalchemy import Row, func, select
from sqlalchemy.orm import Session

from rest_api.models import SessionParticipant, Table, TableSession
from .base import BaseRepository


class TableRepository(BaseRepository[Table]):
    """Repository for Table entities."""

    @property
    def model(self) -> type[Table]:
        return Table

    def find_active(self, table_id: int, *, lock: bool = False) -> Table | None:
        """
        Find an active table.

        With lock=True the row stays locked until the transaction ends, which
        serializes every check-in on the same table.
        """
        query = select(Table).where(Table.id == table_id, Table.is_active.is_(True))
        if lock:
            query = query.with_for_update()
        return self._db.scalar(query)

    def find_by_number(self, location_id: int, number: str) -> Table | None:
        """Find an active table by its number within a location."""
        return self._db.scalar(
            select(Table).where(
                Table.location_id == location_id,
                Table.number == number,
                Table.is_active.is_(True),
            )
        )

    def availability_rows(self, location_id: int) -> Sequence[Row]:
        """
        One row per active table of the location with its active session (if
        any) and the session's current occupancy.
        """
        occupancy = (
            select(
                SessionParticipant.session_id.label("session_id"),
                func.count(SessionParticipant.id).label("occupancy"),
            )
            .group_by(SessionParticipant.session_id)
            .subquery()
        )
        query = (
            select(
                Table,
                TableSession.id.label("session_id"),
                TableSession.start_time.label("session_start_time"),
                func.coalesce(occupancy.c.occupancy, 0).label("occupancy"),
            )
            .outerjoin(
                TableSession,
                (TableSession.table_id == Table.id) & TableSession.is_active.is_(True),
            )
            .outerjoin(occupancy, occupancy.c.session_id == TableSession.id)
            .where(Table.location_id == location_id, Table.is_active.is_(True))
            .order_by(Table.number)
        )
        return self._db.execute(query).all()


def get_table_repository(db: Session) -> TableRepository:
    """Factory function for dependency injection."""
    return TableRepository(db)
