"""
Session Repository - Data access for the table session aggregate
(TableSession + SessionParticipant).

All reads used for guard checks (capacity, names, membership) must run in the
caller's transaction, after the caller has taken its locks.
"""

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from rest_api.models import SessionParticipant, TableSession, utcnow
from .base import BaseRepository


class TableSessionRepository(BaseRepository[TableSession]):
    """Repository for TableSession entities."""

    @property
    def model(self) -> type[TableSession]:
        return TableSession

    def _base_query(self):
        # Table number is part of every session response
        return select(TableSession).options(joinedload(TableSession.table, innerjoin=True))

    def find_active_for_table(self, table_id: int, *, lock: bool = False) -> TableSession | None:
        """Find the table's active session, if any."""
        query = (
            select(TableSession)
            .where(
                TableSession.table_id == table_id,
                TableSession.is_active.is_(True),
            )
            .order_by(TableSession.start_time.desc())
        )
        if lock:
            query = query.with_for_update()
        return self._db.scalar(query)

    def open(self, table_id: int) -> TableSession:
        """Insert a new active session for the table."""
        session = TableSession(table_id=table_id, start_time=utcnow(), is_active=True)
        return self.save(session)


class ParticipantRepository(BaseRepository[SessionParticipant]):
    """Repository for SessionParticipant entities."""

    @property
    def model(self) -> type[SessionParticipant]:
        return SessionParticipant

    def find_for_session(self, session_id: int) -> Sequence[SessionParticipant]:
        """Participants of a session in join order."""
        return self._db.execute(
            select(SessionParticipant)
            .where(SessionParticipant.session_id == session_id)
            .order_by(SessionParticipant.joined_at, SessionParticipant.id)
        ).scalars().all()

    def count_for_session(self, session_id: int) -> int:
        return self._db.scalar(
            select(func.count(SessionParticipant.id)).where(
                SessionParticipant.session_id == session_id
            )
        ) or 0

    def names_for_session(self, session_id: int, *, exclude_id: int | None = None) -> set[str]:
        """Fantasy names currently in use in the session."""
        query = select(SessionParticipant.fantasy_name).where(
            SessionParticipant.session_id == session_id
        )
        if exclude_id is not None:
            query = query.where(SessionParticipant.id != exclude_id)
        return set(self._db.execute(query).scalars().all())

    def add(self, session_id: int, fantasy_name: str, user_id: str | None = None) -> SessionParticipant:
        participant = SessionParticipant(
            session_id=session_id,
            user_id=user_id,
            fantasy_name=fantasy_name,
            joined_at=utcnow(),
        )
        return self.save(participant)


def get_session_repository(db: Session) -> TableSessionRepository:
    """Factory function for dependency injection."""
    return TableSessionRepository(db)


def get_participant_repository(db: Session) -> ParticipantRepository:
    """Factory function for dependency injection."""
    return ParticipantRepository(db)
