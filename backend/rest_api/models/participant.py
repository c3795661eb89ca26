"""
Session Participant Model.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Limits

from .base import BigIntId, Base, utcnow

if TYPE_CHECKING:
    from .table import TableSession


class SessionParticipant(Base):
    """
    One diner's membership in a table session.

    Hard-deleted on leave; the session boundary already scopes participants in time.
    user_id is the external auth provider's id and is absent for guests.
    """

    __tablename__ = "session_participant"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    session_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("table_session.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(Limits.USER_ID_MAX_LENGTH), index=True)
    fantasy_name: Mapped[str] = mapped_column(
        String(Limits.FANTASY_NAME_MAX_LENGTH), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("session_id", "fantasy_name", name="uq_participant_session_name"),
        # NULL user ids (guests) never collide
        UniqueConstraint("session_id", "user_id", name="uq_participant_session_user"),
        Index("ix_participant_session_joined", "session_id", "joined_at"),
    )

    # Relationships
    session: Mapped["TableSession"] = relationship(back_populates="participants")

    def __repr__(self) -> str:
        return f"<SessionParticipant(id={self.id}, session_id={self.session_id}, fantasy_name={self.fantasy_name!r})>"
