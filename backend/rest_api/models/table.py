"""
Table and Session Models: Table, TableSession.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Limits

from .base import BigIntId, Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .location import Location
    from .participant import SessionParticipant


class Table(TimestampMixin, Base):
    """
    Physical, capacity-bounded table at a location.

    Created by location management; check-in only reads it and takes a
    row lock on it to serialize concurrent check-ins.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    location_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("location.id"), nullable=False, index=True
    )
    number: Mapped[str] = mapped_column(Text, nullable=False)  # "7", "T-3"
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="chk_table_capacity_positive"),
        CheckConstraint(
            f"length(number) <= {Limits.TABLE_NUMBER_MAX_LENGTH}",
            name="chk_table_number_length",
        ),
        Index("ix_table_location_number", "location_id", "number", unique=True),
    )

    # Relationships
    location: Mapped["Location"] = relationship(back_populates="tables")
    sessions: Mapped[list["TableSession"]] = relationship(back_populates="table")

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, number={self.number!r}, capacity={self.capacity})>"


class TableSession(TimestampMixin, Base):
    """
    A logical dining session at a table.

    Opened by the first check-in, closed (is_active=False, end_time set) when
    the last participant leaves. Never deleted.
    """

    __tablename__ = "table_session"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    table_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("restaurant_table.id"), nullable=False, index=True
    )
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    __table_args__ = (
        # At most one active session per table, enforced by the store
        Index(
            "uq_table_session_one_active",
            "table_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    # Relationships
    table: Mapped["Table"] = relationship(back_populates="sessions")
    participants: Mapped[list["SessionParticipant"]] = relationship(
        back_populates="session",
        order_by="[SessionParticipant.joined_at, SessionParticipant.id]",
    )

    def close(self) -> None:
        self.is_active = False
        self.end_time = utcnow()

    def __repr__(self) -> str:
        return f"<TableSession(id={self.id}, table_id={self.table_id}, is_active={self.is_active})>"
