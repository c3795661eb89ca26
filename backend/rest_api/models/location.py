"""
Location Model: the restaurant premises that owns tables.

Managed by location administration; the check-in flow only reads it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BigIntId, Base, TimestampMixin

if TYPE_CHECKING:
    from .table import Table


class Location(TimestampMixin, Base):
    """A physical restaurant location."""

    __tablename__ = "location"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    tables: Mapped[list["Table"]] = relationship(back_populates="location")
