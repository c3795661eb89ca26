"""
Order Models: Order, OrderItem.

Owned by the order component. The group-ordering flow only reads status and
moves participant_id during a transfer. participant_id carries no foreign key:
participants are hard-deleted on leave while their finished orders stay on the bill.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus

from .base import BigIntId, Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .table import TableSession

Money = Numeric(10, 2, asdecimal=True)

_STATUS_LIST = ", ".join(f"'{s}'" for s in OrderStatus.ALL)


class Order(TimestampMixin, Base):
    """An individual order placed by one participant of a session."""

    # "order" is a reserved SQL keyword
    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    session_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("table_session.id"), nullable=False, index=True
    )
    participant_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.PENDING, index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)
    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_LIST})", name="chk_order_status"),
        # Leave guard counts a participant's unfinished orders
        Index("ix_order_participant_status", "participant_id", "status"),
    )

    # Relationships
    session: Mapped["TableSession"] = relationship()
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="[OrderItem.created_at, OrderItem.id]",
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, participant_id={self.participant_id}, status='{self.status}')>"


class OrderItem(Base):
    """
    A single line of an order.
    Stores the price at the time of order for historical accuracy.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Menu catalog is external; the id is opaque here
    menu_item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_qty_positive"),
        CheckConstraint("unit_price >= 0", name="chk_order_item_price_non_negative"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
