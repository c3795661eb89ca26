"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and TimestampMixin
- location: Location
- table: Table, TableSession
- participant: SessionParticipant
- order: Order, OrderItem
"""

from .base import Base, TimestampMixin, utcnow
from .location import Location
from .table import Table, TableSession
from .participant import SessionParticipant
from .order import Order, OrderItem

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "Location",
    "Table",
    "TableSession",
    "SessionParticipant",
    "Order",
    "OrderItem",
]
