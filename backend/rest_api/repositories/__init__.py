"""
Repository Pattern implementation.
Centralizes data access for the table session aggregate and orders.

Usage:
    from rest_api.repositories import TableRepository

    repo = TableRepository(db)
    table = repo.find_active(table_id, lock=True)
"""

from .base import BaseRepository
from .table import TableRepository, get_table_repository
from .session import (
    TableSessionRepository,
    ParticipantRepository,
    get_session_repository,
    get_participant_repository,
)
from .order import OrderRepository, get_order_repository

__all__ = [
    # Base
    "BaseRepository",
    # Table
    "TableRepository",
    "get_table_repository",
    # Session aggregate
    "TableSessionRepository",
    "ParticipantRepository",
    "get_session_repository",
    "get_participant_repository",
    # Order
    "OrderRepository",
    "get_order_repository",
]
