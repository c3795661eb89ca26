"""
Services module for business logic.

- domain/: Application services (check-in, group ordering, orders, tables)

Usage:
    from rest_api.services import CheckinService
    service = CheckinService(db)
    result = service.join_table(table_id)
"""

from .domain import (
    CheckinService,
    FantasyNameService,
    GroupOrderService,
    OrderService,
    TableService,
    fantasy_name_service,
)

__all__ = [
    "CheckinService",
    "FantasyNameService",
    "GroupOrderService",
    "OrderService",
    "TableService",
    "fantasy_name_service",
]
