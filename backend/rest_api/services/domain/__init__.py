"""
Domain Services - Application Layer.

Services contain business logic and own the transaction of each operation.
They use Repositories for data access.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import CheckinService

    # In router
    service = CheckinService(db)
    result = service.join_table(table_id, user_id=user_id)
"""

from .fantasy_names import FantasyNameService, NameAssigner, fantasy_name_service
from .checkin_service import CheckinService
from .group_order_service import GroupOrderService
from .order_service import OrderLookup, OrderService
from .table_service import TableService

__all__ = [
    # Names
    "FantasyNameService",
    "NameAssigner",
    "fantasy_name_service",
    # Coordinators
    "CheckinService",
    "GroupOrderService",
    # Orders
    "OrderLookup",
    "OrderService",
    # Tables
    "TableService",
]
