"""
Infrastructure module: Database and request correlation.

Provides:
- Engine, session factory and transactions (db.py)
- Request correlation ids for logs (correlation.py)
"""

from shared.infrastructure.db import (
    Database,
    create_db_engine,
    get_db,
    safe_commit,
    transaction,
)
from shared.infrastructure.correlation import (
    CorrelationIdMiddleware,
    get_request_id,
)

__all__ = [
    # db
    "Database",
    "create_db_engine",
    "get_db",
    "safe_commit",
    "transaction",
    # correlation
    "CorrelationIdMiddleware",
    "get_request_id",
]
