"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.

The engine and session factory live on a `Database` object that is created at
process start and disposed at shutdown (see rest_api.core.lifespan). Services
never reach for a global connection; they receive a `Session` from `get_db`.

Each public service operation runs inside exactly one `transaction()` block.
"""

from collections.abc import Generator
from contextlib import contextmanager
import os

from fastapi import Request
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shared.config.logging import get_logger
from shared.config.settings import Settings, settings as default_settings
from shared.utils.exceptions import AppException, DatabaseError

logger = get_logger(__name__)


def _calculate_pool_size() -> int:
    """
    Calculate pool size based on CPU cores.
    Formula: (2 * CPU cores) + 1, capped at 20 for reasonable limits.
    """
    cores = os.cpu_count() or 4
    return min(cores * 2 + 1, 20)


def _enable_sqlite_write_lock(engine: Engine) -> None:
    """
    SQLite has no row locks, so FOR UPDATE is a no-op there.
    Take the database write lock at BEGIN instead, which serializes
    concurrent check-ins the same way the row lock does on PostgreSQL.

    The hook runs for every transaction, so read-only requests (summary,
    participants, availability) queue behind writers too. SQLite is only
    for development and tests; production settings require PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str, config: Settings | None = None) -> Engine:
    """Create an engine with pooling and timeouts suitable for the backend."""
    config = config or default_settings

    if database_url.startswith("sqlite"):
        in_memory = ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://")
        kwargs: dict = {
            "connect_args": {"check_same_thread": False, "timeout": config.db_pool_timeout},
            "echo": config.db_echo,
        }
        if in_memory:
            # One shared connection, otherwise each checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        _enable_sqlite_write_lock(engine)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=config.db_pool_size or _calculate_pool_size(),
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,  # Wait max N seconds for connection from pool
        pool_recycle=config.db_pool_recycle,
        connect_args={"connect_timeout": config.db_connect_timeout},
        echo=config.db_echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False so outputs can be built from entities after commit
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


class Database:
    """
    Owns the engine (connection pool) and the session factory.

    Usage:
        database = Database(settings.database_url)
        with database.session() as db:
            ...
        database.dispose()
    """

    def __init__(self, database_url: str, config: Settings | None = None):
        self.url = database_url
        self.engine = create_db_engine(database_url, config)
        self.session_factory = create_session_factory(self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context manager for database sessions outside of FastAPI."""
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        """Close every pooled connection (process shutdown)."""
        self.engine.dispose()
        logger.info("Database pool disposed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    database: Database = request.app.state.database
    db = database.session_factory()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def transaction(db: Session, operation: str) -> Generator[Session, None, None]:
    """
    Unit of work for one public service operation.

    Commits when the block completes. On any failure the transaction is rolled
    back before the error propagates, so no half-applied writes survive:
    typed application errors pass through unchanged, raw store failures are
    wrapped as DatabaseError.

    Usage:
        with transaction(self._db, "join table"):
            ...
    """
    try:
        yield db
        safe_commit(db)
    except AppException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise DatabaseError(operation, error=str(e)) from e
    except Exception:
        db.rollback()
        raise
