"""
Base Repository implementation.
Provides common data access patterns shared by the session-aggregate repositories.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


ModelT = TypeVar("ModelT")


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: Return the SQLAlchemy model class

    Repositories never commit; the calling service owns the transaction.
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    def _base_query(self) -> Select:
        """Base query; override to add eager loading."""
        return select(self.model)

    def find_by_id(self, entity_id: int, *, lock: bool = False) -> ModelT | None:
        """
        Find entity by ID.

        Args:
            entity_id: Entity ID
            lock: Take a row lock (SELECT ... FOR UPDATE) until the transaction ends

        Returns:
            Entity or None
        """
        query = self._base_query().where(self.model.id == entity_id)
        if lock:
            query = query.with_for_update()
        return self._db.scalar(query)

    def exists(self, entity_id: int) -> bool:
        """Check if entity exists."""
        query = select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        return (self._db.scalar(query) or 0) > 0

    def save(self, entity: ModelT) -> ModelT:
        """Insert or update entity and flush so generated ids are available."""
        self._db.add(entity)
        self._db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        """Hard delete entity."""
        self._db.delete(entity)
        self._db.flush()
