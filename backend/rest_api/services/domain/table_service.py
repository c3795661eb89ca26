"""
Table Service - occupancy of the tables of a location.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import Location, Table
from rest_api.repositories import TableRepository
from shared.utils.exceptions import NotFoundError, TableNotFoundError
from shared.utils.schemas import TableAvailability


def _table_number_key(number: str) -> tuple:
    # "2" before "10"; non-numeric numbers ("T-3") after numeric ones
    if number.isdigit():
        return (0, int(number), number)
    return (1, 0, number)


class TableService:
    """Read-only service for table availability."""

    def __init__(self, db: Session):
        self._db = db
        self._tables = TableRepository(db)

    def get_table(self, table_id: int) -> Table:
        """Get an active table or raise TableNotFoundError."""
        table = self._tables.find_active(table_id)
        if table is None:
            raise TableNotFoundError(table_id)
        return table

    def get_table_availability(self, location_id: int) -> list[TableAvailability]:
        """
        Occupancy of every active table of a location, ordered by table number.

        Raises:
            NotFoundError: Location does not exist
        """
        if self._db.get(Location, location_id) is None:
            raise NotFoundError("Location", location_id)

        result = [
            TableAvailability(
                table_id=row.Table.id,
                number=row.Table.number,
                capacity=row.Table.capacity,
                occupancy=row.occupancy,
                is_available=row.occupancy < row.Table.capacity,
                session_id=row.session_id,
                session_start_time=row.session_start_time,
            )
            for row in self._tables.availability_rows(location_id)
        ]
        result.sort(key=lambda t: _table_number_key(t.number))
        return result
