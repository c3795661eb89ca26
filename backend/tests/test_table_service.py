"""
Tests for TableService (table availability).
"""

import pytest

from rest_api.services.domain import CheckinService, GroupOrderService, TableService
from shared.utils.exceptions import NotFoundError, TableNotFoundError


class TestTableAvailability:
    """Tests for the per-location occupancy view."""

    def test_occupancy(self, db_session, seed_location, make_table):
        two = make_table(number="2", capacity=2)
        ten = make_table(number="10", capacity=6)
        make_table(number="T-1", capacity=4)
        make_table(number="3", capacity=4, is_active=False)
        checkin = CheckinService(db_session)
        checkin.join_table(two.id)
        checkin.join_table(two.id)
        joined = checkin.join_table(ten.id)

        availability = TableService(db_session).get_table_availability(seed_location.id)

        assert [t.number for t in availability] == ["2", "10", "T-1"]
        by_number = {t.number: t for t in availability}
        assert by_number["2"].occupancy == 2
        assert by_number["2"].is_available is False
        assert by_number["10"].occupancy == 1
        assert by_number["10"].is_available is True
        assert by_number["10"].session_id == joined.session_info.id
        assert by_number["10"].session_start_time is not None
        assert by_number["T-1"].occupancy == 0
        assert by_number["T-1"].session_id is None

    def test_closed_session_frees_table(self, db_session, seed_location, small_table):
        joined = CheckinService(db_session).join_table(small_table.id)
        GroupOrderService(db_session).leave_session(joined.participant_id)

        availability = TableService(db_session).get_table_availability(seed_location.id)

        assert availability[0].occupancy == 0
        assert availability[0].session_id is None
        assert availability[0].is_available is True

    def test_unknown_location(self, db_session):
        with pytest.raises(NotFoundError):
            TableService(db_session).get_table_availability(99)


class TestGetTable:
    """Tests for table lookup."""

    def test_get_table(self, db_session, seed_table):
        assert TableService(db_session).get_table(seed_table.id).number == "1"

    def test_inactive_table(self, db_session, make_table):
        table = make_table(number="Z", is_active=False)

        with pytest.raises(TableNotFoundError):
            TableService(db_session).get_table(table.id)
