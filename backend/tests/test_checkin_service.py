"""
Tests for CheckinService domain service.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from rest_api.models import SessionParticipant, TableSession
from rest_api.services.domain import CheckinService
from shared.utils.exceptions import (
    AlreadyInSessionError,
    ConflictError,
    FantasyNameTakenError,
    InvalidFantasyNameError,
    NotFoundError,
    ParticipantNotFoundError,
    SessionNotFoundError,
    TableAtCapacityError,
    TableNotFoundError,
    ValidationError,
)


def active_sessions(db_session, table_id):
    return db_session.execute(
        select(TableSession).where(
            TableSession.table_id == table_id,
            TableSession.is_active.is_(True),
        )
    ).scalars().all()


class TestJoinTable:
    """Tests for joining a table."""

    def test_first_join_opens_session(self, db_session, seed_table, names):
        service = CheckinService(db_session, names=names)

        result = service.join_table(seed_table.id, user_id="user-a")

        assert result.participant_id > 0
        assert result.fantasy_name
        assert result.session_info.table_id == seed_table.id
        assert result.session_info.table_number == "1"
        assert result.session_info.participant_count == 1
        assert result.session_info.capacity == 4
        sessions = active_sessions(db_session, seed_table.id)
        assert [s.id for s in sessions] == [result.session_info.id]

    def test_second_join_reuses_session(self, db_session, seed_table, names):
        service = CheckinService(db_session, names=names)

        first = service.join_table(seed_table.id, user_id="user-a")
        second = service.join_table(seed_table.id, user_id="user-b")

        assert second.session_info.id == first.session_info.id
        assert second.session_info.participant_count == 2
        assert second.fantasy_name != first.fantasy_name
        assert len(active_sessions(db_session, seed_table.id)) == 1

    def test_generated_names_unique_in_session(self, db_session, make_table, names):
        table = make_table(number="9", capacity=20)
        service = CheckinService(db_session, names=names)

        results = [service.join_table(table.id) for _ in range(20)]

        assert len({r.fantasy_name for r in results}) == 20

    def test_unknown_table(self, db_session, seed_location):
        with pytest.raises(TableNotFoundError) as exc_info:
            CheckinService(db_session).join_table(9999)

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == "NOT_FOUND"

    def test_inactive_table(self, db_session, make_table):
        table = make_table(number="X", is_active=False)

        with pytest.raises(TableNotFoundError):
            CheckinService(db_session).join_table(table.id)

        assert active_sessions(db_session, table.id) == []

    def test_table_at_capacity(self, db_session, small_table):
        service = CheckinService(db_session)
        service.join_table(small_table.id)
        service.join_table(small_table.id)

        with pytest.raises(TableAtCapacityError) as exc_info:
            service.join_table(small_table.id)

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Table is at capacity"
        assert len(db_session.execute(select(SessionParticipant)).scalars().all()) == 2

    def test_same_user_cannot_join_twice(self, db_session, seed_table):
        service = CheckinService(db_session)
        service.join_table(seed_table.id, user_id="user-a")

        with pytest.raises(AlreadyInSessionError) as exc_info:
            service.join_table(seed_table.id, user_id="user-a")

        assert exc_info.value.detail == "User is already part of this session"

    def test_guests_can_join_repeatedly(self, db_session, seed_table):
        service = CheckinService(db_session)

        first = service.join_table(seed_table.id)
        second = service.join_table(seed_table.id)

        assert first.participant_id != second.participant_id
        assert second.session_info.participant_count == 2

    def test_custom_name_used_and_stripped(self, db_session, seed_table):
        result = CheckinService(db_session).join_table(seed_table.id, custom_fantasy_name="  Captain Crunch ")

        assert result.fantasy_name == "Captain Crunch"

    def test_custom_name_invalid(self, db_session, seed_table):
        with pytest.raises(InvalidFantasyNameError) as exc_info:
            CheckinService(db_session).join_table(seed_table.id, custom_fantasy_name="<b>hi</b>")

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "VALIDATION_ERROR"
        # Rolled back: the session opened in the same transaction is gone
        assert active_sessions(db_session, seed_table.id) == []

    def test_custom_name_taken(self, db_session, seed_table):
        service = CheckinService(db_session)
        first = service.join_table(seed_table.id)

        with pytest.raises(FantasyNameTakenError) as exc_info:
            service.join_table(seed_table.id, custom_fantasy_name=first.fantasy_name)

        assert exc_info.value.detail == "Fantasy name already taken"
        participants = db_session.execute(select(SessionParticipant)).scalars().all()
        assert len(participants) == 1

    def test_custom_name_used_at_other_table(self, db_session, seed_table, small_table):
        service = CheckinService(db_session)
        elsewhere = service.join_table(small_table.id, custom_fantasy_name="Captain Crunch")

        result = service.join_table(seed_table.id, custom_fantasy_name="Captain Crunch")

        assert result.fantasy_name == "Captain Crunch"
        assert result.session_info.id != elsewhere.session_info.id

    def test_capacity_checked_before_name(self, db_session, small_table):
        service = CheckinService(db_session)
        first = service.join_table(small_table.id)
        service.join_table(small_table.id)

        with pytest.raises(TableAtCapacityError):
            service.join_table(small_table.id, custom_fantasy_name=first.fantasy_name)

    def test_new_session_after_previous_closed(self, db_session, seed_table):
        service = CheckinService(db_session)
        first = service.join_table(seed_table.id)
        old = db_session.get(TableSession, first.session_info.id)
        old.close()
        db_session.commit()

        second = service.join_table(seed_table.id)

        assert second.session_info.id != first.session_info.id
        assert second.session_info.participant_count == 1


class TestCapacityScenario:
    """Two-seat table: join, name clash, full table, everyone leaves."""

    def test_full_scenario(self, db_session, small_table):
        from rest_api.services.domain import GroupOrderService

        checkin = CheckinService(db_session)
        group = GroupOrderService(db_session)

        a = checkin.join_table(small_table.id, user_id="a")
        assert a.fantasy_name

        with pytest.raises(ConflictError):
            checkin.join_table(small_table.id, user_id="b", custom_fantasy_name=a.fantasy_name)

        b = checkin.join_table(small_table.id, user_id="b")
        assert b.session_info.participant_count == 2

        with pytest.raises(ConflictError):
            checkin.join_table(small_table.id, user_id="c")

        assert group.leave_session(a.participant_id) is True
        session = db_session.get(TableSession, a.session_info.id)
        assert session.is_active is True
        assert session.end_time is None

        assert group.leave_session(b.participant_id) is True
        session = db_session.get(TableSession, a.session_info.id)
        assert session.is_active is False
        assert session.end_time is not None


class TestCheckInByNumber:
    """Tests for checking in with the printed table number."""

    def test_joins_by_number(self, db_session, seed_location, seed_table):
        result = CheckinService(db_session).check_in_by_number(seed_location.id, "1", user_id="u")

        assert result.session_info.table_id == seed_table.id

    def test_number_is_trimmed(self, db_session, seed_location, seed_table):
        result = CheckinService(db_session).check_in_by_number(seed_location.id, " 1 ")

        assert result.session_info.table_id == seed_table.id

    def test_unknown_number(self, db_session, seed_location, seed_table):
        with pytest.raises(TableNotFoundError):
            CheckinService(db_session).check_in_by_number(seed_location.id, "404")

    def test_other_location(self, db_session, seed_table):
        with pytest.raises(NotFoundError):
            CheckinService(db_session).check_in_by_number(seed_table.location_id + 1, "1")


class TestRenameParticipant:
    """Tests for renaming a participant."""

    def test_rename(self, db_session, seed_table):
        service = CheckinService(db_session)
        joined = service.join_table(seed_table.id)

        renamed = service.rename_participant(joined.participant_id, " Sir Lancelot ")

        assert renamed.fantasy_name == "Sir Lancelot"
        assert db_session.get(SessionParticipant, joined.participant_id).fantasy_name == "Sir Lancelot"

    def test_rename_to_own_name(self, db_session, seed_table):
        service = CheckinService(db_session)
        joined = service.join_table(seed_table.id)

        renamed = service.rename_participant(joined.participant_id, joined.fantasy_name)

        assert renamed.fantasy_name == joined.fantasy_name

    def test_rename_to_taken_name(self, db_session, seed_table):
        service = CheckinService(db_session)
        first = service.join_table(seed_table.id)
        second = service.join_table(seed_table.id)

        with pytest.raises(FantasyNameTakenError):
            service.rename_participant(second.participant_id, first.fantasy_name)

        db_session.expire_all()
        assert db_session.get(SessionParticipant, second.participant_id).fantasy_name == second.fantasy_name

    def test_name_in_other_session_is_free(self, db_session, seed_table, small_table):
        service = CheckinService(db_session)
        here = service.join_table(seed_table.id)
        there = service.join_table(small_table.id)

        renamed = service.rename_participant(there.participant_id, here.fantasy_name)

        assert renamed.fantasy_name == here.fantasy_name

    def test_rename_invalid(self, db_session, seed_table):
        service = CheckinService(db_session)
        joined = service.join_table(seed_table.id)

        with pytest.raises(InvalidFantasyNameError):
            service.rename_participant(joined.participant_id, "  ")

    def test_rename_unknown_participant(self, db_session, seed_table):
        with pytest.raises(ParticipantNotFoundError):
            CheckinService(db_session).rename_participant(12345, "Valid Name")


class TestSuggestFantasyName:
    """Tests for the name preview."""

    def test_suggestion_is_free(self, db_session, seed_table, names):
        service = CheckinService(db_session, names=names)
        joined = service.join_table(seed_table.id)

        suggestion = service.suggest_fantasy_name(joined.session_info.id)

        assert suggestion != joined.fantasy_name
        assert names.validate(suggestion)

    def test_unknown_session(self, db_session, seed_location):
        with pytest.raises(SessionNotFoundError):
            CheckinService(db_session).suggest_fantasy_name(777)


class TestStoreConstraints:
    """The schema rejects what the coordinator's locks should already prevent."""

    def test_one_active_session_per_table(self, db_session, seed_table):
        db_session.add(TableSession(table_id=seed_table.id, is_active=True))
        db_session.commit()
        db_session.add(TableSession(table_id=seed_table.id, is_active=True))

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_closed_sessions_do_not_count(self, db_session, seed_table):
        db_session.add(TableSession(table_id=seed_table.id, is_active=False))
        db_session.add(TableSession(table_id=seed_table.id, is_active=False))
        db_session.add(TableSession(table_id=seed_table.id, is_active=True))
        db_session.commit()

        assert len(active_sessions(db_session, seed_table.id)) == 1

    def test_unique_name_per_session(self, db_session, seed_table):
        joined = CheckinService(db_session).join_table(seed_table.id)
        db_session.add(
            SessionParticipant(session_id=joined.session_info.id, fantasy_name=joined.fantasy_name)
        )

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
