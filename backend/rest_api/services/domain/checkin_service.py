"""
Check-in Domain Service.

Turns a physical table into a shared session: the first diner to check in
opens the session, later diners join it until the table's capacity is
reached. Each diner gets a display name unique within the session.

Concurrency: every check-in locks the table row (SELECT ... FOR UPDATE)
before reading the session, so concurrent check-ins on the same table run one
after another, including the one that opens the session. The unique indexes
on the session tables reject anything that still slips through.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.logging import checkin_logger as logger, mask_user_id
from shared.infrastructure.db import transaction
from shared.utils.exceptions import (
    AlreadyInSessionError,
    ConflictError,
    FantasyNameTakenError,
    InvalidFantasyNameError,
    ParticipantNotFoundError,
    SessionNotFoundError,
    TableAtCapacityError,
    TableNotFoundError,
)
from shared.utils.schemas import JoinTableResponse, ParticipantOutput, SessionInfo
from rest_api.models import SessionParticipant
from rest_api.repositories import ParticipantRepository, TableRepository, TableSessionRepository
from .fantasy_names import NameAssigner, fantasy_name_service


def build_participant_output(participant: SessionParticipant) -> ParticipantOutput:
    return ParticipantOutput(
        id=participant.id,
        session_id=participant.session_id,
        user_id=participant.user_id,
        fantasy_name=participant.fantasy_name,
        joined_at=participant.joined_at,
    )


def conflict_from_integrity_error(error: IntegrityError, session_id: int | None) -> ConflictError:
    """Translate a uniqueness violation raised by the store into a typed conflict."""
    message = str(error.orig)
    if "uq_participant_session_name" in message or "fantasy_name" in message:
        return FantasyNameTakenError(session_id)
    if "uq_participant_session_user" in message or "user_id" in message:
        return AlreadyInSessionError(session_id)
    return ConflictError(
        "Table session changed concurrently, please retry",
        session_id=session_id,
        error=message,
    )


class CheckinService:
    """
    Domain service for table check-in.

    Each public method is one transaction.
    """

    def __init__(self, db: Session, names: NameAssigner | None = None):
        self._db = db
        self._names = names or fantasy_name_service
        self._tables = TableRepository(db)
        self._sessions = TableSessionRepository(db)
        self._participants = ParticipantRepository(db)

    def join_table(
        self,
        table_id: int,
        user_id: str | None = None,
        custom_fantasy_name: str | None = None,
    ) -> JoinTableResponse:
        """
        Check a diner in to a table.

        Opens the table's session when there is none, otherwise joins the
        active one.

        Args:
            table_id: Table to join
            user_id: External user id (None for guests)
            custom_fantasy_name: Name chosen by the diner; generated when None

        Returns:
            JoinTableResponse with the participant, its name and the session

        Raises:
            TableNotFoundError: Table missing or inactive
            TableAtCapacityError: Every seat is taken
            AlreadyInSessionError: The user already joined this session
            InvalidFantasyNameError: Custom name has an invalid format
            FantasyNameTakenError: Custom name is used by another participant
        """
        with transaction(self._db, "join table"):
            table = self._tables.find_active(table_id, lock=True)
            if table is None:
                raise TableNotFoundError(table_id)

            session = self._sessions.find_active_for_table(table.id, lock=True)
            try:
                if session is None:
                    session = self._sessions.open(table.id)
                    taken_names: set[str] = set()
                    logger.info("Table session opened", session_id=session.id, table_id=table.id)
                else:
                    present = self._participants.find_for_session(session.id)
                    if len(present) >= table.capacity:
                        raise TableAtCapacityError(table.id, table.capacity, session_id=session.id)
                    if user_id is not None and any(p.user_id == user_id for p in present):
                        raise AlreadyInSessionError(session.id, user=mask_user_id(user_id))
                    taken_names = {p.fantasy_name for p in present}

                if custom_fantasy_name is not None:
                    if not self._names.validate(custom_fantasy_name):
                        raise InvalidFantasyNameError(custom_fantasy_name, session_id=session.id)
                    fantasy_name = custom_fantasy_name.strip()
                    if fantasy_name in taken_names:
                        raise FantasyNameTakenError(session.id)
                else:
                    fantasy_name = self._names.generate(taken_names)

                participant = self._participants.add(session.id, fantasy_name, user_id)
            except IntegrityError as e:
                raise conflict_from_integrity_error(e, session.id if session else None) from e

            participant_count = self._participants.count_for_session(session.id)

            logger.info(
                "Participant joined",
                session_id=session.id,
                table_id=table.id,
                participant_id=participant.id,
                user=mask_user_id(user_id),
                participant_count=participant_count,
                capacity=table.capacity,
            )

            return JoinTableResponse(
                participant_id=participant.id,
                fantasy_name=participant.fantasy_name,
                session_info=SessionInfo(
                    id=session.id,
                    table_id=table.id,
                    table_number=table.number,
                    participant_count=participant_count,
                    capacity=table.capacity,
                ),
            )

    def check_in_by_number(
        self,
        location_id: int,
        table_number: str,
        user_id: str | None = None,
        custom_fantasy_name: str | None = None,
    ) -> JoinTableResponse:
        """
        Check in using the number printed on the table.

        Raises:
            TableNotFoundError: No active table with that number at the location
        """
        table = self._tables.find_by_number(location_id, table_number.strip())
        if table is None:
            raise TableNotFoundError(table_number, location_id=location_id)
        return self.join_table(table.id, user_id=user_id, custom_fantasy_name=custom_fantasy_name)

    def rename_participant(self, participant_id: int, new_name: str) -> ParticipantOutput:
        """
        Change a participant's fantasy name.

        Raises:
            InvalidFantasyNameError: Name has an invalid format
            ParticipantNotFoundError: Participant does not exist
            FantasyNameTakenError: Another participant uses the name
        """
        if not self._names.validate(new_name):
            raise InvalidFantasyNameError(new_name, participant_id=participant_id)
        fantasy_name = new_name.strip()

        with transaction(self._db, "rename participant"):
            participant = self._participants.find_by_id(participant_id, lock=True)
            if participant is None:
                raise ParticipantNotFoundError(participant_id)

            # Same lock as check-in, so a joiner cannot grab the name meanwhile
            session = self._sessions.find_by_id(participant.session_id)
            self._tables.find_by_id(session.table_id, lock=True)

            taken = self._participants.names_for_session(session.id, exclude_id=participant.id)
            if fantasy_name in taken:
                raise FantasyNameTakenError(session.id, participant_id=participant_id)

            previous = participant.fantasy_name
            participant.fantasy_name = fantasy_name
            try:
                self._db.flush()
            except IntegrityError as e:
                raise conflict_from_integrity_error(e, session.id) from e

            logger.info(
                "Participant renamed",
                participant_id=participant.id,
                session_id=session.id,
                from_name=previous,
                to_name=fantasy_name,
            )
            return build_participant_output(participant)

    def suggest_fantasy_name(self, session_id: int) -> str:
        """
        Preview a free generated name for a session.

        Nothing is reserved; a later check-in may still pick the same name.
        """
        session = self._sessions.find_by_id(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        taken = self._participants.names_for_session(session.id)
        return self._names.generate(taken)
