"""
Sessions router.
Participants leaving or renaming themselves, and the group views of a
session (participants, order summary, name suggestion).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    ErrorResponse,
    FantasyNameSuggestion,
    GroupOrderSummary,
    LeaveSessionResponse,
    ParticipantOutput,
    UpdateFantasyNameRequest,
)
from rest_api.services.domain import CheckinService, GroupOrderService


router = APIRouter(prefix="/api", tags=["sessions"])


# =============================================================================
# Participants
# =============================================================================


@router.delete(
    "/participants/{participant_id}",
    response_model=LeaveSessionResponse,
    responses={409: {"model": ErrorResponse}},
)
def leave_session(
    participant_id: int,
    db: Session = Depends(get_db),
) -> LeaveSessionResponse:
    """
    Leave the session.

    Returns left=false when the participant does not exist. Fails with
    CONFLICT while the participant still has unfinished orders.
    """
    left = GroupOrderService(db).leave_session(participant_id)
    return LeaveSessionResponse(left=left)


@router.put(
    "/participants/{participant_id}/fantasy-name",
    response_model=ParticipantOutput,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def rename_participant(
    participant_id: int,
    body: UpdateFantasyNameRequest,
    db: Session = Depends(get_db),
) -> ParticipantOutput:
    """Change the participant's fantasy name."""
    return CheckinService(db).rename_participant(participant_id, body.fantasy_name)


# =============================================================================
# Session views
# =============================================================================


@router.get(
    "/sessions/{session_id}/participants",
    response_model=list[ParticipantOutput],
    responses={404: {"model": ErrorResponse}},
)
def list_participants(
    session_id: int,
    db: Session = Depends(get_db),
) -> list[ParticipantOutput]:
    """Participants of the session in join order."""
    return GroupOrderService(db).list_participants(session_id)


@router.get(
    "/sessions/{session_id}/summary",
    response_model=GroupOrderSummary,
    responses={404: {"model": ErrorResponse}},
)
def get_group_order_summary(
    session_id: int,
    db: Session = Depends(get_db),
) -> GroupOrderSummary:
    """All orders of the session with overall and per-participant totals."""
    return GroupOrderService(db).get_group_order_summary(session_id)


@router.get(
    "/sessions/{session_id}/fantasy-name",
    response_model=FantasyNameSuggestion,
    responses={404: {"model": ErrorResponse}},
)
def suggest_fantasy_name(
    session_id: int,
    db: Session = Depends(get_db),
) -> FantasyNameSuggestion:
    """A free generated name for the session (not reserved)."""
    name = CheckinService(db).suggest_fantasy_name(session_id)
    return FantasyNameSuggestion(session_id=session_id, fantasy_name=name)
