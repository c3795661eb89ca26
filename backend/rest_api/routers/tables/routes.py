"""
Tables router.
Check-in (QR scan or typed table number), table availability and the
active session of a table.

Authentication is handled upstream; the user id arrives in the body.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.rate_limit import JOIN_RATE_LIMIT, limiter
from shared.utils.exceptions import SessionNotFoundError
from shared.utils.schemas import (
    ErrorResponse,
    JoinTableRequest,
    JoinTableResponse,
    TableAvailability,
    TableSessionOutput,
)
from rest_api.services.domain import CheckinService, GroupOrderService, TableService


router = APIRouter(prefix="/api", tags=["tables"])


@router.post(
    "/tables/{table_id}/join",
    response_model=JoinTableResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(JOIN_RATE_LIMIT)
def join_table(
    request: Request,
    table_id: int,
    body: JoinTableRequest,
    db: Session = Depends(get_db),
) -> JoinTableResponse:
    """
    Join a table, opening its session if none is active.

    Fails with CONFLICT when the table is full, the user is already seated
    or the chosen fantasy name is taken.
    """
    return CheckinService(db).join_table(
        table_id,
        user_id=body.user_id,
        custom_fantasy_name=body.fantasy_name,
    )


@router.post(
    "/locations/{location_id}/tables/{number}/join",
    response_model=JoinTableResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(JOIN_RATE_LIMIT)
def join_table_by_number(
    request: Request,
    location_id: int,
    number: str,
    body: JoinTableRequest,
    db: Session = Depends(get_db),
) -> JoinTableResponse:
    """Join a table using the number printed on it."""
    return CheckinService(db).check_in_by_number(
        location_id,
        number,
        user_id=body.user_id,
        custom_fantasy_name=body.fantasy_name,
    )


@router.get("/locations/{location_id}/tables", response_model=list[TableAvailability])
def get_table_availability(
    location_id: int,
    db: Session = Depends(get_db),
) -> list[TableAvailability]:
    """Occupancy of every active table of the location."""
    return TableService(db).get_table_availability(location_id)


@router.get(
    "/tables/{table_id}/session",
    response_model=TableSessionOutput,
    responses={404: {"model": ErrorResponse}},
)
def get_active_session(
    table_id: int,
    db: Session = Depends(get_db),
) -> TableSessionOutput:
    """The table's active session with its participants."""
    session = GroupOrderService(db).get_active_session(table_id)
    if session is None:
        raise SessionNotFoundError(table_id=table_id)
    return session
