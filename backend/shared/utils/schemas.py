"""
Shared Pydantic schemas used across the application.

Money fields are Decimal and serialize as strings ("44.49") so totals are
never rounded through floats on the way out.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderStatusLiteral = Literal["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]
ErrorKind = Literal["NOT_FOUND", "CONFLICT", "VALIDATION_ERROR", "INTERNAL_ERROR"]


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: ErrorKind
    detail: str


# =============================================================================
# Check-in Schemas
# =============================================================================


class JoinTableRequest(BaseModel):
    """Request to join a table (scan QR / type table number)."""

    user_id: str | None = Field(default=None, max_length=Limits.USER_ID_MAX_LENGTH)
    # Format is checked by the fantasy name validator, not here,
    # so a bad name surfaces as VALIDATION_ERROR like every other guard
    fantasy_name: str | None = Field(default=None, max_length=200)


class SessionInfo(BaseModel):
    """Session snapshot returned on check-in."""

    id: int
    table_id: int
    table_number: str
    participant_count: int
    capacity: int


class JoinTableResponse(BaseModel):
    """Response after joining a table."""

    participant_id: int
    fantasy_name: str
    session_info: SessionInfo


class ParticipantOutput(BaseModel):
    """A present participant of a session."""

    id: int
    session_id: int
    user_id: str | None = None
    fantasy_name: str
    joined_at: datetime


class TableSessionOutput(BaseModel):
    """Active session of a table with its participants."""

    id: int
    table_id: int
    table_number: str
    start_time: datetime
    end_time: datetime | None = None
    is_active: bool
    participants: list[ParticipantOutput] = []


class UpdateFantasyNameRequest(BaseModel):
    """Request to rename a participant."""

    fantasy_name: str = Field(min_length=1, max_length=200)


class FantasyNameSuggestion(BaseModel):
    """A free generated fantasy name for a session."""

    session_id: int
    fantasy_name: str


class LeaveSessionResponse(BaseModel):
    """Result of leaving a session."""

    left: bool


class TableAvailability(BaseModel):
    """Occupancy of one table of a location."""

    table_id: int
    number: str
    capacity: int
    occupancy: int
    is_available: bool
    session_id: int | None = None
    session_start_time: datetime | None = None


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    """A line of a new order."""

    menu_item_id: str = Field(min_length=1, max_length=64)
    quantity: int = Field(ge=1, le=Limits.MAX_ITEM_QUANTITY)
    unit_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    notes: str | None = Field(default=None, max_length=Limits.ORDER_NOTES_MAX_LENGTH)


class CreateOrderRequest(BaseModel):
    """Request to place an order for a participant."""

    participant_id: int
    items: list[OrderItemInput] = Field(min_length=1, max_length=Limits.MAX_ITEMS_PER_ORDER)
    notes: str | None = Field(default=None, max_length=Limits.ORDER_NOTES_MAX_LENGTH)


class OrderItemOutput(BaseModel):
    """A line of an order."""

    id: int
    menu_item_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    notes: str | None = None


class OrderOutput(BaseModel):
    """An order with its items."""

    id: int
    session_id: int
    participant_id: int
    status: OrderStatusLiteral
    notes: str | None = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime | None = None
    items: list[OrderItemOutput] = []


class TransferOrderRequest(BaseModel):
    """Request to hand an order to another participant of the same session."""

    from_participant_id: int
    to_participant_id: int


class UpdateOrderStatusRequest(BaseModel):
    """Request to move an order to another status."""

    status: OrderStatusLiteral


class GroupOrderSummary(BaseModel):
    """All orders of a session, totaled overall and per participant."""

    session_id: int
    table_number: str
    participants: list[ParticipantOutput]
    orders: list[OrderOutput]
    total_amount: Decimal
    # Keyed by participant id; includes departed participants who still own orders
    individual_totals: dict[int, Decimal]
