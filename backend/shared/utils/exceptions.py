"""
Centralized application exceptions for consistent error handling.

Every guard failure in the coordinators is one of four stable kinds:
NOT_FOUND, CONFLICT, VALIDATION_ERROR, INTERNAL_ERROR. The kind travels with
the exception (`error_code`) and is rendered by the API as
{"error": <kind>, "detail": <message>}.

Usage:
    from shared.utils.exceptions import NotFoundError, ConflictError

    raise NotFoundError("Table", table_id)
    raise ConflictError("Table is at capacity", table_id=table_id)
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    error_code: str = "ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, error_code=self.error_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return self.detail


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Table", 123)
    """

    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class TableNotFoundError(NotFoundError):
    """Table missing or inactive."""

    def __init__(self, table_id: int | str | None = None, **log_context: Any):
        super().__init__("Table", table_id, **log_context)


class SessionNotFoundError(NotFoundError):
    """Table session not found."""

    def __init__(self, session_id: int | None = None, **log_context: Any):
        super().__init__("Table session", session_id, **log_context)


class ParticipantNotFoundError(NotFoundError):
    """Session participant not found."""

    def __init__(self, participant_id: int | None = None, **log_context: Any):
        super().__init__("Participant", participant_id, **log_context)


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Quantity must be positive", field="quantity")
    """

    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidFantasyNameError(ValidationError):
    """Custom fantasy name does not match the allowed format."""

    def __init__(self, name: str, **log_context: Any):
        super().__init__(
            "Invalid fantasy name format",
            field="fantasy_name",
            length=len(name),
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("User is already part of this session")
    """

    error_code = "CONFLICT"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class TableAtCapacityError(ConflictError):
    """Every seat of the table is taken."""

    def __init__(self, table_id: int, capacity: int, **log_context: Any):
        super().__init__("Table is at capacity", table_id=table_id, capacity=capacity, **log_context)


class AlreadyInSessionError(ConflictError):
    """The user already has a participant row in this session."""

    def __init__(self, session_id: int, **log_context: Any):
        super().__init__("User is already part of this session", session_id=session_id, **log_context)


class FantasyNameTakenError(ConflictError):
    """Another present participant already uses the name."""

    def __init__(self, session_id: int, **log_context: Any):
        super().__init__("Fantasy name already taken", session_id=session_id, **log_context)


class PendingOrdersError(ConflictError):
    """Participant still owns unfinished orders."""

    def __init__(self, participant_id: int, pending_count: int, **log_context: Any):
        super().__init__(
            "Cannot leave session with pending orders",
            participant_id=participant_id,
            pending_count=pending_count,
            **log_context,
        )


class TransferNotAllowedError(ConflictError):
    """Order transfer rejected by an ownership or status guard."""

    def __init__(self, detail: str, order_id: int, **log_context: Any):
        super().__init__(detail, order_id=order_id, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to open session", table_id=3)
    """

    error_code = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
