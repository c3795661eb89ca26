"""
Centralized constants for the backend application.
Avoids magic strings for order statuses and size limits.

Usage:
    from shared.config.constants import OrderStatus, Limits

    if order.status in OrderStatus.TRANSFERABLE:
        ...
"""

from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants (lowercase, as stored by the order component)."""

    PENDING: Final[str] = "pending"
    CONFIRMED: Final[str] = "confirmed"  # Accepted by staff, not yet cooking
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    DELIVERED: Final[str] = "delivered"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, PREPARING, READY, DELIVERED, CANCELLED]

    # Status groups
    # A participant holding any of these cannot leave the session
    UNFINISHED: Final[list[str]] = [PENDING, CONFIRMED, PREPARING]
    # Kitchen has not started yet, so ownership may still move
    TRANSFERABLE: Final[list[str]] = [PENDING, CONFIRMED]
    # Excluded from group totals
    NOT_BILLABLE: Final[list[str]] = [CANCELLED]
    # No further transitions allowed
    FINAL: Final[list[str]] = [DELIVERED, CANCELLED]


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Size limits shared by validation and schema definitions."""

    FANTASY_NAME_MAX_LENGTH: Final[int] = 50
    TABLE_NUMBER_MAX_LENGTH: Final[int] = 20
    USER_ID_MAX_LENGTH: Final[int] = 64
    ORDER_NOTES_MAX_LENGTH: Final[int] = 500
    MAX_ITEMS_PER_ORDER: Final[int] = 50
    MAX_ITEM_QUANTITY: Final[int] = 99
