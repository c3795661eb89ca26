"""
Security module: rate limiting.

Authentication and authorization are handled upstream; the API trusts the
user id it is given.
"""

from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    JOIN_RATE_LIMIT,
)

__all__ = [
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
    "JOIN_RATE_LIMIT",
]
