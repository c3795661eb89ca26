"""
Tables routers - /api/tables/*, /api/locations/*/tables
"""

from .routes import router

__all__ = ["router"]
