"""
Sessions routers - /api/participants/*, /api/sessions/*
"""

from .routes import router

__all__ = ["router"]
