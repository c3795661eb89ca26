"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its database.
"""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import Database


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


def check_database_health(database: Database) -> dict:
    """Run SELECT 1 and report latency."""
    start = time.perf_counter()
    try:
        with database.session() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    return {
        "status": "healthy",
        "type": database.engine.dialect.name,
        "latency_ms": latency_ms,
    }


@router.get("/health/detailed")
def detailed_health_check(request: Request):
    """
    Detailed health check that verifies database connectivity.

    Returns 503 Service Unavailable if the database is down.
    """
    database_status = check_database_health(request.app.state.database)
    healthy = database_status["status"] == "healthy"

    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "status": "healthy" if healthy else "degraded",
        "dependencies": {"database": database_status},
    }

    if not healthy:
        return JSONResponse(content=checks, status_code=503)

    return checks
