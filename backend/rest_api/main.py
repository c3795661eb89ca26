"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from shared.config.settings import settings
from shared.infrastructure.db import Database
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_exception_handlers, register_middlewares
from rest_api.routers.orders import router as orders_router
from rest_api.routers.public import health_router
from rest_api.routers.sessions import router as sessions_router
from rest_api.routers.tables import router as tables_router


def create_app(database: Database | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        database: Pre-built Database to use instead of one created from
            settings at startup (tests pass an in-memory one)
    """
    app = FastAPI(
        title="Tableside REST API",
        description="Table check-in and group ordering API",
        version="0.1.0",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    register_exception_handlers(app)
    register_middlewares(app)
    configure_cors(app)

    # =========================================================================
    # Include Routers
    # =========================================================================

    app.include_router(health_router)
    app.include_router(tables_router)
    app.include_router(sessions_router)
    app.include_router(orders_router)

    return app


app = create_app()


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=settings.debug,
    )
