"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text

from condo_voting import __version__
from condo_voting.core.config import get_settings
from condo_voting.core.database import Database
from condo_voting.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: open the database on startup, dispose on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir, json_logs=settings.log_json)
    app.state.database = Database(
        settings.database_url,
        schema=settings.database_schema,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    logger.info(f"Condo voting API {__version__} started ({settings.environment})")

    yield

    await app.state.database.dispose()
    app.state.database = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Condo Voting API",
        description="Polls and unit ballots for condominium assemblies",
        version=__version__,
        lifespan=lifespan,
    )

    from condo_voting.api.errors import register_error_handlers

    register_error_handlers(app)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    @app.get("/health", tags=["health"])
    async def health(request: Request) -> JSONResponse:
        database = getattr(request.app.state, "database", None)
        if database is None:
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        try:
            async with database.session() as session:
                await session.execute(text("SELECT 1"))
        except Exception as exc:
            logger.error(f"Health check failed: {exc}")
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return JSONResponse(content={"status": "ok", "version": __version__})

    # Register middleware and routers
    from condo_voting.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
