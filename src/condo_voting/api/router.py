"""Root API router with /api/v1 prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from condo_voting.api.middleware import RequestLogMiddleware, SecurityHeadersMiddleware, setup_cors
from condo_voting.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from condo_voting.api.v1.polls import polls_router
    from condo_voting.api.v1.votes import votes_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(polls_router)
    root_router.include_router(votes_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLogMiddleware)
