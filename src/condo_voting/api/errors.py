"""Translate ledger errors into HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from condo_voting.core.errors import (
    AlreadyVotedError,
    InvalidSelectionError,
    InvalidStateError,
    MissingVoterError,
    NotFoundError,
    PollDefinitionError,
    ServiceUnavailableError,
    StorageConflictError,
    VotingError,
    WindowClosedError,
)
from condo_voting.schemas.common import ErrorResponse

STATUS_BY_ERROR: dict[type[VotingError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    AlreadyVotedError: status.HTTP_409_CONFLICT,
    StorageConflictError: status.HTTP_409_CONFLICT,
    WindowClosedError: 422,
    InvalidSelectionError: 422,
    MissingVoterError: 422,
    PollDefinitionError: 422,
    ServiceUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: VotingError) -> int:
    """HTTP status for a ledger error (400 for unmapped subclasses)."""
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


def register_error_handlers(app: FastAPI) -> None:
    """Register the VotingError handler on ``app``."""

    @app.exception_handler(VotingError)
    async def voting_error_handler(request: Request, exc: VotingError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        body = ErrorResponse(detail=exc.message, code=exc.code)
        return JSONResponse(status_code=status_code, content=body.model_dump())
