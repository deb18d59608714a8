"""Poll API endpoints: definition, lifecycle and results."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from condo_voting.core.dependencies import (
    OPERATOR_ROLES,
    get_async_session,
    get_current_user,
    require_auditor,
    require_role,
)
from condo_voting.lib.ledger import AuditMode, PollStatus
from condo_voting.models.user import User
from condo_voting.schemas.common import PaginationMeta
from condo_voting.schemas.poll import (
    OptionResponse,
    PaginatedPollResponse,
    PollCreateRequest,
    PollDetailResponse,
    PollResponse,
    PollUpdateRequest,
    TransitionRequest,
)
from condo_voting.schemas.tally import TallyResult
from condo_voting.services.poll_service import (
    create_poll,
    get_poll,
    get_poll_with_options,
    list_polls,
    transition_poll,
    update_draft_poll,
)
from condo_voting.services.tally_service import tally, visible_tally

polls_router = APIRouter(
    prefix="/polls",
    tags=["polls"],
)


def _detail_response(poll: object, options: list) -> PollDetailResponse:
    """Build a PollDetailResponse from a poll and its ordered options."""
    summary = PollResponse.model_validate(poll)
    return PollDetailResponse(
        **summary.model_dump(),
        options=[OptionResponse.model_validate(option) for option in options],
    )


# ---------------------------------------------------------------------------
# Read endpoints (any authenticated user)
# ---------------------------------------------------------------------------


@polls_router.get("")
async def list_all_polls(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _user: Annotated[User, Depends(get_current_user)],
    status_filter: Annotated[PollStatus | None, Query(alias="status", description="Filter by status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedPollResponse:
    """List polls, newest first."""
    polls, total = await list_polls(session, status=status_filter, page=page, page_size=page_size)
    return PaginatedPollResponse(
        items=[PollResponse.model_validate(poll) for poll in polls],
        pagination=PaginationMeta.build(total=total, page=page, page_size=page_size),
    )


@polls_router.get("/{poll_id}")
async def get_poll_detail(
    poll_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _user: Annotated[User, Depends(get_current_user)],
) -> PollDetailResponse:
    """Get a poll with its options."""
    found = await get_poll_with_options(session, poll_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poll not found")
    poll, options = found
    return _detail_response(poll, options)


@polls_router.get("/{poll_id}/results")
async def get_poll_results(
    poll_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _user: Annotated[User, Depends(get_current_user)],
) -> TallyResult:
    """Partial results while open (if the poll shows them), final results once closed."""
    _visibility, result = await visible_tally(session, poll_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Results are not available for this poll",
        )
    return result


@polls_router.get("/{poll_id}/ballots")
async def get_poll_ballots(
    poll_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(require_auditor)],
) -> TallyResult:
    """Results with per-ballot detail, for audits of tracked polls."""
    poll = await get_poll(session, poll_id)
    if poll is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poll not found")
    if poll.audit_mode != AuditMode.TRACKED.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This poll does not track voters",
        )
    result = await tally(session, poll_id, include_detail=True)
    logger.bind(poll_id=str(poll_id)).info(f"User {current_user.id} read ballot detail")
    return result


# ---------------------------------------------------------------------------
# Operator endpoints (staff / council)
# ---------------------------------------------------------------------------


@polls_router.post("", status_code=status.HTTP_201_CREATED)
async def create_poll_endpoint(
    body: PollCreateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(require_role(*OPERATOR_ROLES))],
) -> PollDetailResponse:
    """Create a draft poll."""
    poll = await create_poll(session, body, created_by=current_user.id)
    return _detail_response(poll, poll.options)


@polls_router.patch("/{poll_id}")
async def update_poll_endpoint(
    poll_id: uuid.UUID,
    body: PollUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    _user: Annotated[User, Depends(require_role(*OPERATOR_ROLES))],
) -> PollDetailResponse:
    """Edit a draft poll.  Only provided fields are updated."""
    poll = await update_draft_poll(session, poll_id, body)
    return _detail_response(poll, poll.options)


@polls_router.post("/{poll_id}/transition")
async def transition_poll_endpoint(
    poll_id: uuid.UUID,
    body: TransitionRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(require_role(*OPERATOR_ROLES))],
) -> PollResponse:
    """Open a draft poll or close an open one."""
    poll = await transition_poll(session, poll_id, body.status)
    logger.bind(poll_id=str(poll_id)).info(f"{current_user.role} {current_user.id} set status '{poll.status}'")
    return PollResponse.model_validate(poll)
