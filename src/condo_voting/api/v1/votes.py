"""Voting API endpoints: the caller's units, votable polls and ballot casting."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from condo_voting.core.dependencies import get_async_session, get_current_user
from condo_voting.lib.ledger import VoteChannel
from condo_voting.models.user import User
from condo_voting.schemas.ballot import BallotResponse, CastVoteRequest, VoteSubmitRequest
from condo_voting.schemas.unit import UnitResponse, VotablePollResponse
from condo_voting.services.eligibility_service import is_unit_eligible, resolve_eligible_units
from condo_voting.services.poll_service import list_votable_polls
from condo_voting.services.vote_service import cast_vote, get_unit_ballot

votes_router = APIRouter(tags=["votes"])


async def _require_eligible(session: AsyncSession, user: User, unit_id: uuid.UUID) -> None:
    if not await is_unit_eligible(session, user.id, unit_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not linked to this unit",
        )


@votes_router.get("/me/units")
async def list_my_units(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[UnitResponse]:
    """Units the caller may vote through (possibly none)."""
    units = await resolve_eligible_units(session, current_user.id)
    return [UnitResponse.model_validate(unit) for unit in units]


@votes_router.get("/me/polls")
async def list_my_votable_polls(
    unit_id: Annotated[uuid.UUID, Query(description="Unit to list pending polls for")],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[VotablePollResponse]:
    """Open polls the unit has not voted in yet."""
    await _require_eligible(session, current_user, unit_id)
    polls = await list_votable_polls(session, unit_id)
    return [VotablePollResponse.model_validate(poll) for poll in polls]


@votes_router.post("/polls/{poll_id}/votes", status_code=status.HTTP_201_CREATED)
async def cast_vote_endpoint(
    poll_id: uuid.UUID,
    body: VoteSubmitRequest,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> BallotResponse:
    """Cast (or, where allowed, change) a unit's ballot."""
    await _require_eligible(session, current_user, body.unit_id)
    ballot = await cast_vote(
        session,
        CastVoteRequest(
            poll_id=poll_id,
            unit_id=body.unit_id,
            option_ids=body.option_ids,
            voter_user_id=current_user.id,
            channel=VoteChannel.WEB,
        ),
    )
    return BallotResponse.model_validate(ballot)


@votes_router.get("/polls/{poll_id}/votes/{unit_id}")
async def get_unit_vote_status(
    poll_id: uuid.UUID,
    unit_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(get_async_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> BallotResponse:
    """The ballot a unit cast in a poll (404 if it has not voted)."""
    await _require_eligible(session, current_user, unit_id)
    ballot = await get_unit_ballot(session, poll_id, unit_id)
    if ballot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="This unit has not voted in this poll")
    return BallotResponse.model_validate(ballot)
