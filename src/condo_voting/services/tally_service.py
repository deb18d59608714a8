"""Tally engine -- per-option counts, percentages and audit detail."""

import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from condo_voting.core.database import scoped_transaction
from condo_voting.core.errors import NotFoundError
from condo_voting.lib.ledger import AuditMode, PollType, ResultVisibility, count_selections, result_visibility
from condo_voting.models.ballot import Ballot
from condo_voting.models.poll import Poll
from condo_voting.models.unit import Unit
from condo_voting.schemas.poll import OptionResponse, PollResponse
from condo_voting.schemas.tally import BallotDetail, OptionTally, TallyResult
from condo_voting.services.poll_service import get_poll_with_options


def _selection_of(poll: Poll, ballot: Ballot) -> set[uuid.UUID]:
    """Option ids a ballot counts towards, according to the poll type."""
    if poll.poll_type == PollType.SINGLE_CHOICE.value:
        return {ballot.option_id} if ballot.option_id is not None else set()
    return set(ballot.selected_option_ids)


async def tally(session: AsyncSession, poll_id: uuid.UUID, *, include_detail: bool = False) -> TallyResult:
    """Compute the result of a poll.

    Who may ask for ``include_detail`` is decided by the caller.  The engine
    applies its own gate on top: detail is only attached to tracked polls,
    since anonymous ballots never stored a voter.

    Poll, options and ballots are read in one transaction, so a ballot being
    cast concurrently is either fully counted or not counted at all.

    Args:
        session: Database session.
        poll_id: The poll UUID.
        include_detail: Attach one BallotDetail per ballot (tracked polls only).

    Returns:
        The TallyResult.

    Raises:
        NotFoundError: If the poll does not exist.
        ServiceUnavailableError: If storage is unreachable.
    """
    async with scoped_transaction(session):
        found = await get_poll_with_options(session, poll_id)
        if found is None:
            msg = f"Poll {poll_id} not found"
            raise NotFoundError(msg)
        poll, options = found

        result = await session.execute(
            select(Ballot, Unit.number)
            .join(Unit, Unit.id == Ballot.unit_id)
            .where(Ballot.poll_id == poll_id)
            .order_by(Ballot.cast_at, Ballot.id)
        )
        rows = list(result.all())

    counts, total = count_selections(
        [option.id for option in options],
        (_selection_of(poll, ballot) for ballot, _ in rows),
    )
    options_by_id = {option.id: option for option in options}

    detail = None
    if include_detail and poll.audit_mode == AuditMode.TRACKED.value:
        detail = [
            BallotDetail(
                id=ballot.id,
                unit_id=ballot.unit_id,
                unit_number=unit_number,
                option_id=ballot.option_id,
                option_ids=ballot.selected_option_ids,
                voter_user_id=ballot.voter_user_id,
                channel=ballot.channel,
                cast_at=ballot.cast_at,
            )
            for ballot, unit_number in rows
        ]
    elif include_detail:
        logger.bind(poll_id=str(poll_id)).debug("Detail requested for an anonymous poll; not attached")

    return TallyResult(
        poll=PollResponse.model_validate(poll),
        options=[
            OptionTally(
                option=OptionResponse.model_validate(options_by_id[count.option_id]),
                votes=count.votes,
                percentage=count.percentage,
            )
            for count in counts
        ],
        total_votes=total,
        detail=detail,
        computed_at=datetime.now(UTC),
    )


async def visible_tally(
    session: AsyncSession,
    poll_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> tuple[ResultVisibility, TallyResult | None]:
    """Tally for a regular (non-auditor) caller, honouring result visibility.

    Args:
        session: Database session.
        poll_id: The poll UUID.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Tuple of (visibility, result).  The result is None when hidden.

    Raises:
        NotFoundError: If the poll does not exist.
    """
    now = now or datetime.now(UTC)
    result = await session.execute(select(Poll).where(Poll.id == poll_id))
    poll = result.scalar_one_or_none()
    if poll is None:
        msg = f"Poll {poll_id} not found"
        raise NotFoundError(msg)

    visibility = result_visibility(poll.status, poll.show_partial, poll.start_at, poll.end_at, now)
    if visibility is ResultVisibility.HIDDEN:
        return visibility, None
    return visibility, await tally(session, poll_id, include_detail=False)
