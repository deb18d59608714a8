"""Vote registrar -- the single entry point that writes ballots.

``cast_vote`` validates a ballot against the poll and commits it in one
scoped transaction.  The (poll_id, unit_id) uniqueness constraint on
``ballots`` settles races between concurrent callers: the loser's flush
fails with IntegrityError, which is treated as a storage conflict and retried
once.  On the retry the winner's ballot is visible, so the loser either gets
AlreadyVotedError or replaces the ballot (when the poll allows changes).
"""

import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from condo_voting.core.database import scoped_transaction
from condo_voting.core.errors import (
    AlreadyVotedError,
    MissingVoterError,
    NotFoundError,
    StorageConflictError,
)
from condo_voting.lib.ledger import (
    AuditMode,
    PollType,
    as_utc,
    ensure_accepting_votes,
    ensure_within_window,
    validate_selection,
)
from condo_voting.models.ballot import Ballot
from condo_voting.models.poll import Poll, PollOption
from condo_voting.models.unit import Unit
from condo_voting.models.user import User
from condo_voting.schemas.ballot import CastVoteRequest

# One retry after losing the uniqueness race; a second conflict means the
# ledger moved again underneath us and is reported to the caller.
_MAX_ATTEMPTS = 2


async def get_unit_ballot(session: AsyncSession, poll_id: uuid.UUID, unit_id: uuid.UUID) -> Ballot | None:
    """Get the ballot ``unit_id`` cast in ``poll_id``, if any.

    Args:
        session: Database session.
        poll_id: The poll UUID.
        unit_id: The unit UUID.

    Returns:
        The Ballot or None.
    """
    result = await session.execute(select(Ballot).where(Ballot.poll_id == poll_id, Ballot.unit_id == unit_id))
    return result.scalar_one_or_none()


async def has_unit_voted(session: AsyncSession, poll_id: uuid.UUID, unit_id: uuid.UUID) -> bool:
    """True if ``unit_id`` already holds a ballot in ``poll_id``."""
    result = await session.execute(
        select(Ballot.id).where(Ballot.poll_id == poll_id, Ballot.unit_id == unit_id)
    )
    return result.scalar_one_or_none() is not None


async def cast_vote(
    session: AsyncSession,
    request: CastVoteRequest,
    *,
    now: datetime | None = None,
) -> Ballot:
    """Record the ballot of one unit in one poll.

    Checks, in order: poll exists, unit exists, poll is open, ``now`` is in
    ``[start_at, end_at]``, the selection fits the poll type and option set,
    and tracked polls carry a voter.  Then inserts the ballot, or replaces
    the unit's existing ballot when the poll allows vote changes.

    Anonymous polls never store ``voter_user_id``, even when one is given.

    Args:
        session: Database session.  Any pending work on it is committed
            together with the ballot.
        request: The ballot to record.
        now: Time of the vote; defaults to the current UTC time.

    Returns:
        The persisted Ballot.

    Raises:
        NotFoundError: If the poll, the unit or a tracked voter does not exist.
        InvalidStateError: If the poll is not open.
        WindowClosedError: If ``now`` is outside the voting window.
        InvalidSelectionError: If the options do not fit the poll.
        MissingVoterError: If a tracked poll gets no voter.
        AlreadyVotedError: If the unit already voted and changes are not allowed.
        StorageConflictError: If the retry after a lost race conflicts again.
        ServiceUnavailableError: If storage is unreachable.
    """
    cast_at = as_utc(now or datetime.now(UTC))
    log = logger.bind(poll_id=str(request.poll_id), unit_id=str(request.unit_id))

    attempt = 1
    while True:
        try:
            ballot, replaced = await _cast_once(session, request, cast_at)
            break
        except StorageConflictError:
            if attempt == _MAX_ATTEMPTS:
                log.warning("Ballot write conflicted twice; giving up")
                raise
            log.info("Lost the ballot uniqueness race, retrying once")
            attempt += 1

    action = "Replaced" if replaced else "Recorded"
    log.info(f"{action} ballot {ballot.id} via {ballot.channel} ({len(ballot.option_ids)} option(s))")
    return ballot


async def _cast_once(session: AsyncSession, request: CastVoteRequest, cast_at: datetime) -> tuple[Ballot, bool]:
    """One check-and-write attempt inside a single transaction.

    Returns:
        Tuple of (ballot, True if an existing ballot was replaced).
    """
    async with scoped_transaction(session):
        poll = await session.get(Poll, request.poll_id, populate_existing=True)
        if poll is None:
            msg = f"Poll {request.poll_id} not found"
            raise NotFoundError(msg)
        if await session.get(Unit, request.unit_id) is None:
            msg = f"Unit {request.unit_id} not found"
            raise NotFoundError(msg)

        ensure_accepting_votes(poll.status)
        ensure_within_window(poll.start_at, poll.end_at, cast_at)

        option_rows = await session.execute(select(PollOption.id).where(PollOption.poll_id == poll.id))
        selection = validate_selection(poll.poll_type, request.option_ids, set(option_rows.scalars().all()))

        voter_user_id = await _voter_for(session, poll, request)

        option_id = selection[0] if poll.poll_type == PollType.SINGLE_CHOICE.value else None
        option_ids = [str(value) for value in selection]

        existing = await session.execute(
            select(Ballot)
            .where(Ballot.poll_id == poll.id, Ballot.unit_id == request.unit_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        ballot = existing.scalar_one_or_none()
        replaced = ballot is not None

        if ballot is not None:
            if not poll.allow_vote_change:
                msg = "This unit has already voted in this poll"
                raise AlreadyVotedError(msg)
            ballot.option_id = option_id
            ballot.option_ids = option_ids
            ballot.voter_user_id = voter_user_id
            ballot.channel = request.channel.value
            ballot.cast_at = cast_at
        else:
            ballot = Ballot(
                poll_id=poll.id,
                unit_id=request.unit_id,
                option_id=option_id,
                option_ids=option_ids,
                voter_user_id=voter_user_id,
                channel=request.channel.value,
                cast_at=cast_at,
            )
            session.add(ballot)

        try:
            await session.flush()
        except IntegrityError as exc:
            msg = "A concurrent ballot for this unit was written first"
            raise StorageConflictError(msg) from exc

    return ballot, replaced


async def _voter_for(session: AsyncSession, poll: Poll, request: CastVoteRequest) -> uuid.UUID | None:
    """Voter id to store: required (and must exist) for tracked polls, dropped for anonymous ones."""
    if poll.audit_mode == AuditMode.TRACKED.value:
        if request.voter_user_id is None:
            msg = "Tracked polls require the identity of the voter"
            raise MissingVoterError(msg)
        if await session.get(User, request.voter_user_id) is None:
            msg = f"User {request.voter_user_id} not found"
            raise NotFoundError(msg)
        return request.voter_user_id
    return None
