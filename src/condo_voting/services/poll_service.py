"""Poll service -- poll store reads/writes and the lifecycle controller."""

import uuid
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from condo_voting.core.database import scoped_transaction
from condo_voting.core.errors import NotFoundError, PollDefinitionError
from condo_voting.lib.ledger import PollStatus, as_utc, check_transition, ensure_editable
from condo_voting.models.ballot import Ballot
from condo_voting.models.poll import Poll, PollOption
from condo_voting.schemas.poll import PollCreateRequest, PollUpdateRequest


def _check_window(start_at: datetime, end_at: datetime) -> None:
    if as_utc(end_at) <= as_utc(start_at):
        msg = "end_at must be later than start_at"
        raise PollDefinitionError(msg)


def _build_options(texts: list[str]) -> list[PollOption]:
    if len(texts) < 2:
        msg = "A poll needs at least 2 options"
        raise PollDefinitionError(msg)
    return [PollOption(text=text, position=position) for position, text in enumerate(texts)]


# ---------------------------------------------------------------------------
# Read operations
# ---------------------------------------------------------------------------


async def get_poll(session: AsyncSession, poll_id: uuid.UUID) -> Poll | None:
    """Get a poll by ID, without its options.

    Args:
        session: Database session.
        poll_id: The poll UUID.

    Returns:
        The Poll or None if not found.
    """
    result = await session.execute(select(Poll).where(Poll.id == poll_id))
    return result.scalar_one_or_none()


async def get_poll_with_options(session: AsyncSession, poll_id: uuid.UUID) -> tuple[Poll, list[PollOption]] | None:
    """Get a poll together with its options in display order.

    Args:
        session: Database session.
        poll_id: The poll UUID.

    Returns:
        Tuple of (poll, options) or None if the poll does not exist.
    """
    result = await session.execute(select(Poll).options(selectinload(Poll.options)).where(Poll.id == poll_id))
    poll = result.scalar_one_or_none()
    if poll is None:
        return None
    return poll, sorted(poll.options, key=lambda option: option.position)


async def list_polls(
    session: AsyncSession,
    *,
    status: PollStatus | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Poll], int]:
    """List polls, newest first.

    Args:
        session: Database session.
        status: Optional status filter.
        page: Page number (1-based).
        page_size: Items per page.

    Returns:
        Tuple of (polls, total count).
    """
    query = select(Poll)
    count_query = select(func.count(Poll.id))
    if status is not None:
        query = query.where(Poll.status == status.value)
        count_query = count_query.where(Poll.status == status.value)

    total = (await session.execute(count_query)).scalar_one()
    offset = (page - 1) * page_size
    query = query.order_by(Poll.created_at.desc(), Poll.id).offset(offset).limit(page_size)
    result = await session.execute(query)
    polls = list(result.scalars().all())

    logger.debug(f"Listed {len(polls)} polls (total={total}, page={page})")
    return polls, total


async def list_votable_polls(
    session: AsyncSession,
    unit_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> list[Poll]:
    """List open polls, inside their window, that ``unit_id`` has not voted in.

    This is the menu shown to residents (web "participar" page, chat bot).

    Args:
        session: Database session.
        unit_id: The unit the caller is voting for.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Matching polls, newest first.
    """
    now = as_utc(now or datetime.now(UTC))
    already_voted = select(Ballot.poll_id).where(Ballot.unit_id == unit_id)
    result = await session.execute(
        select(Poll)
        .where(
            Poll.status == PollStatus.OPEN.value,
            Poll.start_at <= now,
            Poll.end_at >= now,
            Poll.id.not_in(already_voted),
        )
        .order_by(Poll.created_at.desc(), Poll.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Write operations (staff / council)
# ---------------------------------------------------------------------------


async def create_poll(
    session: AsyncSession,
    request: PollCreateRequest,
    *,
    created_by: uuid.UUID,
) -> Poll:
    """Create a draft poll and its options atomically.

    Args:
        session: Database session.
        request: The poll definition.
        created_by: ID of the operator creating the poll.

    Returns:
        The created Poll with options loaded.

    Raises:
        PollDefinitionError: If end_at is not after start_at or fewer than
            two options are given.
    """
    _check_window(request.start_at, request.end_at)
    options = _build_options(list(request.options))

    poll = Poll(
        title=request.title,
        description=request.description,
        poll_type=request.poll_type.value,
        audit_mode=request.audit_mode.value,
        show_partial=request.show_partial,
        allow_vote_change=request.allow_vote_change,
        created_by=created_by,
        start_at=as_utc(request.start_at),
        end_at=as_utc(request.end_at),
        status=PollStatus.DRAFT.value,
        options=options,
    )
    async with scoped_transaction(session):
        session.add(poll)
    await session.refresh(poll, attribute_names=["options", "created_at", "updated_at"])
    logger.bind(poll_id=str(poll.id)).info(
        f"Created draft poll '{poll.title}' ({poll.poll_type}, {poll.audit_mode}, {len(options)} options)"
    )
    return poll


async def update_draft_poll(
    session: AsyncSession,
    poll_id: uuid.UUID,
    request: PollUpdateRequest,
) -> Poll:
    """Apply changes to a draft poll.

    Args:
        session: Database session.
        poll_id: The poll UUID.
        request: Fields to change; unset fields are left alone.

    Returns:
        The updated Poll with options loaded.

    Raises:
        NotFoundError: If the poll does not exist.
        InvalidStateError: If the poll is no longer a draft.
        PollDefinitionError: If the resulting window or option list is invalid.
    """
    updates = request.model_dump(exclude_unset=True)
    async with scoped_transaction(session):
        found = await get_poll_with_options(session, poll_id)
        if found is None:
            msg = f"Poll {poll_id} not found"
            raise NotFoundError(msg)
        poll, _ = found
        ensure_editable(poll.status)

        start_at = updates.get("start_at") or poll.start_at
        end_at = updates.get("end_at") or poll.end_at
        _check_window(start_at, end_at)

        if "title" in updates and updates["title"] is not None:
            poll.title = updates["title"]
        if "description" in updates:
            poll.description = updates["description"]
        poll.start_at = as_utc(start_at)
        poll.end_at = as_utc(end_at)
        if updates.get("options") is not None:
            # Drafts have no ballots, so the option list can be rebuilt.
            poll.options.clear()
            await session.flush()
            poll.options.extend(_build_options(list(updates["options"])))
    await session.refresh(poll, attribute_names=["options", "updated_at"])
    logger.bind(poll_id=str(poll.id)).info(f"Updated draft poll (fields={sorted(updates)})")
    return poll


async def transition_poll(
    session: AsyncSession,
    poll_id: uuid.UUID,
    to_status: PollStatus | str,
    *,
    now: datetime | None = None,
) -> Poll:
    """Move a poll to its next lifecycle state.

    draft → open and open → closed are the only legal moves; the voting
    window is not consulted here (it is enforced when votes are cast) and
    ballots are never touched.

    Args:
        session: Database session.
        poll_id: The poll UUID.
        to_status: The requested status.
        now: Timestamp recorded as opened_at / closed_at.

    Returns:
        The updated Poll.

    Raises:
        NotFoundError: If the poll does not exist.
        InvalidStateError: If the move skips a state, goes backward or
            repeats the current state.
    """
    now = as_utc(now or datetime.now(UTC))
    async with scoped_transaction(session):
        # Row lock on PostgreSQL so two operators cannot race the same move.
        result = await session.execute(select(Poll).where(Poll.id == poll_id).with_for_update())
        poll = result.scalar_one_or_none()
        if poll is None:
            msg = f"Poll {poll_id} not found"
            raise NotFoundError(msg)
        previous = poll.status
        target = check_transition(poll.status, str(to_status))
        poll.status = target.value
        if target is PollStatus.OPEN:
            poll.opened_at = now
        else:
            poll.closed_at = now
    await session.refresh(poll, attribute_names=["updated_at"])
    logger.bind(poll_id=str(poll.id)).info(f"Poll moved from '{previous}' to '{poll.status}'")
    return poll
