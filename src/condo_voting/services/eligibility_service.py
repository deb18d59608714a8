"""Eligibility resolver -- which units a user may vote through."""

import uuid

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from condo_voting.core.database import scoped_transaction
from condo_voting.core.errors import NotFoundError
from condo_voting.models.unit import Unit, UserUnit
from condo_voting.models.user import User


async def resolve_eligible_units(session: AsyncSession, user_id: uuid.UUID) -> list[Unit]:
    """Return the units ``user_id`` may cast ballots for, ordered by number.

    An empty list is a normal answer: the user is not linked to any unit.

    Args:
        session: Database session.
        user_id: The user UUID.

    Returns:
        The user's units.
    """
    result = await session.execute(
        select(Unit)
        .join(UserUnit, UserUnit.unit_id == Unit.id)
        .where(UserUnit.user_id == user_id)
        .order_by(Unit.number)
    )
    return list(result.scalars().all())


async def is_unit_eligible(session: AsyncSession, user_id: uuid.UUID, unit_id: uuid.UUID) -> bool:
    """True if ``user_id`` is linked to ``unit_id``."""
    result = await session.execute(
        select(UserUnit.id).where(UserUnit.user_id == user_id, UserUnit.unit_id == unit_id)
    )
    return result.scalar_one_or_none() is not None


# ---------------------------------------------------------------------------
# Unit registry (used by the CLI and seeding scripts)
# ---------------------------------------------------------------------------


async def list_units(session: AsyncSession) -> list[Unit]:
    """List all units ordered by number."""
    result = await session.execute(select(Unit).order_by(Unit.number))
    return list(result.scalars().all())


async def get_unit_by_number(session: AsyncSession, number: str) -> Unit | None:
    """Get a unit by its number."""
    result = await session.execute(select(Unit).where(Unit.number == number.strip()))
    return result.scalar_one_or_none()


async def create_unit(session: AsyncSession, number: str) -> Unit:
    """Register a unit.

    Raises:
        ValueError: If a unit with the same number exists.
    """
    unit = Unit(number=number.strip())
    try:
        async with scoped_transaction(session):
            session.add(unit)
    except IntegrityError:
        msg = f"Unit '{number}' already exists"
        raise ValueError(msg) from None
    await session.refresh(unit)
    logger.bind(unit_id=str(unit.id)).info(f"Created unit {unit.number}")
    return unit


async def link_user_to_unit(session: AsyncSession, user_id: uuid.UUID, unit_id: uuid.UUID) -> UserUnit:
    """Allow ``user_id`` to vote through ``unit_id``.

    Linking an already linked pair returns the existing link.

    Raises:
        NotFoundError: If the user or the unit does not exist.
    """
    if await session.get(User, user_id) is None:
        msg = f"User {user_id} not found"
        raise NotFoundError(msg)
    if await session.get(Unit, unit_id) is None:
        msg = f"Unit {unit_id} not found"
        raise NotFoundError(msg)

    existing = await session.execute(
        select(UserUnit).where(UserUnit.user_id == user_id, UserUnit.unit_id == unit_id)
    )
    link = existing.scalar_one_or_none()
    if link is not None:
        return link

    link = UserUnit(user_id=user_id, unit_id=unit_id)
    async with scoped_transaction(session):
        session.add(link)
    logger.bind(unit_id=str(unit_id)).info(f"Linked user {user_id} to unit")
    return link


async def unlink_user_from_unit(session: AsyncSession, user_id: uuid.UUID, unit_id: uuid.UUID) -> None:
    """Remove a user-unit link.  The unit's ballots are left untouched.

    Raises:
        NotFoundError: If the pair is not linked.
    """
    result = await session.execute(
        select(UserUnit).where(UserUnit.user_id == user_id, UserUnit.unit_id == unit_id)
    )
    link = result.scalar_one_or_none()
    if link is None:
        msg = f"User {user_id} is not linked to unit {unit_id}"
        raise NotFoundError(msg)
    async with scoped_transaction(session):
        await session.delete(link)
    logger.bind(unit_id=str(unit_id)).info(f"Unlinked user {user_id} from unit")
