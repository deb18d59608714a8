"""Shared test fixtures: in-memory database, sessions, users, units and polls."""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable, Sequence
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from condo_voting.core.config import Settings
from condo_voting.core.database import Database
from condo_voting.core.security import create_access_token
from condo_voting.models import Base, Poll, PollOption, Unit, User, UserUnit

PollFactory = Callable[..., Awaitable[tuple[Poll, list[uuid.UUID]]]]


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        _env_file=None,
    )  # type: ignore[call-arg]


@pytest.fixture
async def database() -> AsyncGenerator[Database]:
    """In-memory SQLite database shared by every session of a test."""
    db = Database("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield db

    await db.dispose()


@pytest.fixture
async def async_session(database: Database) -> AsyncGenerator[AsyncSession]:
    """Per-test async session."""
    async with database.session() as session:
        yield session


async def _add_user(session: AsyncSession, name: str, role: str, *, council_member: bool = False) -> User:
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        role=role,
        council_member=council_member,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def staff_user(async_session: AsyncSession) -> User:
    return await _add_user(async_session, "Sindica Ana", "staff")


@pytest.fixture
async def resident(async_session: AsyncSession) -> User:
    return await _add_user(async_session, "Morador Bruno", "resident")


@pytest.fixture
async def other_resident(async_session: AsyncSession) -> User:
    return await _add_user(async_session, "Moradora Carla", "resident")


@pytest.fixture
async def auditor(async_session: AsyncSession) -> User:
    return await _add_user(async_session, "Auditor Davi", "auditor")


async def _add_unit(session: AsyncSession, number: str) -> Unit:
    unit = Unit(number=number)
    session.add(unit)
    await session.commit()
    await session.refresh(unit)
    return unit


@pytest.fixture
async def unit_101(async_session: AsyncSession, resident: User) -> Unit:
    """Unit 101, linked to ``resident``."""
    unit = await _add_unit(async_session, "101")
    async_session.add(UserUnit(user_id=resident.id, unit_id=unit.id))
    await async_session.commit()
    return unit


@pytest.fixture
async def unit_102(async_session: AsyncSession, other_resident: User) -> Unit:
    """Unit 102, linked to ``other_resident``."""
    unit = await _add_unit(async_session, "102")
    async_session.add(UserUnit(user_id=other_resident.id, unit_id=unit.id))
    await async_session.commit()
    return unit


@pytest.fixture
async def unit_201(async_session: AsyncSession) -> Unit:
    """Unit 201, with no residents linked."""
    return await _add_unit(async_session, "201")


@pytest.fixture
def make_poll(async_session: AsyncSession, staff_user: User) -> PollFactory:
    """Factory inserting a poll directly; returns the poll and its option ids in order.

    Defaults to an open, anonymous, single choice poll whose window started
    an hour ago and ends in an hour.
    """

    async def _make(
        *,
        title: str = "Troca do portao",
        status: str = "open",
        poll_type: str = "single_choice",
        audit_mode: str = "anonymous",
        show_partial: bool = False,
        allow_vote_change: bool = False,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        options: Sequence[str] = ("Sim", "Nao"),
    ) -> tuple[Poll, list[uuid.UUID]]:
        now = datetime.now(UTC)
        poll = Poll(
            title=title,
            poll_type=poll_type,
            audit_mode=audit_mode,
            show_partial=show_partial,
            allow_vote_change=allow_vote_change,
            created_by=staff_user.id,
            start_at=start_at or now - timedelta(hours=1),
            end_at=end_at or now + timedelta(hours=1),
            status=status,
            options=[PollOption(text=text, position=position) for position, text in enumerate(options)],
        )
        async_session.add(poll)
        await async_session.commit()
        await async_session.refresh(poll)
        await async_session.refresh(poll, attribute_names=["options"])
        return poll, [option.id for option in poll.options]

    return _make


@pytest.fixture
def resident_token(settings: Settings, resident: User) -> str:
    """JWT access token for ``resident``."""
    return create_access_token(
        subject=str(resident.id),
        role=resident.role,
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
