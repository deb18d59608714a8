"""Async database engine and session management.

A :class:`Database` owns one async engine and its session factory.  It is
constructed explicitly by whoever runs the process (the FastAPI lifespan, a
CLI command, a test fixture) and handed to the code that needs it; there is
no module-level engine.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger
from sqlalchemy import event
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from condo_voting.core.errors import ServiceUnavailableError

# Errors that mean "the storage backend is unreachable", as opposed to a
# constraint violation or a programming error.
_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError)


class Database:
    """Async engine plus session factory for one database."""

    def __init__(
        self,
        database_url: str,
        *,
        schema: str | None = None,
        pool_size: int = 10,
        max_overflow: int = 5,
        **kwargs: object,
    ) -> None:
        """Create the engine and session factory.

        Args:
            database_url: Async connection string.
            schema: Optional PostgreSQL schema for isolated environments.
            pool_size: Pool size for connection-pooled engines.
            max_overflow: Overflow connections for connection-pooled engines.
            **kwargs: Additional arguments passed to create_async_engine.
        """
        if schema is not None:
            connect_args = kwargs.pop("connect_args", {})
            if not isinstance(connect_args, dict):
                msg = "connect_args must be a dict"
                raise TypeError(msg)
            connect_args["options"] = f"-c search_path={schema},public"
            kwargs["connect_args"] = connect_args
        # Only set pool sizing for connection-pooled engines (not SQLite/StaticPool)
        uses_static_pool = kwargs.get("poolclass") is StaticPool or "sqlite" in database_url
        if not uses_static_pool:
            kwargs.setdefault("pool_size", pool_size)
            kwargs.setdefault("max_overflow", max_overflow)
        self.url = database_url
        self.engine: AsyncEngine = create_async_engine(database_url, **kwargs)
        if database_url.startswith("sqlite"):
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine, expire_on_commit=False
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Open a session that is closed when the block exits."""
        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        """Dispose of the engine and release pooled connections."""
        await self.engine.dispose()


@asynccontextmanager
async def scoped_transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession]:
    """Run a block as one transaction on ``session``.

    Commits when the block completes and rolls back on any exception, so an
    invariant failure raised inside the block never leaves partial writes.
    Connection-level failures are re-raised as ServiceUnavailableError.

    Args:
        session: The session to run the transaction on.

    Yields:
        The same session.
    """
    try:
        yield session
        await session.commit()
    except _UNAVAILABLE_ERRORS as exc:
        await _rollback_quietly(session)
        logger.error(f"Storage unavailable: {exc}")
        raise ServiceUnavailableError("Storage backend unavailable") from exc
    except Exception:
        await _rollback_quietly(session)
        raise


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    # SQLite ignores foreign keys (and their ON DELETE rules) unless asked.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def _rollback_quietly(session: AsyncSession) -> None:
    """Roll back, logging (not raising) a failure of the rollback itself."""
    try:
        await session.rollback()
    except SQLAlchemyError as exc:
        logger.warning(f"Rollback failed: {exc}")
