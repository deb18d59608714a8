"""FastAPI dependency injection for database sessions, caller identity, and roles.

The :class:`~condo_voting.core.database.Database` lives on ``app.state`` (set
by the lifespan in ``main.py``); sessions are opened per request from it.
"""

import uuid
from collections.abc import AsyncGenerator, Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from condo_voting.core.config import Settings, get_settings
from condo_voting.core.database import Database
from condo_voting.core.security import decode_token
from condo_voting.models.user import ROLE_AUDITOR, ROLE_COUNCIL, ROLE_STAFF, User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Roles allowed to define polls and move them through their lifecycle.
OPERATOR_ROLES = (ROLE_STAFF, ROLE_COUNCIL)


def get_database(request: Request) -> Database:
    """Return the Database attached to the running application."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialized",
        )
    return database


async def get_async_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    async with database.session() as session:
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Decode the bearer token and return the calling user.

    Raises:
        HTTPException: If the token is invalid or the user is unknown or inactive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
        user_id = uuid.UUID(str(payload.get("sub")))
    except Exception as exc:
        raise credentials_exception from exc

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def require_role(*roles: str) -> Callable[..., Any]:
    """Factory that creates a dependency requiring specific user roles.

    Args:
        *roles: Allowed role names (e.g., "staff", "council").

    Returns:
        A FastAPI dependency function that validates the user's role.
    """

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role}' does not have access to this resource",
            )
        return current_user

    return role_checker


def can_audit(user: User) -> bool:
    """True if ``user`` may see per-ballot detail of tracked polls."""
    return user.role in (ROLE_STAFF, ROLE_COUNCIL, ROLE_AUDITOR) or bool(user.council_member)


async def require_auditor(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that admits only users allowed to audit ballots."""
    if not can_audit(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only staff, council and auditors can view ballot detail",
        )
    return current_user
