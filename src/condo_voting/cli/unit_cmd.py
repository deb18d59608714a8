"""Unit registry CLI commands: create units and link residents to them."""

import asyncio
import uuid

import typer

from condo_voting.core.config import get_settings
from condo_voting.core.database import Database
from condo_voting.core.errors import NotFoundError

unit_app = typer.Typer()


def _open_database() -> Database:
    settings = get_settings()
    return Database(settings.database_url, schema=settings.database_schema)


@unit_app.command("create")
def create_unit(
    number: str = typer.Argument(..., help="Unit number, e.g. 101 or B-12"),
    if_not_exists: bool = typer.Option(
        False,
        "--if-not-exists",
        help="Exit successfully if the unit already exists (idempotent mode)",
    ),
) -> None:
    """Register a unit."""
    asyncio.run(_create_unit(number, if_not_exists=if_not_exists))


async def _create_unit(number: str, *, if_not_exists: bool = False) -> None:
    """Async implementation of unit creation."""
    from condo_voting.services import eligibility_service

    database = _open_database()
    try:
        async with database.session() as session:
            unit = await eligibility_service.create_unit(session, number)
            typer.echo(f"Unit '{unit.number}' created ({unit.id})")
    except ValueError as e:
        if if_not_exists and "already exists" in str(e):
            typer.echo(f"Unit '{number}' already exists, skipping (--if-not-exists)")
            return
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await database.dispose()


@unit_app.command("list")
def list_units() -> None:
    """List all units."""
    asyncio.run(_list_units())


async def _list_units() -> None:
    """Async implementation of unit listing."""
    from condo_voting.services import eligibility_service

    database = _open_database()
    try:
        async with database.session() as session:
            units = await eligibility_service.list_units(session)
            if not units:
                typer.echo("No units found.")
                return
            typer.echo(f"{'Number':<12} {'ID':<38}")
            typer.echo("-" * 50)
            for unit in units:
                typer.echo(f"{unit.number:<12} {unit.id!s:<38}")
    finally:
        await database.dispose()


@unit_app.command("link")
def link_user(
    number: str = typer.Argument(..., help="Unit number"),
    user_id: uuid.UUID = typer.Option(..., "--user-id", help="User to link to the unit"),
    unlink: bool = typer.Option(False, "--unlink", help="Remove the link instead of creating it"),
) -> None:
    """Allow a user to vote through a unit (or revoke it with --unlink)."""
    asyncio.run(_link_user(number, user_id, unlink=unlink))


async def _link_user(number: str, user_id: uuid.UUID, *, unlink: bool = False) -> None:
    """Async implementation of linking and unlinking."""
    from condo_voting.services import eligibility_service

    database = _open_database()
    try:
        async with database.session() as session:
            unit = await eligibility_service.get_unit_by_number(session, number)
            if unit is None:
                msg = f"Unit '{number}' not found"
                raise NotFoundError(msg)
            if unlink:
                await eligibility_service.unlink_user_from_unit(session, user_id, unit.id)
                typer.echo(f"User {user_id} unlinked from unit '{unit.number}'")
            else:
                await eligibility_service.link_user_to_unit(session, user_id, unit.id)
                typer.echo(f"User {user_id} linked to unit '{unit.number}'")
    except NotFoundError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await database.dispose()
