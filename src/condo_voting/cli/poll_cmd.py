"""Poll CLI commands: open and close polls, print results."""

import asyncio
import uuid

import typer

from condo_voting.core.config import get_settings
from condo_voting.core.database import Database
from condo_voting.core.errors import VotingError
from condo_voting.lib.ledger import PollStatus
from condo_voting.schemas.tally import TallyResult

poll_app = typer.Typer()


def _open_database() -> Database:
    settings = get_settings()
    return Database(settings.database_url, schema=settings.database_schema)


def format_tally(result: TallyResult) -> list[str]:
    """Render a tally as printable lines."""
    lines = [f"{result.poll.title} [{result.poll.status}]", f"Total ballots: {result.total_votes}"]
    width = max((len(entry.option.text) for entry in result.options), default=0)
    for entry in result.options:
        lines.append(f"  {entry.option.text:<{width}}  {entry.votes:>5}  {entry.percentage:>6}%")
    if result.detail is not None:
        lines.append("Ballots:")
        for row in result.detail:
            lines.append(
                f"  unit {row.unit_number:<8} voter {row.voter_user_id}"
                f"  via {row.channel}  at {row.cast_at:%Y-%m-%d %H:%M}"
            )
    return lines


async def _transition(poll_id: uuid.UUID, target: PollStatus) -> None:
    from condo_voting.services.poll_service import transition_poll

    database = _open_database()
    try:
        async with database.session() as session:
            poll = await transition_poll(session, poll_id, target)
            typer.echo(f"Poll '{poll.title}' is now {poll.status}")
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await database.dispose()


@poll_app.command("open")
def open_poll(poll_id: uuid.UUID = typer.Argument(..., help="Poll ID")) -> None:
    """Open a draft poll for voting."""
    asyncio.run(_transition(poll_id, PollStatus.OPEN))


@poll_app.command("close")
def close_poll(poll_id: uuid.UUID = typer.Argument(..., help="Poll ID")) -> None:
    """Close an open poll."""
    asyncio.run(_transition(poll_id, PollStatus.CLOSED))


@poll_app.command("tally")
def tally_poll(
    poll_id: uuid.UUID = typer.Argument(..., help="Poll ID"),
    detail: bool = typer.Option(False, "--detail", help="Include per-ballot detail (tracked polls only)"),
) -> None:
    """Print the current result of a poll."""
    asyncio.run(_tally(poll_id, include_detail=detail))


async def _tally(poll_id: uuid.UUID, *, include_detail: bool) -> None:
    from condo_voting.services.tally_service import tally

    database = _open_database()
    try:
        async with database.session() as session:
            result = await tally(session, poll_id, include_detail=include_detail)
        for line in format_tally(result):
            typer.echo(line)
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await database.dispose()
