"""Typer CLI root application with serve command."""

import typer

from condo_voting.core.config import get_settings
from condo_voting.core.logging import setup_logging

app = typer.Typer(name="condo-voting", help="Condominium polls and unit ballots CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, json_logs=settings.log_json)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("127.0.0.1", "--host", help="Bind host"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "condo_voting.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from condo_voting.cli.db_cmd import db_app
    from condo_voting.cli.poll_cmd import poll_app
    from condo_voting.cli.unit_cmd import unit_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(unit_app, name="unit", help="Unit registry and resident links")
    app.add_typer(poll_app, name="poll", help="Poll lifecycle and results")


_register_subcommands()
