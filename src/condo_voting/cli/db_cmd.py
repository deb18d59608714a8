"""Database migration CLI commands using Alembic programmatically."""

import typer
from alembic.config import Config
from loguru import logger

db_app = typer.Typer()


def _alembic_config(config_path: str) -> Config:
    return Config(config_path)


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
    config_path: str = typer.Option("alembic.ini", "--config", help="Path to alembic.ini"),
) -> None:
    """Apply migrations up to the target revision."""
    from alembic import command

    logger.info(f"Upgrading voting ledger schema to {revision}")
    command.upgrade(_alembic_config(config_path), revision)
    logger.info("Schema upgrade complete")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
    config_path: str = typer.Option("alembic.ini", "--config", help="Path to alembic.ini"),
) -> None:
    """Roll the schema back to the target revision."""
    from alembic import command

    logger.info(f"Downgrading voting ledger schema to {revision}")
    command.downgrade(_alembic_config(config_path), revision)
    logger.info("Schema downgrade complete")


@db_app.command()
def current(
    config_path: str = typer.Option("alembic.ini", "--config", help="Path to alembic.ini"),
) -> None:
    """Show the current schema revision."""
    from alembic import command

    command.current(_alembic_config(config_path), verbose=True)
