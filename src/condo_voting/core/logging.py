"""Loguru logging configuration.

Ledger records carry ``poll_id`` and ``unit_id`` context (bound with
``logger.bind``) so a single poll can be followed across concurrent requests.
With ``json_logs`` the stderr sink emits one JSON object per record instead
of text, and a rotating log file is added when ``log_dir`` is provided.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | "
    "poll={extra[poll_id]} unit={extra[unit_id]} | {message}"
)


def setup_logging(log_level: str = "INFO", log_dir: str | None = None, *, json_logs: bool = False) -> None:
    """Configure Loguru sinks for the service and the CLI.

    Args:
        log_level: Minimum log level to emit (case-insensitive).
        log_dir: Optional directory for log files.  When set, a file sink
            rotated every 24 hours and retained 7 days is added.
        json_logs: Serialize stderr records as JSON lines for log shippers.
    """
    level = log_level.upper()
    logger.remove()
    logger.configure(extra={"poll_id": "-", "unit_id": "-"})
    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_LOG_FORMAT)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "condo-voting.log",
            level=level,
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
        )
