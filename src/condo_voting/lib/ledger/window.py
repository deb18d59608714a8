"""Voting window and result visibility rules."""

from datetime import UTC, datetime

from condo_voting.core.errors import WindowClosedError
from condo_voting.lib.ledger.enums import PollStatus, ResultVisibility


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes for timezone-aware columns; they are
    stored in UTC, so naive values are tagged rather than converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_within_window(start_at: datetime, end_at: datetime, now: datetime) -> bool:
    """True if ``start_at <= now <= end_at`` (both bounds inclusive)."""
    return as_utc(start_at) <= as_utc(now) <= as_utc(end_at)


def ensure_within_window(start_at: datetime, end_at: datetime, now: datetime) -> None:
    """Reject votes cast before the window opens or after it ends.

    Raises:
        WindowClosedError: If ``now`` is outside ``[start_at, end_at]``.
    """
    if as_utc(now) < as_utc(start_at):
        msg = f"Voting has not started yet (opens at {as_utc(start_at).isoformat()})"
        raise WindowClosedError(msg)
    if as_utc(now) > as_utc(end_at):
        msg = f"Voting period ended at {as_utc(end_at).isoformat()}"
        raise WindowClosedError(msg)


def result_visibility(
    status: str,
    show_partial: bool,
    start_at: datetime,
    end_at: datetime,
    now: datetime,
) -> ResultVisibility:
    """Decide what results a regular caller may see.

    Closed polls always expose final results.  Open polls expose partial
    results only when ``show_partial`` is set and ``now`` is inside the
    voting window.  Everything else is hidden.
    """
    poll_status = PollStatus(status)
    if poll_status is PollStatus.CLOSED:
        return ResultVisibility.FINAL
    if poll_status is PollStatus.OPEN and show_partial and is_within_window(start_at, end_at, now):
        return ResultVisibility.PARTIAL
    return ResultVisibility.HIDDEN
