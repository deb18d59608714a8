"""Poll lifecycle rules: draft → open → closed, nothing else."""

from condo_voting.core.errors import InvalidStateError
from condo_voting.lib.ledger.enums import PollStatus

# Each state has at most one legal successor; closed is terminal.
NEXT_STATUS: dict[PollStatus, PollStatus] = {
    PollStatus.DRAFT: PollStatus.OPEN,
    PollStatus.OPEN: PollStatus.CLOSED,
}


def check_transition(current: str, target: str) -> PollStatus:
    """Validate a status change and return the target as a PollStatus.

    Args:
        current: The poll's current status.
        target: The requested status.

    Returns:
        The validated target status.

    Raises:
        InvalidStateError: If ``target`` is not the single successor of
            ``current`` (skips, backward moves, reopening and same-state
            requests are all rejected).
    """
    current_status = PollStatus(current)
    try:
        target_status = PollStatus(target)
    except ValueError:
        msg = f"Unknown poll status '{target}'"
        raise InvalidStateError(msg) from None

    if NEXT_STATUS.get(current_status) is not target_status:
        msg = f"Cannot move poll from '{current_status}' to '{target_status}'"
        raise InvalidStateError(msg)
    return target_status


def ensure_editable(status: str) -> None:
    """Reject definition changes (title, description, dates, options) outside draft.

    Raises:
        InvalidStateError: If the poll is not a draft.
    """
    if PollStatus(status) is not PollStatus.DRAFT:
        msg = f"Poll is '{status}'; only draft polls can be edited"
        raise InvalidStateError(msg)


def ensure_accepting_votes(status: str) -> None:
    """Reject ballots for polls that are not open.

    Raises:
        InvalidStateError: If the poll is a draft or closed.
    """
    if PollStatus(status) is not PollStatus.OPEN:
        msg = f"Poll is '{status}' and is not accepting votes"
        raise InvalidStateError(msg)
