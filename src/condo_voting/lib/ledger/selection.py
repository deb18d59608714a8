"""Ballot selection validation against a poll's type and option set."""

import uuid
from collections.abc import Collection, Sequence

from condo_voting.core.errors import InvalidSelectionError
from condo_voting.lib.ledger.enums import PollType


def validate_selection(
    poll_type: str,
    selected: Sequence[uuid.UUID],
    poll_option_ids: Collection[uuid.UUID],
) -> list[uuid.UUID]:
    """Check a selection and return it as a list in the order given.

    Rules:
      * at least one option;
      * no option twice;
      * exactly one option for single_choice polls;
      * every option belongs to the poll.

    Args:
        poll_type: The poll's type.
        selected: Option ids chosen by the voter.
        poll_option_ids: Ids of the poll's options.

    Returns:
        The validated selection.

    Raises:
        InvalidSelectionError: If any rule is violated.
    """
    chosen = list(selected)
    if not chosen:
        msg = "Select at least one option"
        raise InvalidSelectionError(msg)
    if len(set(chosen)) != len(chosen):
        msg = "The same option was selected more than once"
        raise InvalidSelectionError(msg)
    if PollType(poll_type) is PollType.SINGLE_CHOICE and len(chosen) != 1:
        msg = f"Single choice polls take exactly one option, got {len(chosen)}"
        raise InvalidSelectionError(msg)

    unknown = [option_id for option_id in chosen if option_id not in poll_option_ids]
    if unknown:
        msg = f"Options do not belong to this poll: {', '.join(str(u) for u in unknown)}"
        raise InvalidSelectionError(msg)
    return chosen
