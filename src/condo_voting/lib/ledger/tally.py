"""Tally arithmetic: per-option counts and independently rounded percentages."""

import uuid
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class OptionCount:
    """Votes received by one option."""

    option_id: uuid.UUID
    votes: int
    percentage: float


def percentage(votes: int, total: int) -> float:
    """Share of ``total`` as a percentage rounded half-up to 2 decimals.

    Returns 0.0 when ``total`` is zero.  Each option is rounded on its own,
    so the shares of a poll need not add up to exactly 100.
    """
    if total == 0:
        return 0.0
    share = (Decimal(votes) * 100 / Decimal(total)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return float(share)


def count_selections(
    option_ids: Sequence[uuid.UUID],
    selections: Iterable[Collection[uuid.UUID]],
) -> tuple[list[OptionCount], int]:
    """Count ballots per option.

    Args:
        option_ids: The poll's options in display order.
        selections: One collection of selected option ids per ballot.

    Returns:
        Tuple of (counts in ``option_ids`` order, total ballots).
    """
    votes = dict.fromkeys(option_ids, 0)
    total = 0
    for selection in selections:
        total += 1
        for option_id in set(selection):
            if option_id in votes:
                votes[option_id] += 1

    counts = [OptionCount(option_id, votes[option_id], percentage(votes[option_id], total)) for option_id in option_ids]
    return counts, total
