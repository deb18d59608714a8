"""Ledger rules library -- storage-free rules shared by the services.

Public API:
    - check_transition / ensure_editable / ensure_accepting_votes: lifecycle rules
    - validate_selection: option count and membership rules
    - ensure_within_window / result_visibility: time window rules
    - count_selections / percentage: tally arithmetic
"""

from condo_voting.lib.ledger.enums import AuditMode, PollStatus, PollType, ResultVisibility, VoteChannel
from condo_voting.lib.ledger.lifecycle import NEXT_STATUS, check_transition, ensure_accepting_votes, ensure_editable
from condo_voting.lib.ledger.selection import validate_selection
from condo_voting.lib.ledger.tally import OptionCount, count_selections, percentage
from condo_voting.lib.ledger.window import as_utc, ensure_within_window, is_within_window, result_visibility

__all__ = [
    "NEXT_STATUS",
    "AuditMode",
    "OptionCount",
    "PollStatus",
    "PollType",
    "ResultVisibility",
    "VoteChannel",
    "as_utc",
    "check_transition",
    "count_selections",
    "ensure_accepting_votes",
    "ensure_editable",
    "ensure_within_window",
    "is_within_window",
    "percentage",
    "result_visibility",
    "validate_selection",
]
