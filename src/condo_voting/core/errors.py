"""Ledger error taxonomy.

Every rejected invariant raises a distinct subclass of :class:`VotingError`
so callers (HTTP handlers, the chat bot, the CLI, tests) can branch on the
cause.  ``code`` is the stable machine-readable identifier used in API
error bodies.
"""


class VotingError(Exception):
    """Base class for all recoverable ledger errors."""

    code = "voting_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(VotingError):
    """A referenced poll, option, unit or user does not exist."""

    code = "not_found"


class InvalidStateError(VotingError):
    """The operation is illegal for the poll's current lifecycle state."""

    code = "invalid_state"


class WindowClosedError(VotingError):
    """A vote was attempted outside the poll's [start_at, end_at] window."""

    code = "window_closed"


class InvalidSelectionError(VotingError):
    """Option count or membership violates the poll type, or duplicates were given."""

    code = "invalid_selection"


class MissingVoterError(VotingError):
    """A tracked poll received a ballot without a voter identity."""

    code = "missing_voter"


class AlreadyVotedError(VotingError):
    """The unit already holds a ballot and the poll does not allow changes."""

    code = "already_voted"


class PollDefinitionError(VotingError):
    """A poll definition is malformed (dates out of order, too few options)."""

    code = "invalid_poll"


class StorageConflictError(VotingError):
    """A concurrent write won the (poll, unit) uniqueness race.

    Raised inside the vote registrar and retried once; callers only see it if
    the retry itself conflicts.
    """

    code = "storage_conflict"


class ServiceUnavailableError(VotingError):
    """The storage backend could not be reached; fatal to the request only."""

    code = "service_unavailable"
