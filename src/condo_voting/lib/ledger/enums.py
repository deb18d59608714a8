"""Enumerations shared by the ledger rules, ORM models and API schemas."""

import enum


class PollStatus(enum.StrEnum):
    """Lifecycle state of a poll (rascunho / aberta / encerrada)."""

    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"


class PollType(enum.StrEnum):
    """How many options a ballot may select."""

    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"


class AuditMode(enum.StrEnum):
    """Whether the voter behind each ballot is recorded."""

    ANONYMOUS = "anonymous"
    TRACKED = "tracked"


class VoteChannel(enum.StrEnum):
    """Caller surface a ballot was cast through."""

    WEB = "web"
    WHATSAPP = "whatsapp"
    CLI = "cli"


class ResultVisibility(enum.StrEnum):
    """What a non-auditor caller may see of a poll's tally."""

    HIDDEN = "hidden"
    PARTIAL = "partial"
    FINAL = "final"
