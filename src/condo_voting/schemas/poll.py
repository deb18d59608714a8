"""Pydantic v2 schemas for poll definition and lifecycle operations."""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from condo_voting.lib.ledger.enums import AuditMode, PollStatus, PollType
from condo_voting.schemas.common import PaginationMeta

OptionText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]

# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class OptionResponse(BaseModel):
    """A poll option."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    poll_id: uuid.UUID
    text: str
    position: int


class PollResponse(BaseModel):
    """Poll summary without options."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    title: str
    description: str | None = None
    poll_type: PollType
    audit_mode: AuditMode
    show_partial: bool
    allow_vote_change: bool
    created_by: uuid.UUID
    start_at: datetime
    end_at: datetime
    status: PollStatus
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PollDetailResponse(PollResponse):
    """Poll with its options in display order."""

    options: list[OptionResponse]


class PaginatedPollResponse(BaseModel):
    """Paginated list of polls."""

    items: list[PollResponse]
    pagination: PaginationMeta


# ---------------------------------------------------------------------------
# Write schemas
# ---------------------------------------------------------------------------


class PollCreateRequest(BaseModel):
    """Definition of a new poll; it is created as a draft."""

    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    poll_type: PollType = PollType.SINGLE_CHOICE
    audit_mode: AuditMode = AuditMode.ANONYMOUS
    show_partial: bool = False
    allow_vote_change: bool = False
    start_at: datetime
    end_at: datetime
    options: list[OptionText] = Field(min_length=2, description="Option texts in display order")


class PollUpdateRequest(BaseModel):
    """Changes to a draft poll.

    All fields optional -- only provided fields are updated.  Providing
    ``options`` replaces the whole option list.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    options: list[OptionText] | None = Field(default=None, min_length=2)


class TransitionRequest(BaseModel):
    """Requested lifecycle state."""

    status: PollStatus
