"""Pydantic v2 schemas for casting ballots."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from condo_voting.lib.ledger.enums import VoteChannel


class CastVoteRequest(BaseModel):
    """Everything the vote registrar needs to record one unit's ballot.

    ``voter_user_id`` is required by tracked polls and discarded by
    anonymous ones.
    """

    model_config = {"frozen": True}

    poll_id: uuid.UUID
    unit_id: uuid.UUID
    option_ids: list[uuid.UUID] = Field(min_length=1)
    voter_user_id: uuid.UUID | None = None
    channel: VoteChannel = VoteChannel.WEB


class VoteSubmitRequest(BaseModel):
    """API body for casting a ballot on behalf of one of the caller's units."""

    unit_id: uuid.UUID
    option_ids: list[uuid.UUID] = Field(min_length=1)


class BallotResponse(BaseModel):
    """A recorded ballot as returned to the voter."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    poll_id: uuid.UUID
    unit_id: uuid.UUID
    option_id: uuid.UUID | None = None
    option_ids: list[uuid.UUID]
    voter_user_id: uuid.UUID | None = None
    channel: VoteChannel
    cast_at: datetime
