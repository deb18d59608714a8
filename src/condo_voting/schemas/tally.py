"""Pydantic v2 schemas for tally results."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from condo_voting.lib.ledger.enums import VoteChannel
from condo_voting.schemas.poll import OptionResponse, PollResponse


class OptionTally(BaseModel):
    """Votes and share received by one option."""

    option: OptionResponse
    votes: int = Field(ge=0)
    percentage: float = Field(ge=0, le=100, description="Rounded to 2 decimals, independently per option")


class BallotDetail(BaseModel):
    """One ballot with its unit and voter, for audits of tracked polls."""

    id: uuid.UUID
    unit_id: uuid.UUID
    unit_number: str
    option_id: uuid.UUID | None = None
    option_ids: list[uuid.UUID]
    voter_user_id: uuid.UUID | None = None
    channel: VoteChannel
    cast_at: datetime


class TallyResult(BaseModel):
    """Computed result of a poll.

    ``detail`` is only ever populated for tracked polls.
    """

    poll: PollResponse
    options: list[OptionTally]
    total_votes: int = Field(ge=0)
    detail: list[BallotDetail] | None = None
    computed_at: datetime
