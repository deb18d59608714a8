"""Ballot ORM model: the ledger of cast votes."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from condo_voting.lib.ledger.enums import VoteChannel
from condo_voting.models.base import Base, JSONType, UUIDMixin


class Ballot(Base, UUIDMixin):
    """The single persisted vote of one unit in one poll (voto).

    ``uq_ballots_poll_unit`` is what makes at-most-one-ballot-per-unit hold
    under concurrent writers; the registrar's existence check only decides
    between insert and replace.  The poll, unit and voter foreign keys
    RESTRICT deletion, so cleaning up what a ballot refers to never removes
    the ballot; departing residents are deactivated instead.
    """

    __tablename__ = "ballots"

    poll_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("polls.id", ondelete="RESTRICT"),
        nullable=False,
    )
    unit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("units.id", ondelete="RESTRICT"),
        nullable=False,
    )
    # Set for single_choice polls only.
    option_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("poll_options.id", ondelete="RESTRICT"),
        nullable=True,
    )
    # Selected option ids as strings, in the order the voter gave them.
    option_ids: Mapped[list[str]] = mapped_column(JSONType, nullable=False)
    # Never written for anonymous polls.
    voter_user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True,
    )
    channel: Mapped[str] = mapped_column(String(20), nullable=False, default=VoteChannel.WEB.value)
    cast_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("poll_id", "unit_id", name="uq_ballots_poll_unit"),
        Index("idx_ballots_poll_id", "poll_id"),
        Index("idx_ballots_option_id", "option_id"),
    )

    @property
    def selected_option_ids(self) -> list[uuid.UUID]:
        """Selected option ids as UUIDs."""
        return [uuid.UUID(value) for value in self.option_ids]
