"""Poll and option ORM models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from condo_voting.lib.ledger.enums import AuditMode, PollStatus, PollType
from condo_voting.models.base import Base, TimestampMixin, UUIDMixin


class Poll(Base, UUIDMixin, TimestampMixin):
    """A condominium-wide question submitted for ballot (votação)."""

    __tablename__ = "polls"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    poll_type: Mapped[str] = mapped_column(String(20), nullable=False, default=PollType.SINGLE_CHOICE.value)
    audit_mode: Mapped[str] = mapped_column(String(20), nullable=False, default=AuditMode.ANONYMOUS.value)
    show_partial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    allow_vote_change: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=PollStatus.DRAFT.value)
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    options: Mapped[list["PollOption"]] = relationship(
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.position",
    )

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_polls_window"),
        CheckConstraint("status IN ('draft', 'open', 'closed')", name="ck_polls_status"),
        CheckConstraint("poll_type IN ('single_choice', 'multi_choice')", name="ck_polls_type"),
        CheckConstraint("audit_mode IN ('anonymous', 'tracked')", name="ck_polls_audit_mode"),
        Index("idx_polls_status", "status"),
        Index("idx_polls_created_at", "created_at"),
    )


class PollOption(Base, UUIDMixin):
    """One selectable choice of a poll (opção), shown in ``position`` order."""

    __tablename__ = "poll_options"

    poll_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("polls.id", ondelete="CASCADE"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(String(500), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    poll: Mapped["Poll"] = relationship(back_populates="options")

    __table_args__ = (
        UniqueConstraint("poll_id", "position", name="uq_poll_options_poll_position"),
        Index("idx_poll_options_poll_id", "poll_id"),
    )
