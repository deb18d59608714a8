"""Initial migration: users, units, polls, options and the ballot ledger.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("council_member", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_phone", "users", ["phone"])

    op.create_table(
        "units",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("number", sa.String(20), unique=True, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "user_units",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", UUID(as_uuid=True), sa.ForeignKey("units.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("user_id", "unit_id", name="uq_user_units_user_unit"),
    )
    op.create_index("idx_user_units_unit_id", "user_units", ["unit_id"])

    op.create_table(
        "polls",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("poll_type", sa.String(20), nullable=False),
        sa.Column("audit_mode", sa.String(20), nullable=False),
        sa.Column("show_partial", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("allow_vote_change", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_by", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("end_at > start_at", name="ck_polls_window"),
        sa.CheckConstraint("status IN ('draft', 'open', 'closed')", name="ck_polls_status"),
        sa.CheckConstraint("poll_type IN ('single_choice', 'multi_choice')", name="ck_polls_type"),
        sa.CheckConstraint("audit_mode IN ('anonymous', 'tracked')", name="ck_polls_audit_mode"),
    )
    op.create_index("idx_polls_status", "polls", ["status"])
    op.create_index("idx_polls_created_at", "polls", ["created_at"])

    op.create_table(
        "poll_options",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("poll_id", UUID(as_uuid=True), sa.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("text", sa.String(500), nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.UniqueConstraint("poll_id", "position", name="uq_poll_options_poll_position"),
    )
    op.create_index("idx_poll_options_poll_id", "poll_options", ["poll_id"])

    op.create_table(
        "ballots",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("poll_id", UUID(as_uuid=True), sa.ForeignKey("polls.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("unit_id", UUID(as_uuid=True), sa.ForeignKey("units.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "option_id",
            UUID(as_uuid=True),
            sa.ForeignKey("poll_options.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("option_ids", sa.JSON().with_variant(JSONB(), "postgresql"), nullable=False),
        sa.Column(
            "voter_user_id",
            UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("channel", sa.String(20), nullable=False),
        sa.Column("cast_at", sa.DateTime(timezone=True), nullable=False),
        # One ballot per unit per poll; concurrent writers are settled here.
        sa.UniqueConstraint("poll_id", "unit_id", name="uq_ballots_poll_unit"),
    )
    op.create_index("idx_ballots_poll_id", "ballots", ["poll_id"])
    op.create_index("idx_ballots_option_id", "ballots", ["option_id"])


def downgrade() -> None:
    op.drop_table("ballots")
    op.drop_table("poll_options")
    op.drop_table("polls")
    op.drop_table("user_units")
    op.drop_table("units")
    op.drop_table("users")
