"""Housing unit and user-to-unit link models."""

import uuid

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from condo_voting.models.base import Base, TimestampMixin, UUIDMixin


class Unit(Base, UUIDMixin, TimestampMixin):
    """A housing unit (unidade); the identity that casts ballots."""

    __tablename__ = "units"

    number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    residents: Mapped[list["UserUnit"]] = relationship(back_populates="unit", cascade="all, delete-orphan")


class UserUnit(Base, UUIDMixin):
    """Links a user to a unit they may vote through.

    Owners, co-owners and tenants with a power of attorney each get a row;
    removing a row never touches the unit's ballots.
    """

    __tablename__ = "user_units"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    unit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
    )

    unit: Mapped["Unit"] = relationship(back_populates="residents")

    __table_args__ = (
        UniqueConstraint("user_id", "unit_id", name="uq_user_units_user_unit"),
        Index("idx_user_units_unit_id", "unit_id"),
    )
