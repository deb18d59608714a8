"""User model: the identity behind a ballot in tracked polls."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from condo_voting.models.base import Base, TimestampMixin, UUIDMixin

ROLE_STAFF = "staff"
ROLE_COUNCIL = "council"
ROLE_AUDITOR = "auditor"
ROLE_RESIDENT = "resident"
VALID_ROLES = (ROLE_STAFF, ROLE_COUNCIL, ROLE_AUDITOR, ROLE_RESIDENT)


class User(Base, UUIDMixin, TimestampMixin):
    """A person known to the association.

    Credentials live with the identity provider; this table only holds what
    the ledger needs to resolve eligibility and authorize audit reads.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_RESIDENT)
    # Residents elected to the council may audit tracked polls.
    council_member: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
