"""ORM model registry -- import all models so Alembic autogenerate discovers them."""

from condo_voting.models.ballot import Ballot
from condo_voting.models.base import Base
from condo_voting.models.poll import Poll, PollOption
from condo_voting.models.unit import Unit, UserUnit
from condo_voting.models.user import User

__all__ = [
    "Ballot",
    "Base",
    "Poll",
    "PollOption",
    "Unit",
    "User",
    "UserUnit",
]
