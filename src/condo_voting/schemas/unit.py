"""Pydantic v2 schemas for units and per-unit poll listings."""

import uuid
from datetime import datetime

from pydantic import BaseModel


class UnitResponse(BaseModel):
    """A housing unit."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    number: str
    created_at: datetime


class VotablePollResponse(BaseModel):
    """An open poll the given unit can still vote in."""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    title: str
    end_at: datetime
