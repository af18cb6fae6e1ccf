"""Dining request model and its create payload.

A dining request is a meetup listing: a restaurant, a time, diet and
budget constraints, and a capacity. Requests are created by their
creator and afterwards only change status, when the close-out job marks
past requests as closed.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from app.core.clock import utc_now

DIET_TYPES = ("any", "veg", "non-veg")
BUDGETS = ("budget", "moderate", "premium")

STATUS_OPEN = "open"
STATUS_CLOSED = "closed"

DietType = Literal["any", "veg", "non-veg"]
Budget = Literal["budget", "moderate", "premium"]


class DiningRequest(SQLModel, table=True):
    """A request for dining companions.

    Attributes:
        id: Unique identifier (UUID).
        restaurant_name: Where to eat.
        location: Area or address of the restaurant.
        date_time: When the meal starts, in UTC.
        cuisine_type: Optional free-text cuisine, e.g. "Italian".
        diet_type: One of "any", "veg" or "non-veg".
        budget: One of "budget", "moderate" or "premium".
        max_participants: Capacity, at least 1. Not enforced atomically;
            concurrent joins can overshoot it.
        description: Optional free text from the creator.
        creator_id: Identity of the user who posted the request.
        status: "open" while listed, "closed" once past its date.
        created_at: When the request was posted.
    """
    __tablename__ = "dining_requests"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    restaurant_name: str
    location: str
    date_time: datetime = Field(index=True)
    cuisine_type: str | None = None
    diet_type: str = Field(default="any")
    budget: str = Field(default="moderate")
    max_participants: int = Field(default=4, ge=1)
    description: str | None = None
    creator_id: str = Field(index=True)
    status: str = Field(default=STATUS_OPEN, index=True)
    created_at: datetime = Field(default_factory=utc_now)


class DiningRequestCreate(SQLModel):
    """Validated fields for a new dining request.

    Required text fields are stripped and must not be blank. Optional text
    fields collapse to None when blank.
    """
    restaurant_name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    date_time: datetime
    cuisine_type: str | None = None
    diet_type: DietType = "any"
    budget: Budget = "moderate"
    max_participants: int = Field(default=4, ge=1)
    description: str | None = None

    @field_validator("restaurant_name", "location", mode="before")
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("cuisine_type", "description", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value
