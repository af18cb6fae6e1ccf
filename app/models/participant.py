"""Participant model linking a user to a dining request they joined."""

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from app.core.clock import utc_now


class Participant(SQLModel, table=True):
    """A membership row: user ``user_id`` joined request ``request_id``.

    The composite primary key makes a second join of the same request by
    the same user fail with an integrity error. Rows are created on join
    and deleted on leave, never updated. Creators never get a row for
    their own request.
    """
    __tablename__ = "dining_participants"

    request_id: UUID = Field(foreign_key="dining_requests.id", primary_key=True)
    user_id: str = Field(primary_key=True, index=True)
    joined_at: datetime = Field(default_factory=utc_now)
