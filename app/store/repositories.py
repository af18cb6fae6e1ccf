"""Table-scoped access to the data store.

Each repository covers one table and exposes only the reads and writes
the application performs on it. All methods raise ``StoreError`` on
failure and never return partial results.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.clock import utc_now
from app.models import DiningRequest, DiningRequestCreate, Participant, Profile, ProfileUpdate
from app.models.dining_request import STATUS_CLOSED, STATUS_OPEN
from app.store.errors import store_call

logger = logging.getLogger(__name__)


class RequestRepo:
    """Reads and writes on the ``dining_requests`` table."""

    def __init__(self, session: Session):
        self.session = session

    def list_open(self, upcoming_from: datetime | None = None) -> list[DiningRequest]:
        """Open requests ordered by date, optionally only those not yet started."""
        statement = select(DiningRequest).where(DiningRequest.status == STATUS_OPEN)
        if upcoming_from is not None:
            statement = statement.where(DiningRequest.date_time >= upcoming_from)
        statement = statement.order_by(DiningRequest.date_time)
        with store_call(self.session, "list open requests"):
            return list(self.session.exec(statement).all())

    def list_by_creator(self, creator_id: str) -> list[DiningRequest]:
        """All requests a user created, most recent date first."""
        statement = (
            select(DiningRequest)
            .where(DiningRequest.creator_id == creator_id)
            .order_by(DiningRequest.date_time.desc())
        )
        with store_call(self.session, "list requests by creator"):
            return list(self.session.exec(statement).all())

    def list_by_ids(
        self, request_ids: Iterable[UUID], exclude_creator: str | None = None
    ) -> list[DiningRequest]:
        """Requests with the given ids, most recent date first."""
        ids = list(request_ids)
        if not ids:
            return []
        statement = select(DiningRequest).where(DiningRequest.id.in_(ids))
        if exclude_creator is not None:
            statement = statement.where(DiningRequest.creator_id != exclude_creator)
        statement = statement.order_by(DiningRequest.date_time.desc())
        with store_call(self.session, "list requests by id"):
            return list(self.session.exec(statement).all())

    def insert(self, data: DiningRequestCreate, creator_id: str) -> DiningRequest:
        """Insert a new open request owned by ``creator_id``."""
        request = DiningRequest(
            **data.model_dump(),
            creator_id=creator_id,
            status=STATUS_OPEN,
        )
        with store_call(self.session, "insert request"):
            self.session.add(request)
            self.session.commit()
            self.session.refresh(request)
        return request

    def close_before(self, cutoff: datetime) -> int:
        """Mark open requests dated before ``cutoff`` as closed."""
        statement = (
            update(DiningRequest)
            .where(DiningRequest.status == STATUS_OPEN)
            .where(DiningRequest.date_time < cutoff)
            .values(status=STATUS_CLOSED)
        )
        with store_call(self.session, "close past requests"):
            result = self.session.execute(statement)
            self.session.commit()
        return result.rowcount or 0


class ParticipantRepo:
    """Reads and writes on the ``dining_participants`` table."""

    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> list[Participant]:
        with store_call(self.session, "list participants"):
            return list(self.session.exec(select(Participant)).all())

    def list_for_user(self, user_id: str) -> list[Participant]:
        statement = select(Participant).where(Participant.user_id == user_id)
        with store_call(self.session, "list participants for user"):
            return list(self.session.exec(statement).all())

    def insert(self, request_id: UUID, user_id: str) -> Participant:
        """Add a membership row. A repeated join raises a conflict."""
        participant = Participant(request_id=request_id, user_id=user_id)
        with store_call(self.session, "insert participant"):
            self.session.add(participant)
            self.session.commit()
            self.session.refresh(participant)
        return participant

    def delete(self, request_id: UUID, user_id: str) -> int:
        """Remove a membership row and return how many rows were deleted."""
        statement = (
            delete(Participant)
            .where(Participant.request_id == request_id)
            .where(Participant.user_id == user_id)
        )
        with store_call(self.session, "delete participant"):
            result = self.session.execute(statement)
            self.session.commit()
        return result.rowcount or 0


class ProfileRepo:
    """Reads and writes on the ``profiles`` table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Profile | None:
        with store_call(self.session, "get profile"):
            return self.session.get(Profile, user_id)

    def list_by_ids(self, user_ids: Iterable[str]) -> list[Profile]:
        ids = list(user_ids)
        if not ids:
            return []
        statement = select(Profile).where(Profile.id.in_(ids))
        with store_call(self.session, "list profiles"):
            return list(self.session.exec(statement).all())

    def upsert(self, user_id: str, data: ProfileUpdate) -> Profile:
        """Create the user's profile or overwrite its fields."""
        with store_call(self.session, "upsert profile"):
            profile = self.session.get(Profile, user_id)
            if profile is None:
                profile = Profile(id=user_id)
            profile.full_name = data.full_name
            profile.diet_preference = data.diet_preference
            profile.budget_preference = data.budget_preference
            profile.updated_at = utc_now()
            self.session.add(profile)
            self.session.commit()
            self.session.refresh(profile)
        return profile


class DiningStore:
    """Bundle of the three table repositories sharing one session."""

    def __init__(self, session: Session):
        self.session = session
        self.requests = RequestRepo(session)
        self.participants = ParticipantRepo(session)
        self.profiles = ProfileRepo(session)

    def ping(self) -> bool:
        """Return True if the store answers a trivial query."""
        try:
            self.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning(f"Data store unreachable: {e}")
            return False
        return True
