"""Application state for dining requests and the views derived from it.

``DiningState`` is immutable. The reducers below return a new state for
each event (fetch succeeded, join succeeded, leave succeeded), which keeps
the derivation rules testable without rendering anything.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import NamedTuple
from uuid import UUID

from app.models import DiningRequest, Participant, Profile

ANONYMOUS = "Anonymous"


class Membership(NamedTuple):
    """A participant row reduced to its identity."""
    request_id: UUID
    user_id: str


@dataclass(frozen=True)
class RequestView:
    """A dining request decorated for display.

    Unknown attributes are read from the wrapped request, so a view can be
    used wherever a request is expected (filters, templates).
    """
    request: DiningRequest
    creator_name: str
    participant_count: int
    is_creator: bool = False
    is_joined: bool = False

    def __getattr__(self, name):
        if name == "request":
            raise AttributeError(name)
        return getattr(self.request, name)

    @property
    def spots_left(self) -> int:
        """Remaining capacity. Display only, may go negative under races."""
        return self.request.max_participants - self.participant_count

    @property
    def is_full(self) -> bool:
        return self.spots_left <= 0

    @property
    def can_join(self) -> bool:
        return not self.is_creator and not self.is_joined and not self.is_full

    @property
    def action_label(self) -> str | None:
        """Label of the join control, None for the creator (no control)."""
        if self.is_creator:
            return None
        if self.is_joined:
            return "Leave"
        return "Full" if self.is_full else "Join"

    @property
    def budget_symbol(self) -> str:
        return {"budget": "$", "moderate": "$$"}.get(self.request.budget, "$$$")


def count_participants(participants: Iterable[Membership]) -> dict[UUID, int]:
    """Number of distinct participants per request."""
    counts: dict[UUID, int] = {}
    for membership in set(participants):
        counts[membership.request_id] = counts.get(membership.request_id, 0) + 1
    return counts


def creator_name(profiles: Mapping[str, Profile], creator_id: str) -> str:
    profile = profiles.get(creator_id)
    if profile is None or not profile.full_name:
        return ANONYMOUS
    return profile.full_name


def build_views(
    requests: Iterable[DiningRequest],
    participants: Iterable[Membership],
    profiles: Mapping[str, Profile],
    user_id: str | None,
) -> list[RequestView]:
    """Join requests with creator names and participant counts."""
    participants = tuple(participants)
    counts = count_participants(participants)
    joined = {m.request_id for m in participants if m.user_id == user_id}
    return [
        RequestView(
            request=r,
            creator_name=creator_name(profiles, r.creator_id),
            participant_count=counts.get(r.id, 0),
            is_creator=user_id is not None and r.creator_id == user_id,
            is_joined=r.id in joined,
        )
        for r in requests
    ]


def split_by_creator(views: Iterable[RequestView], user_id: str | None):
    """Split views into (mine, others), keeping their order."""
    mine, others = [], []
    for view in views:
        (mine if view.creator_id == user_id else others).append(view)
    return mine, others


@dataclass(frozen=True)
class DiningState:
    """Everything the browse view knows about requests for one user.

    Attributes:
        user_id: The signed-in user the state was loaded for.
        requests: Fetched dining requests, in fetch order.
        participants: Participant rows for all requests.
        profiles: Creator profiles by user id.
        joined: Ids of requests the user has joined.
        loading: True until a fetch finishes or is skipped.
        online: False when the fetch was skipped because the store was
            unreachable.
    """
    user_id: str | None = None
    requests: tuple[DiningRequest, ...] = ()
    participants: tuple[Membership, ...] = ()
    profiles: Mapping[str, Profile] = field(default_factory=dict)
    joined: frozenset[UUID] = frozenset()
    loading: bool = True
    online: bool = True

    def find(self, request_id: UUID) -> DiningRequest | None:
        return next((r for r in self.requests if r.id == request_id), None)

    def participant_count(self, request_id: UUID) -> int:
        return count_participants(self.participants).get(request_id, 0)

    def view(self, request_id: UUID) -> RequestView | None:
        request = self.find(request_id)
        if request is None:
            return None
        return build_views([request], self.participants, self.profiles, self.user_id)[0]

    def views(self) -> list[RequestView]:
        return build_views(self.requests, self.participants, self.profiles, self.user_id)


def fetch_succeeded(
    user_id: str,
    requests: Iterable[DiningRequest],
    participants: Iterable[Participant | Membership],
    profiles: Iterable[Profile],
) -> DiningState:
    """State after a complete fetch of requests, participants and profiles."""
    memberships = tuple(Membership(p.request_id, p.user_id) for p in participants)
    return DiningState(
        user_id=user_id,
        requests=tuple(requests),
        participants=memberships,
        profiles={p.id: p for p in profiles},
        joined=frozenset(m.request_id for m in memberships if m.user_id == user_id),
        loading=False,
    )


def skipped(user_id: str | None, online: bool = True) -> DiningState:
    """Empty, not-loading state used when a fetch is skipped or fails."""
    return DiningState(user_id=user_id, loading=False, online=online)


def join_succeeded(state: DiningState, request_id: UUID) -> DiningState:
    """Add the user to a request's participants and joined set."""
    membership = Membership(request_id, state.user_id)
    participants = state.participants
    if membership not in participants:
        participants = participants + (membership,)
    return replace(state, participants=participants, joined=state.joined | {request_id})


def leave_succeeded(state: DiningState, request_id: UUID) -> DiningState:
    """Remove the user from a request's participants and joined set."""
    membership = Membership(request_id, state.user_id)
    return replace(
        state,
        participants=tuple(m for m in state.participants if m != membership),
        joined=state.joined - {request_id},
    )
