"""Read and mutation operations on dining requests.

Every operation takes the store, the signed-in user and whether the
store is reachable. Offline operations return immediately without
contacting the store. Store failures never escape: they come back as a
notice on the result.

Join and leave are two-phase updates. The change is applied to a copy
of the state, the store write is attempted, and the copy is kept on
success or dropped in favour of the original state on failure.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from app.core.clock import utc_now
from app.dining import messages
from app.dining.forms import parse_profile_form, parse_request_form
from app.dining.messages import Notice
from app.dining.state import (
    DiningState,
    Membership,
    RequestView,
    build_views,
    fetch_succeeded,
    join_succeeded,
    leave_succeeded,
    skipped,
)
from app.models import DiningRequest, Profile
from app.store.errors import StoreError
from app.store.repositories import DiningStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a read. ``notice`` is set only when the read failed."""
    state: DiningState
    notice: Notice | None = None

    @property
    def ok(self) -> bool:
        return self.notice is None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a join or leave: the state to show next and what happened."""
    state: DiningState
    ok: bool
    notice: Notice


@dataclass(frozen=True)
class FormResult:
    """Outcome of a form submission (create request, save profile)."""
    ok: bool
    notice: Notice | None = None
    errors: dict[str, str] = field(default_factory=dict)
    record: DiningRequest | Profile | None = None


@dataclass(frozen=True)
class History:
    created: list[RequestView] = field(default_factory=list)
    joined: list[RequestView] = field(default_factory=list)


def load_browse(
    store: DiningStore,
    user_id: str,
    online: bool,
    upcoming_only: bool = True,
    now: datetime | None = None,
) -> LoadResult:
    """Fetch open requests with participant counts and creator profiles.

    Profiles are fetched for the creators of the fetched requests only. A
    failure in any of the three reads fails the whole load.
    """
    if not online:
        logger.warning(f"Store unreachable, skipping request fetch for {user_id}")
        return LoadResult(skipped(user_id, online=False))

    try:
        requests = store.requests.list_open(upcoming_from=(now or utc_now()) if upcoming_only else None)
        participants = store.participants.list_all()
        creator_ids = {r.creator_id for r in requests}
        profiles = store.profiles.list_by_ids(creator_ids)
    except StoreError as e:
        return LoadResult(skipped(user_id), messages.error_notice("LOADING_REQUESTS", e))

    return LoadResult(fetch_succeeded(user_id, requests, participants, profiles))


def load_history(store: DiningStore, user_id: str, online: bool) -> tuple[History, Notice | None]:
    """Requests the user created and requests they joined, newest first."""
    if not online:
        return History(), messages.offline_notice()

    try:
        created = store.requests.list_by_creator(user_id)
        joined_ids = {p.request_id for p in store.participants.list_for_user(user_id)}
        joined = store.requests.list_by_ids(joined_ids, exclude_creator=user_id)
        # All rows, for the participant counts on both tabs
        participants = [Membership(p.request_id, p.user_id) for p in store.participants.list_all()]
        creator_ids = {r.creator_id for r in joined} | {user_id}
        profiles = {p.id: p for p in store.profiles.list_by_ids(creator_ids)}
    except StoreError as e:
        return History(), messages.error_notice("LOADING_HISTORY", e)

    return History(
        created=build_views(created, participants, profiles, user_id),
        joined=build_views(joined, participants, profiles, user_id),
    ), None


def load_profile(store: DiningStore, user_id: str, online: bool) -> tuple[Profile, Notice | None]:
    """The user's profile, or an unsaved default one."""
    default = Profile(id=user_id)
    if not online:
        return default, messages.offline_notice()
    try:
        profile = store.profiles.get(user_id)
    except StoreError as e:
        return default, messages.error_notice("LOADING_PROFILE", e)
    return profile or default, None


def join_request(
    store: DiningStore, state: DiningState, request_id: UUID, online: bool
) -> MutationResult:
    """Join a request on behalf of ``state.user_id``.

    Refused without a store call when offline, when the request is unknown,
    owned by the user, already joined or full.
    """
    if not online:
        return MutationResult(state, False, messages.offline_notice("join"))

    view = state.view(request_id)
    refusal = None
    if view is None:
        refusal = messages.NOT_FOUND
    elif view.is_creator:
        refusal = messages.OWN_REQUEST
    elif view.is_joined:
        refusal = messages.ALREADY_JOINED
    elif view.is_full:
        refusal = messages.REQUEST_FULL
    if refusal:
        return MutationResult(state, False, messages.error_notice("JOINING_REQUEST", description=refusal))

    optimistic = join_succeeded(state, request_id)
    try:
        store.participants.insert(request_id, state.user_id)
    except StoreError as e:
        logger.info(f"Join of {request_id} by {state.user_id} rejected: {e.message}")
        return MutationResult(state, False, messages.error_notice("JOINING_REQUEST", e))

    logger.info(f"User {state.user_id} joined request {request_id}")
    return MutationResult(optimistic, True, messages.success_notice("JOINED_REQUEST"))


def leave_request(
    store: DiningStore, state: DiningState, request_id: UUID, online: bool
) -> MutationResult:
    """Leave a joined request on behalf of ``state.user_id``.

    A leave that deletes nothing is reported as a failure and leaves the
    state untouched.
    """
    if not online:
        return MutationResult(state, False, messages.offline_notice("leave"))

    if request_id not in state.joined:
        return MutationResult(
            state, False, messages.error_notice("LEAVING_REQUEST", description=messages.NOT_JOINED)
        )

    optimistic = leave_succeeded(state, request_id)
    try:
        deleted = store.participants.delete(request_id, state.user_id)
    except StoreError as e:
        logger.info(f"Leave of {request_id} by {state.user_id} rejected: {e.message}")
        return MutationResult(state, False, messages.error_notice("LEAVING_REQUEST", e))

    if not deleted:
        return MutationResult(
            state, False, messages.error_notice("LEAVING_REQUEST", description=messages.NOT_JOINED)
        )

    logger.info(f"User {state.user_id} left request {request_id}")
    return MutationResult(optimistic, True, messages.success_notice("LEFT_REQUEST"))


def create_request(
    store: DiningStore,
    user_id: str,
    form: Mapping[str, str],
    online: bool,
    now: datetime | None = None,
) -> FormResult:
    """Validate the form and insert a new open request."""
    if not online:
        return FormResult(False, messages.offline_notice("create"))

    data, errors = parse_request_form(form, now=now)
    if data is None:
        return FormResult(False, errors=errors)

    try:
        request = store.requests.insert(data, creator_id=user_id)
    except StoreError as e:
        return FormResult(False, messages.error_notice("CREATING_REQUEST", e))

    logger.info(f"User {user_id} created request {request.id} at {request.restaurant_name}")
    return FormResult(True, messages.success_notice("REQUEST_CREATED"), record=request)


def save_profile(
    store: DiningStore, user_id: str, form: Mapping[str, str], online: bool
) -> FormResult:
    """Upsert the user's profile from the submitted form."""
    if not online:
        return FormResult(False, messages.offline_notice("profile"))

    data, errors = parse_profile_form(form)
    if data is None:
        return FormResult(False, errors=errors)

    try:
        profile = store.profiles.upsert(user_id, data)
    except StoreError as e:
        return FormResult(False, messages.error_notice("SAVING_PROFILE", e))

    logger.info(f"Saved profile for {user_id}")
    return FormResult(True, messages.success_notice("PROFILE_SAVED"), record=profile)
