"""Dependencies shared by the page routes."""
from fastapi import Depends, Request
from sqlmodel import Session

from app.core.database import get_session
from app.dining.messages import Notice
from app.store.repositories import DiningStore


class NotSignedIn(Exception):
    """Raised when a page needs a user and the session has none."""


def get_store(session: Session = Depends(get_session)) -> DiningStore:
    return DiningStore(session)


def get_online_status(store: DiningStore = Depends(get_store)) -> bool:
    """Whether the data store is reachable for this request."""
    return store.ping()


def current_user(request: Request) -> str:
    """Identity of the signed-in user, taken from the session cookie."""
    user_id = request.session.get("user_id")
    if not user_id:
        raise NotSignedIn()
    return user_id


def wants_json(request: Request) -> bool:
    """Check if the client prefers JSON response (AJAX request)."""
    accept = request.headers.get("accept", "")
    return "application/json" in accept


def flash(request: Request, notice: Notice | None) -> None:
    """Queue a notice for the next rendered page."""
    if notice is None:
        return
    request.session.setdefault("notices", []).append(notice.to_dict())
