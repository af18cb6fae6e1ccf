"""Closing out dining requests whose date has passed."""
import logging
from datetime import datetime

from app.core.clock import utc_now
from app.store.repositories import DiningStore

logger = logging.getLogger(__name__)


def close_past_requests(store: DiningStore, now: datetime | None = None) -> int:
    """Set open requests dated before ``now`` to closed.

    Returns the number of requests closed. Participant rows are kept so
    the requests still show up in the users' history.
    """
    closed = store.requests.close_before(now or utc_now())
    if closed:
        logger.info(f"Closed {closed} past dining requests")
    return closed
