"""The single error type raised by the data store layer."""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import FlushError
from sqlmodel import Session

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A read or write against the data store failed.

    Attributes:
        message: Human-readable description from the underlying driver.
        code: "conflict" for constraint violations such as a repeated join,
            "unavailable" when the store could not be reached, "error"
            otherwise.
    """

    def __init__(self, message: str, code: str = "error"):
        super().__init__(message)
        self.message = message
        self.code = code


@contextmanager
def store_call(session: Session, action: str):
    """Run a store operation, converting driver errors into StoreError.

    The session is rolled back before the error propagates so it stays
    usable for the rest of the request.
    """
    try:
        yield
    except IntegrityError as e:
        session.rollback()
        logger.error(f"Store rejected {action}: {e.orig}")
        raise StoreError(f"Duplicate or invalid record: {e.orig}", code="conflict") from e
    except FlushError as e:
        # Same primary key already present in this session's identity map
        session.rollback()
        logger.error(f"Store rejected {action}: {e}")
        raise StoreError(f"Duplicate record: {e}", code="conflict") from e
    except OperationalError as e:
        session.rollback()
        logger.error(f"Store unavailable during {action}: {e.orig}")
        raise StoreError(f"Connection to the data store failed: {e.orig}", code="unavailable") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Store error during {action}: {e}")
        raise StoreError(str(e)) from e
