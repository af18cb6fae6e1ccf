"""Engine and sessions for the dining store.

SQLite stands in for the hosted backend. Three tables live here:
``dining_requests``, ``dining_participants`` and ``profiles``. Routes get
a session per HTTP request through ``get_session``; the close-out job
opens its own from ``engine``.

Each pooled connection is set up with:
    - ``journal_mode=WAL`` so page reads are not blocked while the
      close-out job flips past requests to closed.
    - ``foreign_keys=ON`` so a participant row cannot point at a dining
      request that does not exist.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

# Sessions are handed between FastAPI's worker threads
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False},
    echo=settings.debug,
)


@sa_event.listens_for(engine, "connect")
def configure_connection(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create the requests, participants and profiles tables if missing."""
    # Registers every table on SQLModel.metadata
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Per-request session dependency, overridden in tests."""
    with Session(engine) as session:
        yield session
