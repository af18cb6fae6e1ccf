"""Shared test fixtures."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.clock import utc_now
from app.core.database import get_session
from app.main import app
from app.models import DiningRequest, Participant, Profile
from app.store.repositories import DiningStore

ALICE = "alice@example.com"
BOB = "bob@example.com"


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> DiningStore:
    return DiningStore(session)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="bob_client")
def bob_client_fixture(client: TestClient) -> TestClient:
    """A test client signed in as bob."""
    response = client.post("/auth/signin", data={"email": BOB}, follow_redirects=False)
    assert response.status_code == 303
    return client


@pytest.fixture(name="alice_profile")
def alice_profile_fixture(session: Session) -> Profile:
    profile = Profile(id=ALICE, full_name="Alice Smith", diet_preference="veg", budget_preference="premium")
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture(name="open_request")
def open_request_fixture(session: Session, alice_profile: Profile) -> DiningRequest:
    """An open request by alice tomorrow with nobody joined."""
    request = DiningRequest(
        restaurant_name="The Italian Kitchen",
        location="Downtown",
        date_time=utc_now() + timedelta(days=1),
        cuisine_type="Italian",
        diet_type="veg",
        budget="moderate",
        max_participants=4,
        description="Pasta night",
        creator_id=ALICE,
    )
    session.add(request)
    session.commit()
    session.refresh(request)
    return request


@pytest.fixture(name="nearly_full_request")
def nearly_full_request_fixture(session: Session) -> DiningRequest:
    """An open request for four people with three already joined."""
    request = DiningRequest(
        restaurant_name="Spice Route",
        location="Harbour Street",
        date_time=utc_now() + timedelta(days=2),
        cuisine_type="Indian",
        diet_type="non-veg",
        budget="budget",
        max_participants=4,
        creator_id=ALICE,
    )
    session.add(request)
    session.flush()
    for user_id in ("carol@example.com", "dave@example.com", "erin@example.com"):
        session.add(Participant(request_id=request.id, user_id=user_id))
    session.commit()
    session.refresh(request)
    return request


@pytest.fixture(name="past_request")
def past_request_fixture(session: Session) -> DiningRequest:
    """A request still marked open although its date has passed."""
    request = DiningRequest(
        restaurant_name="Old Diner",
        location="Uptown",
        date_time=utc_now() - timedelta(days=2),
        creator_id=ALICE,
    )
    session.add(request)
    session.commit()
    session.refresh(request)
    return request
