"""Tests for page and AJAX routes."""

from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.core.clock import utc_now
from app.dining import messages
from app.main import app
from app.models import DiningRequest, Participant, Profile
from app.routes.deps import get_online_status
from app.store.errors import StoreError
from app.store.repositories import ParticipantRepo, ProfileRepo

BOB = "bob@example.com"
JSON = {"Accept": "application/json"}


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    def test_root_redirects_to_browse(self, client: TestClient):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "/requests"


class TestAuthRoutes:
    """Tests for sign-in and the session."""

    def test_anonymous_browse_redirects_to_signin(self, client: TestClient):
        response = client.get("/requests", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/auth/signin"

    def test_anonymous_ajax_gets_401(self, client: TestClient, open_request: DiningRequest):
        response = client.post(f"/requests/{open_request.id}/join", headers=JSON)
        assert response.status_code == 401

    def test_status_after_signin(self, bob_client: TestClient):
        response = bob_client.get("/auth/status")
        assert response.json() == {"authenticated": True, "user_id": BOB}

    def test_signin_normalizes_email(self, client: TestClient):
        client.post("/auth/signin", data={"email": "  Bob@Example.COM "}, follow_redirects=False)
        assert client.get("/auth/status").json()["user_id"] == BOB

    def test_invalid_email_rejected(self, client: TestClient):
        response = client.post("/auth/signin", data={"email": "bob"})
        assert response.status_code == 422
        assert "Enter a valid email address." in response.text
        assert client.get("/auth/status").json()["authenticated"] is False

    def test_signout(self, bob_client: TestClient):
        response = bob_client.post("/auth/signout", follow_redirects=False)
        assert response.status_code == 303
        assert bob_client.get("/auth/status").json() == {"authenticated": False, "user_id": None}


class TestBrowseRoute:
    """Tests for the browse page."""

    def test_browse_lists_requests(
        self, bob_client: TestClient, open_request: DiningRequest, past_request: DiningRequest
    ):
        response = bob_client.get("/requests")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "The Italian Kitchen" in response.text
        assert "by Alice Smith" in response.text
        assert "Old Diner" not in response.text

    def test_browse_splits_own_requests(self, bob_client: TestClient, session: Session, open_request):
        session.add(
            DiningRequest(
                restaurant_name="Bob's Bistro",
                location="Riverside",
                date_time=utc_now() + timedelta(days=1),
                creator_id=BOB,
            )
        )
        session.commit()

        text = bob_client.get("/requests").text
        assert text.index("My requests") < text.index("Bob&#39;s Bistro") < text.index("Other requests")
        assert text.index("Other requests") < text.index("The Italian Kitchen")

    def test_browse_filters(
        self, bob_client: TestClient, open_request: DiningRequest, nearly_full_request: DiningRequest
    ):
        response = bob_client.get("/requests", params={"q": "harbour", "diet": "all", "budget": "budget"})
        assert "Spice Route" in response.text
        assert "The Italian Kitchen" not in response.text

        response = bob_client.get("/requests", params={"diet": "veg"})
        assert "The Italian Kitchen" in response.text
        assert "Spice Route" not in response.text

    def test_browse_offline_shows_banner(self, bob_client: TestClient, open_request: DiningRequest):
        app.dependency_overrides[get_online_status] = lambda: False
        response = bob_client.get("/requests")
        assert response.status_code == 200
        assert 'id="offline-banner"' in response.text
        assert "The Italian Kitchen" not in response.text


class TestJoinLeaveRoutes:
    """Tests for joining and leaving requests."""

    def test_join_json(self, bob_client: TestClient, nearly_full_request: DiningRequest, session: Session):
        response = bob_client.post(f"/requests/{nearly_full_request.id}/join", headers=JSON)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["joined"] is True
        assert data["participant_count"] == 4
        assert data["spots_left"] == 0
        assert data["label"] == "Leave"
        assert data["notice"]["title"] == "Joined!"
        assert session.exec(select(Participant).where(Participant.user_id == BOB)).first() is not None

    def test_join_full_request_json(self, client: TestClient, nearly_full_request: DiningRequest, session: Session):
        session.add(Participant(request_id=nearly_full_request.id, user_id="frank@example.com"))
        session.commit()
        client.post("/auth/signin", data={"email": BOB}, follow_redirects=False)

        response = client.post(f"/requests/{nearly_full_request.id}/join", headers=JSON)

        assert response.status_code == 409
        assert response.json()["label"] == "Full"

    def test_join_unknown_request_json(self, bob_client: TestClient):
        response = bob_client.post(f"/requests/{uuid4()}/join", headers=JSON)
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_join_offline_json(self, bob_client: TestClient, open_request: DiningRequest, session: Session):
        app.dependency_overrides[get_online_status] = lambda: False
        response = bob_client.post(f"/requests/{open_request.id}/join", headers=JSON)

        assert response.status_code == 503
        assert response.json()["notice"]["title"] == "You're offline"
        assert session.exec(select(Participant)).all() == []

    def test_join_form_redirects_with_notice(self, bob_client: TestClient, open_request: DiningRequest):
        response = bob_client.post(f"/requests/{open_request.id}/join", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/requests"

        page = bob_client.get("/requests").text
        assert "Joined!" in page
        assert ">Leave</button>" in page

    def test_leave_json(self, bob_client: TestClient, open_request: DiningRequest, session: Session):
        session.add(Participant(request_id=open_request.id, user_id=BOB))
        session.commit()

        response = bob_client.post(f"/requests/{open_request.id}/leave", headers=JSON)

        assert response.status_code == 200
        data = response.json()
        assert data["joined"] is False
        assert data["spots_left"] == 4
        assert data["label"] == "Join"
        assert session.exec(select(Participant)).all() == []

    def test_leave_not_joined_json(self, bob_client: TestClient, open_request: DiningRequest):
        response = bob_client.post(f"/requests/{open_request.id}/leave", headers=JSON)
        assert response.status_code == 409
        assert response.json()["notice"]["variant"] == "destructive"

    def test_join_when_read_fails_json(self, bob_client: TestClient, open_request: DiningRequest, session: Session):
        error = StoreError("Connection to the data store failed: x", code="unavailable")
        with patch.object(ProfileRepo, "list_by_ids", side_effect=error):
            response = bob_client.post(f"/requests/{open_request.id}/join", headers=JSON)

        assert response.status_code == 503
        notice = response.json()["notice"]
        assert notice["title"] == "Couldn't join"
        assert notice["description"] == messages.ERRORS["NETWORK"][1]
        assert session.exec(select(Participant)).all() == []

    def test_leave_when_read_fails_json(self, bob_client: TestClient, open_request: DiningRequest, session: Session):
        session.add(Participant(request_id=open_request.id, user_id=BOB))
        session.commit()

        with patch.object(ParticipantRepo, "list_all", side_effect=StoreError("permission denied")):
            response = bob_client.post(f"/requests/{open_request.id}/leave", headers=JSON)

        assert response.status_code == 503
        notice = response.json()["notice"]
        assert notice["title"] == "Couldn't leave"
        assert notice["description"] == "permission denied"
        assert len(session.exec(select(Participant)).all()) == 1


class TestCreateRoutes:
    """Tests for the create-request form."""

    def test_form_prefills_profile_defaults(self, bob_client: TestClient, session: Session):
        session.add(Profile(id=BOB, full_name="Bob", diet_preference="non-veg", budget_preference="premium"))
        session.commit()

        response = bob_client.get("/requests/new")
        assert response.status_code == 200
        assert '<option value="non-veg" selected' in response.text
        assert '<option value="premium" selected' in response.text

    def test_empty_restaurant_rerenders(self, bob_client: TestClient, session: Session):
        response = bob_client.post(
            "/requests",
            data={
                "restaurant_name": "",
                "location": "Station Road",
                "date_time": (utc_now() + timedelta(days=1)).strftime("%Y-%m-%dT%H:%M"),
            },
        )
        assert response.status_code == 422
        assert "Restaurant name is required." in response.text
        assert session.exec(select(DiningRequest)).all() == []

    def test_create_request(self, bob_client: TestClient, session: Session):
        response = bob_client.post(
            "/requests",
            data={
                "restaurant_name": "Noodle Bar",
                "location": "Station Road",
                "date_time": (utc_now() + timedelta(days=1)).strftime("%Y-%m-%dT%H:%M"),
                "diet_type": "any",
                "budget": "budget",
                "max_participants": "3",
            },
            follow_redirects=False,
        )
        assert response.status_code == 303

        created = session.exec(select(DiningRequest)).one()
        assert created.creator_id == BOB
        assert created.max_participants == 3

        page = bob_client.get("/requests").text
        assert "Request created!" in page
        assert "Your request" in page


class TestHistoryRoute:
    """Tests for the history page."""

    def test_history_tabs(
        self, bob_client: TestClient, session: Session, open_request: DiningRequest,
        past_request: DiningRequest,
    ):
        session.add(Participant(request_id=past_request.id, user_id=BOB))
        session.commit()

        created = bob_client.get("/history")
        assert created.status_code == 200
        assert "Old Diner" not in created.text

        joined = bob_client.get("/history", params={"tab": "joined"})
        assert "Old Diner" in joined.text
        assert "The Italian Kitchen" not in joined.text


class TestProfileRoutes:
    """Tests for the profile page."""

    def test_profile_defaults(self, bob_client: TestClient):
        response = bob_client.get("/profile")
        assert response.status_code == 200

    def test_save_profile(self, bob_client: TestClient, session: Session):
        response = bob_client.post(
            "/profile",
            data={"full_name": "Bob Jones", "diet_preference": "veg", "budget_preference": "budget"},
            follow_redirects=False,
        )
        assert response.status_code == 303

        profile = session.get(Profile, BOB)
        assert profile.full_name == "Bob Jones"
        assert "Profile updated!" in bob_client.get("/profile").text

    def test_invalid_profile(self, bob_client: TestClient):
        response = bob_client.post("/profile", data={"diet_preference": "carnivore"})
        assert response.status_code == 422
