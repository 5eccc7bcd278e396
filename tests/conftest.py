from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from app.core.rate_limiter import rate_limiter
from app.database import get_db
from app.dependencies import (
    get_current_admin,
    get_current_profile,
    get_current_user,
    get_current_user_full_access,
)
from app.main import app


@dataclass
class StubUser:
    id: str = "user-1"
    email: str = "user@example.com"
    is_admin: bool = False
    is_active: bool = True
    password_hash: str = "hashed-password"
    temp_password_hash: str | None = None
    temp_password_expires_at: object | None = None
    stripe_customer_id: str | None = None


@dataclass
class StubProfile:
    id: str = "profile-1"
    user_id: str = "user-1"
    email: str = "user@example.com"
    full_name: str = "Riley Student"
    role: str = "SEEKER"
    bio: str | None = "CS junior who likes backend work"
    department: str | None = "Computer Science"
    year: str | None = "Junior"
    avatar_url: str | None = None
    skills: list[str] = field(default_factory=lambda: ["Python", "SQL"])
    interests: list[str] = field(default_factory=lambda: ["Startups"])


@pytest.fixture
def stub_user() -> StubUser:
    return StubUser()


@pytest.fixture
def stub_profile() -> StubProfile:
    return StubProfile()


@pytest.fixture
def finder_profile() -> StubProfile:
    return StubProfile(id="finder-1", user_id="user-2", email="finder@example.com", full_name="Fran Finder", role="FINDER")


@pytest.fixture
def admin_user() -> StubUser:
    return StubUser(id="admin-1", email="admin@example.com", is_admin=True)


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


def _override_common(user, profile):
    def _db_override():
        yield object()

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_current_user_full_access] = lambda: user
    app.dependency_overrides[get_current_profile] = lambda: profile


@pytest.fixture
def client(stub_user: StubUser, stub_profile: StubProfile):
    _override_common(stub_user, stub_profile)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def finder_client(finder_profile: StubProfile):
    _override_common(StubUser(id=finder_profile.user_id, email=finder_profile.email), finder_profile)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(admin_user: StubUser):
    _override_common(admin_user, StubProfile(id="admin-profile", user_id=admin_user.id, email=admin_user.email))
    app.dependency_overrides[get_current_admin] = lambda: admin_user
    yield TestClient(app)
    app.dependency_overrides.clear()


class StubRow:
    """Attribute bag standing in for ORM rows in router tests."""

    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


JOB_DEFAULTS = {
    "id": "job-1",
    "title": "Backend Developer for Study App",
    "type": "STARTUP_COLLABORATION",
    "description": "Build the API for a student study-group app.",
    "requirements": "Python, FastAPI",
    "duration": "3 months",
    "compensation": "Equity",
    "location": "Remote",
    "team_size": "3",
    "tags": ["Python", "FastAPI"],
    "status": "APPROVED",
    "is_draft": False,
    "is_published": True,
    "published_at": None,
    "is_filled": False,
    "filled_at": None,
    "views": 10,
    "applications_count": 0,
    "approved_at": None,
    "rejection_reason": None,
    "is_paid": False,
    "payment_amount": None,
    "created_by_id": "finder-1",
    "created_by": None,
    "created_at": None,
}


@pytest.fixture
def make_job():
    def _make(**overrides):
        return StubRow(**{**JOB_DEFAULTS, **overrides})

    return _make


@pytest.fixture
def make_application():
    def _make(**overrides):
        fields = {
            "id": "app-1",
            "job_id": "job-1",
            "applicant_id": "profile-1",
            "resume_id": None,
            "proposal": "I have built two FastAPI services.",
            "status": "PENDING",
            "match_score": None,
            "match_analysis": None,
            "created_at": None,
            "updated_at": None,
            "job": None,
            "applicant": None,
            "resume": None,
        }
        fields.update(overrides)
        return StubRow(**fields)

    return _make


@pytest.fixture
def make_call_request():
    def _make(**overrides):
        fields = {
            "id": "call-1",
            "job_id": "job-1",
            "requester_id": "profile-1",
            "receiver_id": "finder-1",
            "message": "Can we talk about the role?",
            "status": "PENDING",
            "scheduled_time": None,
            "room_id": None,
            "room_name": None,
            "room_code": None,
            "accepted_at": None,
            "rejected_at": None,
            "reject_reason": None,
            "created_at": None,
            "job": None,
            "requester": None,
            "receiver": None,
        }
        fields.update(overrides)
        return StubRow(**fields)

    return _make
