# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine
from typing import Generator

import models.tables  # noqa: F401  (registers tables on the metadata)
from core.accounts import AccountProvisioner
from core.auth_helpers import create_access_token
from core.invitation_response import InvitationResponseCoordinator
from core.invitations import InvitationEngine
from core.map_authority import MapAuthority
from core.repository import MapRepository
from core.role_guard import RoleMutationGuard
from models.user import Principal


class RecordingNotifier:
    """Collects e-mails instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.invitations = []
        self.responses = []

    def send_invitation_email(self, email, inviter_name, map_name, role, token):
        if self.fail:
            raise RuntimeError("SMTP down")
        self.invitations.append(
            {"email": email, "inviter_name": inviter_name, "map_name": map_name, "role": role, "token": token}
        )

    def send_response_email(self, inviter_email, invitee_name, map_name, status):
        if self.fail:
            raise RuntimeError("SMTP down")
        self.responses.append(
            {"email": inviter_email, "invitee_name": invitee_name, "map_name": map_name, "status": status}
        )


# ============================================================
# Database
# ============================================================
@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def repo(session) -> MapRepository:
    return MapRepository(session)


# ============================================================
# Seed data
# ============================================================
def make_user(repo: MapRepository, email: str, name: str) -> Principal:
    with repo.transaction():
        user = repo.add_user(email=email, password_hash="hash", display_name=name, email_verified=True)
        principal = Principal(id=user.id, email=user.email, display_name=name)
    return principal


@pytest.fixture
def owner(repo) -> Principal:
    return make_user(repo, "owner@example.com", "Owner")


@pytest.fixture
def alice(repo) -> Principal:
    return make_user(repo, "alice@example.com", "Alice")


@pytest.fixture
def bob(repo) -> Principal:
    return make_user(repo, "bob@example.com", "Bob")


@pytest.fixture
def carol(repo) -> Principal:
    return make_user(repo, "carol@example.com", "Carol")


@pytest.fixture
def private_map(repo, owner):
    with repo.transaction():
        map_id = repo.add_map(owner_id=owner.id, name="Private Map", is_public=False).id
    return map_id


@pytest.fixture
def public_map(repo, owner):
    with repo.transaction():
        map_id = repo.add_map(owner_id=owner.id, name="Public Map", is_public=True).id
    return map_id


def grant(repo: MapRepository, map_id: str, user_id: str, role: str):
    """Write a role row directly, bypassing the guard (test setup only)."""
    with repo.transaction():
        repo.upsert_role(map_id, user_id, role)


# ============================================================
# Engine objects
# ============================================================
@pytest.fixture
def authority(repo) -> MapAuthority:
    return MapAuthority(repo)


@pytest.fixture
def guard(repo) -> RoleMutationGuard:
    return RoleMutationGuard(repo)


@pytest.fixture
def invitations(repo) -> InvitationEngine:
    return InvitationEngine(repo, ttl_days=7)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def coordinator(repo, invitations, notifier) -> InvitationResponseCoordinator:
    return InvitationResponseCoordinator(repo, invitations, AccountProvisioner(repo), notifier)


# ============================================================
# HTTP
# ============================================================
@pytest.fixture(scope="function")
def app(session, notifier):
    """Create a test FastAPI application bound to the test session."""
    from main import create_app
    from database import get_session
    from dependencies.services import get_notifier

    app = create_app(start_background=False)
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield app
    app.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(principal: Principal) -> dict:
    token = create_access_token(principal.id, principal.email, principal.display_name)
    return {"Authorization": f"Bearer {token}"}
