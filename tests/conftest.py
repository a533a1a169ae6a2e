# tests/conftest.py
import pytest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from tasklane.main import app
from tasklane.db.database import Base, get_db
from tasklane.auth.context import ActorContext
from tasklane.auth.rbac import get_current_organization_id, get_current_user_id
from tasklane.models import Organization, OrganizationMember, Task, User
from tasklane.models.base_model import utcnow
from tasklane.services.email_service import EmailService


@pytest.fixture(scope="session")
def engine():
    """Create an in-memory SQLite database shared across tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def clean_db(engine):
    """Reset all tables before each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture()
def db(engine):
    """Return a new SQLAlchemy session for each test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture outgoing SMTP mail instead of opening a connection."""
    sent = []

    def fake_send_email(self, to, subject, html_body):
        sent.append({"to": to, "subject": subject, "html_body": html_body})
        return True

    monkeypatch.setattr(EmailService, "_send_email", fake_send_email)
    return sent


# ---------------------------------------------------------
# Data helpers
# ---------------------------------------------------------

@pytest.fixture
def make_user(db):
    def _make(user_id, email=None, first_name=None, last_name=None):
        user = User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            first_name=first_name,
            last_name=last_name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_member(db):
    def _make(user_id, role="member", organization_id="org-1", joined_via="direct"):
        member = OrganizationMember(
            organization_id=organization_id,
            user_id=user_id,
            role=role,
            joined_at=utcnow(),
            joined_via=joined_via,
        )
        db.add(member)
        db.commit()
        db.refresh(member)
        return member
    return _make


@pytest.fixture
def make_task(db):
    def _make(creator_id="member-1", assignee_id=None, status="todo", organization_id="org-1", title="Task"):
        task = Task(
            organization_id=organization_id,
            title=title,
            description="",
            status=status,
            priority="medium",
            creator_id=creator_id,
            assignee_id=assignee_id,
            created_at=utcnow(),
            completed_at=utcnow() if status == "done" else None,
        )
        db.add(task)
        db.commit()
        db.refresh(task)
        return task
    return _make


@pytest.fixture
def org(db, make_user, make_member):
    """
    Organization org-1 ("Acme") with one member per role:
    owner-1, admin-1, member-1, viewer-1.
    """
    organization = Organization(id="org-1", name="Acme", owner_id="owner-1")
    db.add(organization)
    db.commit()

    make_user("owner-1", email="owner@example.com", first_name="Olivia", last_name="Owner")
    make_user("admin-1", email="admin@example.com", first_name="Adam", last_name="Admin")
    make_user("member-1", email="member@example.com")
    make_user("viewer-1", email="viewer@example.com")

    make_member("owner-1", role="owner", joined_via="owner")
    make_member("admin-1", role="admin")
    make_member("member-1", role="member")
    make_member("viewer-1", role="viewer")

    db.refresh(organization)
    return organization


@pytest.fixture
def actor():
    """Build an ActorContext for org-1."""
    def _actor(user_id, role, organization_id="org-1"):
        return ActorContext(actor_id=user_id, role=role, organization_id=organization_id)
    return _actor


# ---------------------------------------------------------
# HTTP client
# ---------------------------------------------------------

@pytest.fixture
def auth_state():
    """Who the test client is authenticated as. Mutate to switch users."""
    return {"user_id": "owner-1", "organization_id": "org-1"}


@pytest.fixture
def client(db, auth_state):
    """FastAPI test client that routes all DB deps to the test session."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    async def override_get_current_user_id():
        return auth_state["user_id"]

    async def override_get_current_organization_id():
        return auth_state["organization_id"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = override_get_current_user_id
    app.dependency_overrides[get_current_organization_id] = override_get_current_organization_id

    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()
