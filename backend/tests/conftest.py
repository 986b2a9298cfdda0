import os

# Keep the app's own engine off disk; every test uses test_engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from teamops.database import get_session  # noqa: E402
from teamops.main import app  # noqa: E402
from teamops.utils.actor_guards import Actor, ActorRole  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from teamops.models.calendar_event import CalendarEvent  # noqa: F401
    from teamops.models.scrim import Scrim  # noqa: F401
    from teamops.models.scrim_game import ScrimGame  # noqa: F401
    from teamops.models.scrim_series import ScrimSeries  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration, so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def coach() -> Actor:
    return Actor(user_id="coach-1", role=ActorRole.coach)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="admin-1", role=ActorRole.admin)


@pytest.fixture
def player() -> Actor:
    return Actor(user_id="player-1", role=ActorRole.player)


@pytest.fixture
def coach_headers():
    return {"X-Actor-Id": "coach-1", "X-Actor-Role": "coach"}


@pytest.fixture
def player_headers():
    return {"X-Actor-Id": "player-1", "X-Actor-Role": "player"}
