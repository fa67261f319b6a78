import os

# Keep the app's own engine off disk; tests use test_engine below.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from matchplan.database import get_session  # noqa: E402
from matchplan.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a fresh in-memory database session per test

    StaticPool makes every connection share the same :memory: database,
    which TestClient needs since it runs requests on another thread.
    """
    # Import all models to ensure they're registered BEFORE create_all
    from matchplan.models.schedule_run import ScheduleRun  # noqa: F401
    from matchplan.models.scheduled_match_record import ScheduledMatchRecord  # noqa: F401

    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client bound to the test session

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """

    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
