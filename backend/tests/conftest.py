# backend/tests/conftest.py
"""
Pytest configuration for the booking engine.

Every test gets a fresh in-memory SQLite database. The API client shares the
test's session through a dependency override, so data created by fixtures is
visible to requests and vice versa.
"""

import os
import sys

# Set test settings BEFORE any app imports
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from typing import Dict, Generator  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models  # noqa: E402,F401
from app.api.dependencies.database import get_db  # noqa: E402
from app.database import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models.booking_type import BookingType  # noqa: E402
from app.models.contact import Contact  # noqa: E402
from app.models.workspace import Workspace  # noqa: E402
from tests.utils.booking_builders import future_monday  # noqa: E402
from tests.utils.factories import (  # noqa: E402
    auth_headers_for,
    make_booking_type,
    make_contact,
    make_workspace,
)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(scope="function")
def test_engine():
    """In-memory SQLite engine shared across threads (TestClient runs handlers off-thread)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(test_engine) -> Generator[Session, None, None]:
    """Create a new database session for each test."""
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
    )
    session = TestSessionLocal()

    yield session

    # Cleanup
    session.rollback()
    session.close()


@pytest.fixture
def client(db: Session):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - the lifespan would create tables on the app engine
    test_client = TestClient(app)

    yield test_client

    # Cleanup
    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Domain fixtures
# ============================================================================


@pytest.fixture
def monday():
    """A Monday far enough ahead that all its slots are in the future."""
    return future_monday(weeks_ahead=2)


@pytest.fixture
def test_workspace(db: Session) -> Workspace:
    return make_workspace(db, "harbor-physio")


@pytest.fixture
def other_workspace(db: Session) -> Workspace:
    return make_workspace(db, "elsewhere-studio")


@pytest.fixture
def consultation(db: Session, test_workspace: Workspace) -> BookingType:
    """30 minute type bookable Mondays 09:00-11:00 UTC."""
    return make_booking_type(db, test_workspace)


@pytest.fixture
def test_contact(db: Session, test_workspace: Workspace) -> Contact:
    return make_contact(db, test_workspace)


# ============================================================================
# Auth fixtures
# ============================================================================


@pytest.fixture
def owner_headers(test_workspace: Workspace) -> Dict[str, str]:
    return auth_headers_for(test_workspace.id, "OWNER", user_id="owner-1")


@pytest.fixture
def staff_headers(test_workspace: Workspace) -> Dict[str, str]:
    return auth_headers_for(test_workspace.id, "STAFF", user_id="staff-1")
