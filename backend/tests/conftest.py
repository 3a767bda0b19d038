# backend/tests/conftest.py
"""
Pytest configuration for the Maestro backend.

Every test gets a fresh in-memory SQLite schema. The TestClient fixture
shares the test's session, so rows created through services are visible to
HTTP calls and the other way round.
"""

import itertools
import os

# Set testing mode BEFORE any maestro imports
os.environ["is_testing"] = "true"

from typing import Callable, Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from maestro.api.dependencies.database import get_db
from maestro.core.config import settings
from maestro.core.enums import UserRole
from maestro.database import Base, create_app_engine
from maestro.main import app
from maestro.models.user import User
from maestro.principal import CallerContext
from maestro.schemas.classroom import ClassroomCreate
from maestro.services.base import BaseService
from maestro.services.membership_service import MembershipService

settings.is_testing = True

TEST_DATABASE_URL = settings.test_database_url
if not TEST_DATABASE_URL.startswith("sqlite"):
    raise RuntimeError("Tests drop every table after each test; refusing a non-SQLite database")

test_engine = create_app_engine(TEST_DATABASE_URL)
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)

_user_counter = itertools.count(1)


@pytest.fixture(scope="function")
def db():
    """Create a new database session (and schema) for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)
    BaseService._class_metrics.clear()


@pytest.fixture
def client(db: Session):
    """Create a test client with the test database."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - create directly
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# USERS
# ============================================================================


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    """Factory for users with unique usernames and emails."""

    def _make(role: UserRole = UserRole.STUDENT, is_master: bool = False, name: str = "user") -> User:
        n = next(_user_counter)
        user = User(
            username=f"{name}{n}",
            email=f"{name}{n}@example.com",
            role=role.value,
            is_master=is_master,
            first_name=name.title(),
            last_name="Test",
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def student(make_user) -> User:
    return make_user(UserRole.STUDENT, name="student")


@pytest.fixture
def other_student(make_user) -> User:
    return make_user(UserRole.STUDENT, name="student")


@pytest.fixture
def mentor(make_user) -> User:
    return make_user(UserRole.MENTOR, name="mentor")


@pytest.fixture
def other_mentor(make_user) -> User:
    return make_user(UserRole.MENTOR, name="mentor")


@pytest.fixture
def master(make_user) -> User:
    """A mentor holding the master role."""
    return make_user(UserRole.MENTOR, is_master=True, name="master")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, name="admin")


def caller(user: User) -> CallerContext:
    return CallerContext.from_user(user)


def auth_headers(user: User) -> Dict[str, str]:
    return {"X-User-Id": str(user.id), "X-User-Role": user.role}


@pytest.fixture
def as_caller() -> Callable[[User], CallerContext]:
    return caller


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers


# ============================================================================
# CLASSROOMS
# ============================================================================


@pytest.fixture
def make_classroom(db: Session) -> Callable:
    def _make(owner: User, **overrides):
        data = {"title": "Piano Academy", "subject": "piano", "level": "beginner"}
        data.update(overrides)
        return MembershipService(db).create_classroom(caller(owner), ClassroomCreate(**data))

    return _make


@pytest.fixture
def classroom(make_classroom, master):
    return make_classroom(master)
