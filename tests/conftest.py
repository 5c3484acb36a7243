# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.

Every test gets a fresh in-memory database and a mocked object
storage, wired into the app through create_app().
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
from typing import Generator

from core.config import Settings
from core.security import hash_password, issue_bridge_token, issue_session_token
from core.storage import ObjectStorage
from database import Database
from main import create_app
from models.enums import Role
from models.user import User


TEST_PASSWORD = "Password123"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        SESSION_SECRET="test-secret",
        ALLOWED_ORIGINS="https://shop.example.com",
        MAX_UPLOAD_BYTES=1024,
        ENABLE_SCHEDULER=False,
    )


@pytest.fixture
def database() -> Generator[Database, None, None]:
    db = Database("sqlite://")
    db.create_db_and_tables()
    yield db
    db.close()


@pytest.fixture
def storage():
    """Mock Supabase bucket wrapper."""
    mock_storage = Mock(spec=ObjectStorage)
    mock_storage.upload.side_effect = lambda path, data, content_type=None: path
    mock_storage.public_url.side_effect = lambda path: f"https://cdn.example.com/{path}"
    mock_storage.download.return_value = b"%PDF-1.4 test"
    return mock_storage


@pytest.fixture
def app(settings, database, storage):
    """Create a test FastAPI application instance."""
    return create_app(settings=settings, database=database, storage=storage)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


# -----------------------------------------------------
# Accounts
# -----------------------------------------------------
@pytest.fixture
def make_user(database):
    """Insert a user and return the (detached) row."""
    counter = {"n": 0}

    def _make(role: str = Role.CUSTOMER.value, email: str = None, name: str = None) -> User:
        counter["n"] += 1
        with database.session() as session:
            user = User(
                name=name or f"{role.title()} {counter['n']}",
                email=email or f"{role.lower()}{counter['n']}@example.com",
                password=hash_password(TEST_PASSWORD),
                role=role,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(Role.ADMIN.value)


@pytest.fixture
def staff(make_user) -> User:
    return make_user(Role.STAFF.value)


@pytest.fixture
def customer(make_user) -> User:
    return make_user(Role.CUSTOMER.value)


@pytest.fixture
def auth_headers(settings):
    """Bearer headers for a user."""
    def _headers(user: User) -> dict:
        token = issue_bridge_token(user.id, user.email, user.role, config=settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def session_cookie(settings):
    """Session cookie value for a user."""
    def _cookie(user: User) -> dict:
        token = issue_session_token(user.id, user.email, user.role, user.name, config=settings)
        return {settings.SESSION_COOKIE_NAME: token}

    return _cookie
