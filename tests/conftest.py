"""Pytest configuration and fixtures."""

import os

# Cheap bcrypt cost for tests; must be set before taskflow.config is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskflow.database import Base, get_db
from taskflow.models.task import Task  # noqa: F401
from taskflow.models.user import User  # noqa: F401
from taskflow.scripts.create_user import create_user
from taskflow.services.auth import AuthService


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from main import app
    from taskflow.rate_limit import limiter

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    limiter.reset()
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


def _user_dict(result) -> dict:
    return {
        "user_id": result.user.id,
        "email": result.user.email,
        "name": result.user.name,
        "access_token": result.access_token,
        "refresh_token": result.refresh_token,
        "headers": {"Authorization": f"Bearer {result.access_token}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Register a regular user and return its ids and tokens."""
    result = AuthService().register(db_session, "Test User", "test@example.com", "password123")
    return _user_dict(result)


@pytest.fixture(name="other_user")
def other_user_fixture(db_session: Session):
    """A second regular user."""
    result = AuthService().register(db_session, "Other User", "other@example.com", "password456")
    return _user_dict(result)


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session):
    """Create an admin through the CLI helper and log in."""
    create_user(db_session, "Admin User", "admin@example.com", "adminpass1", role="admin")
    result = AuthService().login(db_session, "admin@example.com", "adminpass1")
    return _user_dict(result)
