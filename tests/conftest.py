"""Pytest configuration and shared fixtures for Tolva tests."""

import os

# Settings are read at import time: configure the environment BEFORE importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "tolva-test-secret")
os.environ.setdefault("BOOTSTRAP_CREATE_ALL", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tolva.app.api.v1.auth_router import create_access_token
from tolva.app.db import models  # noqa: F401  (registers tables on Base)
from tolva.app.db.base import Base
from tolva.app.db.session import get_db
from tolva.app.main import app

test_engine = create_engine(
    "sqlite://",
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture(scope="function")
def db_session():
    """Provide a test database session with all tables created."""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    def override_get_db():
        try:
            yield session
        finally:
            pass  # the fixture closes the session

    app.dependency_overrides[get_db] = override_get_db

    yield session

    session.close()
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session):
    """Provide a FastAPI test client bound to the test database."""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Bearer headers for the main test user."""
    return {"Authorization": f"Bearer {create_access_token(USER_ID)}"}


@pytest.fixture
def other_auth_headers():
    """Bearer headers for a second user (ownership checks)."""
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}
