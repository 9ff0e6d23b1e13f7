"""
Pytest configuration and fixtures for unit and integration tests.
"""

import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base

# Import models to register with Base.metadata
from app.models import measurement, profile, revoked_token, user  # noqa: F401


# Use test database URL from env, or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL, echo=False)

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create a test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def override_get_db(test_db):
    """Override get_db dependency for FastAPI."""

    def _get_db():
        try:
            yield test_db
        finally:
            pass  # Closed by the test_db fixture

    return _get_db


@pytest.fixture
def sample_user_id():
    """Sample user ID for tests."""
    from uuid import uuid4

    return uuid4()


@pytest.fixture
def sample_user(test_db, sample_user_id):
    """A stored user owning sample_user_id."""
    from app.models.user import User
    from app.utils.password import hash_password

    user = User(
        user_id=sample_user_id,
        email="athlete@example.com",
        password_hash=hash_password("password123"),
    )
    test_db.add(user)
    test_db.commit()
    return user


@pytest.fixture
def auth_headers(sample_user):
    """Bearer header for sample_user."""
    from app.utils.jwt import create_access_token

    return {"Authorization": f"Bearer {create_access_token(sample_user.user_id)}"}


@pytest.fixture
def client(override_get_db):
    """TestClient wired to the test database."""
    from fastapi.testclient import TestClient
    from app.main import app
    from app.db.database import get_db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
