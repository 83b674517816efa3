"""
Shared pytest fixtures for the userpatch test suite.

Every test gets its own temporary SQLite database and an application built
around it, so tests never touch the configured database or each other.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from userpatch.database import build_engine, create_tables
from userpatch.main import create_app
from userpatch.models.user import User


@pytest.fixture
def test_engine(tmp_path):
    """Create a temporary SQLite database for one test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(test_engine):
    """TestClient for an app bound to the temporary database."""
    app = create_app(engine=test_engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def test_db(test_engine):
    """Direct SQLAlchemy session for tests that need DB access."""
    TestSessionLocal = sessionmaker(bind=test_engine)
    db = TestSessionLocal()
    yield db
    db.close()


@pytest.fixture
def make_user(test_db):
    """Insert a user straight into the database and return it."""

    def _make_user(**overrides) -> User:
        values = {
            "name": "Test User",
            "email": "test@example.com",
            "age": 30,
            "phone": "1234567890",
            "active": True,
            "bio": "Some bio",
            "role": "user",
            "score": 75.0,
        }
        values.update(overrides)
        user = User(**values)
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user

    return _make_user
