"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. The schema is dropped and
recreated around every test, so nothing leaks between tests.
"""
import pytest
import sys
import os
from uuid import uuid4

# Must be set before core.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")
os.environ.setdefault("LOG_FORMAT", "text")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from core.database import Base, SessionLocal, engine
from core.security import create_access_token, hash_password
import models  # noqa: F401  (registers tables on Base.metadata)
from models import Profile, User

TEST_PASSWORD = "password123"


@pytest.fixture(autouse=True)
def _fresh_schema():
    """Empty tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(_fresh_schema):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    from main import app
    return TestClient(app)


def make_user(db, email=None):
    user = User(
        email=email or f"test_{uuid4().hex[:8]}@example.com",
        password_hash=hash_password(TEST_PASSWORD),
        display_name="Test User",
        role="user",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user):
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(db_session):
    """
    A registered user with no profile yet (onboarding not done).
    """
    return make_user(db_session)


@pytest.fixture
def auth_headers(test_user):
    return headers_for(test_user)


@pytest.fixture
def other_user_headers(db_session):
    """Bearer headers for a second, unrelated account."""
    return headers_for(make_user(db_session))


@pytest.fixture
def profile_data():
    """Healthy 30 year old, normal BMI, weight loss goal."""
    return {
        "age": 30,
        "height_cm": 175,
        "weight_kg": 70,
        "health_conditions": ["none"],
        "dietary_preference": "omnivore",
        "fitness_goal": "weight_loss",
        "target_weight_kg": 65,
    }


@pytest.fixture
def test_profile(db_session, test_user, profile_data):
    profile = Profile(user_id=test_user.id, **profile_data)
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile
