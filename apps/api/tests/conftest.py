"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. The schema is created for
each test and dropped afterwards, so nothing leaks between tests. The
language model is replaced by FakeLLMClient, which replays scripted
responses and records every call.
"""
import os
import sys
from datetime import date
from typing import Any, Dict, List, Optional

import pytest

# Add the parent directory to the path so we can import core/services/models
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-gymbuddy-suite-0123456789")
os.environ.setdefault("LOG_FORMAT", "text")

from fastapi.testclient import TestClient

from core.database import Base, SessionLocal, engine, get_db
from core.security import create_access_token, get_password_hash
from main import app
from models import AthleteProfile, Exercise, User, Workout
from services.llm_client import get_llm_client
from fixtures.ai_fixtures import FakeLLMClient


# ---------------------------------------------------------------------------
# Database and app fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db_session():
    """Fresh schema per test, shared with the app through get_db."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    def _override_get_db():
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    yield session

    app.dependency_overrides.pop(get_db, None)
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_llm():
    llm = FakeLLMClient()
    app.dependency_overrides[get_llm_client] = lambda: llm
    yield llm
    app.dependency_overrides.pop(get_llm_client, None)


@pytest.fixture
def client(db_session, fake_llm):
    return TestClient(app)


def _make_user(db_session, email: str) -> User:
    user = User(email=email, password_hash=get_password_hash("password123"), display_name=email.split("@")[0])
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def test_user(db_session):
    return _make_user(db_session, "athlete@example.com")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, "other@example.com")


@pytest.fixture
def auth_headers(test_user):
    token = create_access_token(data={"sub": str(test_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_profile(db_session, test_user):
    profile = AthleteProfile(
        user_id=test_user.id,
        language="en",
        age=32,
        weight_kg=80,
        height_cm=180,
        gender="male",
        weight_experience="intermediate",
        current_frequency=3,
        current_split="Full Body",
        goals_ranked=[{"goal": "Build strength", "priority": 1}, {"goal": "Lose fat", "priority": 2}],
        goal_timeline="6 months",
        available_days=["monday", "thursday"],
        session_duration=60,
        equipment="Full gym",
        sports_history=[{"sport": "Football", "years": 5, "level": "amateur"}],
        onboarding_completed=True,
    )
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def make_workout(db_session, test_user):
    """Factory: make_workout(date, status="done", exercises=[{...}], user=...)."""

    def _make(
        on: date,
        status: str = "done",
        name: str = "Upper A",
        workout_type: Optional[str] = "Strength",
        exercises: Optional[List[Dict[str, Any]]] = None,
        user: Optional[User] = None,
        notes: Optional[str] = None,
    ) -> Workout:
        owner = user or test_user
        workout = Workout(
            user_id=owner.id,
            name=name,
            date=on,
            workout_type=workout_type,
            status=status,
            notes=notes,
        )
        for position, ex in enumerate(exercises or []):
            workout.exercises.append(Exercise(user_id=owner.id, position=position, workout_name=name, **ex))
        db_session.add(workout)
        db_session.commit()
        return workout

    return _make

