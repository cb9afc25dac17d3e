"""Pytest fixtures and configuration for inboxparser tests."""

import os

# Keep the module-level engine off disk; must be set before inboxparser.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("INBOX_ENABLE_LLM", "true")

import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from inboxparser.database.database import Base, get_db
from inboxparser.database.repository import GoalRepository, TaskRepository
from inboxparser.engine.goal_matcher import GoalMatcher
from inboxparser.engine.pipeline import CapturePipeline, ParserConfig
from inboxparser.models.enums import GoalStatus, LifeAspect
from inboxparser.models.goal import Goal


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Wednesday, ISO week 2026-W02
REFERENCE_DATE = date(2026, 1, 7)


class FakeLLMClient:
    """Stand-in for LLMClient that records prompts and returns a canned response."""

    def __init__(self, response=None, connected=True):
        self.response = response
        self.connected = connected
        self.prompts = []
        self.timeouts = []

    def check_connection(self):
        return self.connected

    def complete(self, prompt, timeout=None):
        self.prompts.append(prompt)
        self.timeouts.append(timeout)
        return self.response


@pytest.fixture
def today():
    """Fixed reference date so relative dates are deterministic."""
    return REFERENCE_DATE


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine, created fresh for each test."""
    # Import models so they register on Base.metadata
    from inboxparser.database import models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def goal_repository(db_session: Session):
    """Create a GoalRepository instance for testing."""
    return GoalRepository(db_session)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def goal_matcher(goal_repository, task_repository):
    return GoalMatcher(goal_repository, task_repository)


@pytest.fixture
def sample_goal_base():
    """Base goal data; override fields per test."""
    return {
        "id": "goal-train",
        "aspect": LifeAspect.FITNESS,
        "title": "Train 4x per week",
        "period": "2026-W02",
        "created_at": datetime(2026, 1, 5, 8, 0, 0),
    }


@pytest.fixture
def sample_goals(goal_repository, sample_goal_base):
    """Active weekly goals for fitness and nutrition, plus a paused one."""
    created_at = sample_goal_base["created_at"]
    goals = [
        Goal(**sample_goal_base),
        Goal(**{
            **sample_goal_base,
            "id": "goal-spar",
            "title": "Muay thai sparring",
            "created_at": created_at + timedelta(minutes=1),
        }),
        Goal(**{
            **sample_goal_base,
            "id": "goal-cook",
            "aspect": LifeAspect.NUTRITION,
            "title": "Cook 5 meals weekly",
            "created_at": created_at + timedelta(minutes=2),
        }),
        Goal(**{
            **sample_goal_base,
            "id": "goal-swim",
            "title": "Swim twice a week",
            "status": GoalStatus.PAUSED,
            "created_at": created_at + timedelta(minutes=3),
        }),
    ]
    return [goal_repository.create(goal) for goal in goals]


@pytest.fixture
def fake_llm():
    """Connected fake language-model client with no canned response."""
    return FakeLLMClient()


@pytest.fixture
def rule_config():
    """Configuration with the language-model step switched off."""
    return ParserConfig(enable_llm=False)


@pytest.fixture
def pipeline(rule_config):
    """Rule-only pipeline without goal matching."""
    return CapturePipeline(config=rule_config)


@pytest.fixture
def matching_pipeline(goal_matcher, sample_goals, rule_config):
    """Rule-only pipeline matching against the sample goals."""
    return CapturePipeline(goal_matcher=goal_matcher, config=rule_config)


@pytest.fixture
def test_client(db_session: Session, session_factory, fake_llm):
    """Create a FastAPI test client with overridden database and language-model dependencies."""
    from inboxparser.api.app import app, get_llm_client, get_session_factory

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
