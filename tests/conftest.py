"""Pytest fixtures and configuration for doBag tests."""

import os

# The app module builds its engine at import time; keep it off the dev database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from dobag.database.database import Base
from dobag.database.repository import TaskRepository
from dobag.database.modifier_repository import (
    ModifierRepository,
    TaskModifierRepository,
    DEFAULT_MODIFIER_CATALOG,
)
from dobag.models.task import Task, TaskStatus
from dobag.models.modifier import SchedulingHint, ScheduleContext
from dobag.modifiers import ModifierBehavior, ModifierRegistry, build_default_registry
from dobag.engine.scheduler import SchedulerService
from dobag.engine.lifecycle import TaskLifecycleService
from dobag.engine.task_modifiers import TaskModifierService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session(test_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test,
    with the test user and the default modifier catalog already in place.
    """
    from dobag.database.models import UserDB

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Create test user (required for foreign key constraints)
    now = datetime.utcnow()
    session.add(UserDB(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    ))
    session.commit()

    ModifierRepository(session).ensure_defaults(DEFAULT_MODIFIER_CATALOG)

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def modifier_repository(db_session: Session):
    return ModifierRepository(db_session)


@pytest.fixture
def task_modifier_repository(db_session: Session):
    return TaskModifierRepository(db_session)


@pytest.fixture
def registry():
    """Registry with the built-in behaviors."""
    return build_default_registry()


@pytest.fixture
def scheduler(registry, task_repository, task_modifier_repository):
    return SchedulerService(registry, task_repository, task_modifier_repository)


@pytest.fixture
def lifecycle(task_repository, task_modifier_repository, scheduler):
    return TaskLifecycleService(task_repository, task_modifier_repository, scheduler)


@pytest.fixture
def modifier_service(registry, modifier_repository, task_modifier_repository):
    return TaskModifierService(registry, modifier_repository, task_modifier_repository)


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime.utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "text": "Test Task",
        "position": 1,
        "status": TaskStatus.BAG,
        "is_template": False,
        "template_id": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def make_task(task_repository, sample_task_base):
    """Factory that persists a task with the given overrides."""
    def _make_task(**overrides) -> Task:
        return task_repository.create(Task(**{**sample_task_base, "id": str(uuid.uuid4()), **overrides}))
    return _make_task


@pytest.fixture
def sample_template(make_task):
    """A template on the shelf."""
    return make_task(text="Weekly review", status=TaskStatus.SHELF, is_template=True)


class FakePositionBehavior(ModifierBehavior):
    """Test behavior that suggests positions taken straight from the modifier value.

    ``{"positions": [3, 5]}`` yields one hint with ``suggestedPositions``;
    ``{"position": 4}`` yields one hint with ``data.position``.
    """

    kind = "fake-position"

    def validate_value(self, value: Any) -> bool:
        return isinstance(value, dict)

    def get_default_value(self) -> Dict[str, Any]:
        return {}

    def get_scheduling_hints(
        self,
        task: Task,
        value: Dict[str, Any],
        context: Optional[ScheduleContext],
    ) -> List[SchedulingHint]:
        hints = []
        if "position" in value:
            hints.append(SchedulingHint(type="placement", priority=50, data={"position": value["position"]}))
        if "positions" in value:
            hints.append(SchedulingHint(type="placement", priority=50, data={"suggestedPositions": value["positions"]}))
        return hints


@pytest.fixture
def fake_position_behavior():
    return FakePositionBehavior()


@pytest.fixture
def fake_registry(fake_position_behavior):
    """Built-in behaviors plus a position-suggesting test behavior."""
    registry = build_default_registry()
    registry.register(fake_position_behavior.kind, fake_position_behavior)
    return registry


@pytest.fixture
def fake_modifier(modifier_repository):
    """Catalog row for the position-suggesting test behavior."""
    return modifier_repository.create(name="Fake position", kind=FakePositionBehavior.kind)


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from dobag.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from dobag.api.app import app
    from dobag.database.database import get_db
    from dobag.auth.dependencies import get_current_user

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    # Override authentication to return test user
    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
