"""Pytest fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("ROLLOVER_ENABLED", "false")

import itertools  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from kaizen.core.game_rules import GameRules  # noqa: E402
from kaizen.db.base import Base  # noqa: E402
from kaizen.db.session import get_db  # noqa: E402
from kaizen.main import app  # noqa: E402
from kaizen.models import ActivityLog, Task, User, UserStats  # noqa: E402,F401 - register for create_all
from kaizen.services.progression import initial_stats  # noqa: E402

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_email_counter = itertools.count(1)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def setup_db():
    """Create tables once for test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(setup_db):
    """Test client with overridden DB."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory(setup_db):
    return TestingSessionLocal


@pytest.fixture
def db(setup_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clean_tables(setup_db):
    """Empty every table so batch-wide counts only see this test's users."""
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def rules():
    return GameRules()


@pytest.fixture
def make_user(setup_db, rules):
    """Create a user with starting stats; keyword overrides patch the stats row."""

    def _make_user(**stats_overrides) -> int:
        with TestingSessionLocal() as session:
            user = User(
                email=f"user{next(_email_counter)}@test.com",
                hashed_password="not-a-real-hash",
                full_name="Test User",
            )
            session.add(user)
            session.flush()
            session.add(UserStats(user_id=user.id, **{**initial_stats(rules), **stats_overrides}))
            session.commit()
            return user.id

    return _make_user


@pytest.fixture
def make_task(setup_db, rules):
    """Insert a task directly, bypassing the API."""
    from kaizen.models.task import TaskStatus, TaskType

    def _make_task(user_id: int, assigned_date, status=TaskStatus.pending, **fields) -> int:
        with TestingSessionLocal() as session:
            task = Task(
                user_id=user_id,
                title=fields.pop("title", "Task"),
                type=fields.pop("type", TaskType.todo),
                assigned_date=assigned_date,
                status=status,
                delay_count=fields.pop("delay_count", 0),
                exp_reward=fields.pop("exp_reward", rules.task_completion_exp),
                coin_reward=fields.pop("coin_reward", rules.task_completion_coins),
                heart_loss=fields.pop("heart_loss", rules.task_failure_heart_loss),
                coin_loss=fields.pop("coin_loss", rules.task_failure_coin_loss),
                **fields,
            )
            session.add(task)
            session.commit()
            return task.id

    return _make_task


def register_and_login(client, email: str, password: str = "secret123", full_name: str = "Test User") -> str:
    """Register a user through the API and return a bearer token."""
    client.post(
        "/auth/register",
        json={"email": email, "password": password, "full_name": full_name},
    )
    return client.post("/auth/login", json={"email": email, "password": password}).json()["access_token"]
