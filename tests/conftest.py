"""
Pytest configuration and fixtures for commute expense tests.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from commute_expense.expenses.models import ExpenseKind, ExpenseLine
from commute_expense.expenses.repository import (
    ProfileRepository,
    SubmissionRepository,
    create_tables,
)
from commute_expense.expenses.session import Session

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

FIXED_NOW = datetime(2024, 4, 15, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def engine():
    """In-memory SQLite engine with the expense tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def submission_repository(engine) -> SubmissionRepository:
    return SubmissionRepository(engine)


@pytest.fixture
def profile_repository(engine) -> ProfileRepository:
    return ProfileRepository(engine)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    """Clock frozen at FIXED_NOW."""
    return lambda: fixed_now


@pytest.fixture
def admin_session() -> Session:
    return Session(user_id="admin-1", email="admin@example.com", role="admin", profile_name="経理 花子")


@pytest.fixture
def user_session() -> Session:
    return Session(user_id="user-1", email="taro@example.com", role=None, profile_name="")


@pytest.fixture
def one_time_line() -> ExpenseLine:
    """A complete one-time fare row."""
    return ExpenseLine(
        kind=ExpenseKind.ONE_TIME,
        from_station="梅田",
        to_station="三宮",
        amount="330",
        start_date="2024-04-10",
        transportation="阪急",
    )


@pytest.fixture
def regular_line() -> ExpenseLine:
    """A complete commuter pass row."""
    return ExpenseLine(
        kind=ExpenseKind.REGULAR,
        from_station="A",
        to_station="B",
        amount="1,000",
        start_date="2024-04-01",
        end_date="2024-04-30",
        transportation="JR",
    )


# Environment setup for tests
@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("INIT_DB", "false")
    monkeypatch.delenv("SLACK_WEBHOOK_URL", raising=False)
    monkeypatch.delenv("APP_URL", raising=False)
    monkeypatch.delenv("NOTIFY_TIMEOUT_SECONDS", raising=False)
    yield
