"""Pytest configuration and shared fixtures for habitkit tests.

Provides isolated storage backends, repositories wired to them, and entry
factories for testing statistics without touching a real database.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from habitkit.config import TestConfig
from habitkit.infra.backends import InMemoryBackend, SQLModelBackend, reset_storage
from habitkit.infra.database import create_db_engine
from habitkit.infra.repositories import StorageEntryRepository, StorageHabitRepository
from habitkit.models import HabitEntry, HabitType
from habitkit.models.habit import new_id

# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Test configuration rooted in a per-test temporary directory."""
    monkeypatch.delenv("HABITKIT_STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("HABITKIT_DATABASE_URL", raising=False)
    return TestConfig(tmp_path / "data")


@pytest.fixture
def db_engine(config):
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with the habitkit pragmas installed
    """
    engine = create_db_engine(config)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_backend(db_engine):
    backend = SQLModelBackend(db_engine)
    backend.apply_schema()
    return backend


@pytest.fixture
def memory_backend():
    backend = InMemoryBackend()
    backend.apply_schema()
    yield backend
    backend.close()


@pytest.fixture(params=["sqlite", "memory"])
def backend(request):
    """Run the requesting test once per backend."""
    return request.getfixturevalue(f"{request.param}_backend")


@pytest.fixture(autouse=True)
def _forget_process_storage():
    """Drop any process-wide handle a test opened."""
    yield
    reset_storage()


# =============================================================================
# Repository Fixtures
# =============================================================================


class FakeClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 0)):
        self.current = start

    def __call__(self) -> datetime:
        moment = self.current
        self.current += timedelta(minutes=1)
        return moment


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def habit_repo(backend, clock):
    return StorageHabitRepository(backend, clock=clock)


@pytest.fixture
def entry_repo(backend):
    return StorageEntryRepository(backend)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(habit_repo):
    """Factory for creating persisted habits with sensible defaults."""

    def _create_habit(name: str = "Exercise", **overrides):
        fields = {"color": "#4A9EFF", "type": HabitType.YES_NO, "question": f"Did you {name.lower()}?"}
        fields.update(overrides)
        return habit_repo.create(name=name, **fields)

    return _create_habit


@pytest.fixture
def make_entries():
    """Build in-memory entries from ``{date: value}`` pairs or a list of ``yes`` days."""

    def _make(days, habit_id: str = "habit-1") -> list[HabitEntry]:
        if isinstance(days, dict):
            pairs = days.items()
        else:
            pairs = ((day, "yes") for day in days)
        return [HabitEntry(id=new_id(), habit_id=habit_id, date=day, value=value) for day, value in pairs]

    return _make


@pytest.fixture
def today() -> date:
    return date(2024, 6, 15)
