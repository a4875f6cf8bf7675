# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.store.memory_store import InMemoryRecordStore
from taskboard.tasks.task_adapter import TaskDataAdapter

from .fakes import FakeRecordStore

TODAY = date(2026, 10, 19)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    A SimpleNamespace instead of the real Settings keeps tests away from
    environment variables and .env files.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        store_url=None,
        project_id=None,
        public_key=None,
        table_name="task1",
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
        default_filter="all",
        default_sort="dueDate",
    )


@pytest.fixture()
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def adapter(fake_store: FakeRecordStore) -> TaskDataAdapter:
    return TaskDataAdapter(fake_store)


@pytest.fixture()
def state(settings: SimpleNamespace, memory_store: InMemoryRecordStore) -> AppState:
    """AppState wired to the in-memory store (no network)."""
    return create_initial_state(settings=settings, store=memory_store)
