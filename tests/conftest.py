# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from trackr.tasks.task_models import User
from trackr.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="trackr",
        log_level="INFO",
        console_enabled=False,
        username="alice",
        # Short undo window so countdown tests stay fast.
        undo_window_ms=50,
        seed_demo_data=False,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
    )


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    """Real SQLite store: its transactions are part of what we want to test."""
    return TaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def user(store: TaskStore) -> User:
    return store.ensure_user("alice")
