# src/trackr/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the TaskStore, the current user and the view models into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.scope import Scope
from ..core.state import AppState
from ..tasks.task_api import seed_demo_data
from ..tasks.task_store import TaskStore
from ..views.archive import ArchiveViewModel
from ..views.tasks_view import TasksViewModel

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, scope: Scope | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(settings.tasks_db_path)
    user = store.ensure_user(settings.username)
    if getattr(settings, "seed_demo_data", False):
        seed_demo_data(store, user)

    if scope is None:
        scope = Scope("app")

    state = AppState(
        settings=settings,
        task_store=store,
        current_user=user,
        scope=scope,
        tasks=TasksViewModel(store, scope, current_user_id=user.id),
        archive=ArchiveViewModel(
            store,
            scope,
            current_user_id=user.id,
            undo_window=settings.undo_window_ms / 1000.0,
        ),
    )
    logger.info("State ready user=%s db=%s", user.username, settings.tasks_db_path)
    return state
