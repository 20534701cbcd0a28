# src/trackr/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_models import User
from ..tasks.task_store import TaskStore
from ..views.archive import ArchiveViewModel
from ..views.tasks_view import TasksViewModel
from .scope import Scope


@dataclass
class AppState:
    # Settings object (config.Settings in the app, a SimpleNamespace in tests).
    settings: Any

    task_store: TaskStore
    current_user: User
    scope: Scope

    tasks: TasksViewModel
    archive: ArchiveViewModel

    def close(self) -> None:
        """Tear down view models and abandon pending background work."""
        self.tasks.close()
        self.archive.close()
        self.scope.cancel()
        self.task_store.close()
