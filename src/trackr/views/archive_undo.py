# src/trackr/views/archive_undo.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.live import LiveValue
from ..core.ports import TaskRepo
from ..core.scope import Scope
from ..tasks.task_models import TaskStatus, TaskSummary

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ArchivedItem:
    """What is needed to put an archived task back where it was."""

    task_id: int
    previous_status: TaskStatus


class ArchiveUndoController:
    """
    Single-slot undo for archiving from the tasks screen.

    Archiving another task replaces the pending item; the replaced one can no
    longer be undone (its task simply stays archived).
    """

    def __init__(self, repo: TaskRepo, scope: Scope) -> None:
        self._repo = repo
        self._scope = scope
        self.archived_item: LiveValue[ArchivedItem | None] = LiveValue(None, name="archived_item")

    def archive_task(self, task_summary: TaskSummary) -> None:
        self.archived_item.set(ArchivedItem(task_summary.id, task_summary.status))
        self._scope.launch(self._repo.archive, [task_summary.id], name="archive")
        logger.info("Task %s archived (was %s)", task_summary.id, task_summary.status)

    def undo_archive(self) -> None:
        item = self.archived_item.value
        if item is None:
            return
        self._scope.launch(self._repo.update_task_status, item.task_id, item.previous_status, name="undo_archive")
        self.archived_item.set(None)
        logger.info("Task %s restored to %s", item.task_id, item.previous_status)
