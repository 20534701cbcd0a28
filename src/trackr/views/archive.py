# src/trackr/views/archive.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..core.live import LiveValue, Mediator, map_live
from ..core.ports import TaskRepo
from ..core.scope import Scope
from ..tasks.task_models import TaskSummary

logger = logging.getLogger(__name__)

DEFAULT_UNDO_WINDOW_SECONDS = 5.0


@dataclass(slots=True, frozen=True)
class ArchivedTask:
    task_summary: TaskSummary
    selected: bool


class ArchiveViewModel:
    """
    Archive screen: select archived tasks, unarchive them in bulk, undo for a while.

    The undo target is the id set of the most recent unarchive call. A new call
    replaces it (no union) and restarts the countdown. When the countdown runs
    out the set is cleared and undoable_count drops to 0.
    """

    def __init__(
        self,
        repo: TaskRepo,
        scope: Scope,
        *,
        current_user_id: int,
        undo_window: float = DEFAULT_UNDO_WINDOW_SECONDS,
    ) -> None:
        self._repo = repo
        self._scope = scope
        self._current_user_id = current_user_id
        self._undo_window = float(undo_window)
        self._countdown: asyncio.Task[None] | None = None

        self._archived_summaries = repo.observe_archived_summaries()
        self.selected_task_ids: LiveValue[frozenset[int]] = LiveValue(frozenset(), name="selected_task_ids")

        # Ids that were most recently unarchived and can be archived back.
        self.undoable_task_ids: LiveValue[frozenset[int]] = LiveValue(frozenset(), name="undoable_task_ids")

        self.selected_count = map_live(self.selected_task_ids, len, name="selected_count")
        self.undoable_count = map_live(self.undoable_task_ids, len, name="undoable_count")

        self.archived_tasks: Mediator[list[ArchivedTask]] = Mediator(name="archived_tasks")

        def update(_: object) -> None:
            selected = self.selected_task_ids.value
            tasks = self._archived_summaries.value
            if selected is None or tasks is None:
                return
            self.archived_tasks.set([ArchivedTask(task, task.id in selected) for task in tasks])

        self.archived_tasks.add_source(self._archived_summaries, update)
        self.archived_tasks.add_source(self.selected_task_ids, update)

    @property
    def undo_window(self) -> float:
        return self._undo_window

    def toggle_task_selection(self, task_id: int) -> None:
        selected = self.selected_task_ids.value or frozenset()
        if task_id in selected:
            self.selected_task_ids.set(selected - {task_id})
        else:
            self.selected_task_ids.set(selected | {task_id})

    def clear_selection(self) -> None:
        self.selected_task_ids.set(frozenset())

    def toggle_task_star_state(self, task_id: int) -> None:
        self._scope.launch(self._repo.toggle_task_star_state, task_id, self._current_user_id, name="toggle_star")

    def unarchive(self, task_ids: Iterable[int]) -> frozenset[int]:
        """Unarchive the given ids that are currently archived; returns those ids."""
        requested = frozenset(int(i) for i in task_ids)
        archived = {s.id for s in (self._archived_summaries.value or ())}
        ids = requested & archived
        if requested - ids:
            logger.warning("unarchive: ignoring ids that are not archived: %s", sorted(requested - ids))
        if not ids:
            return ids
        self._scope.launch(self._repo.unarchive, sorted(ids), name="unarchive")
        self.undoable_task_ids.set(ids)
        self._restart_countdown()
        logger.info("Unarchived %d task(s); undo available for %.1fs", len(ids), self._undo_window)
        return ids

    def unarchive_selected_tasks(self) -> None:
        ids = self.selected_task_ids.value or frozenset()
        if not ids:
            return
        self.unarchive(ids)
        self.clear_selection()

    def undo_unarchiving(self) -> None:
        ids = self.undoable_task_ids.value or frozenset()
        if not ids:
            return
        self._stop_countdown()
        self._scope.launch(self._repo.archive, sorted(ids), name="undo_unarchive")
        self.undoable_task_ids.set(frozenset())
        logger.info("Unarchiving undone for %d task(s)", len(ids))

    def close(self) -> None:
        self._stop_countdown()
        self.archived_tasks.dispose()
        self.selected_count.dispose()
        self.undoable_count.dispose()

    # ---- countdown ----

    def _restart_countdown(self) -> None:
        self._stop_countdown()
        self._countdown = self._scope.launch_later(self._undo_window, self._expire_undo, name="undo_countdown")

    def _stop_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _expire_undo(self) -> None:
        self._countdown = None
        if self.undoable_task_ids.value:
            logger.debug("Undo window elapsed; %d task(s) stay unarchived", len(self.undoable_task_ids.value))
        self.undoable_task_ids.set(frozenset())
