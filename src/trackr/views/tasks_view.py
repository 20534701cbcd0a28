# src/trackr/views/tasks_view.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..core.live import Mediator
from ..core.ports import TaskRepo
from ..core.scope import Scope
from ..tasks.task_models import TRACKED_STATUSES, TaskStatus, TaskSummary
from .archive_undo import ArchiveUndoController
from .expansion import ExpansionController, ExpansionState
from .list_items import HeaderData, ListItem, create_list_items
from .reorder import ReorderController

logger = logging.getLogger(__name__)


class TasksViewModel:
    """
    Tasks screen: grouped list, expand/collapse, stars, archive with undo, reordering.

    list_items is recomputed when either the summaries or the expanded states
    change. The last summaries are cached here, so a toggle re-projects without
    another database read.
    """

    def __init__(
        self,
        repo: TaskRepo,
        scope: Scope,
        *,
        current_user_id: int,
        statuses: Iterable[TaskStatus] = TRACKED_STATUSES,
    ) -> None:
        self._repo = repo
        self._scope = scope
        self._current_user_id = current_user_id

        self.expansion = ExpansionController(statuses)
        self._summaries = repo.observe_ongoing_summaries()
        self.reorder = ReorderController(repo, scope, self._summaries)
        self.archive = ArchiveUndoController(repo, scope)
        self.archived_item = self.archive.archived_item

        self._cached_summaries: list[TaskSummary] | None = None
        self.list_items: Mediator[list[ListItem]] = Mediator(name="list_items")
        self.list_items.add_source(self._summaries, self._on_summaries)
        self.list_items.add_source(self.expansion.state, self._on_expanded_states)

    def _on_summaries(self, summaries: list[TaskSummary] | None) -> None:
        # Cached so that toggling a group does not need another read.
        self._cached_summaries = summaries
        self._publish(create_list_items(summaries, self.expansion.state.value))

    def _on_expanded_states(self, states: ExpansionState | None) -> None:
        self._publish(create_list_items(self._cached_summaries, states))

    def _publish(self, items: list[ListItem] | None) -> None:
        if items is not None:
            self.list_items.set(items)

    def toggle_expanded_state(self, header: HeaderData | TaskStatus) -> None:
        status = header.task_status if isinstance(header, HeaderData) else header
        self.expansion.toggle(status)

    def toggle_task_star_state(self, task_summary: TaskSummary) -> None:
        self._scope.launch(
            self._repo.toggle_task_star_state, task_summary.id, self._current_user_id, name="toggle_star"
        )

    def find_task(self, task_id: int) -> TaskSummary | None:
        for summary in self._summaries.value or ():
            if summary.id == task_id:
                return summary
        return None

    # ---- archive ----

    def archive_task(self, task_summary: TaskSummary) -> None:
        self.archive.archive_task(task_summary)

    def undo_archive(self) -> None:
        self.archive.undo_archive()

    # ---- reorder ----

    def begin_drag(self, category: TaskStatus) -> None:
        self.reorder.begin_drag(category)

    def commit_drag(self, category: TaskStatus, new_order: Sequence[TaskSummary]) -> None:
        self.reorder.commit_drag(category, new_order)

    def move_task(self, category: TaskStatus, from_index: int, to_index: int) -> None:
        self.reorder.move_item(category, from_index, to_index)

    def undo_last_reorder(self) -> None:
        self.reorder.undo_last_reorder()

    def close(self) -> None:
        self.list_items.dispose()
