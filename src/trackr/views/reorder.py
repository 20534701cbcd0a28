# src/trackr/views/reorder.py

"""
Drag-and-drop reordering with a one-step undo.

Flow:
- begin_drag(category): snapshot the group's current order (the reorder cache)
- commit_drag(category, new_order): persist order_in_category = position, atomically
- undo_last_reorder(): put the snapshot of the last commit's order_in_category values back, atomically

move_item() is the non-drag path (keyboard / accessibility actions). It uses
displace semantics: the moved task is taken out and reinserted at the target
position, and the tasks in between shift by one. It never swaps two tasks.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.live import LiveValue
from ..core.ports import TaskRepo
from ..core.scope import Scope
from ..tasks.task_models import TaskStatus, TaskSummary

logger = logging.getLogger(__name__)


def ordered_group(summaries: Sequence[TaskSummary] | None, category: TaskStatus) -> list[TaskSummary]:
    """Summaries of one status in display order."""
    group = [s for s in (summaries or ()) if s.status == category]
    return sorted(group, key=lambda s: s.order_in_category)


def displace(items: Sequence[TaskSummary], from_index: int, to_index: int) -> list[TaskSummary]:
    """Move items[from_index] to to_index, shifting everything in between."""
    out = list(items)
    out.insert(to_index, out.pop(from_index))
    return out


class ReorderController:
    def __init__(self, repo: TaskRepo, scope: Scope, summaries: LiveValue[list[TaskSummary]]) -> None:
        self._repo = repo
        self._scope = scope
        self._summaries = summaries
        self._drag_snapshot: list[TaskSummary] = []
        self._undo_snapshot: list[TaskSummary] = []
        self._drag_category: TaskStatus | None = None
        self._undo_category: TaskStatus | None = None

    @property
    def can_undo(self) -> bool:
        return self._undo_category is not None

    @property
    def dragging(self) -> TaskStatus | None:
        return self._drag_category

    def current_order(self, category: TaskStatus) -> list[TaskSummary]:
        return ordered_group(self._summaries.value, category)

    def begin_drag(self, category: TaskStatus) -> None:
        self._drag_snapshot = self.current_order(category)
        self._drag_category = category
        logger.debug("Drag started in %s (%d tasks cached)", category, len(self._drag_snapshot))

    def commit_drag(self, category: TaskStatus, new_order: Sequence[TaskSummary]) -> None:
        if self._drag_category != category:
            # No matching begin_drag(): what is persisted right now is the pre-drag order.
            self.begin_drag(category)
        self._undo_snapshot = self._drag_snapshot
        self._drag_snapshot = []
        self._drag_category = None
        self._undo_category = category
        self._scope.launch(self._repo.reorder_list, category, list(new_order), name="reorder_list")
        logger.info("Reorder committed for %s (%d tasks)", category, len(new_order))

    def cancel_drag(self) -> None:
        """Drop a drag that was never committed; nothing was persisted."""
        self._drag_category = None
        self._drag_snapshot = []

    def undo_last_reorder(self) -> None:
        category = self._undo_category
        if category is None:
            return
        orders = {s.id: s.order_in_category for s in self._undo_snapshot}
        self._undo_category = None
        self._undo_snapshot = []
        self._scope.launch(self._repo.update_orders, orders, name="restore_order")
        logger.info("Reorder undone for %s", category)

    def move_item(self, category: TaskStatus, from_index: int, to_index: int) -> None:
        """Move one task within its group without a drag gesture (displace, not swap)."""
        current = self.current_order(category)
        if not (0 <= from_index < len(current) and 0 <= to_index < len(current)):
            logger.warning(
                "move ignored: %s has %d tasks, got %d -> %d", category, len(current), from_index, to_index
            )
            return
        if from_index == to_index:
            return
        if self._drag_category != category:
            self.begin_drag(category)
        self.commit_drag(category, displace(current, from_index, to_index))
