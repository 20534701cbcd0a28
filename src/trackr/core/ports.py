# src/trackr/core/ports.py

"""
Ports (interfaces) used by the view models.

View models depend on Protocols instead of the SQLite store.
This keeps storage swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from ..tasks.task_models import TaskDetail, TaskStatus, TaskSummary
from .live import LiveValue


class TaskRepo(Protocol):
    # Live queries
    def observe_ongoing_summaries(self) -> LiveValue[list[TaskSummary]]: ...
    def observe_archived_summaries(self) -> LiveValue[list[TaskSummary]]: ...

    # Status
    def update_task_status(self, task_id: int, status: TaskStatus) -> None: ...
    def update_tasks_status(self, task_ids: Iterable[int], status: TaskStatus) -> None: ...
    def archive(self, task_ids: Iterable[int]) -> None: ...
    def unarchive(self, task_ids: Iterable[int]) -> None: ...

    # Ordering (update_orders / reorder_list are atomic)
    def update_order_in_category(self, task_id: int, order_in_category: int) -> None: ...
    def update_orders(self, orders: Mapping[int, int]) -> None: ...
    def reorder_list(self, status: TaskStatus, summaries: Sequence[TaskSummary]) -> None: ...

    # Stars
    def toggle_task_star_state(self, task_id: int, user_id: int) -> None: ...

    # Detail
    def load_task_detail(self, task_id: int) -> TaskDetail | None: ...
    def save_task_detail(self, detail: TaskDetail) -> int: ...
