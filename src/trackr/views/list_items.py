# src/trackr/views/list_items.py

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..tasks.task_models import TRACKED_STATUSES, TaskStatus, TaskSummary


@dataclass(slots=True, frozen=True)
class HeaderData:
    task_status: TaskStatus
    count: int
    expanded: bool


@dataclass(slots=True, frozen=True)
class HeaderItem:
    header_data: HeaderData


@dataclass(slots=True, frozen=True)
class TaskItem:
    task_summary: TaskSummary


ListItem = HeaderItem | TaskItem


def create_list_items(
    summaries: Iterable[TaskSummary] | None,
    expanded_states: Mapping[TaskStatus, bool] | None,
) -> list[ListItem] | None:
    """
    Build the tasks screen rows: for each tracked status, a header followed by
    that status' tasks (only when expanded), ordered by order_in_category.

    Returns None when either input is None: "not ready yet", as opposed to an
    empty list of tasks. Statuses missing from expanded_states get no group.
    """
    if summaries is None or expanded_states is None:
        return None

    groups: dict[TaskStatus, list[TaskSummary]] = {s: [] for s in TRACKED_STATUSES if s in expanded_states}
    for summary in summaries:
        group = groups.get(summary.status)
        if group is not None:
            group.append(summary)

    items: list[ListItem] = []
    for status, group in groups.items():
        expanded = bool(expanded_states[status])
        items.append(HeaderItem(HeaderData(task_status=status, count=len(group), expanded=expanded)))
        if expanded:
            # sorted() is stable: equal orders keep the repository's order.
            items.extend(TaskItem(s) for s in sorted(group, key=lambda s: s.order_in_category))
    return items


def task_summaries(items: Iterable[ListItem]) -> list[TaskSummary]:
    """Task rows of a list, in display order (headers dropped)."""
    return [item.task_summary for item in items if isinstance(item, TaskItem)]


def find_header(items: list[ListItem], position: int) -> HeaderItem | None:
    """Header of the group the row at `position` belongs to (sticky header lookup)."""
    for item in reversed(items[: position + 1]):
        if isinstance(item, HeaderItem):
            return item
    return None
