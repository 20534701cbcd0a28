# src/trackr/tasks/task_api.py

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from .task_models import Tag, TaskDetail, TaskStatus, User
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def create_task(
    store: TaskStore,
    *,
    title: str,
    owner: User,
    creator: User | None = None,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    description: str = "",
    due_in_days: float = 7.0,
    tags: Sequence[Tag] = (),
) -> int:
    """
    Convenience helper: create a task at the end of its status group.
    Raises InvalidArgument for an empty title (nothing is written).
    """
    now_ts = time.time()
    detail = TaskDetail(
        id=0,
        title=title,
        description=description,
        status=status,
        created_at=now_ts,
        due_at=now_ts + max(0.0, float(due_in_days)) * 86400,
        owner=owner,
        creator=creator or owner,
        tags=tuple(tags),
    )
    return store.save_task_detail(detail)


_DEMO_TASKS: tuple[tuple[str, TaskStatus, tuple[str, ...]], ...] = (
    ("Write the project brief", TaskStatus.IN_PROGRESS, ("work",)),
    ("Review pull requests", TaskStatus.IN_PROGRESS, ("work", "urgent")),
    ("Book dentist appointment", TaskStatus.NOT_STARTED, ("home",)),
    ("Plan weekend trip", TaskStatus.NOT_STARTED, ("home",)),
    ("Renew passport", TaskStatus.NOT_STARTED, ("urgent",)),
    ("Set up backups", TaskStatus.COMPLETED, ("home",)),
    ("Send Q3 report", TaskStatus.ARCHIVED, ("work",)),
)

_DEMO_TAGS: dict[str, str] = {"work": "blue", "home": "green", "urgent": "red"}


def seed_demo_data(store: TaskStore, owner: User) -> int:
    """Fill an empty database with a few tasks. Returns how many were created."""
    if store.count_tasks() > 0:
        logger.info("Demo data skipped: database already has tasks")
        return 0

    tags = {label: store.add_tag(label, color) for label, color in _DEMO_TAGS.items()}
    to_archive: list[int] = []
    for title, status, labels in _DEMO_TASKS:
        initial = TaskStatus.COMPLETED if status == TaskStatus.ARCHIVED else status
        task_id = create_task(store, title=title, owner=owner, status=initial, tags=[tags[t] for t in labels])
        if status == TaskStatus.ARCHIVED:
            to_archive.append(task_id)
    store.archive(to_archive)

    logger.info("Seeded %d demo tasks", len(_DEMO_TASKS))
    return len(_DEMO_TASKS)
