# src/trackr/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from ..core.errors import InvalidArgument


class TaskStatus(StrEnum):
    """
    Task workflow status.

    NOT_STARTED -> IN_PROGRESS -> COMPLETED -> ARCHIVED.
    ARCHIVED tasks are hidden from the main list and shown on the archive screen.
    """

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


# Statuses shown as groups on the tasks screen, in display order.
TRACKED_STATUSES: tuple[TaskStatus, ...] = (
    TaskStatus.IN_PROGRESS,
    TaskStatus.NOT_STARTED,
    TaskStatus.COMPLETED,
)


@dataclass(slots=True, frozen=True)
class User:
    id: int
    username: str
    avatar: str = "default"


@dataclass(slots=True, frozen=True)
class Tag:
    id: int
    label: str
    color: str = "gray"


@dataclass(slots=True, frozen=True)
class TaskSummary:
    """Lightweight projection of a task for list display (no description)."""

    id: int
    title: str
    status: TaskStatus
    due_at: float
    order_in_category: int
    owner: User
    tags: tuple[Tag, ...] = ()
    star_users: tuple[User, ...] = ()

    def is_starred_by(self, user_id: int) -> bool:
        return any(u.id == user_id for u in self.star_users)


@dataclass(slots=True, frozen=True)
class TaskDetail:
    """Everything the edit screen shows. id == 0 means "not saved yet"."""

    id: int
    title: str
    status: TaskStatus
    created_at: float
    due_at: float
    owner: User
    creator: User
    description: str = ""
    tags: tuple[Tag, ...] = field(default=())
    star_users: tuple[User, ...] = field(default=())


def validate_task_detail(detail: TaskDetail) -> None:
    if not detail.title or not detail.title.strip():
        raise InvalidArgument("Task must include non-empty title.")
