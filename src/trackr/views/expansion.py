# src/trackr/views/expansion.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from ..core.live import LiveValue
from ..tasks.task_models import TRACKED_STATUSES, TaskStatus

logger = logging.getLogger(__name__)

ExpansionState = Mapping[TaskStatus, bool]


class ExpansionController:
    """
    Owns the expanded/collapsed flag of each status group.

    Every toggle publishes a brand-new read-only mapping: subscribers may keep
    the previous one around for comparison.
    """

    def __init__(self, statuses: Iterable[TaskStatus] = TRACKED_STATUSES) -> None:
        initial = MappingProxyType({status: True for status in statuses})
        self.state: LiveValue[ExpansionState] = LiveValue(initial, name="expanded_states")

    def is_expanded(self, status: TaskStatus) -> bool:
        current = self.state.value or {}
        return bool(current.get(status, False))

    def toggle(self, status: TaskStatus) -> None:
        current = self.state.value or {}
        if status not in current:
            logger.warning("toggle ignored: status %s has no group", status)
            return
        updated = dict(current)
        updated[status] = not current[status]
        self.state.set(MappingProxyType(updated))
        logger.debug("Group %s expanded=%s", status, updated[status])
