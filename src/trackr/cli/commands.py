# src/trackr/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.errors import InvalidArgument
from ..core.state import AppState
from ..tasks.task_api import create_task
from ..tasks.task_models import TRACKED_STATUSES, TaskStatus, TaskSummary
from ..views.list_items import HeaderItem, ListItem, TaskItem

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_STATUS_ALIASES: dict[str, TaskStatus] = {
    "todo": TaskStatus.NOT_STARTED,
    "doing": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.COMPLETED,
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- parsing / rendering helpers ----


def parse_status(raw: str) -> TaskStatus | None:
    key = raw.strip().lower().replace("-", "_")
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    try:
        return TaskStatus(key)
    except ValueError:
        return None


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def _format_due(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d")


def format_task(summary: TaskSummary, current_user_id: int) -> str:
    star = "*" if summary.is_starred_by(current_user_id) else " "
    tags = f" [{', '.join(t.label for t in summary.tags)}]" if summary.tags else ""
    return f"#{summary.id:<4} {star} {summary.title}{tags}  due {_format_due(summary.due_at)}  @{summary.owner.username}"


def render_list_items(items: list[ListItem], current_user_id: int) -> str:
    lines: list[str] = []
    for item in items:
        if isinstance(item, HeaderItem):
            h = item.header_data
            marker = "v" if h.expanded else ">"
            lines.append(f"{marker} {h.task_status.label} ({h.count})")
        elif isinstance(item, TaskItem):
            lines.append("    " + format_task(item.task_summary, current_user_id))
    return "\n".join(lines) if lines else "(nothing to show yet)"


def _lookup(state: AppState, args: list[str]) -> TaskSummary | str:
    if not args or _parse_id(args[0]) is None:
        return "Usage: pass a task id, e.g. 12"
    task_id = _parse_id(args[0])
    summary = state.tasks.find_task(task_id) if task_id is not None else None
    if summary is None:
        return f"No ongoing task #{args[0].lstrip('#')}."
    return summary


# ---- tasks screen ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_list_items(state.tasks.list_items.value or [], state.current_user.id)


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /add [status] <title>"
    status = parse_status(args[0])
    words = args[1:] if status is not None else args
    try:
        task_id = create_task(
            state.task_store,
            title=" ".join(words),
            owner=state.current_user,
            status=status or TaskStatus.NOT_STARTED,
        )
    except InvalidArgument as e:
        return f"Not saved: {e}"
    return f"Task #{task_id} created."


def cmd_toggle(state: AppState, args: list[str]) -> str:
    status = parse_status(args[0]) if args else None
    if status is None or status not in TRACKED_STATUSES:
        return "Usage: /toggle <not_started|in_progress|completed>"
    state.tasks.toggle_expanded_state(status)
    shown = "expanded" if state.tasks.expansion.is_expanded(status) else "collapsed"
    return f"{status.label}: {shown}."


def cmd_star(state: AppState, args: list[str]) -> str:
    found = _lookup(state, args)
    if isinstance(found, str):
        return found
    state.tasks.toggle_task_star_state(found)
    return f"Star toggled on #{found.id}."


def cmd_archive(state: AppState, args: list[str]) -> str:
    found = _lookup(state, args)
    if isinstance(found, str):
        return found
    state.tasks.archive_task(found)
    return f"Task #{found.id} archived. /undo to bring it back."


def cmd_undo(state: AppState, args: list[str]) -> str:
    item = state.tasks.archived_item.value
    if item is None:
        return "Nothing to undo."
    state.tasks.undo_archive()
    return f"Task #{item.task_id} is back in {item.previous_status.label}."


def cmd_move(state: AppState, args: list[str]) -> str:
    if len(args) < 2 or _parse_id(args[1]) is None:
        return "Usage: /move <task id> <position in its group, starting at 1>"
    found = _lookup(state, args)
    if isinstance(found, str):
        return found
    group = state.tasks.reorder.current_order(found.status)
    from_index = next(i for i, s in enumerate(group) if s.id == found.id)
    to_index = (_parse_id(args[1]) or 1) - 1
    if not 0 <= to_index < len(group):
        return f"Position must be between 1 and {len(group)}."
    state.tasks.move_task(found.status, from_index, to_index)
    return f"Task #{found.id} moved to position {to_index + 1}. /undomove to revert."


def cmd_undo_move(state: AppState, args: list[str]) -> str:
    if not state.tasks.reorder.can_undo:
        return "Nothing to undo."
    state.tasks.undo_last_reorder()
    return "Order restored."


# ---- archive screen ----


def cmd_archived(state: AppState, args: list[str]) -> str:
    rows = state.archive.archived_tasks.value or []
    if not rows:
        return "Archive is empty."
    lines = [f"Archived ({len(rows)}, {state.archive.selected_count.value or 0} selected):"]
    for row in rows:
        mark = "[x]" if row.selected else "[ ]"
        lines.append(f"  {mark} " + format_task(row.task_summary, state.current_user.id))
    return "\n".join(lines)


def cmd_select(state: AppState, args: list[str]) -> str:
    ids = [_parse_id(a) for a in args]
    if not ids or any(i is None for i in ids):
        return "Usage: /select <task id> [task id ...]"
    for task_id in ids:
        state.archive.toggle_task_selection(task_id)  # type: ignore[arg-type]
    return f"{state.archive.selected_count.value or 0} selected."


def cmd_clear(state: AppState, args: list[str]) -> str:
    state.archive.clear_selection()
    return "Selection cleared."


def cmd_unarchive(state: AppState, args: list[str]) -> str:
    if args:
        ids = [_parse_id(a) for a in args]
        if any(i is None for i in ids):
            return "Usage: /unarchive [task id ...]"
        if not state.archive.unarchive(i for i in ids if i is not None):
            return "None of those tasks are archived."
    else:
        if not state.archive.selected_count.value:
            return "Nothing selected. Use /select first or pass ids."
        state.archive.unarchive_selected_tasks()
    seconds = state.archive.undo_window
    return f"{state.archive.undoable_count.value or 0} task(s) unarchived. /undounarchive within {seconds:g}s to revert."


def cmd_undo_unarchive(state: AppState, args: list[str]) -> str:
    count = state.archive.undoable_count.value or 0
    if not count:
        return "Nothing to undo."
    state.archive.undo_unarchiving()
    return f"{count} task(s) archived again."


registry.register("help", cmd_help, "Show this help", aliases=["h"])
registry.register("list", cmd_list, "Show the task list", aliases=["ls"])
registry.register("add", cmd_add, "Create a task: /add [status] <title>")
registry.register("toggle", cmd_toggle, "Expand/collapse a status group")
registry.register("star", cmd_star, "Star/unstar a task")
registry.register("archive", cmd_archive, "Archive a task")
registry.register("undo", cmd_undo, "Undo the last archive")
registry.register("move", cmd_move, "Move a task within its group: /move <id> <position>")
registry.register("undomove", cmd_undo_move, "Undo the last reorder")
registry.register("archived", cmd_archived, "Show archived tasks")
registry.register("select", cmd_select, "Select/deselect archived tasks")
registry.register("clear", cmd_clear, "Clear the archive selection")
registry.register("unarchive", cmd_unarchive, "Unarchive the selection (or the given ids)")
registry.register("undounarchive", cmd_undo_unarchive, "Undo the last unarchive while the window is open")
