# tests/test_commands.py

from __future__ import annotations

import pytest

from trackr.cli.bootstrap import create_initial_state
from trackr.cli.commands import CommandRegistry, parse_status, registry
from trackr.tasks.task_models import TaskStatus


def test_command_registry_routes_and_aliases() -> None:
    reg = CommandRegistry()
    called = {"a": 0}

    def handler(state, args):
        called["a"] += 1
        return f"a:{','.join(args)}"

    reg.register("alpha", handler, "alpha", aliases=["a"])

    assert reg.handle(None, "/alpha x y") == "a:x,y"  # type: ignore[arg-type]
    assert reg.handle(None, "/A") == "a:"  # type: ignore[arg-type]
    assert called["a"] == 2
    assert "/alpha - alpha" in reg.build_help()


def test_command_registry_unknown_and_non_command() -> None:
    reg = CommandRegistry()
    assert reg.handle(None, "hello") is None  # type: ignore[arg-type]
    assert "Unknown command" in (reg.handle(None, "/nope") or "")  # type: ignore[arg-type]
    assert "Empty command" in (reg.handle(None, "/") or "")  # type: ignore[arg-type]


def test_parse_status_accepts_aliases() -> None:
    assert parse_status("doing") == TaskStatus.IN_PROGRESS
    assert parse_status("not-started") == TaskStatus.NOT_STARTED
    assert parse_status("COMPLETED") == TaskStatus.COMPLETED
    assert parse_status("later") is None


@pytest.mark.asyncio
async def test_console_session_flow(settings) -> None:
    state = create_initial_state(settings=settings)

    async def run(line: str) -> str:
        reply = registry.handle(state, line)
        await state.scope.join()
        assert reply is not None
        return reply

    assert "Not saved" in await run("/add todo   ")
    assert await run("/add doing Write brief") == "Task #1 created."
    assert await run("/add doing Review code") == "Task #2 created."

    listing = await run("/list")
    assert "v In progress (2)" in listing
    assert listing.index("Write brief") < listing.index("Review code")

    await run("/move 2 1")
    listing = await run("/list")
    assert listing.index("Review code") < listing.index("Write brief")
    assert await run("/undomove") == "Order restored."
    assert await run("/undomove") == "Nothing to undo."

    assert "collapsed" in await run("/toggle doing")
    assert "Write brief" not in await run("/list")

    assert "archived" in await run("/archive 1")
    archived = await run("/archived")
    assert "Write brief" in archived
    assert await run("/undo") == "Task #1 is back in In progress."

    await run("/archive 2")
    await run("/select 2")
    assert "1 task(s) unarchived" in await run("/unarchive")
    assert await run("/undounarchive") == "1 task(s) archived again."
    assert await run("/undounarchive") == "Nothing to undo."

    assert await run("/unarchive 1") == "None of those tasks are archived."
    assert await run("/undounarchive") == "Nothing to undo."
    assert "No ongoing task" in await run("/star 42")
    state.close()
