# tests/test_scope.py

from __future__ import annotations

import asyncio
import sqlite3

import pytest

from trackr.core.errors import InvalidArgument, PersistenceFailure, TrackrError
from trackr.core.scope import Scope


@pytest.mark.asyncio
async def test_launch_runs_sync_and_async_jobs_in_order() -> None:
    scope = Scope("test")
    ran: list[str] = []

    async def async_job(tag: str) -> None:
        ran.append(tag)

    scope.launch(ran.append, "first")
    scope.launch(async_job, "second")
    scope.launch(ran.append, "third")
    assert ran == []

    await scope.join()
    assert ran == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_cancel_abandons_pending_jobs_and_refuses_new_ones() -> None:
    scope = Scope("test")
    ran: list[int] = []

    scope.launch(ran.append, 1)
    timer = scope.launch_later(0.01, ran.append, 2)
    scope.cancel()

    assert scope.launch(ran.append, 3) is None
    await asyncio.sleep(0.05)

    assert ran == []
    assert scope.cancelled
    assert timer is not None and timer.cancelled()


@pytest.mark.asyncio
async def test_launch_later_waits_for_delay() -> None:
    scope = Scope("test")
    ran: list[str] = []

    scope.launch_later(0.02, ran.append, "late")
    await asyncio.sleep(0)
    assert ran == []

    await asyncio.sleep(0.06)
    assert ran == ["late"]


@pytest.mark.asyncio
async def test_join_does_not_wait_for_delayed_jobs() -> None:
    scope = Scope("test")
    scope.launch_later(10.0, lambda: None)
    await asyncio.wait_for(scope.join(), timeout=1.0)
    scope.cancel()


@pytest.mark.asyncio
async def test_failure_is_reported_as_persistence_failure() -> None:
    reported: list[TrackrError] = []
    scope = Scope("test", on_error=reported.append)

    def broken() -> None:
        raise sqlite3.OperationalError("disk I/O error")

    scope.launch(broken)
    scope.launch(lambda: None)
    await scope.join()

    assert len(reported) == 1
    assert isinstance(reported[0], PersistenceFailure)
    assert isinstance(reported[0].__cause__, sqlite3.OperationalError)
    assert scope.failures.value is reported[0]


@pytest.mark.asyncio
async def test_trackr_errors_are_reported_unchanged() -> None:
    scope = Scope("test")
    err = InvalidArgument("bad")

    def broken() -> None:
        raise err

    scope.launch(broken)
    await scope.join()
    assert scope.failures.value is err
