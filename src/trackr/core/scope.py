# src/trackr/core/scope.py

"""
Scope: owner of background work started by a view model.

- launch(fn, *args) runs fn in a new asyncio task (fire-and-forget for the caller)
- launch_later(delay, fn, *args) does the same after a delay (countdowns)
- cancel() abandons everything still pending; committed work stays committed

Failures are never swallowed: they are logged, published on `failures`
(as PersistenceFailure unless already a TrackrError) and passed to `on_error`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from .errors import PersistenceFailure, TrackrError
from .live import LiveValue

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[TrackrError], None]


class Scope:
    def __init__(self, name: str = "scope", *, on_error: ErrorHandler | None = None) -> None:
        self.name = name
        self._on_error = on_error
        self._jobs: set[asyncio.Task[Any]] = set()
        self._timers: set[asyncio.Task[Any]] = set()
        self._cancelled = False
        self.failures: LiveValue[TrackrError] = LiveValue(name=f"{name}.failures")

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def launch(self, fn: Callable[..., Any], *args: Any, name: str | None = None) -> asyncio.Task[Any] | None:
        """
        Run fn(*args) in the background. fn may be sync or async.

        Must be called from the event loop thread. Returns None once the scope is cancelled.
        """
        return self._start(self._jobs, self._run(fn, args), name or getattr(fn, "__name__", "job"))

    def launch_later(
        self, delay: float, fn: Callable[..., Any], *args: Any, name: str | None = None
    ) -> asyncio.Task[Any] | None:
        """Like launch(), after `delay` seconds. Cancel the returned task to call it off."""
        return self._start(self._timers, self._run_later(delay, fn, args), name or getattr(fn, "__name__", "delayed"))

    async def join(self) -> None:
        """
        Wait until every launched job (and any job they launch) has finished.

        Delayed jobs are not waited for: a countdown is not outstanding work.
        """
        while True:
            jobs = [job for job in self._jobs if not job.done()]
            if not jobs:
                return
            await asyncio.gather(*jobs, return_exceptions=True)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        jobs = [job for job in (*self._jobs, *self._timers) if not job.done()]
        for job in jobs:
            job.cancel()
        logger.debug("Scope %s cancelled (%d pending jobs)", self.name, len(jobs))

    # ---- internals ----

    def _start(self, bucket: set[asyncio.Task[Any]], coro: Any, name: str) -> asyncio.Task[Any] | None:
        if self._cancelled:
            coro.close()
            logger.debug("Scope %s is cancelled; dropping job %s", self.name, name)
            return None
        job = asyncio.get_running_loop().create_task(coro, name=f"{self.name}:{name}")
        bucket.add(job)
        job.add_done_callback(bucket.discard)
        return job

    async def _run(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._report(fn, e)

    async def _run_later(self, delay: float, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        await asyncio.sleep(max(0.0, float(delay)))
        await self._run(fn, args)

    def _report(self, fn: Callable[..., Any], exc: Exception) -> None:
        logger.exception("Job %s failed in scope %s", getattr(fn, "__name__", fn), self.name)
        if isinstance(exc, TrackrError):
            err: TrackrError = exc
        else:
            err = PersistenceFailure(f"{type(exc).__name__}: {exc}")
            err.__cause__ = exc
        self.failures.set(err)
        if self._on_error is not None:
            self._on_error(err)
