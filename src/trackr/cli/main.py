# src/trackr/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState on a running event loop, then runs the
console REPL until /exit (or waits for a signal when the console is disabled).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    state = create_initial_state(settings=settings)

    try:
        if settings.console_enabled:
            await run_console_loop(state)
        else:
            stop_main = asyncio.Event()
            loop = asyncio.get_running_loop()
            for signum in (signal.SIGINT, signal.SIGTERM):
                # Some platforms do not support signal handlers on the loop.
                with contextlib.suppress(NotImplementedError, RuntimeError):
                    loop.add_signal_handler(signum, stop_main.set)
            logger.info("Console disabled. Nothing to drive the app; press Ctrl+C to stop.")
            await stop_main.wait()
        await state.scope.join()
    finally:
        # Open undo windows are dropped here; their tasks simply stay as they are.
        state.close()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)
    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
