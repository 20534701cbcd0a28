# src/trackr/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import TrackrError
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL on the event loop.

    input() runs in a worker thread so that countdowns and persistence jobs
    keep running while the prompt waits.
    """
    logger.info("Console connector started (user=%s).", state.current_user.username)
    _print_ts("[CONSOLE] Use /help for commands, /list to see your tasks, /exit to quit.\n")

    def on_failure(err: TrackrError) -> None:
        _print_ts(f"[ERROR] {err}")

    failures = state.scope.failures.subscribe(on_failure)
    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                reply = command_registry.handle(state, user_input)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply is None:
                reply = "Commands start with '/'. Use /help to list them."

            # Let the writes started by the command land before anything is shown.
            await state.scope.join()
            _print_ts(reply)
    finally:
        failures.dispose()

    logger.info("Console connector finished.")
