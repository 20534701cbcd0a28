# src/trackr/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Per-logger console floors. The store logs every write and the reactive core
# logs every subscription change; both belong in trackr.log, not under the prompt.
_CONSOLE_FLOORS: dict[str, int] = {
    "trackr.tasks.task_store": logging.WARNING,
    "trackr.core.live": logging.WARNING,
    "trackr.core.scope": logging.WARNING,
}


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keeps the REPL readable while trackr.log stays complete.

    View models and commands log at the handler level. Storage and the
    scope/live plumbing only reach the console from WARNING up. Anything
    outside trackr (py.warnings included) needs ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("trackr."):
            return record.levelno >= logging.ERROR

        for prefix, floor in _CONSOLE_FLOORS.items():
            if name.startswith(prefix):
                return record.levelno >= floor
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/trackr",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Send logs to stderr (filtered, TRACKR_LOG_LEVEL) and to <log_dir>/trackr.log.

    Call before the store is opened so schema migrations are logged too.
    Calling it again replaces the handlers.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # stderr, so log lines do not interleave with replies printed on stdout.
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_file = logging.FileHandler(str(log_dir / "trackr.log"), encoding="utf-8")
    log_file.setLevel(file_level)
    log_file.setFormatter(fmt)
    root.addHandler(log_file)

    logging.captureWarnings(True)

    # asyncio logs every slow callback at DEBUG; the file does not need it.
    logging.getLogger("asyncio").setLevel(logging.INFO)
