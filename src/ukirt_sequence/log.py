from __future__ import annotations

import logging
import os
import time

from rich.logging import RichHandler


LOG_LEVEL_ENV = "UKIRT_SEQ_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"
_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def resolve_level(level: str | None = None) -> str:
    """Pick the log level name: argument, then ``UKIRT_SEQ_LOG_LEVEL``, then INFO.

    Unrecognised names fall back to INFO rather than failing the command.
    """

    raw = level if level is not None else os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL)
    name = str(raw).upper().strip()
    return name if name in _LEVELS else DEFAULT_LEVEL


def setup_logging(level: str | None = None) -> None:
    """Send log records to the console through a single RichHandler.

    Safe to call more than once: existing root handlers are replaced.
    """

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    logging.basicConfig(
        level=resolve_level(level),
        format="%(message)s",
        datefmt="[%H:%M:%S]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, omit_repeated_times=False)],
    )


class timer:
    """Time one CLI command over a number of execs.

    Example:
        with timer("summary", execs=len(paths)):
            ...

    Logs at DEBUG only. Exceptions propagate; reporting them is up to the caller.
    """

    def __init__(self, command: str, logger: logging.Logger | None = None, *, execs: int = 1):
        self.command = command
        self.execs = execs
        self.logger = logger or logging.getLogger("ukirt_sequence")
        self.t0 = 0.0

    def __enter__(self):
        self.t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        dt = time.perf_counter() - self.t0
        status = "done" if exc is None else "failed"
        self.logger.debug("%s %s: %d exec(s) in %.3f s", self.command, status, self.execs, dt)
        return False
