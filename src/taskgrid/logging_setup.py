# src/taskgrid/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

APP_LOGGER = "taskgrid"

# Loggers that run on every request / every state change. Console shows them at WARNING+.
CHATTY_APP_LOGGERS = (
    "taskgrid.api",
    "taskgrid.tasks.task_layout",
    "taskgrid.connectors",
)

# HTTP stack under the API client; logs every connection and request at DEBUG/INFO.
HTTP_LIBRARIES = ("httpx", "httpcore")


def _under(name: str, prefix: str) -> bool:
    return name == prefix or name.startswith(prefix + ".")


class _AgendaConsoleFilter(logging.Filter):
    """
    Console filter for the interactive agenda.

    The agenda prints to the same terminal as the log, so only the controller and
    CLI talk freely. Request and layout chatter goes to the file log only, and
    anything outside the app (HTTP stack, asyncio, py.warnings) must reach ERROR.
    """

    def __init__(self, chatty: Iterable[str] = CHATTY_APP_LOGGERS) -> None:
        super().__init__()
        self._chatty = tuple(chatty)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not _under(name, APP_LOGGER):
            return record.levelno >= logging.ERROR
        if any(_under(name, p) for p in self._chatty):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskgrid",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    library_level: int = logging.WARNING,
) -> Path:
    """
    Console handler filtered for the agenda, plus <log_dir>/taskgrid.log with everything.

    httpx/httpcore are capped at `library_level` for both handlers; at DEBUG they log
    every TCP/TLS step of every request. Call once, before the first log line.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "taskgrid.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_AgendaConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    for name in HTTP_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)

    logging.captureWarnings(True)
    return log_file
