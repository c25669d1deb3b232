# src/taskgrid/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from ..tasks.task_controller import TaskController


@dataclass
class AppState:
    """
    Session state passed explicitly to connectors and command handlers.

    settings is typed loosely so tests can pass a SimpleNamespace.
    """

    settings: Any
    api: Any  # TaskApi; closed on shutdown if it has an async close()
    controller: TaskController

    # Day the agenda is focused on (None -> today).
    focus_day: date | None = None
