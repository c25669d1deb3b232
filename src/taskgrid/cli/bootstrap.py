# src/taskgrid/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) log directory exists,
- wires the HTTP API client and the TaskController into AppState.
"""

from __future__ import annotations

import logging

from ..api.client import TaskApiClient
from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_controller import TaskController

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.log_dir.mkdir(parents=True, exist_ok=True)

    api = TaskApiClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout_seconds,
        connect_timeout=settings.api_connect_timeout_seconds,
    )
    controller = TaskController(api, layout_strategy=settings.layout_strategy)

    logger.debug("State wired: api=%s strategy=%s", settings.api_base_url, settings.layout_strategy)
    return AppState(settings=settings, api=api, controller=controller)


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    close = getattr(state.api, "close", None)
    if close is None:
        return
    try:
        await close()
    except Exception:
        logger.debug("API client close failed.", exc_info=True)
