# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskgrid.core.state import AppState
from taskgrid.tasks.task_controller import TaskController

from .fakes import FakeTaskApi


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment / .env.
    """
    return SimpleNamespace(
        app_name="taskgrid-test",
        log_dir=tmp_path / "logs",
        api_base_url="http://test",
        api_timeout_seconds=1.0,
        api_connect_timeout_seconds=1.0,
        layout_strategy="pairwise",
        week_starts_on=0,
    )


@pytest.fixture()
def api() -> FakeTaskApi:
    return FakeTaskApi()


@pytest.fixture()
def controller(api: FakeTaskApi) -> TaskController:
    return TaskController(api)


@pytest.fixture()
def state(settings: SimpleNamespace, api: FakeTaskApi, controller: TaskController) -> AppState:
    """AppState wired with the in-memory API fake."""
    return AppState(settings=settings, api=api, controller=controller)
