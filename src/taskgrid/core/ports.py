# src/taskgrid/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The controller depends on Protocols instead of concrete implementations.
This keeps the HTTP transport swappable and makes testing easier
(tests/fakes.py provides an in-memory TaskApi).
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..tasks.task_controller import TaskState

JsonBody = Any
# Decoded JSON response; a falsy value means "the server did not apply the change".


class TaskApi(Protocol):
    """
    Remote CRUD contract consumed by TaskController.

    Response shapes:
    - fetch_tasks  -> {"tasks": [...]}      fetch_labels -> {"labels": [...]}
    - create/update task    -> {"task": {...}}
    - create/update subtask -> {"subtask": {...}}
    - create/update label   -> {"label": {...}}
    - delete_*              -> {"id": <int>}

    Implementations may raise TaskApiError subclasses on failure.
    """

    async def fetch_tasks(self) -> JsonBody: ...
    async def create_task(self, payload: dict[str, Any]) -> JsonBody: ...
    async def update_task(self, payload: dict[str, Any]) -> JsonBody: ...
    async def delete_task(self, task_id: int) -> JsonBody: ...

    async def create_subtask(self, payload: dict[str, Any]) -> JsonBody: ...
    async def update_subtask(self, payload: dict[str, Any]) -> JsonBody: ...
    async def delete_subtask(self, subtask_id: int) -> JsonBody: ...

    async def fetch_labels(self) -> JsonBody: ...
    async def create_label(self, payload: dict[str, Any]) -> JsonBody: ...
    async def update_label(self, payload: dict[str, Any]) -> JsonBody: ...
    async def delete_label(self, label_id: int) -> JsonBody: ...


class StateListener(Protocol):
    """Rendering-layer callback, invoked with the newly published state."""

    def __call__(self, state: TaskState) -> None: ...
