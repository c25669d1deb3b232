# src/taskgrid/tasks/task_controller.py

"""
Reconciliation controller: the session's single source of truth for tasks,
subtasks and labels.

Every mutation goes through one remote call. Local state is patched only after
that call returns a truthy, well-formed body (no optimistic writes before the
server answers, no full refetch after). Whenever the task collection changes it
is fed through task_layout.layout() before being published.

Failure policy:
- TaskApiError from the transport -> logged, state unchanged, returns None
- falsy or malformed response     -> logged, state unchanged, returns it as-is
- update_*/create_* given None    -> returns None without a remote call

Concurrency: single asyncio loop, no locks. Each merge runs synchronously after
the awaited call, so merges never interleave on the same collection.

Subtask ordering: after every mutation a task's subtasks are sorted by index and
numbered 0..n-1. A subtask update is a list splice (remove, re-insert at the new
index, renumber), so moving left and right are symmetric.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from ..api.errors import TaskApiError
from ..core.ports import StateListener, TaskApi
from .task_layout import PAIRWISE, SWEEP, layout
from .task_models import Label, NewLabel, NewSubtask, NewTask, Subtask, Task

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class TaskState:
    """What the rendering layer reads. Tasks already carry intersects / intersect_index."""

    tasks: tuple[Task, ...]
    labels: tuple[Label, ...]
    is_fetching: bool


def _renumber(subtasks: Iterable[Subtask]) -> list[Subtask]:
    return [s if s.index == i else replace(s, index=i) for i, s in enumerate(subtasks)]


def _ordered(subtasks: Iterable[Subtask]) -> list[Subtask]:
    return sorted(subtasks, key=lambda s: s.index)


class TaskController:
    def __init__(self, api: TaskApi, *, layout_strategy: str = PAIRWISE) -> None:
        if layout_strategy not in (PAIRWISE, SWEEP):
            raise ValueError(f"Unknown layout strategy: {layout_strategy!r}")
        self._api = api
        self._layout_strategy = layout_strategy

        self._tasks: list[Task] = []
        self._labels: list[Label] = []
        self._is_fetching = False
        self._listeners: list[StateListener] = []

    # ---- published state ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def labels(self) -> tuple[Label, ...]:
        return tuple(self._labels)

    @property
    def is_fetching(self) -> bool:
        return self._is_fetching

    @property
    def layout_strategy(self) -> str:
        return self._layout_strategy

    def snapshot(self) -> TaskState:
        return TaskState(tasks=tuple(self._tasks), labels=tuple(self._labels), is_fetching=self._is_fetching)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def get_task(self, task_id: int) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def get_label(self, label_id: int) -> Label | None:
        return next((lb for lb in self._labels if lb.id == label_id), None)

    def find_subtask(self, subtask_id: int) -> Subtask | None:
        for t in self._tasks:
            for s in t.subtasks:
                if s.id == subtask_id:
                    return s
        return None

    def _publish(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    def _commit_tasks(self, tasks: Iterable[Task]) -> None:
        self._tasks = layout(list(tasks), strategy=self._layout_strategy)
        self._publish()

    # ---- bulk replace ----

    def set_tasks(self, tasks: Iterable[Task]) -> None:
        """Replace the whole task collection (always re-runs layout)."""
        self._commit_tasks(tasks)

    def set_labels(self, labels: Iterable[Label]) -> None:
        self._labels = list(labels)
        self._publish()

    # ---- remote call plumbing ----

    async def _call(self, what: str, call: Callable[[], Awaitable[R]]) -> R | None:
        try:
            res = await call()
        except TaskApiError as e:
            logger.warning("%s failed: %s", what, e)
            return None
        if not res:
            logger.info("%s returned nothing (%r); local state unchanged", what, res)
        return res

    @staticmethod
    def _record(res: Any, key: str, what: str) -> dict[str, Any] | None:
        if not isinstance(res, dict) or not isinstance(res.get(key), dict):
            logger.warning("%s: malformed response, expected {%r: {...}}; local state unchanged", what, key)
            return None
        return res[key]

    @staticmethod
    def _deleted_id(res: Any, what: str) -> int | None:
        try:
            return int(res["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning("%s: malformed response, expected {'id': ...}; local state unchanged", what)
            return None

    def _task_from_record(
        self,
        raw: Any,
        previous: Task | None = None,
        *,
        labels: Iterable[Label] | None = None,
    ) -> Task:
        task = Task.from_api(raw)
        # The server may answer without relations; keep what we already know.
        if "subtasks" not in raw and previous is not None:
            task.subtasks = list(previous.subtasks)
        if task.label is None and task.label_id is not None:
            known = self._labels if labels is None else labels
            task.label = next((lb for lb in known if lb.id == task.label_id), None)
        return task

    # ---- initial load ----

    async def load(self) -> bool:
        """
        Fetch all tasks and labels, lay out tasks, publish both.

        is_fetching is set for the duration and always cleared, even when a fetch
        fails or times out. On failure state is left unchanged and False is returned.
        """
        self._is_fetching = True
        self._publish()

        tasks: list[Task] = []
        labels: list[Label] = []
        ok = False
        try:
            tasks_body = await self._api.fetch_tasks()
            labels_body = await self._api.fetch_labels()
            labels = [Label.from_api(r) for r in labels_body["labels"]]
            tasks = [self._task_from_record(r, labels=labels) for r in tasks_body["tasks"]]
            ok = True
        except TaskApiError as e:
            logger.warning("Initial load failed: %s", e)
        except (KeyError, TypeError, ValueError):
            logger.warning("Initial load: malformed response", exc_info=True)
        finally:
            self._is_fetching = False

        if not ok:
            self._publish()
            return False

        self._labels = labels
        self._commit_tasks(tasks)
        logger.info("Loaded %d tasks and %d labels", len(tasks), len(labels))
        return True

    # ---- tasks ----

    async def create_task(self, data: NewTask | None) -> Any:
        if data is None:
            return None
        res = await self._call("create_task", lambda: self._api.create_task(data.to_api()))
        if not res:
            return res
        raw = self._record(res, "task", "create_task")
        if raw is None:
            return res
        try:
            task = self._task_from_record(raw)
        except ValueError:
            logger.warning("create_task: unparsable task record", exc_info=True)
            return res

        self._commit_tasks([task, *self._tasks])
        logger.debug("Task created id=%s", task.id)
        return res

    async def update_task(self, data: Task | None, *, merge: bool = True) -> Any:
        """
        Send the full task; on success replace it in place and re-run layout.

        merge=False issues the call but leaves local state alone (the caller is
        about to replace the collection itself, e.g. a drag in progress).
        """
        if data is None:
            return None
        res = await self._call("update_task", lambda: self._api.update_task(data.to_api()))
        if not res or not merge:
            return res
        raw = self._record(res, "task", "update_task")
        if raw is None:
            return res

        try:
            task_id = int(raw["id"])
        except (KeyError, TypeError, ValueError):
            logger.warning("update_task: task record has no usable id; local state unchanged")
            return res

        previous = self.get_task(task_id)
        if previous is None:
            logger.info("update_task: task id=%s is not loaded; local state unchanged", task_id)
            return res
        try:
            task = self._task_from_record(raw, previous)
        except ValueError:
            logger.warning("update_task: unparsable task record", exc_info=True)
            return res

        self._commit_tasks(task if t.id == task.id else t for t in self._tasks)
        return res

    async def delete_task(self, task_id: int) -> Any:
        res = await self._call("delete_task", lambda: self._api.delete_task(task_id))
        if not res:
            return res
        deleted = self._deleted_id(res, "delete_task")
        if deleted is None:
            return res

        self._commit_tasks(t for t in self._tasks if t.id != deleted)
        logger.debug("Task deleted id=%s", deleted)
        return res

    # ---- subtasks ----

    def _with_subtasks(self, changes: dict[int, list[Subtask]]) -> list[Task]:
        return [replace(t, subtasks=changes[t.id]) if t.id in changes else t for t in self._tasks]

    async def create_subtask(self, data: NewSubtask | None) -> Any:
        if data is None:
            return None
        res = await self._call("create_subtask", lambda: self._api.create_subtask(data.to_api()))
        if not res:
            return res
        raw = self._record(res, "subtask", "create_subtask")
        if raw is None:
            return res
        try:
            sub = Subtask.from_api(raw)
        except ValueError:
            logger.warning("create_subtask: unparsable subtask record", exc_info=True)
            return res

        parent = self.get_task(sub.task_id)
        if parent is None:
            logger.info("create_subtask: parent task id=%s is not loaded", sub.task_id)
            return res

        # Newest first: the new subtask takes index 0, siblings shift down by one.
        siblings = _renumber([replace(sub, index=0), *_ordered(parent.subtasks)])
        self._commit_tasks(self._with_subtasks({parent.id: siblings}))
        return res

    async def update_subtask(self, data: Subtask | None) -> Any:
        if data is None:
            return None
        res = await self._call("update_subtask", lambda: self._api.update_subtask(data.to_api()))
        if not res:
            return res
        raw = self._record(res, "subtask", "update_subtask")
        if raw is None:
            return res
        try:
            sub = Subtask.from_api(raw)
        except ValueError:
            logger.warning("update_subtask: unparsable subtask record", exc_info=True)
            return res

        parent = self.get_task(sub.task_id)
        if parent is None:
            logger.info("update_subtask: parent task id=%s is not loaded", sub.task_id)
            return res

        changes: dict[int, list[Subtask]] = {}

        # Detach from wherever it currently lives (possibly another task).
        for t in self._tasks:
            if any(s.id == sub.id for s in t.subtasks):
                changes[t.id] = _renumber(s for s in _ordered(t.subtasks) if s.id != sub.id)

        siblings = changes.get(parent.id, _ordered(parent.subtasks))
        pos = max(0, min(sub.index, len(siblings)))
        siblings = [*siblings[:pos], sub, *siblings[pos:]]
        changes[parent.id] = _renumber(siblings)

        self._commit_tasks(self._with_subtasks(changes))
        return res

    async def delete_subtask(self, subtask_id: int) -> Any:
        res = await self._call("delete_subtask", lambda: self._api.delete_subtask(subtask_id))
        if not res:
            return res
        deleted = self._deleted_id(res, "delete_subtask")
        if deleted is None:
            return res

        changes = {
            t.id: _renumber(s for s in _ordered(t.subtasks) if s.id != deleted)
            for t in self._tasks
            if any(s.id == deleted for s in t.subtasks)
        }
        if not changes:
            logger.info("delete_subtask: subtask id=%s is not loaded", deleted)
            return res

        self._commit_tasks(self._with_subtasks(changes))
        return res

    # ---- labels ----

    async def create_label(self, data: NewLabel | None) -> Any:
        if data is None:
            return None
        res = await self._call("create_label", lambda: self._api.create_label(data.to_api()))
        if not res:
            return res
        raw = self._record(res, "label", "create_label")
        if raw is None:
            return res
        try:
            label = Label.from_api(raw)
        except ValueError:
            logger.warning("create_label: unparsable label record", exc_info=True)
            return res

        self._labels = [*self._labels, label]
        self._publish()
        return res

    async def update_label(self, data: Label | None) -> Any:
        if data is None:
            return None
        res = await self._call("update_label", lambda: self._api.update_label(data.to_api()))
        if not res:
            return res
        raw = self._record(res, "label", "update_label")
        if raw is None:
            return res
        try:
            label = Label.from_api(raw)
        except ValueError:
            logger.warning("update_label: unparsable label record", exc_info=True)
            return res

        if self.get_label(label.id) is None:
            logger.info("update_label: label id=%s is not loaded; local state unchanged", label.id)
            return res

        self._labels = [label if lb.id == label.id else lb for lb in self._labels]
        if any(t.label_id == label.id for t in self._tasks):
            # Embedded copies on tasks must show the new name/color.
            self._commit_tasks(replace(t, label=label) if t.label_id == label.id else t for t in self._tasks)
        else:
            self._publish()
        return res

    async def delete_label(self, label_id: int) -> Any:
        res = await self._call("delete_label", lambda: self._api.delete_label(label_id))
        if not res:
            return res
        deleted = self._deleted_id(res, "delete_label")
        if deleted is None:
            return res

        self._labels = [lb for lb in self._labels if lb.id != deleted]
        if any(t.label_id == deleted for t in self._tasks):
            self._commit_tasks(
                replace(t, label=None, label_id=None) if t.label_id == deleted else t for t in self._tasks
            )
        else:
            self._publish()
        return res
