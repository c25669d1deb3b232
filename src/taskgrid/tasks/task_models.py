# src/taskgrid/tasks/task_models.py

"""
Task / Subtask / Label records and their JSON wire format.

The remote API speaks camelCase JSON (taskId, labelId, ...). Records here use
snake_case attributes and convert at the edge via from_api()/to_api().

intersects / intersect_index are derived by task_layout.layout() and are never
sent to the server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any


def as_aware(value: datetime) -> datetime:
    """Naive datetimes are read as local wall-clock time."""
    return value if value.tzinfo is not None else value.astimezone()


def parse_datetime(raw: Any) -> datetime | None:
    """
    Parse an ISO-8601 date into an aware datetime.

    "...Z" and explicit offsets keep their offset; an offset-less string is local time.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return as_aware(raw)
    if not isinstance(raw, str):
        raise ValueError(f"Expected ISO-8601 string for date, got {type(raw).__name__}")
    return as_aware(datetime.fromisoformat(raw.strip()))


def format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _require_dict(raw: Any, what: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"{what} record must be a JSON object, got {type(raw).__name__}")
    return raw


def _require_id(raw: dict[str, Any], what: str) -> int:
    value = raw.get("id")
    if value is None:
        raise ValueError(f"{what} record has no id")
    return int(value)


def _non_negative(raw: Any) -> int:
    try:
        return max(0, int(raw or 0))
    except (TypeError, ValueError):
        return 0


def _optional_int(raw: Any) -> int | None:
    return None if raw is None else int(raw)


@dataclass(slots=True)
class Label:
    id: int
    name: str
    color: str

    @classmethod
    def from_api(cls, raw: Any) -> Label:
        data = _require_dict(raw, "Label")
        return cls(
            id=_require_id(data, "Label"),
            name=str(data.get("name") or ""),
            color=str(data.get("color") or ""),
        )

    def to_api(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass(slots=True)
class Subtask:
    id: int
    task_id: int
    index: int
    title: str
    done: bool = False

    @classmethod
    def from_api(cls, raw: Any) -> Subtask:
        data = _require_dict(raw, "Subtask")
        task_id = data.get("taskId")
        if task_id is None:
            raise ValueError("Subtask record has no taskId")
        return cls(
            id=_require_id(data, "Subtask"),
            task_id=int(task_id),
            index=int(data.get("index") or 0),
            title=str(data.get("title") or ""),
            done=bool(data.get("done", False)),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "index": self.index,
            "title": self.title,
            "done": self.done,
        }


@dataclass(slots=True)
class Task:
    id: int
    title: str
    date: datetime | None = None
    estimate: int = 0
    actual: int = 0
    done: bool = False
    subtasks: list[Subtask] = field(default_factory=list)
    label_id: int | None = None
    label: Label | None = None

    # Derived by task_layout.layout(); never persisted.
    intersects: int = 0
    intersect_index: int = 0

    @classmethod
    def from_api(cls, raw: Any) -> Task:
        data = _require_dict(raw, "Task")
        raw_label = data.get("label")
        label = Label.from_api(raw_label) if raw_label else None
        subtasks = [Subtask.from_api(s) for s in (data.get("subtasks") or [])]
        subtasks.sort(key=lambda s: s.index)
        label_id = _optional_int(data.get("labelId"))
        if label_id is None and label is not None:
            label_id = label.id
        return cls(
            id=_require_id(data, "Task"),
            title=str(data.get("title") or ""),
            date=parse_datetime(data.get("date")),
            estimate=_non_negative(data.get("estimate")),
            actual=_non_negative(data.get("actual")),
            done=bool(data.get("done", False)),
            subtasks=subtasks,
            label_id=label_id,
            label=label,
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": format_datetime(self.date),
            "estimate": self.estimate,
            "actual": self.actual,
            "done": self.done,
            "labelId": self.label_id,
            "subtasks": [s.to_api() for s in self.subtasks],
        }

    def window(self) -> tuple[datetime, datetime] | None:
        """Half-open, always-aware [start, end) window, or None for unscheduled tasks."""
        if self.date is None:
            return None
        start = as_aware(self.date)
        return start, start + timedelta(minutes=self.estimate)


# ---- new-record payloads (no server id yet) ----


@dataclass(slots=True)
class NewTask:
    title: str
    date: datetime | None = None
    estimate: int = 0
    actual: int = 0
    done: bool = False
    label_id: int | None = None

    def to_api(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "date": format_datetime(self.date),
            "estimate": max(0, int(self.estimate)),
            "actual": max(0, int(self.actual)),
            "done": self.done,
            "labelId": self.label_id,
        }


@dataclass(slots=True)
class NewSubtask:
    task_id: int
    title: str
    done: bool = False

    def to_api(self) -> dict[str, Any]:
        # New subtasks always land first; the server assigns index 0.
        return {"taskId": self.task_id, "title": self.title, "done": self.done, "index": 0}


@dataclass(slots=True)
class NewLabel:
    name: str
    color: str

    def to_api(self) -> dict[str, Any]:
        return {"name": self.name, "color": self.color}
