# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskgrid.tasks.task_models import Label, NewSubtask, NewTask, Subtask, Task


def test_task_from_api_full_record() -> None:
    task = Task.from_api(
        {
            "id": 3,
            "title": "Plan",
            "date": "2024-05-06T09:00:00.000Z",
            "estimate": 45,
            "actual": 10,
            "done": False,
            "labelId": 2,
            "label": {"id": 2, "name": "work", "color": "#f00"},
            "subtasks": [
                {"id": 8, "taskId": 3, "index": 1, "title": "b", "done": True},
                {"id": 7, "taskId": 3, "index": 0, "title": "a", "done": False},
            ],
            "intersects": 5,
            "intersectIndex": 2,
        }
    )

    assert task.date == datetime(2024, 5, 6, 9, 0, tzinfo=timezone.utc)
    assert task.window() == (task.date, task.date + timedelta(minutes=45))
    assert task.label == Label(id=2, name="work", color="#f00")
    assert [s.id for s in task.subtasks] == [7, 8]
    # derived fields from the wire are ignored
    assert (task.intersects, task.intersect_index) == (0, 0)


def test_task_from_api_defaults_and_unscheduled() -> None:
    task = Task.from_api({"id": 1})
    assert task.date is None
    assert task.window() is None
    assert (task.estimate, task.actual, task.done, task.subtasks) == (0, 0, False, [])


def test_negative_estimate_is_clamped() -> None:
    assert Task.from_api({"id": 1, "estimate": -30}).estimate == 0


def test_label_id_falls_back_to_embedded_label() -> None:
    task = Task.from_api({"id": 1, "label": {"id": 4, "name": "x", "color": "#000"}})
    assert task.label_id == 4


@pytest.mark.parametrize("raw", [None, [], "task", {"title": "no id"}])
def test_task_from_api_rejects_malformed(raw: object) -> None:
    with pytest.raises(ValueError):
        Task.from_api(raw)


def test_subtask_requires_task_id() -> None:
    with pytest.raises(ValueError):
        Subtask.from_api({"id": 1, "index": 0})


def test_task_to_api_omits_derived_fields() -> None:
    task = Task(id=1, title="t", date=datetime(2024, 5, 6, 9, 0), estimate=30, intersects=3, intersect_index=1)
    body = task.to_api()
    assert body["date"] == "2024-05-06T09:00:00"
    assert "intersects" not in body and "intersectIndex" not in body
    assert "label" not in body


def test_new_record_payloads_have_no_id() -> None:
    assert "id" not in NewTask(title="t").to_api()
    assert NewTask(title="t", estimate=-5).to_api()["estimate"] == 0
    assert NewSubtask(task_id=3, title="s").to_api() == {"taskId": 3, "title": "s", "done": False, "index": 0}


def test_offset_less_date_is_read_as_local_time() -> None:
    local = Task.from_api({"id": 1, "date": "2024-05-06T09:00:00"})
    utc = Task.from_api({"id": 2, "date": "2024-05-06T09:00:00Z"})

    assert local.date == datetime(2024, 5, 6, 9, 0).astimezone()
    assert local.date is not None and local.date.tzinfo is not None
    assert utc.date is not None and utc.date.utcoffset() == timedelta(0)
    assert isinstance(utc.date - local.date, timedelta)


def test_window_of_naive_task_is_aware() -> None:
    task = Task(id=1, title="t", date=datetime(2024, 5, 6, 9, 0), estimate=30)
    w = task.window()
    assert w is not None
    assert w[0] == datetime(2024, 5, 6, 9, 0).astimezone()
    assert w[1] - w[0] == timedelta(minutes=30)
