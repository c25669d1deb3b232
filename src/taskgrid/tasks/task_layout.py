# src/taskgrid/tasks/task_layout.py

from __future__ import annotations

"""
Overlap / lane layout for scheduled tasks.

layout() annotates every task with:
- intersects:      how many LATER tasks (in sequence order) overlap this one
- intersect_index: the horizontal lane the grid renders the task in

Only scheduled, not-done tasks take part. Windows are half-open
[date, date + estimate minutes), so touching endpoints do not overlap.
Task.window() reads naive dates as local time, so naive and aware dates mix freely.

Two lane strategies:
- "pairwise": single O(n^2) scan over (i, j) pairs, last write wins. Lanes depend
  on sequence order. This is what existing grid consumers were built against.
- "sweep":    minimum-lane interval colouring (sort by start, min-heap of active
  lanes keyed by end). Overlapping tasks always get distinct lanes and the lane
  count equals the peak number of simultaneous tasks.

intersects is computed identically by both strategies.
"""

import heapq
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date, datetime, timedelta, tzinfo

from .task_models import Task

logger = logging.getLogger(__name__)

PAIRWISE = "pairwise"
SWEEP = "sweep"

Window = tuple[datetime, datetime]


def _active_window(task: Task) -> Window | None:
    if task.done:
        return None
    return task.window()


def _overlaps(a: Window, b: Window) -> bool:
    return a[0] < b[1] and a[1] > b[0]


def _fresh_copies(tasks: Sequence[Task]) -> list[Task]:
    return [replace(t, intersects=0, intersect_index=0) for t in tasks]


def _count_and_pairwise_lanes(out: list[Task], windows: list[Window | None], *, assign_lanes: bool) -> None:
    n = len(out)
    for i in range(n):
        wi = windows[i]
        if wi is None:
            continue
        for j in range(i + 1, n):
            wj = windows[j]
            if wj is None or not _overlaps(wi, wj):
                continue

            out[i].intersects += 1
            if not assign_lanes:
                continue
            if wi[0] <= wj[0]:
                out[j].intersect_index = out[i].intersect_index + 1
            else:
                out[i].intersect_index = out[j].intersect_index + 1


def _sweep_lanes(out: list[Task], windows: list[Window | None]) -> None:
    order = sorted(
        (pos for pos, w in enumerate(windows) if w is not None),
        key=lambda pos: (windows[pos][0], pos),  # type: ignore[index]
    )

    active: list[tuple[datetime, int]] = []  # (end, lane)
    free: list[int] = []
    next_lane = 0

    for pos in order:
        start, end = windows[pos]  # type: ignore[misc]

        # Release every lane whose task has ended by this start.
        while active and active[0][0] <= start:
            _, lane = heapq.heappop(active)
            heapq.heappush(free, lane)

        if free:
            lane = heapq.heappop(free)
        else:
            lane = next_lane
            next_lane += 1

        out[pos].intersect_index = lane
        heapq.heappush(active, (end, lane))


def layout(tasks: Sequence[Task], *, strategy: str = PAIRWISE) -> list[Task]:
    """
    Return new Task objects (same order) with intersects / intersect_index recomputed.

    The input sequence and its tasks are not mutated.
    Raises ValueError for an unknown strategy.
    """
    if strategy not in (PAIRWISE, SWEEP):
        raise ValueError(f"Unknown layout strategy: {strategy!r}")

    out = _fresh_copies(tasks)
    windows = [_active_window(t) for t in out]

    _count_and_pairwise_lanes(out, windows, assign_lanes=(strategy == PAIRWISE))
    if strategy == SWEEP:
        _sweep_lanes(out, windows)

    logger.debug(
        "layout strategy=%s tasks=%d scheduled=%d",
        strategy,
        len(out),
        sum(1 for w in windows if w is not None),
    )
    return out


def lane_count(tasks: Sequence[Task]) -> int:
    """Number of lanes the grid needs for already laid-out tasks (0 if nothing is active)."""
    lanes = [t.intersect_index for t in tasks if _active_window(t) is not None]
    return max(lanes) + 1 if lanes else 0


# ---- visible window helpers (day / week grids) ----


def day_window(day: date, tz: tzinfo | None = None) -> Window:
    """Aware [midnight, next midnight) for `day`; local time unless `tz` is given."""
    start = datetime(day.year, day.month, day.day)
    end = start + timedelta(days=1)
    if tz is None:
        return start.astimezone(), end.astimezone()
    return start.replace(tzinfo=tz), end.replace(tzinfo=tz)


def week_days(day: date, *, week_starts_on: int = 0) -> list[date]:
    """The seven dates of the week containing `day` (0 = Monday start)."""
    offset = (day.weekday() - week_starts_on) % 7
    first = day - timedelta(days=offset)
    return [first + timedelta(days=k) for k in range(7)]


def tasks_in_window(tasks: Sequence[Task], start: datetime, end: datetime) -> list[Task]:
    """
    Scheduled tasks (done or not) whose window touches [start, end), in input order.

    A zero-length task counts when its start lies inside the window.
    """
    out: list[Task] = []
    for t in tasks:
        w = t.window()
        if w is None:
            continue
        ts, te = w
        if ts < end and (te > start or ts == start):
            out.append(t)
    return out
