# src/taskgrid/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import date, datetime, time, tzinfo
from typing import cast

from ..core.state import AppState
from ..tasks.task_layout import day_window, lane_count, tasks_in_window, week_days
from ..tasks.task_models import NewLabel, NewSubtask, NewTask, Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

NOT_APPLIED = "The server did not apply the change."


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /day, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def _hhmm(value: datetime, tz: tzinfo | None) -> str:
    return value.astimezone(tz).strftime("%H:%M")


def format_task_line(task: Task, tz: tzinfo | None = None) -> str:
    box = "[x]" if task.done else "[ ]"
    w = task.window()
    when = f"{_hhmm(w[0], tz)}-{_hhmm(w[1], tz)}" if w else "--:-----:--"
    lane = f"lane {task.intersect_index}"
    overlap = f" +{task.intersects}" if task.intersects else ""
    label = f" ({task.label.name})" if task.label else ""
    subs = f" [{sum(s.done for s in task.subtasks)}/{len(task.subtasks)}]" if task.subtasks else ""
    return f"{box} #{task.id} {when} {lane}{overlap} {task.title}{label}{subs}"


def _parse_day(args: list[str], state: AppState) -> date:
    if args:
        return date.fromisoformat(args[0])
    return state.focus_day or date.today()


def _parse_int(raw: str, what: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{what} must be an integer, got {raw!r}") from None


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    ctrl = state.controller
    settings = state.settings
    return (
        "Status:\n"
        f"  API: {getattr(settings, 'api_base_url', '?')}\n"
        f"  Layout strategy: {ctrl.layout_strategy}\n"
        f"  Tasks: {len(ctrl.tasks)}  Labels: {len(ctrl.labels)}\n"
        f"  Fetching: {'yes' if ctrl.is_fetching else 'no'}"
    )


async def cmd_day(state: AppState, args: list[str]) -> str:
    """
    /day             -> agenda for the focused day (today by default)
    /day 2024-05-01  -> agenda for that day (and focus it)
    """
    day = _parse_day(args, state)
    state.focus_day = day

    tasks = state.controller.tasks
    start, end = day_window(day)
    visible = sorted(tasks_in_window(tasks, start, end), key=lambda t: (t.window(), t.intersect_index))
    if not visible:
        return f"{day.isoformat()}: no scheduled tasks."

    lines = [f"{day.isoformat()} ({lane_count(visible)} lanes):"]
    lines.extend(f"  {format_task_line(t)}" for t in visible)
    return "\n".join(lines)


async def cmd_week(state: AppState, args: list[str]) -> str:
    day = _parse_day(args, state)
    tasks = state.controller.tasks
    starts_on = int(getattr(state.settings, "week_starts_on", 0))

    lines: list[str] = []
    for d in week_days(day, week_starts_on=starts_on):
        start, end = day_window(d)
        visible = sorted(tasks_in_window(tasks, start, end), key=lambda t: (t.window(), t.intersect_index))
        lines.append(f"{d.strftime('%a')} {d.isoformat()}: {len(visible)} task(s)")
        lines.extend(f"    {format_task_line(t)}" for t in visible)
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add HH:MM <minutes> <title...>  -> create a task on the focused day"""
    if len(args) < 3:
        return "Usage: /add HH:MM <minutes> <title...>"
    at = time.fromisoformat(args[0])
    minutes = _parse_int(args[1], "minutes")
    day = state.focus_day or date.today()
    start = datetime.combine(day, at).astimezone()

    res = await state.controller.create_task(
        NewTask(title=" ".join(args[2:]), date=start, estimate=max(0, minutes))
    )
    if not res:
        return NOT_APPLIED
    return f"Created task #{res['task']['id']}." if isinstance(res, dict) and "task" in res else "Created."


async def cmd_done(state: AppState, args: list[str]) -> str:
    """/done <id>  -> toggle completion"""
    if not args:
        return "Usage: /done <task_id>"
    task = state.controller.get_task(_parse_int(args[0], "task_id"))
    if task is None:
        return f"No task #{args[0]}."
    res = await state.controller.update_task(replace(task, done=not task.done))
    if not res:
        return NOT_APPLIED
    return f"Task #{task.id} marked {'not done' if task.done else 'done'}."


async def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <task_id>"
    res = await state.controller.delete_task(_parse_int(args[0], "task_id"))
    return f"Deleted task #{args[0]}." if res else NOT_APPLIED


async def cmd_sub(state: AppState, args: list[str]) -> str:
    """/sub <task_id> <title...>  -> add a subtask at the top"""
    if len(args) < 2:
        return "Usage: /sub <task_id> <title...>"
    task_id = _parse_int(args[0], "task_id")
    if state.controller.get_task(task_id) is None:
        return f"No task #{task_id}."
    res = await state.controller.create_subtask(NewSubtask(task_id=task_id, title=" ".join(args[1:])))
    return "Subtask added." if res else NOT_APPLIED


async def cmd_submv(state: AppState, args: list[str]) -> str:
    """/submv <subtask_id> <index>  -> move a subtask to a new position"""
    if len(args) < 2:
        return "Usage: /submv <subtask_id> <index>"
    sub = state.controller.find_subtask(_parse_int(args[0], "subtask_id"))
    if sub is None:
        return f"No subtask #{args[0]}."
    res = await state.controller.update_subtask(replace(sub, index=max(0, _parse_int(args[1], "index"))))
    return "Subtask moved." if res else NOT_APPLIED


async def cmd_subrm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /subrm <subtask_id>"
    res = await state.controller.delete_subtask(_parse_int(args[0], "subtask_id"))
    return "Subtask deleted." if res else NOT_APPLIED


async def cmd_labels(state: AppState, args: list[str]) -> str:
    labels = state.controller.labels
    if not labels:
        return "No labels."
    return "\n".join(["Labels:"] + [f"  #{lb.id} {lb.name} {lb.color}" for lb in labels])


async def cmd_label(state: AppState, args: list[str]) -> str:
    """/label <name> <color>  -> create a label"""
    if len(args) < 2:
        return "Usage: /label <name> <color>"
    res = await state.controller.create_label(NewLabel(name=args[0], color=args[1]))
    return f"Label {args[0]!r} created." if res else NOT_APPLIED


async def cmd_labelrm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /labelrm <label_id>"
    res = await state.controller.delete_label(_parse_int(args[0], "label_id"))
    return "Label deleted." if res else NOT_APPLIED


async def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("[API] Reloading tasks and labels...")
    ok = await state.controller.load()
    if not ok:
        return "Reload failed (see log). Showing the previous state."
    return f"Reloaded: {len(state.controller.tasks)} tasks, {len(state.controller.labels)} labels."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show API/layout settings and counts.")
registry.register("day", cmd_day, help_text="Agenda for a day: /day [YYYY-MM-DD].", aliases=["d"])
registry.register("week", cmd_week, help_text="Agenda for the week: /week [YYYY-MM-DD].", aliases=["w"])
registry.register("add", cmd_add, help_text="Create a task: /add HH:MM <minutes> <title...>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <task_id>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <task_id>.")
registry.register("sub", cmd_sub, help_text="Add a subtask: /sub <task_id> <title...>.")
registry.register("submv", cmd_submv, help_text="Move a subtask: /submv <subtask_id> <index>.")
registry.register("subrm", cmd_subrm, help_text="Delete a subtask: /subrm <subtask_id>.")
registry.register("labels", cmd_labels, help_text="List labels.")
registry.register("label", cmd_label, help_text="Create a label: /label <name> <color>.")
registry.register("labelrm", cmd_labelrm, help_text="Delete a label: /labelrm <label_id>.")
registry.register("reload", cmd_reload, help_text="Refetch tasks and labels from the API.")
