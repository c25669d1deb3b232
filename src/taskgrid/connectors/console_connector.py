# src/taskgrid/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_controller import TaskState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    """
    Interactive agenda REPL.

    input() runs in a worker thread so the event loop (and any in-flight API call)
    is never blocked; every controller mutation still happens on the loop thread.
    """
    logger.info("Console connector started (api=%s).", getattr(state.settings, "api_base_url", "?"))
    _print_ts("[CONSOLE] Use /day, /week, /add ... Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    def on_state(snapshot: TaskState) -> None:
        logger.debug(
            "State published: tasks=%d labels=%d fetching=%s",
            len(snapshot.tasks),
            len(snapshot.labels),
            snapshot.is_fetching,
        )

    unsubscribe = state.controller.subscribe(on_state)
    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                response = await command_registry.handle(state, user_input, emit=emit)
            except ValueError as e:
                response = f"Invalid input: {e}"
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is None:
                response = "Commands start with '/'. Use /help to list them."
            print(f"[{_ts_local()}] {response}\n")
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
