# src/tasktimer/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.cost import format_time
from ..tasks.timer_engine import AlarmKind, TickResult

logger = logging.getLogger(__name__)

_ALARM_TEXT = {
    AlarmKind.HALF: "half of the planned time reached",
    AlarmKind.FULL: "planned time reached",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _on_tick(result: TickResult) -> None:
    if result.alarm is None:
        return
    _print_ts(
        f"[ALARM] {result.task.name}: {_ALARM_TEXT[result.alarm]} "
        f"({format_time(result.task.time_spent)} / {format_time(result.task.duration * 60)})"
    )


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[str | None]) -> None:
    """
    Read stdin on a daemon thread and hand lines to the event loop.

    None marks EOF. The thread is a daemon so a pending input() never blocks exit.
    """

    def deliver(item: str | None) -> bool:
        try:
            loop.call_soon_threadsafe(lines.put_nowait, item)
        except RuntimeError:
            # Event loop already closed (after /exit).
            return False
        return True

    def reader() -> None:
        while True:
            try:
                line = input(">>> ")
            except (EOFError, KeyboardInterrupt):
                deliver(None)
                return
            except RuntimeError:
                return
            if not deliver(line):
                return

    threading.Thread(target=reader, name="console-stdin", daemon=True).start()


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL.

    Commands and ticks share one event loop: stdin is read on a daemon thread,
    but every command is handled on the loop, so the store has one writer.
    """
    interval = float(getattr(state.settings, "tick_interval_seconds", 1.0))
    state.engine.start(interval_seconds=interval, on_tick=_on_tick)

    logger.info("Console connector started (tasks=%d).", len(state.store))
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    lines: asyncio.Queue[str | None] = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), lines)

    try:
        while True:
            raw = await lines.get()
            if raw is None:
                logger.info("Console EOF received, exiting.")
                break

            user_input = raw.strip()
            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                user_input = "/" + user_input

            try:
                response = command_registry.handle(state, user_input)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is not None:
                _print_ts(response)

    finally:
        await state.engine.stop()
        logger.info("Console connector finished.")
