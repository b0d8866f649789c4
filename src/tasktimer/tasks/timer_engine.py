# src/tasktimer/tasks/timer_engine.py

from __future__ import annotations

"""
Timer engine.

Owns the per-second tick:
- starting one task's timer stops every other one (single active timer),
- each tick adds exactly one second to the running task,
- crossing half or full planned duration fires the alarm port.

The store's timer_running flags are the only record of which task is active;
active_task_id / active_elapsed are derived from them on every read.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ..core.ports import AlarmSink
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

TickCallback = Callable[["TickResult"], None]


class AlarmKind(StrEnum):
    HALF = "half"
    FULL = "full"


@dataclass(slots=True, frozen=True)
class TickResult:
    """What a single tick did to the running task."""

    task: Task
    alarm: AlarmKind | None = None


def alarm_for(time_spent: int, duration_minutes: int) -> AlarmKind | None:
    """
    Threshold check for a freshly advanced time_spent.

    Exact equality only; zero or negative durations never alarm.
    """
    if duration_minutes <= 0:
        return None
    if time_spent == duration_minutes * 60:
        return AlarmKind.FULL
    if time_spent == duration_minutes * 30:
        return AlarmKind.HALF
    return None


class TimerEngine:
    def __init__(self, store: TaskStore, alarm: AlarmSink) -> None:
        self._store = store
        self._alarm = alarm
        self._runner: asyncio.Task[None] | None = None

    # ---- derived state ----

    @property
    def active_task_id(self) -> str | None:
        running = self._store.running_task()
        return running.id if running is not None else None

    @property
    def active_elapsed(self) -> int:
        """Seconds spent on the running task (0 when nothing runs)."""
        running = self._store.running_task()
        return running.time_spent if running is not None else 0

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    # ---- operations ----

    def toggle_timer(self, task_id: str) -> Task | None:
        """
        Stopped -> Running (every other timer stops); Running -> Stopped.

        Unknown ids are ignored.
        """
        task = self._store.find(task_id)
        if task is None:
            logger.debug("toggle_timer: unknown task id=%s", task_id)
            return None

        if task.timer_running:
            self._store.set_timers(None)
            logger.info("Timer stopped id=%s time_spent=%s", task_id, task.time_spent)
        else:
            previous = self.active_task_id
            self._store.set_timers(task_id)
            if previous is not None:
                logger.info("Timer stopped id=%s (another timer started)", previous)
            logger.info("Timer started id=%s", task_id)

        return self._store.find(task_id)

    def tick(self) -> TickResult | None:
        """Advance the running task by one second and fire threshold alarms."""
        task = self._store.advance_running(1)
        if task is None:
            return None

        alarm = alarm_for(task.time_spent, task.duration)
        if alarm is not None:
            logger.info(
                "Alarm (%s) id=%s time_spent=%s duration=%smin",
                alarm.value,
                task.id,
                task.time_spent,
                task.duration,
            )
            try:
                self._alarm.fire_alarm()
            except Exception:
                logger.exception("fire_alarm failed task_id=%s", task.id)

        return TickResult(task=task, alarm=alarm)

    # ---- ticker lifecycle ----

    def start(self, *, interval_seconds: float = 1.0, on_tick: TickCallback | None = None) -> None:
        """Schedule the ticker on the running event loop (no-op if already started)."""
        if self.is_running:
            return
        self._runner = asyncio.create_task(
            run_timer_ticker(self, interval_seconds=interval_seconds, on_tick=on_tick),
            name="timer-ticker",
        )
        logger.debug("Timer ticker started (interval=%ss)", interval_seconds)

    async def stop(self) -> None:
        """Cancel the ticker and wait for it to finish. Safe to call more than once."""
        runner, self._runner = self._runner, None
        if runner is None:
            return
        runner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await runner
        logger.debug("Timer ticker stopped.")


async def run_timer_ticker(
        engine: TimerEngine,
        *,
        interval_seconds: float = 1.0,
        on_tick: TickCallback | None = None,
) -> None:
    """
    Recurring tick source.

    Ticks every interval_seconds whether or not a timer runs. Missed ticks
    (e.g. host suspended) are not caught up: elapsed time counts delivered ticks.

    To stop the ticker, cancel the coroutine/task.
    """
    sleep_s = max(0.001, float(interval_seconds))

    while True:
        await asyncio.sleep(sleep_s)

        try:
            result = engine.tick()
        except Exception:
            logger.exception("tick failed")
            continue

        if result is not None and on_tick is not None:
            try:
                on_tick(result)
            except Exception:
                logger.exception("on_tick callback failed")
