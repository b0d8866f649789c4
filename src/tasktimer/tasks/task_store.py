# src/tasktimer/tasks/task_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.ports import KeyValueStorage
from .errors import ValidationError
from .task_models import Task, new_task_id

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
HOURLY_RATE_KEY = "hourlyRate"

EDITABLE_FIELDS = frozenset({"name", "due_date", "priority", "category", "duration"})


class TaskStore:
    """
    Ordered in-memory task list, persisted through a KeyValueStorage port.

    Copy-on-write:
    - tasks are frozen records; an edit produces a new record via dataclasses.replace
    - every mutation builds a fresh tuple and swaps it in, so snapshots handed out
      by get() never change under the reader

    Persistence:
    - every mutation writes the full list under "tasks"
    - set_hourly_rate writes "hourlyRate"
    - writes are fire-and-forget: failures are logged, never raised
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self._tasks: tuple[Task, ...] = ()
        self._hourly_rate: float = 0.0

    # ---- loading / persistence ----

    def load(self) -> None:
        """Read tasks and hourly rate from storage (best-effort)."""
        try:
            raw_tasks = self._storage.load(TASKS_KEY)
        except Exception:
            logger.exception("Failed to read %r from storage; starting empty.", TASKS_KEY)
            raw_tasks = None

        self._tasks = self._decode_tasks(raw_tasks)

        try:
            raw_rate = self._storage.load(HOURLY_RATE_KEY)
        except Exception:
            logger.exception("Failed to read %r from storage.", HOURLY_RATE_KEY)
            raw_rate = None

        self._hourly_rate = self._decode_rate(raw_rate)
        logger.info("TaskStore loaded tasks=%d hourly_rate=%s", len(self._tasks), self._hourly_rate)

    @staticmethod
    def _decode_tasks(raw: str | None) -> tuple[Task, ...]:
        if not raw:
            return ()
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored task list is not valid JSON; ignoring it.")
            return ()
        if not isinstance(data, list):
            logger.warning("Stored task list is not a JSON array; ignoring it.")
            return ()

        decoded: list[Task] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                decoded.append(Task.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed stored task: %r", item)
        return TaskStore._repair(decoded)

    @staticmethod
    def _repair(tasks: Iterable[Task]) -> tuple[Task, ...]:
        """
        Enforce unique ids and at most one running timer.

        Later duplicates get a fresh id; only the first running task keeps its flag.
        """
        out: list[Task] = []
        seen: set[str] = set()
        running_seen = False
        for task in tasks:
            if task.id in seen:
                logger.warning("Duplicate task id=%s; assigning a new id.", task.id)
                task = replace(task, id=new_task_id())
            seen.add(task.id)

            if task.timer_running:
                if running_seen:
                    logger.warning("Task id=%s also flagged running; stopping it.", task.id)
                    task = replace(task, timer_running=False)
                running_seen = True

            out.append(task)
        return tuple(out)

    @staticmethod
    def _decode_rate(raw: str | None) -> float:
        if raw is None or raw.strip() == "":
            return 0.0
        try:
            return float(raw)
        except ValueError:
            logger.warning("Stored hourly rate %r is not a number; using 0.", raw)
            return 0.0

    def _persist_tasks(self) -> None:
        try:
            payload = json.dumps([t.to_dict() for t in self._tasks], ensure_ascii=False)
            self._storage.save(TASKS_KEY, payload)
        except Exception:
            logger.exception("Failed to persist task list (tasks=%d).", len(self._tasks))

    def _persist_rate(self) -> None:
        try:
            self._storage.save(HOURLY_RATE_KEY, repr(self._hourly_rate))
        except Exception:
            logger.exception("Failed to persist hourly rate.")

    def _commit(self, tasks: Iterable[Task]) -> None:
        self._tasks = tuple(tasks)
        self._persist_tasks()

    # ---- reads ----

    def get(self) -> tuple[Task, ...]:
        return self._tasks

    def find(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def running_task(self) -> Task | None:
        for t in self._tasks:
            if t.timer_running:
                return t
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- hourly rate ----

    @property
    def hourly_rate(self) -> float:
        return self._hourly_rate

    def set_hourly_rate(self, rate: float) -> None:
        rate = float(rate)
        if rate == self._hourly_rate:
            return
        self._hourly_rate = rate
        self._persist_rate()
        logger.debug("Hourly rate set to %s", rate)

    # ---- mutations ----

    def create(
        self,
        name: str | None,
        priority: str | None,
        due_date: datetime | None = None,
        category: str | None = None,
        duration: int | None = None,
    ) -> Task:
        if not name or not name.strip():
            raise ValidationError("Task name is required")
        if not priority or not str(priority).strip():
            raise ValidationError("Task priority is required")
        if duration is not None and int(duration) < 0:
            raise ValidationError("Duration cannot be negative")

        task = Task(
            id=new_task_id(),
            name=name,
            due_date=due_date if due_date is not None else datetime.now(),
            priority=str(priority),
            category=category or "",
            duration=int(duration or 0),
        )
        self._commit((*self._tasks, task))
        logger.debug("Task created id=%s name=%r priority=%s", task.id, task.name, task.priority)
        return task

    def delete(self, task_id: str) -> bool:
        if self.find(task_id) is None:
            logger.debug("delete: unknown task id=%s", task_id)
            return False
        self._commit(t for t in self._tasks if t.id != task_id)
        logger.debug("Task deleted id=%s", task_id)
        return True

    def _replace_one(self, task_id: str, **changes: Any) -> Task | None:
        updated: Task | None = None
        out: list[Task] = []
        for t in self._tasks:
            if t.id == task_id:
                t = replace(t, **changes)
                updated = t
            out.append(t)
        if updated is None:
            return None
        self._commit(out)
        return updated

    def toggle_completion(self, task_id: str) -> Task | None:
        task = self.find(task_id)
        if task is None:
            logger.debug("toggle_completion: unknown task id=%s", task_id)
            return None
        return self._replace_one(task_id, completed=not task.completed)

    def update(self, task_id: str, **fields: Any) -> Task | None:
        """
        Edit user-facing fields: name, due_date, priority, category, duration.

        Name non-emptiness is enforced at creation only.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "duration" in fields:
            fields["duration"] = int(fields["duration"])
            if fields["duration"] < 0:
                raise ValidationError("Duration cannot be negative")
        if "priority" in fields and not str(fields["priority"] or "").strip():
            raise ValidationError("Task priority is required")

        if self.find(task_id) is None:
            logger.debug("update: unknown task id=%s", task_id)
            return None
        return self._replace_one(task_id, **fields)

    def reorder(self, from_index: int, to_index: int | None) -> bool:
        """
        Move the task at from_index to to_index.

        to_index None means the drag was cancelled (no drop target).
        """
        if to_index is None:
            return False
        n = len(self._tasks)
        if not (0 <= from_index < n) or not (0 <= to_index < n):
            logger.debug("reorder: index out of range from=%s to=%s n=%s", from_index, to_index, n)
            return False

        items = list(self._tasks)
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        self._commit(items)
        return True

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap in a whole new list (ids made unique, at most one timer left running)."""
        self._commit(self._repair(tasks))
        logger.debug("Task list replaced (tasks=%d)", len(self._tasks))

    # ---- timer support (used by TimerEngine) ----

    def set_timers(self, running_id: str | None) -> None:
        """
        Set timer_running = (task.id == running_id) for every task in one swap.

        Passing None stops every timer.
        """
        out = []
        changed = False
        for t in self._tasks:
            want = t.id == running_id
            if t.timer_running != want:
                t = replace(t, timer_running=want)
                changed = True
            out.append(t)
        if changed:
            self._commit(out)

    def advance_running(self, seconds: int = 1) -> Task | None:
        """Add seconds to the running task's time_spent; None when no timer runs."""
        running = self.running_task()
        if running is None:
            return None
        return self._replace_one(running.id, time_spent=running.time_spent + int(seconds))
