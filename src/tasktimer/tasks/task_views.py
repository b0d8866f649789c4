# src/tasktimer/tasks/task_views.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import StrEnum

from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Bucket(StrEnum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    OVERDUE = "overdue"
    COMPLETED = "completed"


@dataclass(slots=True, frozen=True)
class TaskFilters:
    """Secondary filters; None or "" means no constraint."""

    priority: str | None = None
    category: str | None = None
    due_date: date | None = None

    def matches(self, task: Task) -> bool:
        if self.priority and task.priority != self.priority:
            return False
        if self.category and task.category != self.category:
            return False
        if self.due_date is not None and task.due_date.date() != self.due_date:
            return False
        return True

    @property
    def is_empty(self) -> bool:
        return not self.priority and not self.category and self.due_date is None


@dataclass(slots=True, frozen=True)
class TaskBuckets:
    today: tuple[Task, ...]
    tomorrow: tuple[Task, ...]
    overdue: tuple[Task, ...]
    completed: tuple[Task, ...]

    def get(self, bucket: Bucket | str) -> tuple[Task, ...]:
        return getattr(self, Bucket(bucket).value)


def bucket_of(task: Task, now: datetime) -> Bucket | None:
    """
    The date bucket a task belongs to, ignoring secondary filters.

    Completed wins over any date bucket. Open tasks due after tomorrow have no bucket.
    """
    if task.completed:
        return Bucket.COMPLETED

    today = now.date()
    due_day = task.due_date.date()
    if due_day == today:
        return Bucket.TODAY
    if due_day == today + timedelta(days=1):
        return Bucket.TOMORROW
    if due_day < today:
        return Bucket.OVERDUE
    return None


def compute_buckets(
    tasks: Iterable[Task],
    filters: TaskFilters | None = None,
    *,
    now: datetime | None = None,
) -> TaskBuckets:
    """Split tasks into the four buckets, keeping list order inside each."""
    filters = filters or TaskFilters()
    now = now or datetime.now()

    groups: dict[Bucket, list[Task]] = {b: [] for b in Bucket}
    for task in tasks:
        if not filters.matches(task):
            continue
        b = bucket_of(task, now)
        if b is not None:
            groups[b].append(task)

    return TaskBuckets(
        today=tuple(groups[Bucket.TODAY]),
        tomorrow=tuple(groups[Bucket.TOMORROW]),
        overdue=tuple(groups[Bucket.OVERDUE]),
        completed=tuple(groups[Bucket.COMPLETED]),
    )


class TaskViews:
    """
    Bucket views over a TaskStore.

    Nothing is cached: every read recomputes from the current snapshot and the
    current filters.
    """

    def __init__(self, store: TaskStore, *, clock: Clock = datetime.now) -> None:
        self._store = store
        self._clock = clock
        self._filters = TaskFilters()

    def today(self) -> date:
        return self._clock().date()

    @property
    def filters(self) -> TaskFilters:
        return self._filters

    def update_filters(self, **changes: object) -> TaskFilters:
        self._filters = replace(self._filters, **changes)
        logger.debug("View filters set: %s", self._filters)
        return self._filters

    def clear_filters(self) -> None:
        self._filters = TaskFilters()

    def buckets(self) -> TaskBuckets:
        return compute_buckets(self._store.get(), self._filters, now=self._clock())

    def bucket(self, name: Bucket | str) -> tuple[Task, ...]:
        return self.buckets().get(name)
