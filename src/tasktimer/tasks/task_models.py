# src/tasktimer/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    """
    Task priority.

    Task.priority is stored as a plain string: CSV import keeps whatever value
    the file carries, so a task may hold a priority outside this enum.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    name: str
    due_date: datetime
    priority: str
    category: str = ""
    completed: bool = False
    time_spent: int = 0  # seconds
    duration: int = 0  # planned minutes
    timer_running: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Storage shape (camelCase keys, ISO date)."""
        return {
            "id": self.id,
            "name": self.name,
            "dueDate": self.due_date.isoformat(),
            "priority": str(self.priority),
            "category": self.category,
            "completed": self.completed,
            "timeSpent": self.time_spent,
            "duration": self.duration,
            "timerRunning": self.timer_running,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """
        Revive a task from its storage shape.

        Raises KeyError / ValueError / TypeError on malformed input; the caller
        decides whether to skip the entry.
        """
        due = datetime.fromisoformat(str(raw["dueDate"]).replace("Z", "+00:00"))
        if due.tzinfo is not None:
            # Older payloads may carry UTC timestamps; keep everything in naive local time.
            due = due.astimezone().replace(tzinfo=None)

        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            due_date=due,
            priority=str(raw["priority"]),
            category=str(raw.get("category") or ""),
            completed=bool(raw.get("completed", False)),
            time_spent=max(0, int(raw.get("timeSpent") or 0)),
            duration=max(0, int(raw.get("duration") or 0)),
            timer_running=bool(raw.get("timerRunning", False)),
        )
