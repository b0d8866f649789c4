# src/tasktimer/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store, timer engine and views depend on Protocols instead of concrete
implementations. This keeps storage and audio swappable and makes testing easier.
"""

from typing import Protocol


class KeyValueStorage(Protocol):
    """
    Persistence port: string blobs under string keys.

    Two keys are used by the task store:
    - "tasks": JSON array of tasks
    - "hourlyRate": stringified number
    """

    def save(self, key: str, value: str) -> None: ...
    def load(self, key: str) -> str | None: ...


class AlarmSink(Protocol):
    """Audio port: invoked when a running task crosses half or full planned duration."""

    def fire_alarm(self) -> None: ...
