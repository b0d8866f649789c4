# src/tasktimer/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.ports import AlarmSink
from ..tasks.task_store import TaskStore
from ..tasks.task_views import TaskViews
from ..tasks.timer_engine import TimerEngine


@dataclass
class AppState:
    # Settings object (tasktimer.config.Settings or a test double).
    settings: Any

    store: TaskStore
    engine: TimerEngine
    views: TaskViews
    alarm: AlarmSink
