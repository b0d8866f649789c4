# src/tasktimer/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/alarm/store/engine/views).
"""

from __future__ import annotations

import logging

from ..alarm.engine import AlarmEngine
from ..config import get_settings
from ..core.state import AppState
from ..storage.kv_store import SqliteKVStore
from ..tasks.task_store import TaskStore
from ..tasks.task_views import TaskViews
from ..tasks.timer_engine import TimerEngine

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    The ticker is not started here; the console loop owns it.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(SqliteKVStore(settings.db_path))
    store.load()

    alarm = AlarmEngine(enabled=settings.alarm_enabled)

    return AppState(
        settings=settings,
        store=store,
        engine=TimerEngine(store, alarm),
        views=TaskViews(store),
        alarm=alarm,
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown of the non-async parts (no exceptions should escape)."""
    try:
        alarm = state.alarm
        if hasattr(alarm, "shutdown"):
            alarm.shutdown()
    except Exception:
        logger.debug("Alarm shutdown failed.", exc_info=True)
