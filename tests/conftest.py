# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktimer.core.state import AppState
from tasktimer.tasks.task_store import TaskStore
from tasktimer.tasks.task_views import TaskViews
from tasktimer.tasks.timer_engine import TimerEngine

from .fakes import FakeAlarm, FakeKVStorage

# Fixed "now" for date-bucket tests: a Monday at noon, far from midnight.
NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasktimer-test",
        data_dir=tmp_path,
        db_path=tmp_path / "tasktimer.sqlite3",
        export_path=tmp_path / "tasks.csv",
        tick_interval_seconds=0.01,
        alarm_enabled=False,
    )


@pytest.fixture()
def kv() -> FakeKVStorage:
    return FakeKVStorage()


@pytest.fixture()
def alarm() -> FakeAlarm:
    return FakeAlarm()


@pytest.fixture()
def store(kv: FakeKVStorage) -> TaskStore:
    s = TaskStore(kv)
    s.load()
    return s


@pytest.fixture()
def engine(store: TaskStore, alarm: FakeAlarm) -> TimerEngine:
    return TimerEngine(store, alarm)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, engine: TimerEngine, alarm: FakeAlarm) -> AppState:
    """AppState wired with in-memory fakes and a fixed clock."""
    return AppState(
        settings=settings,
        store=store,
        engine=engine,
        views=TaskViews(store, clock=lambda: NOW),
        alarm=alarm,
    )
