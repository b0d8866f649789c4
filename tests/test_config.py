# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasktimer.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TASKTIMER_APP_NAME",
        "TASKTIMER_LOG_LEVEL",
        "TASKTIMER_DATA_DIR",
        "TASKTIMER_DB_PATH",
        "TASKTIMER_EXPORT_PATH",
        "TASKTIMER_TICK_INTERVAL_SECONDS",
        "TASKTIMER_ALARM_ENABLED",
        "TASKTIMER_CONSOLE_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.app_name == "tasktimer"
    assert s.log_level == "INFO"
    assert s.data_dir == Path(".local/tasktimer")
    assert s.db_path == Path(".local/tasktimer") / "tasktimer.sqlite3"
    assert s.export_path == Path("tasks.csv")
    assert s.tick_interval_seconds == 1.0
    assert s.alarm_enabled is True
    assert s.console_enabled is True


def test_env_overrides_and_bad_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKTIMER_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKTIMER_DB_PATH", raising=False)
    monkeypatch.setenv("TASKTIMER_ALARM_ENABLED", "off")
    monkeypatch.setenv("TASKTIMER_TICK_INTERVAL_SECONDS", "fast")

    s = Settings.from_env()

    assert s.db_path == tmp_path / "tasktimer.sqlite3"
    assert s.alarm_enabled is False
    assert s.tick_interval_seconds == 1.0

    monkeypatch.setenv("TASKTIMER_TICK_INTERVAL_SECONDS", "-3")
    assert Settings.from_env().tick_interval_seconds == 1.0
