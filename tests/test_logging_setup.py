# tests/test_logging_setup.py

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tasktimer.logging_setup import ConsoleFilter, setup_logging


@pytest.fixture()
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("tasktimer.tasks.task_store", logging.DEBUG, True),
        ("tasktimer.tasks.timer_engine", logging.INFO, False),
        ("tasktimer.tasks.timer_engine", logging.WARNING, True),
        ("tasktimerx", logging.INFO, False),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
        ("py.warnings", logging.WARNING, False),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert ConsoleFilter().filter(_record(name, level)) is shown


def test_setup_logging_writes_everything_to_app_log(tmp_path: Path, restore_root_logging: None) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", app_name="mytimer", console_level=logging.WARNING)

    logging.getLogger("tasktimer.tasks.timer_engine").info("Alarm (half) id=x")
    for h in logging.getLogger().handlers:
        h.flush()

    assert log_file == tmp_path / "logs" / "mytimer.log"
    assert "Alarm (half) id=x" in log_file.read_text("utf-8")


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path: Path, restore_root_logging: None) -> None:
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)
    assert len(logging.getLogger().handlers) == 2
