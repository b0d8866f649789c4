# tests/test_kv_store.py

from __future__ import annotations

from pathlib import Path

from tasktimer.storage.kv_store import SqliteKVStore
from tasktimer.tasks.task_store import TaskStore


def test_save_load_overwrite_delete(tmp_path: Path) -> None:
    kv = SqliteKVStore(tmp_path / "nested" / "kv.sqlite3")

    assert kv.load("tasks") is None
    kv.save("tasks", "[]")
    kv.save("hourlyRate", "60")
    kv.save("tasks", '[{"x": 1}]')

    assert kv.load("tasks") == '[{"x": 1}]'
    assert kv.load("hourlyRate") == "60"
    assert kv.count_keys() == 2

    kv.delete("tasks")
    assert kv.load("tasks") is None


def test_task_store_survives_restart(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"

    store = TaskStore(SqliteKVStore(db))
    store.load()
    a = store.create("Persisted", "medium", category="work", duration=5)
    store.set_hourly_rate(42.5)
    store.toggle_completion(a.id)

    reopened = TaskStore(SqliteKVStore(db))
    reopened.load()

    (t,) = reopened.get()
    assert t == store.find(a.id)
    assert reopened.hourly_rate == 42.5
