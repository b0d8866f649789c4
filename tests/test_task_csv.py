# tests/test_task_csv.py

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime

from tasktimer.tasks.task_csv import CSV_HEADERS, export_csv, import_csv, import_into_store
from tasktimer.tasks.task_models import Task
from tasktimer.tasks.task_store import TaskStore

from .fakes import FakeKVStorage

HEADER = ",".join(CSV_HEADERS)


def _task(**kw) -> Task:
    base = dict(
        id="t1",
        name="Write report",
        due_date=datetime(2026, 10, 19, 15, 45),
        priority="high",
        category="work",
        completed=True,
        time_spent=3725,
        duration=90,
        timer_running=True,
    )
    base.update(kw)
    return Task(**base)


def test_export_format() -> None:
    text = export_csv([_task(), _task(id="t2", name="Email", category="", time_spent=0, duration=0)], 60)
    lines = text.split("\n")

    assert len(CSV_HEADERS) == 7
    assert lines[0] == HEADER
    assert lines[1] == "Write report,high,work,2026-10-19,01:30:00,01:02:05,62.08"
    assert lines[2] == "Email,high,,2026-10-19,00:00:00,00:00:00,0.00"
    assert len(lines) == 3


def test_export_empty_list_is_header_only() -> None:
    assert export_csv([], 10) == HEADER


def test_import_reconstructs_fields() -> None:
    text = HEADER + "\nWrite report,high,work,2026-10-19,01:30:00,01:02:05,62.08\n"
    result = import_csv(text)

    assert result.errors == []
    (t,) = result.tasks
    assert t.name == "Write report"
    assert t.priority == "high"
    assert t.category == "work"
    assert t.due_date == datetime(2026, 10, 19)
    assert t.duration == 90
    assert t.time_spent == 3725
    assert t.completed is False
    assert t.timer_running is False


def test_import_duration_drops_seconds() -> None:
    result = import_csv(HEADER + "\nA,low,,2026-01-01,00:10:59,00:00:59,0.00")
    assert result.tasks[0].duration == 10
    assert result.tasks[0].time_spent == 59


def test_import_keeps_unknown_priority_and_ignores_extra_columns() -> None:
    result = import_csv(HEADER + "\nA,urgent,x,2026-01-01,00:01:00,00:00:01,0.00,extra")
    assert result.tasks[0].priority == "urgent"


def test_import_skips_header_blank_lines_and_crlf() -> None:
    text = HEADER + "\r\nA,low,,2026-01-01,00:01:00,00:00:01,0.00\r\n\r\n\nB,low,,2026-01-02,00:02:00,00:00:02,0.00\r\n"
    result = import_csv(text)
    assert [t.name for t in result.tasks] == ["A", "B"]
    assert result.errors == []


def test_import_rejects_malformed_lines_but_keeps_the_rest() -> None:
    text = "\n".join(
        [
            HEADER,
            "Good,low,,2026-01-01,00:01:00,00:00:01,0.00",
            "too,few,fields",
            "Bad date,low,,someday,00:01:00,00:00:01,0.00",
            "Bad time,low,,2026-01-01,ten,00:00:01,0.00",
            "Short spent,low,,2026-01-01,00:01:00,00:01,0.00",
            "Also good,high,,2026-01-02,00:05:00,00:00:09,0.00",
        ]
    )
    result = import_csv(text)

    assert [t.name for t in result.tasks] == ["Good", "Also good"]
    assert [e.line_no for e in result.errors] == [3, 4, 5, 6]
    assert "line 4" in str(result.errors[1])


def test_imported_tasks_get_fresh_unique_ids() -> None:
    line = "A,low,,2026-01-01,00:01:00,00:00:01,0.00"
    result = import_csv("\n".join([HEADER, line, line, line]))
    ids = {t.id for t in result.tasks}
    assert len(ids) == 3


def test_export_then_import_round_trip(store: TaskStore) -> None:
    store.create("Alpha", "high", due_date=datetime(2026, 10, 19, 9, 30), category="work", duration=25)
    store.create("Beta", "low", due_date=datetime(2026, 11, 1), duration=0)
    store.create("Gamma", "medium", due_date=datetime(2026, 12, 31, 23, 0), category="home", duration=61)
    a, b, c = store.get()
    store.replace_all(
        [
            replace(a, time_spent=4000, completed=True),
            b,
            replace(c, time_spent=59, timer_running=True),
        ]
    )
    originals = store.get()

    fresh = TaskStore(FakeKVStorage())
    result = import_into_store(fresh, export_csv(originals, 42.5))
    imported = fresh.get()

    assert result.errors == []
    assert len(imported) == len(originals)
    for old, new in zip(originals, imported):
        assert new.name == old.name
        assert new.priority == old.priority
        assert new.category == old.category
        assert new.due_date.date() == old.due_date.date()
        assert new.time_spent == old.time_spent
        # duration*60 seconds formatted HH:MM:SS, read back as HH*60 + MM
        hh, rest = divmod(old.duration * 60, 3600)
        assert new.duration == hh * 60 + rest // 60
        assert new.id != old.id
        assert new.completed is False
        assert new.timer_running is False


def test_import_appends_and_persists(store: TaskStore, kv: FakeKVStorage) -> None:
    existing = store.create("Existing", "low")
    text = HEADER + "\nNew,high,,2026-01-01,00:01:00,00:00:01,0.00"

    import_into_store(store, text)

    assert [t.name for t in store.get()] == ["Existing", "New"]
    assert store.get()[0] is existing
    assert [t["name"] for t in json.loads(kv.data["tasks"])] == ["Existing", "New"]


def test_import_with_nothing_valid_leaves_store_untouched(store: TaskStore, kv: FakeKVStorage) -> None:
    store.create("Existing", "low")
    n_saves = len(kv.saves)

    result = import_into_store(store, HEADER + "\nbroken")

    assert len(result.errors) == 1
    assert len(kv.saves) == n_saves
