# src/tasktimer/tasks/task_csv.py

from __future__ import annotations

"""
CSV export/import of the task list.

Wire format (kept compatible with files exported by earlier versions):
- header row with seven fixed column names
- one row per task: name, priority, category, due (YYYY-MM-DD),
  planned duration (HH:MM:SS), time spent (HH:MM:SS), money (2 decimals)
- fields joined with "," and NO quoting: a comma inside a name or category
  shifts the columns of that row
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .cost import format_cost, format_time
from .errors import ParseError
from .task_models import Task, new_task_id
from .task_store import TaskStore

logger = logging.getLogger(__name__)

CSV_HEADERS: tuple[str, ...] = (
    "Task Name",
    "Priority",
    "Category",
    "Task Due",
    "Time (programado para finalizar)",
    "Time finished (tempo que foi finalizada)",
    "Money USD",
)

IMPORT_FIELDS = 6
DATE_FORMAT = "%Y-%m-%d"


@dataclass(slots=True)
class ImportResult:
    tasks: list[Task] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)


def export_csv(tasks: Iterable[Task], hourly_rate: float) -> str:
    rows = [",".join(CSV_HEADERS)]
    for t in tasks:
        rows.append(
            ",".join(
                [
                    t.name,
                    str(t.priority),
                    t.category,
                    t.due_date.strftime(DATE_FORMAT),
                    format_time(t.duration * 60),
                    format_time(t.time_spent),
                    format_cost(t.time_spent, hourly_rate),
                ]
            )
        )
    return "\n".join(rows)


def _parse_date(raw: str, line_no: int) -> datetime:
    s = raw.strip()
    try:
        # Date-only values become local midnight of that day.
        due = datetime.fromisoformat(s)
    except ValueError:
        raise ParseError(f"invalid due date {s!r}", line_no=line_no) from None
    if due.tzinfo is not None:
        due = due.astimezone().replace(tzinfo=None)
    return due


def _time_parts(raw: str, needed: int, what: str, line_no: int) -> list[int]:
    parts = raw.strip().split(":")
    if len(parts) < needed:
        raise ParseError(f"invalid {what} {raw.strip()!r}", line_no=line_no)
    try:
        return [int(p) for p in parts[:needed]]
    except ValueError:
        raise ParseError(f"invalid {what} {raw.strip()!r}", line_no=line_no) from None


def parse_line(line: str, line_no: int) -> Task:
    """
    Build a new task from one CSV data line.

    Only the first six columns are read; the money column is derived data.
    Duration keeps hours and minutes of the HH:MM:SS column (seconds dropped).
    """
    cols = line.split(",")
    if len(cols) < IMPORT_FIELDS:
        raise ParseError(f"expected at least {IMPORT_FIELDS} fields, got {len(cols)}", line_no=line_no)

    name, priority, category, due_raw, duration_raw, spent_raw = cols[:IMPORT_FIELDS]

    due_date = _parse_date(due_raw, line_no)
    hh, mm = _time_parts(duration_raw, 2, "duration", line_no)
    sh, sm, ss = _time_parts(spent_raw, 3, "time spent", line_no)

    return Task(
        id=new_task_id(),
        name=name,
        due_date=due_date,
        priority=priority,
        category=category,
        completed=False,
        time_spent=max(0, sh * 3600 + sm * 60 + ss),
        duration=max(0, hh * 60 + mm),
        timer_running=False,
    )


def import_csv(text: str) -> ImportResult:
    """
    Parse a CSV blob. The first line is the header and is skipped.

    Malformed lines are collected in ImportResult.errors; the rest still import.
    """
    result = ImportResult()
    lines = text.split("\n")

    for line_no, line in enumerate(lines[1:], start=2):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        try:
            result.tasks.append(parse_line(line, line_no))
        except ParseError as e:
            logger.warning("CSV import: skipping %s", e)
            result.errors.append(e)

    logger.info("CSV import parsed tasks=%d errors=%d", len(result.tasks), len(result.errors))
    return result


def import_into_store(store: TaskStore, text: str) -> ImportResult:
    """Append imported tasks to the existing list (persisted immediately)."""
    result = import_csv(text)
    if result.tasks:
        store.replace_all((*store.get(), *result.tasks))
    return result
