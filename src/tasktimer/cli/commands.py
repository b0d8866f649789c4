# src/tasktimer/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta
from pathlib import Path

from ..core.state import AppState
from ..tasks.cost import format_cost, format_time
from ..tasks.errors import ValidationError
from ..tasks.task_csv import export_csv, import_into_store
from ..tasks.task_models import Priority, Task
from ..tasks.task_views import Bucket

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except ValidationError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _split_kv(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split "key=value" tokens from plain words."""
    words: list[str] = []
    kv: dict[str, str] = {}
    for a in args:
        if "=" in a:
            k, _, v = a.partition("=")
            kv[k.strip().lower()] = v.strip()
        else:
            words.append(a)
    return words, kv


def parse_day(raw: str, *, today: date | None = None) -> date:
    """today / tomorrow / yesterday / YYYY-MM-DD."""
    today = today or date.today()
    s = raw.strip().lower()
    if s == "today":
        return today
    if s == "tomorrow":
        return today + timedelta(days=1)
    if s == "yesterday":
        return today - timedelta(days=1)
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise ValidationError(f"Invalid date: {raw!r} (use YYYY-MM-DD, today or tomorrow)") from None


def _name_value(raw: str) -> str:
    """key=value names cannot hold spaces; "_" stands in for one."""
    return raw.replace("_", " ")


def _parse_priority(raw: str) -> Priority:
    try:
        return Priority(raw.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid priority: {raw!r} (low, medium or high)") from None


def _parse_minutes(raw: str) -> int:
    try:
        minutes = int(raw)
    except ValueError:
        raise ValidationError(f"Invalid duration: {raw!r} (whole minutes)") from None
    if minutes < 0:
        raise ValidationError("Duration cannot be negative")
    return minutes


def _task_at(state: AppState, raw: str) -> Task | None:
    """Resolve a 1-based list position (as shown by /list)."""
    try:
        pos = int(raw)
    except ValueError:
        return None
    tasks = state.store.get()
    if 1 <= pos <= len(tasks):
        return tasks[pos - 1]
    return None


def format_task_line(state: AppState, task: Task) -> str:
    pos = (state.store.index_of(task.id) or 0) + 1
    check = "x" if task.completed else " "
    timer = " >" if task.timer_running else ""
    category = f" | category: {task.category}" if task.category else ""
    return (
        f"{pos}. [{check}] {task.name} [{task.priority}] due {task.due_date:%Y-%m-%d}{category}"
        f" | {format_time(task.time_spent)} / {format_time(task.duration * 60)}"
        f" | ${format_cost(task.time_spent, state.store.hourly_rate)}{timer}"
    )


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    active_id = state.engine.active_task_id
    active = state.store.find(active_id) if active_id else None
    active_line = (
        f"{active.name} ({format_time(state.engine.active_elapsed)})" if active is not None else "none"
    )
    f = state.views.filters
    filters = "none" if f.is_empty else _describe_filters(state)
    return (
        "Status:\n"
        f"  Tasks: {len(state.store)}\n"
        f"  Active timer: {active_line}\n"
        f"  Hourly rate: {state.store.hourly_rate:.2f}\n"
        f"  Filters: {filters}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name words> priority=<low|medium|high> [due=YYYY-MM-DD] [category=x] [duration=min]
    /add name=Write_report priority=high        ("_" becomes a space, as in /edit)
    """
    words, kv = _split_kv(args)
    name = " ".join(words) or _name_value(kv.get("name", ""))
    priority = _parse_priority(kv["priority"]) if kv.get("priority") else None

    due_date: datetime | None = None
    if kv.get("due"):
        due_date = datetime.combine(parse_day(kv["due"], today=state.views.today()), datetime.min.time())

    duration = _parse_minutes(kv["duration"]) if kv.get("duration") else None

    task = state.store.create(
        name,
        priority,
        due_date=due_date,
        category=kv.get("category"),
        duration=duration,
    )
    return f"Task added: {format_task_line(state, task)}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list            -> today
    /list <bucket>   -> today | tomorrow | overdue | completed
    /list all        -> the whole list in order
    """
    which = args[0].lower() if args else Bucket.TODAY.value

    if which == "all":
        tasks = state.store.get()
        title = "All tasks"
    else:
        try:
            bucket = Bucket(which)
        except ValueError:
            return "Usage: /list [today|tomorrow|overdue|completed|all]"
        tasks = state.views.bucket(bucket)
        title = bucket.value.capitalize()
        if not state.views.filters.is_empty:
            title += f" (filtered: {_describe_filters(state)})"

    if not tasks:
        return f"{title}: no tasks."
    lines = [f"{title}:"]
    lines.extend(f"  {format_task_line(state, t)}" for t in tasks)
    return "\n".join(lines)


def cmd_timer(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /timer <n>"
    task = _task_at(state, args[0])
    if task is None:
        return f"No task #{args[0]}."
    updated = state.engine.toggle_timer(task.id)
    if updated is None:
        return f"No task #{args[0]}."
    verb = "started" if updated.timer_running else "stopped"
    return f"Timer {verb}: {updated.name} ({format_time(updated.time_spent)})"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <n>"
    task = _task_at(state, args[0])
    if task is None:
        return f"No task #{args[0]}."
    updated = state.store.toggle_completion(task.id)
    if updated is None:
        return f"No task #{args[0]}."
    return f"{updated.name}: {'completed' if updated.completed else 'reopened'}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <n>"
    task = _task_at(state, args[0])
    if task is None or not state.store.delete(task.id):
        return f"No task #{args[0]}."
    return f"Task deleted: {task.name}"


def cmd_move(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /move <from> <to>"
    try:
        src, dst = int(args[0]) - 1, int(args[1]) - 1
    except ValueError:
        return "Usage: /move <from> <to>"
    if not state.store.reorder(src, dst):
        return "Nothing moved (position out of range)."
    return f"Moved #{args[0]} to #{args[1]}."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <n> [name=...] [priority=...] [due=...] [category=...] [duration=...]"""
    if not args:
        return "Usage: /edit <n> field=value ..."
    task = _task_at(state, args[0])
    if task is None:
        return f"No task #{args[0]}."

    _, kv = _split_kv(args[1:])
    if not kv:
        return "Nothing to edit. Fields: name, priority, due, category, duration."

    fields: dict[str, object] = {}
    for key, value in kv.items():
        if key == "name":
            fields["name"] = _name_value(value)
        elif key == "priority":
            fields["priority"] = _parse_priority(value)
        elif key == "due":
            fields["due_date"] = datetime.combine(parse_day(value, today=state.views.today()), task.due_date.time())
        elif key == "category":
            fields["category"] = value
        elif key == "duration":
            fields["duration"] = _parse_minutes(value)
        else:
            return f"Unknown field: {key}. Fields: name, priority, due, category, duration."

    updated = state.store.update(task.id, **fields)
    if updated is None:
        return f"No task #{args[0]}."
    return f"Task updated: {format_task_line(state, updated)}"


def cmd_rate(state: AppState, args: list[str]) -> str:
    if not args:
        return f"Hourly rate: {state.store.hourly_rate:.2f}"
    try:
        rate = float(args[0])
    except ValueError:
        return "Usage: /rate <amount per hour>"
    state.store.set_hourly_rate(rate)
    return f"Hourly rate set to {rate:.2f}"


def _describe_filters(state: AppState) -> str:
    f = state.views.filters
    parts = []
    if f.priority:
        parts.append(f"priority={f.priority}")
    if f.category:
        parts.append(f"category={f.category}")
    if f.due_date is not None:
        parts.append(f"date={f.due_date.isoformat()}")
    return ", ".join(parts)


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter                       -> show filters
    /filter clear                 -> remove all filters
    /filter priority=high category=work date=YYYY-MM-DD   (empty value clears one)
    """
    if not args:
        return f"Filters: {_describe_filters(state) or 'none'}"
    if args[0].lower() == "clear":
        state.views.clear_filters()
        return "Filters cleared."

    _, kv = _split_kv(args)
    changes: dict[str, object] = {}
    for key, value in kv.items():
        if key == "priority":
            changes["priority"] = _parse_priority(value) if value else None
        elif key == "category":
            changes["category"] = value or None
        elif key in ("date", "due"):
            changes["due_date"] = parse_day(value, today=state.views.today()) if value else None
        else:
            return f"Unknown filter: {key}. Filters: priority, category, date."

    state.views.update_filters(**changes)
    return f"Filters: {_describe_filters(state) or 'none'}"


def cmd_export(state: AppState, args: list[str]) -> str:
    path = Path(args[0]).expanduser() if args else Path(state.settings.export_path)
    if path.suffix.lower() != ".csv":
        path = path.with_suffix(".csv")
    text = export_csv(state.store.get(), state.store.hourly_rate)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, "utf-8")
    except OSError as e:
        logger.exception("CSV export failed path=%s", path)
        return f"Export failed: {e}"
    logger.info("Exported %d tasks to %s", len(state.store), path)
    return f"Exported {len(state.store)} tasks to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <file.csv>"
    path = Path(args[0]).expanduser()
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        logger.warning("CSV import failed to read %s: %s", path, e)
        return f"Import failed: {e}"

    result = import_into_store(state.store, text)
    msg = f"Imported {len(result.tasks)} tasks from {path}"
    if result.errors:
        msg += f" (skipped {len(result.errors)} malformed lines: " + "; ".join(str(e) for e in result.errors) + ")"
    return msg


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task count, active timer, rate and filters.")
registry.register(
    "add",
    cmd_add,
    help_text=(
        "Add a task: /add <name> priority=low|medium|high [due=YYYY-MM-DD] [category=x] [duration=min]"
        " (or name=with_underscores)."
    ),
)
registry.register(
    "list", cmd_list, help_text="List tasks: /list [today|tomorrow|overdue|completed|all].", aliases=["ls"]
)
registry.register("timer", cmd_timer, help_text="Start/stop the timer of task <n>.", aliases=["t"])
registry.register("done", cmd_done, help_text="Toggle completion of task <n>.")
registry.register("delete", cmd_delete, help_text="Delete task <n>.", aliases=["rm"])
registry.register("move", cmd_move, help_text="Move task <from> to position <to>.", aliases=["mv"])
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit task <n>: name=... (_ for spaces) priority=... due=... category=... duration=...",
)
registry.register("rate", cmd_rate, help_text="Show or set the hourly rate: /rate [amount].")
registry.register("filter", cmd_filter, help_text="Filter views: /filter priority=.. category=.. date=.. | /filter clear.")
registry.register("export", cmd_export, help_text="Export tasks to CSV: /export [path].")
registry.register("import", cmd_import, help_text="Import tasks from CSV (appends): /import <path>.")
