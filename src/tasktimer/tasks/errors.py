# src/tasktimer/tasks/errors.py

from __future__ import annotations


class TaskError(Exception):
    """Base class for task subsystem errors."""


class ValidationError(TaskError, ValueError):
    """A required field is missing or a field value is not acceptable."""


class ParseError(TaskError, ValueError):
    """A CSV line could not be turned into a task."""

    def __init__(self, message: str, *, line_no: int | None = None) -> None:
        super().__init__(message)
        self.line_no = line_no

    def __str__(self) -> str:
        base = super().__str__()
        if self.line_no is None:
            return base
        return f"line {self.line_no}: {base}"
