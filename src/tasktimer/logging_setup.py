# src/tasktimer/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers whose INFO lines would land between the ">>> " prompt and the user's
# typing. The console connector prints its own alarm notice instead.
QUIET_ON_CONSOLE = frozenset({"tasktimer.tasks.timer_engine"})

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConsoleFilter(logging.Filter):
    """
    Keeps the REPL readable.

    - tasktimer records pass, except timer/alarm chatter below WARNING
    - everything else (third-party, py.warnings) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name in QUIET_ON_CONSOLE:
            return record.levelno >= logging.WARNING
        if record.name == "tasktimer" or record.name.startswith("tasktimer."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasktimer",
    app_name: str = "tasktimer",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route logs to stderr (filtered) and to <log_dir>/<app_name>.log (everything
    at file_level, including every tick and alarm).

    Safe to call again: existing root handlers are replaced. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(ConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
