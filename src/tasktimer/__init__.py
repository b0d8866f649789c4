"""tasktimer: a personal list of timed tasks with a per-second timer."""

__version__ = "0.1.0"
