# src/tasktimer/tasks/cost.py

from __future__ import annotations

SECONDS_PER_HOUR = 3600


def cost_amount(time_spent_seconds: int, hourly_rate: float) -> float:
    """Money earned for time_spent_seconds at hourly_rate. No validation of the rate."""
    return float(hourly_rate) / SECONDS_PER_HOUR * time_spent_seconds


def format_cost(time_spent_seconds: int, hourly_rate: float) -> str:
    """Cost rendered with exactly two decimals (non-finite rates render as nan/inf)."""
    return f"{cost_amount(time_spent_seconds, hourly_rate):.2f}"


def format_time(seconds: int) -> str:
    """Seconds -> HH:MM:SS (hours grow past two digits when needed)."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
