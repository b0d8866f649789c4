# src/tasktimer/alarm/engine.py

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BeepPattern:
    """Two-tone alarm: `repeats` pairs of (high, low) beeps, one pair per `period` seconds."""

    high_hz: float = 880.0
    low_hz: float = 660.0
    beep_seconds: float = 0.1
    period_seconds: float = 0.3
    repeats: int = 10
    gain: float = 0.1
    sample_rate: int = 44100


def render_pattern(np: Any, pattern: BeepPattern) -> Any:
    """
    Render the beep pattern to a mono float32 buffer.

    Each beep is a sine starting at `gain` and decaying exponentially to 0.001.
    """
    sr = pattern.sample_rate
    total = int(sr * (pattern.period_seconds * (pattern.repeats - 1) + 2 * pattern.beep_seconds))
    out = np.zeros(total, dtype=np.float32)

    n = int(sr * pattern.beep_seconds)
    t = np.arange(n, dtype=np.float32) / sr
    envelope = pattern.gain * np.power(0.001 / pattern.gain, t / pattern.beep_seconds)

    high = (np.sin(2 * np.pi * pattern.high_hz * t) * envelope).astype(np.float32)
    low = (np.sin(2 * np.pi * pattern.low_hz * t) * envelope).astype(np.float32)

    for i in range(pattern.repeats):
        start = int(sr * i * pattern.period_seconds)
        out[start : start + n] += high[: max(0, min(n, total - start))]
        start2 = start + n
        out[start2 : start2 + n] += low[: max(0, min(n, total - start2))]

    return out


class AlarmEngine:
    """
    Best-effort alarm player (implements the AlarmSink port).

    Design goals:
    - Optional dependencies (does not crash if numpy/sounddevice are not installed).
    - Does not block the event loop: playback happens in a worker thread.
    - Friendly logging and safe shutdown.

    Notes:
    - If enabled but dependencies are missing, this engine disables itself and
      alarms are only logged.
    - Alarms requested while one is playing are queued and play in order.
    """

    def __init__(self, enabled: bool, pattern: BeepPattern | None = None):
        self.enabled = bool(enabled)
        self.pattern = pattern or BeepPattern()
        self.fired = 0

        self._queue: "queue.Queue[bool | None] | None" = None
        self._worker: threading.Thread | None = None
        self._sd: Any = None  # sounddevice module (runtime import)
        self._buffer: Any = None
        self._stop_requested = False

        if not self.enabled:
            logger.info("Alarm sound disabled.")
            return

        # Lazy / optional imports
        try:
            import numpy as np  # type: ignore
            import sounddevice as sd  # type: ignore
        except Exception as e:
            self.enabled = False
            logger.warning(
                "Alarm sound is enabled, but dependencies are missing or failed to import. "
                "Install the 'audio' extra (numpy + sounddevice) to hear alarms. Error: %s",
                repr(e),
            )
            return

        self._sd = sd
        self._buffer = render_pattern(np, self.pattern)
        self._queue = queue.Queue()

        def audio_worker() -> None:
            logger.debug("Alarm worker thread started.")
            assert self._queue is not None

            while True:
                item = self._queue.get()
                try:
                    if item is None:
                        logger.debug("Alarm worker received stop signal.")
                        return
                    try:
                        self._sd.play(self._buffer, self.pattern.sample_rate)
                        self._sd.wait()
                    except Exception as e:
                        logger.error("Alarm playback failed: %s", repr(e))
                finally:
                    self._queue.task_done()

        self._worker = threading.Thread(target=audio_worker, name="alarm-audio", daemon=True)
        self._worker.start()

        logger.info("Alarm sound ready (sample_rate=%s).", self.pattern.sample_rate)

    def fire_alarm(self) -> None:
        """Queue one alarm pattern (logged only if disabled)."""
        self.fired += 1
        if not self.enabled or self._queue is None:
            logger.info("Alarm fired (sound off).")
            return
        self._queue.put(True)

    def wait_all(self) -> None:
        """Block until all queued alarms have played (no-op if disabled)."""
        if not self.enabled or self._queue is None:
            return
        self._queue.join()

    def shutdown(self) -> None:
        """Request a clean shutdown of the worker (no-op if disabled)."""
        if not self.enabled or self._queue is None:
            return
        if self._stop_requested:
            return
        self._stop_requested = True

        logger.info("Stopping alarm worker...")
        self._queue.put(None)
        self._queue.join()

        if self._worker is not None:
            self._worker.join(timeout=2.0)

        logger.info("Alarm worker stopped.")
