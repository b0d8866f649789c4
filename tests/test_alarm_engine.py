# tests/test_alarm_engine.py

from __future__ import annotations

import pytest

from tasktimer.alarm.engine import AlarmEngine, BeepPattern, render_pattern


def test_disabled_engine_counts_and_never_blocks() -> None:
    engine = AlarmEngine(enabled=False)
    engine.fire_alarm()
    engine.fire_alarm()
    engine.wait_all()
    engine.shutdown()
    engine.shutdown()
    assert engine.fired == 2
    assert engine.enabled is False


def test_render_pattern_shape_and_level() -> None:
    np = pytest.importorskip("numpy")
    pattern = BeepPattern(sample_rate=8000)

    buf = render_pattern(np, pattern)

    expected_len = int(8000 * (0.3 * 9 + 0.2))
    assert buf.dtype == np.float32
    assert abs(len(buf) - expected_len) <= 1
    assert float(np.max(np.abs(buf))) <= pattern.gain + 1e-6
    # silence between the low beep (ends at 0.2s) and the next pair (starts at 0.3s)
    assert float(np.max(np.abs(buf[int(8000 * 0.21) : int(8000 * 0.29)]))) == 0.0
