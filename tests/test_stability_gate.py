import numpy as np
import pytest

from punch_tracker.analysis.stability import StabilityGate

NORM = 100.0
LEFT = np.array([200.0, 100.0])
RIGHT = np.array([300.0, 100.0])


def test_first_frame_is_stable():
    gate = StabilityGate()

    assert gate.update(LEFT, RIGHT, NORM)
    assert gate.last_motion == 0.0


def test_small_shift_is_stable():
    gate = StabilityGate()
    gate.update(LEFT, RIGHT, NORM)

    shift = np.array([5.0, 0.0])
    assert gate.update(LEFT + shift, RIGHT + shift, NORM)
    assert gate.last_motion == pytest.approx(0.05)


def test_ten_percent_shift_is_unstable():
    gate = StabilityGate()
    gate.update(LEFT, RIGHT, NORM)

    shift = np.array([10.0, 0.0])
    assert not gate.update(LEFT + shift, RIGHT + shift, NORM)
    assert gate.last_motion == pytest.approx(0.10)


def test_motion_is_measured_against_latest_frame():
    gate = StabilityGate()
    gate.update(LEFT, RIGHT, NORM)
    shift = np.array([10.0, 0.0])
    gate.update(LEFT + shift, RIGHT + shift, NORM)

    # Holding the new position is stable again.
    assert gate.update(LEFT + shift, RIGHT + shift, NORM)
    prev_left, prev_right = gate.previous_shoulders
    assert np.allclose(prev_left, LEFT + shift)
    assert np.allclose(prev_right, RIGHT + shift)


def test_reset_forgets_previous_shoulders():
    gate = StabilityGate()
    gate.update(LEFT, RIGHT, NORM)

    gate.reset()

    assert gate.previous_shoulders == (None, None)
    assert gate.update(LEFT + 50.0, RIGHT + 50.0, NORM)
