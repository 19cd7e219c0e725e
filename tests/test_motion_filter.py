import numpy as np
import pytest

from punch_tracker.config.engine_config import FilterConfig
from punch_tracker.core.smoother import MotionFilter


def test_first_observation_passes_through():
    f = MotionFilter()
    raw = np.array([10.0, 20.0])

    out = f.smooth(raw, None)

    assert np.allclose(out, raw)
    # Returned value must not alias the input.
    raw[0] = 99.0
    assert out[0] == 10.0


def test_ema_keeps_alpha_of_previous():
    f = MotionFilter()

    out = f.smooth(np.array([110.0, 0.0]), np.array([100.0, 0.0]))

    assert out[0] == pytest.approx(104.0)
    assert out[1] == pytest.approx(0.0)


def test_converges_to_constant_input():
    f = MotionFilter(FilterConfig(alpha=0.5))
    pos = np.array([0.0, 0.0])
    target = np.array([50.0, -20.0])

    for _ in range(40):
        pos = f.smooth(target, pos)

    assert np.allclose(pos, target, atol=1e-6)


def test_alpha_zero_disables_smoothing():
    f = MotionFilter(FilterConfig(alpha=0.0))

    out = f.smooth(np.array([7.0, 8.0]), np.array([0.0, 0.0]))

    assert np.allclose(out, [7.0, 8.0])
