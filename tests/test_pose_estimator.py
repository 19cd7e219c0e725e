from types import SimpleNamespace

import numpy as np
import pytest

pytest.importorskip("ultralytics")
torch = pytest.importorskip("torch")

from punch_tracker.config.keypoints import KEYPOINT_NAMES  # noqa: E402
from punch_tracker.core.pose_estimator import to_keypoint_frame  # noqa: E402


def _person(wrist_x: float) -> np.ndarray:
    kpts = np.zeros((17, 3), dtype=np.float32)
    kpts[:, 2] = 0.8
    kpts[KEYPOINT_NAMES["right_wrist"], :2] = [wrist_x, 120.0]
    return kpts


def _result(*persons: np.ndarray):
    """Stand-in for an Ultralytics pose result: ``keypoints.data`` is (N, 17, 3)."""
    data = np.stack(persons) if persons else np.zeros((0, 17, 3), dtype=np.float32)
    return SimpleNamespace(keypoints=SimpleNamespace(data=torch.from_numpy(data)))


def test_first_person_becomes_keypoint_frame():
    frame = to_keypoint_frame(_result(_person(330.0), _person(900.0)), timestamp=4.2)

    assert frame.timestamp == pytest.approx(4.2)
    assert frame.get("right_wrist").x == pytest.approx(330.0)
    assert frame.confidence("left_shoulder") == pytest.approx(0.8)


def test_person_index_selects_person():
    frame = to_keypoint_frame(_result(_person(330.0), _person(900.0)), timestamp=0.0, person_idx=1)

    assert frame.get("right_wrist").x == pytest.approx(900.0)


def test_nobody_detected_gives_empty_frame():
    assert to_keypoint_frame(_result(), timestamp=1.0).points == {}
    assert to_keypoint_frame(SimpleNamespace(keypoints=None), timestamp=1.0).points == {}


def test_non_finite_keypoints_are_dropped():
    person = _person(330.0)
    person[KEYPOINT_NAMES["left_wrist"], 0] = np.nan

    frame = to_keypoint_frame(_result(person), timestamp=0.0)

    assert frame.get("left_wrist") is None
    assert frame.get("right_wrist") is not None
