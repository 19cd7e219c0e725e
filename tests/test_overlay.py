import numpy as np

from punch_tracker.analysis.calibration import CalibrationStatus
from punch_tracker.analysis.engine import StepResult
from punch_tracker.analysis.scoring import LimbStats
from punch_tracker.analysis.strike import LimbDiagnostics
from punch_tracker.core.frame import Keypoint, KeypointFrame
from punch_tracker.visualization.overlay import ArmSkeletonDrawer, OverlayRenderer, limb_panel_lines


def _result() -> StepResult:
    return StepResult(
        left=LimbStats(total=3, last_speed=2.1, last_power=1.2, last_percent=95, baseline=1.3, average_percent=88),
        right=LimbStats(),
        left_debug=LimbDiagnostics(completion=0.5, speed=1.0, speed_threshold=0.62, reasons=["need more reach"]),
        right_debug=LimbDiagnostics(),
        calibration=CalibrationStatus.COLLECTING,
    )


def test_limb_panel_lines():
    result = _result()

    lines = limb_panel_lines("left", result.left, result.left_debug)

    assert lines[0] == "LEFT  3 strikes"
    assert "95%" in lines[1]
    assert lines[3] == "completion: 50%"
    assert lines[4] == "speed: 1.00 / 0.62"
    assert lines[-1] == "status: need more reach"


def test_skeleton_skips_low_confidence_points():
    frame = np.zeros((200, 400, 3), dtype=np.uint8)
    keypoints = KeypointFrame(
        timestamp=0.0,
        points={
            "left_shoulder": Keypoint(100.0, 100.0, 0.9),
            "left_elbow": Keypoint(60.0, 100.0, 0.9),
            "right_wrist": Keypoint(350.0, 100.0, 0.2),
        },
    )

    out = ArmSkeletonDrawer().draw(frame, keypoints)

    assert out.shape == frame.shape
    assert frame.sum() == 0
    assert out[100, 80].any()      # shoulder-elbow line
    assert not out[100, 350].any()  # wrist below threshold


def test_render_does_not_modify_input():
    frame = np.full((360, 640, 3), 40, dtype=np.uint8)
    keypoints = KeypointFrame(timestamp=0.0, points={"left_shoulder": Keypoint(320.0, 180.0, 0.9)})

    out = OverlayRenderer().render(frame, keypoints, _result())

    assert out.shape == frame.shape
    assert (frame == 40).all()
    assert not np.array_equal(out, frame)
