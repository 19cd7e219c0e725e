"""YOLO pose wrapper producing keypoint frames for the strike engine."""

import logging
import numpy as np
from pathlib import Path
from ultralytics import YOLO

from .frame import KeypointFrame

logger = logging.getLogger(__name__)

# <root>/punch_tracker/core/pose_estimator.py -> <root>
_REPO_ROOT = Path(__file__).resolve().parents[2]


class PoseEstimator:
    """Single-frame pose estimation with an Ultralytics YOLO pose model."""

    def __init__(self, model_name: str = "yolo11n-pose.pt", device: str = "auto"):
        """
        Load the pose model.

        Args:
            model_name: Weights file or Ultralytics model name (yolo11n-pose.pt, ...)
            device: 'auto', 'cpu', 'cuda' or 'mps'
        """
        self.model_name = model_name
        self.device = self._resolve_device(device)
        self.model = YOLO(self._resolve_model_path(model_name))
        logger.info(f"Loaded pose model {model_name} on {self.device}")

    @staticmethod
    def _resolve_model_path(model_name: str) -> str:
        """Prefer local weights (as given, repo root, ./models); else let Ultralytics fetch them."""
        name = Path(str(model_name))
        for cand in (name, _REPO_ROOT / name.name, _REPO_ROOT / "models" / name.name):
            if cand.exists():
                return str(cand)
        return str(model_name)

    @staticmethod
    def _resolve_device(device: str) -> str:
        if device != "auto":
            return device
        import torch
        if torch.cuda.is_available():
            return "cuda"
        if torch.backends.mps.is_available():
            return "mps"
        return "cpu"

    def predict(self, frame: np.ndarray, conf: float = 0.5):
        """
        Run pose estimation on a single frame.

        Args:
            frame: BGR image as numpy array
            conf: Person detection confidence threshold

        Returns:
            The Ultralytics result for the frame
        """
        results = self.model.predict(frame, conf=conf, device=self.device, verbose=False)
        return results[0]

    def keypoint_frame(self, frame: np.ndarray, timestamp: float, conf: float = 0.5) -> KeypointFrame:
        """
        Estimate the pose of the first detected person as a ``KeypointFrame``.

        A frame with nobody in it yields an empty ``KeypointFrame`` so the
        engine still sees time advance.
        """
        return to_keypoint_frame(self.predict(frame, conf=conf), timestamp)


def _keypoint_array(result) -> np.ndarray:
    """``(N, 17, 3)`` x, y, confidence per detected person (N may be 0)."""
    if result.keypoints is None:
        return np.zeros((0, 17, 3), dtype=np.float32)
    return result.keypoints.data.cpu().numpy()


def to_keypoint_frame(result, timestamp: float, person_idx: int = 0) -> KeypointFrame:
    """Convert one Ultralytics pose result into a ``KeypointFrame`` for one person."""
    persons = _keypoint_array(result)
    if person_idx >= len(persons):
        return KeypointFrame(timestamp=float(timestamp))
    kpts = persons[person_idx]
    return KeypointFrame.from_coco(kpts[:, :2], kpts[:, 2], timestamp)
