"""Torso / camera stability gate."""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ..config.engine_config import StabilityConfig


class StabilityGate:
    """Freeze learning while the shoulders are moving too much.

    Camera shake or the user stepping around moves every keypoint at once and
    is indistinguishable from a punch once the hand is measured relative to the
    image. Average shoulder displacement since the previous frame, in shoulder
    spans, is the tell.
    """

    def __init__(self, config: Optional[StabilityConfig] = None):
        self.config = config or StabilityConfig()
        self._prev_left: Optional[np.ndarray] = None
        self._prev_right: Optional[np.ndarray] = None
        self.last_motion = 0.0

    def reset(self) -> None:
        self._prev_left = None
        self._prev_right = None
        self.last_motion = 0.0

    @property
    def previous_shoulders(self) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
        return self._prev_left, self._prev_right

    def shoulder_motion(self, left: np.ndarray, right: np.ndarray, norm: float) -> float:
        """Mean shoulder displacement since the previous frame, in spans."""
        prev_left = self._prev_left if self._prev_left is not None else left
        prev_right = self._prev_right if self._prev_right is not None else right
        moved = float(np.linalg.norm(left - prev_left)) + float(np.linalg.norm(right - prev_right))
        return moved / (2.0 * norm)

    def update(self, left: np.ndarray, right: np.ndarray, norm: float) -> bool:
        """Record this frame's shoulders and return True when the frame is stable."""
        motion = self.shoulder_motion(left, right, norm)
        self._prev_left = np.asarray(left, dtype=np.float64).copy()
        self._prev_right = np.asarray(right, dtype=np.float64).copy()
        self.last_motion = motion
        return motion < self.config.max_shoulder_motion_frac
