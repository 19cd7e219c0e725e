"""Per-frame keypoint snapshot consumed by the strike engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import numpy as np

from ..config.keypoints import ARM_KEYPOINTS, COCO_KEYPOINTS


@dataclass(frozen=True)
class Keypoint:
    """A named landmark position (pixels) with its detector confidence."""

    x: float
    y: float
    confidence: float

    @property
    def xy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass(frozen=True)
class KeypointFrame:
    """Named 2D points for one processed video frame.

    ``timestamp`` is in seconds on a monotonic clock chosen by the caller.
    Names may be missing; missing and low-confidence points are handled by
    the engine, not here.
    """

    timestamp: float
    points: Dict[str, Keypoint] = field(default_factory=dict)

    def get(self, name: str) -> Optional[Keypoint]:
        return self.points.get(name)

    def confidence(self, name: str) -> float:
        kp = self.points.get(name)
        return kp.confidence if kp is not None else 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeypointFrame":
        """Build a frame from ``{"timestamp": t, "points": {name: {x, y, confidence}}}``.

        Non-finite or missing confidences count as 0.

        Raises:
            ValueError: if the frame is not a mapping, or the timestamp or a
                coordinate is not a finite number, or a confidence is not numeric.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Invalid frame: {data!r}")
        try:
            timestamp = float(data["timestamp"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid frame timestamp: {data.get('timestamp')!r}") from e
        if not math.isfinite(timestamp):
            raise ValueError(f"Invalid frame timestamp: {timestamp!r}")

        raw_points = data.get("points") or {}
        if not isinstance(raw_points, Mapping):
            raise ValueError(f"Invalid frame points: {raw_points!r}")

        points: Dict[str, Keypoint] = {}
        for name, raw in raw_points.items():
            if raw is None:
                continue
            try:
                x = float(raw["x"])
                y = float(raw["y"])
                conf = raw.get("confidence", raw.get("score", 0.0))
                conf = float(conf) if conf is not None else 0.0
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ValueError(f"Invalid keypoint {name!r}: {raw!r}") from e
            if not (math.isfinite(x) and math.isfinite(y)):
                raise ValueError(f"Non-finite keypoint {name!r}: {raw!r}")
            points[str(name)] = Keypoint(x, y, _clamp_confidence(conf))

        return cls(timestamp=timestamp, points=points)

    @classmethod
    def from_coco(
        cls,
        keypoints: np.ndarray,
        confidence: np.ndarray,
        timestamp: float,
        names=ARM_KEYPOINTS,
    ) -> "KeypointFrame":
        """Build a frame from a ``(17, 2)`` COCO keypoint array and ``(17,)`` confidences.

        Non-finite points are left out, as if the detector had missed them.
        """
        points: Dict[str, Keypoint] = {}
        for idx, name in COCO_KEYPOINTS.items():
            if name not in names or idx >= len(keypoints):
                continue
            x, y = float(keypoints[idx][0]), float(keypoints[idx][1])
            if not (math.isfinite(x) and math.isfinite(y)):
                continue
            points[name] = Keypoint(x, y, _clamp_confidence(float(confidence[idx])))
        return cls(timestamp=float(timestamp), points=points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "points": {
                name: {"x": kp.x, "y": kp.y, "confidence": kp.confidence}
                for name, kp in self.points.items()
            },
        }


def _clamp_confidence(conf: float) -> float:
    if not math.isfinite(conf):
        return 0.0
    return min(1.0, max(0.0, conf))
