"""Per-limb mutable state owned by the strike engine."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Optional

import numpy as np


class StrikeState(Enum):
    """Strike state machine. Cooldown is a deadline, not a state."""

    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class LimbState:
    """Everything the engine remembers about one arm between frames."""

    side: str

    # Smoothed hand position; also the fallback input when no hand keypoint is usable.
    filtered_position: Optional[np.ndarray] = None
    # Distance hand -> shoulder (px) on the previous frame.
    dist_to_shoulder: Optional[float] = None

    # Adaptive guard / reach distances (px); None until the first learning frame.
    rest_extension: Optional[float] = None
    max_extension: Optional[float] = None
    # extension_range / shoulder span from the last learning frame.
    range_norm: Optional[float] = None

    speed_history: Deque[float] = field(default_factory=lambda: deque(maxlen=5))
    noise_estimate: Optional[float] = None

    state: StrikeState = StrikeState.IDLE
    cooldown_until: float = float("-inf")

    @property
    def active(self) -> bool:
        return self.state is StrikeState.ACTIVE

    @property
    def peak_speed(self) -> float:
        return max(self.speed_history, default=0.0)

    def extension_range(self, norm: float, floor_frac: float = 0.02) -> float:
        """``max - rest``, floored at ``norm * floor_frac``."""
        if self.rest_extension is None or self.max_extension is None:
            return norm * floor_frac
        return max(self.max_extension - self.rest_extension, norm * floor_frac)
