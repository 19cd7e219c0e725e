"""Temporal smoothing for hand positions."""

import numpy as np
from typing import Optional

from ..config.engine_config import FilterConfig


class MotionFilter:
    """
    Smooth a limb's hand position over time using exponential moving average.

    Raw keypoints jitter by more than a small voluntary motion from one frame
    to the next; the filter keeps ``alpha`` of the previous estimate and takes
    ``1 - alpha`` from the new observation.
    """

    def __init__(self, config: Optional[FilterConfig] = None):
        """
        Initialize motion filter.

        Args:
            config: Filter parameters. ``alpha`` is the weight on the previous
                filtered position (0-1). Higher = more smoothing, more lag.
        """
        self.config = config or FilterConfig()
        self.alpha = float(self.config.alpha)

    def smooth(self, raw: np.ndarray, previous: Optional[np.ndarray]) -> np.ndarray:
        """
        Apply one EMA step.

        Args:
            raw: (2,) observed position
            previous: (2,) previous filtered position, or None for the first
                observation

        Returns:
            New filtered position. The first observation is returned as-is.
        """
        raw = np.asarray(raw, dtype=np.float64)
        if previous is None:
            return raw.copy()

        return self.alpha * np.asarray(previous, dtype=np.float64) + (1 - self.alpha) * raw
