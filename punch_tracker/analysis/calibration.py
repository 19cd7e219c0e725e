"""Calibration progress derived from the learned motion range."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Optional

from ..config.engine_config import CalibrationConfig

logger = logging.getLogger(__name__)


class CalibrationStatus(Enum):
    WAITING = "waiting"
    COLLECTING = "collecting"
    COMPLETE = "complete"

    @property
    def rank(self) -> int:
        return _RANK[self]


_RANK = {
    CalibrationStatus.WAITING: 0,
    CalibrationStatus.COLLECTING: 1,
    CalibrationStatus.COMPLETE: 2,
}

GUIDANCE = {
    CalibrationStatus.WAITING: "Keep both hands visible so the tracker can learn your guard.",
    CalibrationStatus.COLLECTING: "Give a couple of full extensions to finish calibration.",
    CalibrationStatus.COMPLETE: "Ready - start throwing punches! (Auto-calibrated)",
}


class CalibrationMonitor:
    """Waiting -> Collecting -> Complete, driven by the widest limb range.

    The status is guidance for the user only; the strike detector gates on its
    own range thresholds.
    """

    def __init__(self, config: Optional[CalibrationConfig] = None):
        self.config = config or CalibrationConfig()
        self.status = CalibrationStatus.WAITING

    def reset(self) -> None:
        self.status = CalibrationStatus.WAITING

    @property
    def is_complete(self) -> bool:
        return self.status is CalibrationStatus.COMPLETE

    def update(self, range_norms: Iterable[Optional[float]]) -> CalibrationStatus:
        """Advance the status from the current per-limb normalized ranges."""
        if self.is_complete:
            return self.status

        widest = max((r for r in range_norms if r is not None), default=0.0)
        if widest > self.config.complete_range_norm:
            candidate = CalibrationStatus.COMPLETE
        elif widest > self.config.collecting_range_norm:
            candidate = CalibrationStatus.COLLECTING
        else:
            candidate = CalibrationStatus.WAITING

        if candidate.rank > self.status.rank:
            logger.info(f"Calibration {self.status.value} -> {candidate.value} (range {widest:.2f})")
            self.status = candidate
        return self.status

    @property
    def guidance(self) -> str:
        return GUIDANCE[self.status]
