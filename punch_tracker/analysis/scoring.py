"""Rolling-percentile strike scoring.

Each accepted strike's power is compared against the limb's own recent best:
the 90th percentile of its last strikes. 100% means "as hard as your usual
best"; scores are capped at 150%.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, List, Optional

import numpy as np

from ..config.engine_config import ScoreConfig
from ..config.keypoints import SIDES
from ..storage.history_store import HistoryRecord, HistoryStore

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentile(values: Iterable[float], p: float) -> Optional[float]:
    """Nearest-rank percentile: sorted ascending, index ``round(p * (n - 1))``.

    Returns None for an empty input.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    idx = round_half_up(p * (len(ordered) - 1))
    idx = min(len(ordered) - 1, max(0, idx))
    return float(ordered[idx])


@dataclass
class LimbStats:
    """Cumulative and last-event figures for one limb."""

    total: int = 0
    last_speed: float = 0.0
    last_power: float = 0.0
    last_percent: int = 0
    baseline: float = 0.0
    average_percent: int = 0


class ScoreHistory:
    """Bounded FIFO of strike powers, oldest evicted first."""

    def __init__(self, capacity: int = 50, values: Iterable[float] = ()):
        self.capacity = int(capacity)
        self._values: Deque[float] = deque(maxlen=self.capacity)
        self.extend(values)

    def push(self, power: float) -> None:
        self._values.append(float(power))

    def extend(self, values: Iterable[float]) -> None:
        for v in values:
            self.push(v)

    def clear(self) -> None:
        self._values.clear()

    def values(self) -> List[float]:
        return list(self._values)

    def recent(self, n: int) -> List[float]:
        return list(self._values)[-n:] if n > 0 else []

    def __len__(self) -> int:
        return len(self._values)


class ScoreEngine:
    """Per-limb strike histories, percent scoring and persistence.

    ``clock`` stamps saved records and checks their expiry; it should be a
    wall clock shared across sessions (``time.time``), unlike the monotonic
    frame timestamps.
    """

    def __init__(
        self,
        config: Optional[ScoreConfig] = None,
        store: Optional[HistoryStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or ScoreConfig()
        self.store = store
        self.clock = clock
        self.histories: Dict[str, ScoreHistory] = {
            side: ScoreHistory(self.config.history_size) for side in SIDES
        }

    def restore(self) -> bool:
        """Seed both histories from the store unless the record has expired.

        Returns:
            True when a record was loaded.
        """
        if self.store is None:
            return False

        record = self.store.load()
        if record is None:
            return False

        age = self.clock() - record.saved_at
        if age > self.config.history_expiry_s:
            logger.info(f"Discarding strike history saved {age / 60:.1f} min ago")
            return False

        for side, values in (("left", record.left), ("right", record.right)):
            history = self.histories[side]
            history.clear()
            history.extend(values[-self.config.history_size:])
        logger.info(
            f"Restored strike history: left={len(self.histories['left'])} "
            f"right={len(self.histories['right'])}"
        )
        return True

    def save(self) -> None:
        if self.store is None:
            return
        self.store.save(
            HistoryRecord(
                saved_at=self.clock(),
                left=self.histories["left"].values(),
                right=self.histories["right"].values(),
            )
        )

    def history(self, side: str) -> List[float]:
        return self.histories[side].values()

    def baseline(self, side: str) -> float:
        """90th-percentile power of the limb's history (0 when empty)."""
        return percentile(self.histories[side].values(), self.config.percentile) or 0.0

    def percent(self, side: str, power: float) -> int:
        """Score ``power`` against the limb's history, clamped to [0, max_percent]."""
        values = self.histories[side].values()
        base = percentile(values, self.config.percentile) or max(values + [power])
        base = max(self.config.min_baseline, base)
        pct = round_half_up((power / base) * 100)
        return max(0, min(self.config.max_percent, pct))

    def average_percent(self, side: str) -> int:
        """Mean of the recent strikes relative to the baseline (fatigue trend)."""
        base = self.baseline(side)
        recent = self.histories[side].recent(self.config.average_window)
        if not base or not recent:
            return 0
        avg = float(np.mean(recent))
        pct = round_half_up((avg / max(self.config.min_baseline, base)) * 100)
        return max(0, min(self.config.max_percent, pct))

    def record(self, side: str, power: float) -> int:
        """Add an accepted strike, persist, and return its percent score."""
        self.histories[side].push(power)
        self.save()
        return self.percent(side, power)

    def fill_stats(self, side: str, stats: LimbStats) -> LimbStats:
        """Refresh the derived figures of ``stats`` in place."""
        stats.baseline = self.baseline(side)
        stats.average_percent = self.average_percent(side)
        return stats
