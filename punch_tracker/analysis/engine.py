"""Per-frame strike engine.

Turns a stream of ``KeypointFrame``s into per-limb strike counts and scores:

    shoulder check -> stability gate
        -> per limb: motion filter -> extension tracker -> strike detector
    -> calibration -> arbitration -> score engine -> StepResult

One engine instance owns all mutable state (``EngineState``). ``step`` must
not be called concurrently on the same instance.
"""

from __future__ import annotations

import copy
import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..config.engine_config import EngineConfig, DEFAULT_CONFIG
from ..config.keypoints import SIDES, keypoint_name
from ..core.frame import Keypoint, KeypointFrame
from ..core.smoother import MotionFilter
from ..storage.history_store import HistoryStore
from .calibration import CalibrationMonitor, CalibrationStatus
from .extension import ExtensionTracker
from .limb import LimbState
from .scoring import LimbStats, ScoreEngine
from .stability import StabilityGate
from .strike import (
    LimbDiagnostics,
    StrikeDetector,
    StrikeEvent,
    REASON_HAND_MISSING,
    REASON_LOW_SHOULDER_CONF,
    REASON_SHOULDERS_MISSING,
    REASON_TORSO_MOVING,
)

logger = logging.getLogger(__name__)


@dataclass
class EngineState:
    """All per-session state mutated by ``StrikeEngine.step``."""

    left: LimbState
    right: LimbState
    prev_timestamp: Optional[float] = None
    frame_count: int = 0

    def limb(self, side: str) -> LimbState:
        return self.left if side == "left" else self.right


@dataclass
class StepResult:
    """Output bundle of one processed frame."""

    left: LimbStats
    right: LimbStats
    left_debug: LimbDiagnostics
    right_debug: LimbDiagnostics
    calibration: CalibrationStatus
    # Accepted strikes (at most one unless simultaneous strikes are allowed).
    strikes: List[StrikeEvent] = field(default_factory=list)
    stable: bool = True

    def stats(self, side: str) -> LimbStats:
        return self.left if side == "left" else self.right

    def debug(self, side: str) -> LimbDiagnostics:
        return self.left_debug if side == "left" else self.right_debug


def _finite(kp: Optional[Keypoint]) -> Optional[Keypoint]:
    """Treat a keypoint with a NaN or infinite coordinate as missing."""
    if kp is None or not (math.isfinite(kp.x) and math.isfinite(kp.y)):
        return None
    return kp


def arbitrate(proposals: List[StrikeEvent], allow_simultaneous: bool = False) -> List[StrikeEvent]:
    """Pick the strikes that count this frame.

    By default only the highest-power proposal is accepted; on a tie the first
    proposal (left limb) wins.
    """
    if len(proposals) <= 1 or allow_simultaneous:
        return list(proposals)

    best = proposals[0]
    for event in proposals[1:]:
        if event.power > best.power:
            best = event
    return [best]


class StrikeEngine:
    """Self-calibrating two-limb strike detector and scorer."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        history_store: Optional[HistoryStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (defaults to ``DEFAULT_CONFIG``)
            history_store: Optional persistence for strike power histories;
                loaded once here, saved on every accepted strike
            clock: Wall clock for history timestamps / expiry only
        """
        self.config = config or DEFAULT_CONFIG

        self.filter = MotionFilter(self.config.filter)
        self.extension = ExtensionTracker(self.config.extension)
        self.stability = StabilityGate(self.config.stability)
        self.detector = StrikeDetector(self.config.strike, self.config.extension.range_floor_frac)
        self.calibration = CalibrationMonitor(self.config.calibration)
        self.scores = ScoreEngine(self.config.scoring, store=history_store, clock=clock)

        self.state = self._new_state()
        self.stats: Dict[str, LimbStats] = {side: LimbStats() for side in SIDES}

        self.scores.restore()
        for side in SIDES:
            self.scores.fill_stats(side, self.stats[side])

    def _new_state(self) -> EngineState:
        size = self.config.extension.speed_history_size
        return EngineState(
            left=LimbState("left", speed_history=deque(maxlen=size)),
            right=LimbState("right", speed_history=deque(maxlen=size)),
        )

    def reset(self) -> None:
        """Forget learned motion state and counters; keep the score histories."""
        self.state = self._new_state()
        self.stability.reset()
        self.calibration.reset()
        self.stats = {side: LimbStats() for side in SIDES}
        for side in SIDES:
            self.scores.fill_stats(side, self.stats[side])

    @property
    def calibration_status(self) -> CalibrationStatus:
        return self.calibration.status

    def step(self, frame: KeypointFrame) -> StepResult:
        """Process one frame to completion."""
        now = float(frame.timestamp)
        kp_cfg = self.config.keypoints

        ls = _finite(frame.get("left_shoulder"))
        rs = _finite(frame.get("right_shoulder"))
        if ls is None or rs is None:
            return self._blocked(now, REASON_SHOULDERS_MISSING)
        if ls.confidence < kp_cfg.min_shoulder_conf or rs.confidence < kp_cfg.min_shoulder_conf:
            return self._blocked(now, REASON_LOW_SHOULDER_CONF)

        shoulders = {"left": ls.xy, "right": rs.xy}
        norm = max(float(np.linalg.norm(shoulders["left"] - shoulders["right"])), kp_cfg.min_shoulder_span_px)
        stable = self.stability.update(shoulders["left"], shoulders["right"], norm)
        if not stable:
            logger.debug(f"Unstable frame at {now:.3f}s (shoulder motion {self.stability.last_motion:.3f})")

        prev_t = self.state.prev_timestamp
        min_dt = self.config.extension.min_dt_s
        dt = max(now - prev_t, min_dt) if prev_t is not None else min_dt

        proposals: List[StrikeEvent] = []
        debug: Dict[str, LimbDiagnostics] = {}
        for side in SIDES:
            event, debug[side] = self._process_limb(side, frame, shoulders[side], norm, dt, now, stable)
            if event is not None:
                proposals.append(event)

        calibration = self.calibration.update(
            [self.state.left.range_norm, self.state.right.range_norm]
        )

        accepted = arbitrate(proposals, self.config.arbitration.allow_simultaneous)
        for event in proposals:
            if event not in accepted:
                logger.debug(f"Dropped simultaneous {event.side} strike (power {event.power:.2f})")
        for event in accepted:
            self._accept(event)

        self.state.prev_timestamp = now
        self.state.frame_count += 1
        return self._result(debug["left"], debug["right"], calibration, accepted, stable)

    def _process_limb(
        self,
        side: str,
        frame: KeypointFrame,
        shoulder: np.ndarray,
        norm: float,
        dt: float,
        now: float,
        stable: bool,
    ) -> Tuple[Optional[StrikeEvent], LimbDiagnostics]:
        limb = self.state.limb(side)
        min_hand_conf = self.config.keypoints.min_hand_conf

        # Prefer wrist; fall back to elbow, then hold the last filtered position.
        wrist = _finite(frame.get(keypoint_name(side, "wrist")))
        elbow = _finite(frame.get(keypoint_name(side, "elbow")))
        hand_missing = wrist is None or wrist.confidence < min_hand_conf
        if not hand_missing:
            raw = wrist.xy
        elif elbow is not None and elbow.confidence >= min_hand_conf:
            raw = elbow.xy
        elif limb.filtered_position is not None:
            raw = limb.filtered_position
        else:
            return None, self._limb_debug(limb, norm, REASON_HAND_MISSING)

        previous = limb.filtered_position
        filtered = self.filter.smooth(raw, previous)
        limb.filtered_position = filtered

        if hand_missing:
            # Keep tracking so the hand does not freeze, but learn nothing.
            return None, self._limb_debug(
                limb, norm, REASON_HAND_MISSING,
                extension=float(np.linalg.norm(filtered - shoulder)),
            )

        sample = self.extension.measure(
            limb, filtered, previous if previous is not None else filtered, shoulder, norm, dt
        )
        limb.speed_history.append(sample.speed)

        if not stable:
            limb.dist_to_shoulder = sample.dist_to_shoulder
            return None, self._limb_debug(
                limb, norm, REASON_TORSO_MOVING,
                extension=sample.dist_to_shoulder,
                speed=sample.speed_forward,
                speed_threshold=self.config.strike.speed_min,
            )

        self.extension.learn(limb, sample, norm)
        event, diagnostics = self.detector.update(limb, sample, now, norm)

        stats = self.stats[side]
        stats.last_speed = sample.speed_forward
        stats.last_power = self.detector.power(sample.speed_forward, sample.dist_to_shoulder, norm)

        limb.dist_to_shoulder = sample.dist_to_shoulder
        return event, diagnostics

    def _accept(self, event: StrikeEvent) -> None:
        limb = self.state.limb(event.side)
        if limb.dist_to_shoulder is not None and limb.max_extension is not None:
            limb.max_extension = max(limb.max_extension, limb.dist_to_shoulder)

        stats = self.stats[event.side]
        stats.total += 1
        stats.last_speed = event.speed
        stats.last_power = event.power
        stats.last_percent = self.scores.record(event.side, event.power)
        logger.debug(
            f"{event.side} strike #{stats.total}: speed={event.speed:.2f} "
            f"power={event.power:.2f} ({stats.last_percent}%)"
        )

    def _limb_debug(
        self,
        limb: LimbState,
        norm: float,
        reason: str,
        extension: float = 0.0,
        speed: float = 0.0,
        speed_threshold: float = 0.0,
    ) -> LimbDiagnostics:
        return LimbDiagnostics(
            speed=speed,
            speed_threshold=speed_threshold,
            range_norm=limb.range_norm or 0.0,
            extension_norm=extension / norm if norm > 0 else 0.0,
            rest_norm=(limb.rest_extension / norm) if limb.rest_extension is not None and norm > 0 else 0.0,
            reasons=[reason],
            active=limb.active,
            peak_speed=limb.peak_speed,
        )

    def _blocked(self, now: float, reason: str) -> StepResult:
        """Frame without usable shoulders: only time advances."""
        self.state.prev_timestamp = now
        self.state.frame_count += 1
        left = self._limb_debug(self.state.left, 1.0, reason)
        right = self._limb_debug(self.state.right, 1.0, reason)
        left.rest_norm = right.rest_norm = 0.0
        return self._result(left, right, self.calibration.status, [], stable=False)

    def _result(
        self,
        left_debug: LimbDiagnostics,
        right_debug: LimbDiagnostics,
        calibration: CalibrationStatus,
        strikes: List[StrikeEvent],
        stable: bool,
    ) -> StepResult:
        for side in SIDES:
            self.scores.fill_stats(side, self.stats[side])
        return StepResult(
            left=copy.copy(self.stats["left"]),
            right=copy.copy(self.stats["right"]),
            left_debug=left_debug,
            right_debug=right_debug,
            calibration=calibration,
            strikes=list(strikes),
            stable=stable,
        )
