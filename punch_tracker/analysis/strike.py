"""Strike (punch) detection.

A strike is a purposeful outward extension of the hand. Each limb runs a small
hysteresis state machine:

    IDLE --(fast forward reach past the trigger distance)--> ACTIVE
    ACTIVE --(retraction, or back inside the reset distance)--> IDLE

Entering ACTIVE proposes a ``StrikeEvent`` and arms a cooldown deadline so a
single extension cannot fire twice. Leaving ACTIVE emits nothing; it only
re-arms detection. Thresholds scale with the limb's learned range: a user with
a long reach must move proportionally faster and further.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config.engine_config import StrikeConfig
from .extension import ExtensionSample
from .limb import LimbState, StrikeState

REASON_SHOULDERS_MISSING = "shoulders missing"
REASON_LOW_SHOULDER_CONF = "low shoulder confidence"
REASON_HAND_MISSING = "hand keypoint missing"
REASON_TORSO_MOVING = "torso moving - hold steady"
REASON_ACTIVE = "strike active - retract to reset"
REASON_READY = "ready to strike"
REASON_COOLDOWN = "cooldown"
REASON_NOT_FORWARD = "not moving forward"
REASON_NEED_REACH = "need more reach"


@dataclass(frozen=True)
class StrikeEvent:
    """A strike proposed (and possibly accepted) on one frame."""

    side: str

    # Outward hand speed at the trigger frame (shoulder spans per second).
    speed: float

    # speed * reach factor, in arbitrary units; what the score engine ranks.
    power: float

    # Caller clock, seconds.
    timestamp: float


@dataclass
class LimbDiagnostics:
    """Per-frame snapshot of why a limb did or did not strike."""

    completion: float = 0.0
    speed: float = 0.0
    speed_threshold: float = 0.0
    moving_forward: bool = False
    moving_backward: bool = False
    range_norm: float = 0.0
    extension_norm: float = 0.0
    trigger_norm: float = 0.0
    rest_norm: float = 0.0
    reasons: List[str] = field(default_factory=lambda: ["waiting"])
    active: bool = False
    peak_speed: float = 0.0

    @property
    def status(self) -> str:
        return ", ".join(self.reasons)


@dataclass(frozen=True)
class StrikeThresholds:
    """Distances (px) and speed (span/s) derived from the learned range."""

    extension_range: float
    range_norm: float
    speed_threshold: float
    trigger_distance: float
    reset_distance: float
    range_enough: bool


class StrikeDetector:
    """Hysteresis strike detector with a cooldown deadline."""

    def __init__(self, config: Optional[StrikeConfig] = None, range_floor_frac: float = 0.02):
        self.config = config or StrikeConfig()
        self.range_floor_frac = float(range_floor_frac)

    def thresholds(self, limb: LimbState, norm: float) -> StrikeThresholds:
        cfg = self.config
        extension_range = limb.extension_range(norm, self.range_floor_frac)
        range_norm = extension_range / norm
        rest = limb.rest_extension if limb.rest_extension is not None else 0.0

        if range_norm < cfg.trigger_small_range_norm:
            gain = cfg.trigger_gain_small
        elif range_norm < cfg.trigger_medium_range_norm:
            gain = cfg.trigger_gain_medium
        else:
            gain = cfg.trigger_gain_large

        return StrikeThresholds(
            extension_range=extension_range,
            range_norm=range_norm,
            speed_threshold=max(cfg.speed_min, cfg.speed_base + range_norm * cfg.speed_range_gain),
            trigger_distance=rest + extension_range * gain,
            reset_distance=rest + extension_range * cfg.reset_gain,
            range_enough=extension_range >= norm * cfg.min_range_frac,
        )

    def power(self, speed_forward: float, dist_to_shoulder: float, norm: float) -> float:
        reach = min(self.config.reach_max, max(self.config.reach_min, dist_to_shoulder / norm))
        return speed_forward * reach

    def update(
        self,
        limb: LimbState,
        sample: ExtensionSample,
        now: float,
        norm: float,
    ) -> Tuple[Optional[StrikeEvent], LimbDiagnostics]:
        """Advance the state machine for one trusted frame.

        Must run after the extension tracker has learned from ``sample``.

        Returns:
            (event, diagnostics) -- event is None unless the limb just entered
            ACTIVE.
        """
        cfg = self.config
        th = self.thresholds(limb, norm)
        dist = sample.dist_to_shoulder
        speed_fwd = sample.speed_forward
        rest = limb.rest_extension if limb.rest_extension is not None else dist

        was_active = limb.active
        in_cooldown = now < limb.cooldown_until

        event: Optional[StrikeEvent] = None
        if (
            not was_active
            and not in_cooldown
            and th.range_enough
            and sample.moving_forward
            and speed_fwd >= th.speed_threshold
            and dist >= th.trigger_distance
        ):
            limb.state = StrikeState.ACTIVE
            limb.cooldown_until = now + cfg.cooldown_s
            event = StrikeEvent(
                side=limb.side,
                speed=speed_fwd,
                power=self.power(speed_fwd, dist, norm),
                timestamp=now,
            )

        # Only a strike raised on an earlier frame can be released.
        if was_active and (sample.moving_backward or dist <= th.reset_distance):
            limb.state = StrikeState.IDLE

        trigger_delta = th.trigger_distance - rest
        if trigger_delta > 1e-4:
            completion = min(1.0, max(0.0, (dist - rest) / trigger_delta))
        else:
            completion = 0.0
        if not sample.moving_forward and speed_fwd < cfg.idle_speed:
            completion = 0.0

        reasons: List[str] = []
        if was_active:
            reasons.append(REASON_ACTIVE)
        else:
            if not th.range_enough:
                reasons.append(f"range {th.range_norm * 100:.0f}% < {cfg.min_range_frac * 100:.0f}%")
            if in_cooldown:
                reasons.append(REASON_COOLDOWN)
            if not sample.moving_forward:
                reasons.append(REASON_NOT_FORWARD)
            if speed_fwd < th.speed_threshold:
                reasons.append(f"speed {speed_fwd:.2f} < {th.speed_threshold:.2f}")
            if dist < th.trigger_distance:
                reasons.append(REASON_NEED_REACH)
        if not reasons:
            reasons.append(REASON_READY)

        diagnostics = LimbDiagnostics(
            completion=completion,
            speed=speed_fwd,
            speed_threshold=th.speed_threshold,
            moving_forward=sample.moving_forward,
            moving_backward=sample.moving_backward,
            range_norm=th.range_norm,
            extension_norm=dist / norm,
            trigger_norm=th.trigger_distance / norm,
            rest_norm=rest / norm,
            reasons=reasons,
            active=was_active,
            peak_speed=limb.peak_speed,
        )
        return event, diagnostics
