"""Strike engine configuration.

All thresholds, learning rates and scoring parameters are centralised here so
that tuning the detector never requires touching analysis code.

Units:
    - distances are pixels unless a name ends in ``_norm`` / ``_frac``, in which
      case they are fractions of the shoulder span ("normalized units");
    - speeds are normalized units per second;
    - times are seconds on the caller's monotonic clock.
"""

from __future__ import annotations
from dataclasses import dataclass, field


# =====================================================================
# Keypoint gating
# =====================================================================

@dataclass(frozen=True)
class KeypointConfig:
    """Confidence gates applied to the incoming keypoints."""

    min_shoulder_conf: float = 0.15
    min_hand_conf: float = 0.05      # wrist, and the elbow when used as fallback
    min_shoulder_span_px: float = 1.0  # floor for the normalisation reference


# =====================================================================
# Motion filter
# =====================================================================

@dataclass(frozen=True)
class FilterConfig:
    """Exponential smoothing of the hand position."""

    # Weight kept on the previous filtered position (higher = smoother, more lag).
    alpha: float = 0.6


# =====================================================================
# Extension tracking
# =====================================================================

@dataclass(frozen=True)
class ExtensionConfig:
    """Adaptive rest / max-reach estimation and motion classification."""

    # Rest extension learning rates
    rest_rate_retract: float = 0.6   # hand closer than rest: snap to new guard
    rest_rate_drift: float = 0.03    # otherwise: slow drift

    # Max extension learning rates
    max_rate_grow: float = 0.3
    max_rate_decay: float = 0.02

    # max >= rest + span * this, keeps the range strictly positive
    min_range_frac: float = 0.04
    # extension_range floor (span fraction)
    range_floor_frac: float = 0.02

    # Forward speed floor before / after a range estimate exists
    forward_speed_floor: float = 0.15
    forward_speed_floor_ranged: float = 0.3
    # Backward motion requires forward speed below this
    backward_speed_max: float = 0.2

    # Forward gate on the change of distance-to-shoulder
    forward_gate_span_frac: float = 0.003
    forward_gate_range_frac: float = 0.03

    # Resting-jitter estimate (EMA of raw speed)
    noise_seed: float = 0.05
    noise_rate: float = 0.1
    noise_floor_gain: float = 1.2

    speed_history_size: int = 5

    # Lower bound on the frame interval (s); also used when there is no previous frame
    min_dt_s: float = 1.0 / 120.0


# =====================================================================
# Torso stability
# =====================================================================

@dataclass(frozen=True)
class StabilityConfig:
    """Camera shake / torso translation gate."""

    # Mean shoulder displacement per frame (span fraction) at which learning freezes
    max_shoulder_motion_frac: float = 0.08


# =====================================================================
# Strike detection
# =====================================================================

@dataclass(frozen=True)
class StrikeConfig:
    """Hysteresis, thresholds and debouncing for the strike state machine."""

    min_range_frac: float = 0.06          # range needed before thresholds are trusted
    cooldown_s: float = 0.25

    # speed_threshold = max(speed_min, speed_base + range_norm * speed_range_gain)
    speed_min: float = 0.6
    speed_base: float = 0.5
    speed_range_gain: float = 1.2

    # trigger = rest + range * gain, looser while the range is small
    trigger_gain_small: float = 0.5
    trigger_gain_medium: float = 0.6
    trigger_gain_large: float = 0.65
    trigger_small_range_norm: float = 0.06
    trigger_medium_range_norm: float = 0.10

    # reset = rest + range * reset_gain
    reset_gain: float = 0.25

    # power = speed_forward * clamp(dist / span, reach_min, reach_max)
    reach_min: float = 0.4
    reach_max: float = 1.6

    # completion is forced to 0 when idle-ish
    idle_speed: float = 0.1


# =====================================================================
# Arbitration
# =====================================================================

@dataclass(frozen=True)
class ArbitrationConfig:
    """Policy when both limbs propose a strike in the same frame."""

    # False: only the higher-power proposal counts.
    allow_simultaneous: bool = False


# =====================================================================
# Calibration
# =====================================================================

@dataclass(frozen=True)
class CalibrationConfig:
    """Range thresholds (span fraction) for the calibration guidance."""

    collecting_range_norm: float = 0.08
    complete_range_norm: float = 0.18


# =====================================================================
# Scoring
# =====================================================================

@dataclass(frozen=True)
class ScoreConfig:
    """Rolling-percentile scoring and history persistence."""

    history_size: int = 50
    percentile: float = 0.90
    average_window: int = 10
    min_baseline: float = 0.001
    max_percent: int = 150
    history_expiry_s: float = 30 * 60.0


# =====================================================================
# Master Configuration
# =====================================================================

@dataclass(frozen=True)
class EngineConfig:
    """Top-level configuration aggregating all sub-configs."""

    keypoints: KeypointConfig = field(default_factory=KeypointConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    extension: ExtensionConfig = field(default_factory=ExtensionConfig)
    stability: StabilityConfig = field(default_factory=StabilityConfig)
    strike: StrikeConfig = field(default_factory=StrikeConfig)
    arbitration: ArbitrationConfig = field(default_factory=ArbitrationConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    scoring: ScoreConfig = field(default_factory=ScoreConfig)


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()
