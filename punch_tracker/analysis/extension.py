"""Adaptive rest / max-reach estimation and forward-motion classification.

Distances are measured from the hand to its own shoulder and compared against
the shoulder span, so every threshold is independent of image resolution and
of how far the user stands from the camera.

The tracker learns two distances per limb:

- ``rest_extension``: where the hand sits in guard. It snaps quickly to a
  smaller distance when the hand retracts past it and otherwise drifts slowly,
  so a burst of punches does not drag it outwards.
- ``max_extension``: the fullest reach seen. It grows while the hand moves
  outwards past it and decays slowly when the user stops reaching fully.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config.engine_config import ExtensionConfig
from .limb import LimbState


@dataclass(frozen=True)
class ExtensionSample:
    """Kinematics of one limb on one frame."""

    dist_to_shoulder: float   # px
    speed: float              # raw frame-to-frame speed (span/s)
    speed_forward: float      # outward component, floored at 0 (span/s)
    delta_dist: float         # change of distance to shoulder (px)
    forward_gate: float       # px
    moving_forward: bool
    moving_backward: bool


class ExtensionTracker:
    """Per-limb kinematics and adaptive range estimation."""

    def __init__(self, config: Optional[ExtensionConfig] = None):
        self.config = config or ExtensionConfig()

    def measure(
        self,
        limb: LimbState,
        filtered: np.ndarray,
        previous: np.ndarray,
        shoulder: np.ndarray,
        norm: float,
        dt: float,
    ) -> ExtensionSample:
        """Classify the motion from ``previous`` to ``filtered``.

        Args:
            limb: Limb state (read only here)
            filtered: (2,) current filtered hand position
            previous: (2,) previous filtered hand position
            shoulder: (2,) shoulder of the same side
            norm: Shoulder span in px (>= 1)
            dt: Frame interval in seconds (> 0)
        """
        cfg = self.config
        dist = float(np.linalg.norm(filtered - shoulder))

        step = filtered - previous
        travel = float(np.linalg.norm(step))
        outward = filtered - shoulder
        outward_len = float(np.linalg.norm(outward)) or 1.0
        proj = float(np.dot(step, outward / outward_len))

        speed = (travel / norm) / dt
        speed_forward = (max(0.0, proj) / norm) / dt

        rest = limb.rest_extension if limb.rest_extension is not None else dist
        max_ext = limb.max_extension if limb.max_extension is not None else dist

        delta = dist - limb.dist_to_shoulder if limb.dist_to_shoulder is not None else 0.0
        forward_gate = max(norm * cfg.forward_gate_span_frac, (max_ext - rest) * cfg.forward_gate_range_frac)
        floor = cfg.forward_speed_floor_ranged if limb.range_norm else cfg.forward_speed_floor

        moving_forward = speed_forward > floor and delta > forward_gate
        moving_backward = delta < -forward_gate and speed_forward < cfg.backward_speed_max

        return ExtensionSample(
            dist_to_shoulder=dist,
            speed=speed,
            speed_forward=speed_forward,
            delta_dist=delta,
            forward_gate=forward_gate,
            moving_forward=moving_forward,
            moving_backward=moving_backward,
        )

    def learn(self, limb: LimbState, sample: ExtensionSample, norm: float) -> None:
        """Update noise, rest and max extension from a trusted sample."""
        cfg = self.config
        dist = sample.dist_to_shoulder

        noise = limb.noise_estimate if limb.noise_estimate is not None else cfg.noise_seed
        noise = noise * (1 - cfg.noise_rate) + sample.speed * cfg.noise_rate
        limb.noise_estimate = noise

        rest = limb.rest_extension if limb.rest_extension is not None else dist
        max_ext = limb.max_extension if limb.max_extension is not None else dist

        noise_floor = max(cfg.forward_speed_floor, noise * cfg.noise_floor_gain)
        if not sample.moving_forward or sample.speed_forward < noise_floor or dist < rest:
            rate = cfg.rest_rate_retract if dist < rest else cfg.rest_rate_drift
            rest += (dist - rest) * rate

        if sample.moving_forward and dist > max_ext:
            max_ext += (dist - max_ext) * cfg.max_rate_grow
        if not sample.moving_forward:
            max_ext -= (max_ext - dist) * cfg.max_rate_decay
        max_ext = max(max_ext, rest + norm * cfg.min_range_frac)

        limb.rest_extension = rest
        limb.max_extension = max_ext
        limb.range_norm = limb.extension_range(norm, cfg.range_floor_frac) / norm
