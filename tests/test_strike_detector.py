from __future__ import annotations

import pytest

from punch_tracker.analysis.extension import ExtensionSample
from punch_tracker.analysis.limb import LimbState, StrikeState
from punch_tracker.analysis.strike import (
    StrikeDetector,
    REASON_ACTIVE,
    REASON_COOLDOWN,
    REASON_NEED_REACH,
    REASON_NOT_FORWARD,
    REASON_READY,
)

NORM = 100.0


def _limb(rest: float = 30.0, max_ext: float = 40.0) -> LimbState:
    return LimbState("right", rest_extension=rest, max_extension=max_ext, range_norm=(max_ext - rest) / NORM)


def _sample(
    dist: float,
    speed_forward: float = 0.0,
    forward: bool = False,
    backward: bool = False,
) -> ExtensionSample:
    return ExtensionSample(
        dist_to_shoulder=dist,
        speed=speed_forward,
        speed_forward=speed_forward,
        delta_dist=0.0,
        forward_gate=0.3,
        moving_forward=forward,
        moving_backward=backward,
    )


class TestThresholds:
    def test_large_range_uses_large_trigger_gain(self):
        th = StrikeDetector().thresholds(_limb(30.0, 40.0), NORM)

        assert th.range_norm == pytest.approx(0.10)
        assert th.trigger_distance == pytest.approx(36.5)
        assert th.reset_distance == pytest.approx(32.5)
        assert th.speed_threshold == pytest.approx(0.62)
        assert th.range_enough

    def test_small_range_is_not_enough(self):
        th = StrikeDetector().thresholds(_limb(30.0, 34.0), NORM)

        assert th.range_norm == pytest.approx(0.04)
        assert th.trigger_distance == pytest.approx(32.0)
        assert th.speed_threshold == pytest.approx(0.6)
        assert not th.range_enough

    def test_power_clamps_reach(self):
        det = StrikeDetector()

        assert det.power(2.0, 20.0, NORM) == pytest.approx(0.8)
        assert det.power(2.0, 80.0, NORM) == pytest.approx(1.6)
        assert det.power(2.0, 300.0, NORM) == pytest.approx(3.2)


class TestStateMachine:
    def test_fast_reach_fires_and_arms_cooldown(self):
        det = StrikeDetector()
        limb = _limb()

        event, diag = det.update(limb, _sample(40.0, 2.0, forward=True), 1.0, NORM)

        assert event is not None
        assert event.side == "right"
        assert event.speed == pytest.approx(2.0)
        assert event.power == pytest.approx(0.8)
        assert event.timestamp == 1.0
        assert limb.state is StrikeState.ACTIVE
        assert limb.cooldown_until == pytest.approx(1.25)
        assert diag.completion == pytest.approx(1.0)
        assert diag.reasons == [REASON_READY]

    def test_active_limb_does_not_fire_again(self):
        det = StrikeDetector()
        limb = _limb()
        det.update(limb, _sample(40.0, 2.0, forward=True), 1.0, NORM)

        event, diag = det.update(limb, _sample(45.0, 2.0, forward=True), 1.5, NORM)

        assert event is None
        assert diag.active
        assert diag.reasons == [REASON_ACTIVE]

    def test_retraction_releases_without_event(self):
        det = StrikeDetector()
        limb = _limb()
        det.update(limb, _sample(40.0, 2.0, forward=True), 1.0, NORM)

        event, _ = det.update(limb, _sample(38.0, backward=True), 1.1, NORM)

        assert event is None
        assert limb.state is StrikeState.IDLE

    def test_returning_inside_reset_distance_releases(self):
        det = StrikeDetector()
        limb = _limb()
        det.update(limb, _sample(40.0, 2.0, forward=True), 1.0, NORM)

        det.update(limb, _sample(32.0), 1.1, NORM)

        assert limb.state is StrikeState.IDLE

    def test_cooldown_blocks_then_expires(self):
        det = StrikeDetector()
        limb = _limb()
        det.update(limb, _sample(40.0, 2.0, forward=True), 1.0, NORM)
        det.update(limb, _sample(31.0, backward=True), 1.05, NORM)

        event, diag = det.update(limb, _sample(40.0, 2.0, forward=True), 1.2, NORM)
        assert event is None
        assert REASON_COOLDOWN in diag.reasons

        event, _ = det.update(limb, _sample(40.0, 2.0, forward=True), 1.3, NORM)
        assert event is not None

    def test_idle_reasons_list_every_failed_gate(self):
        det = StrikeDetector()
        limb = _limb(30.0, 34.0)

        event, diag = det.update(limb, _sample(31.0, 0.3), 1.0, NORM)

        assert event is None
        assert diag.reasons == [
            "range 4% < 6%",
            REASON_NOT_FORWARD,
            "speed 0.30 < 0.60",
            REASON_NEED_REACH,
        ]
        assert diag.status.startswith("range 4%")

    def test_completion_tracks_progress_to_trigger(self):
        det = StrikeDetector()
        limb = _limb()

        _, diag = det.update(limb, _sample(33.25, 0.5, forward=True), 1.0, NORM)

        assert diag.completion == pytest.approx(0.5)
        assert diag.trigger_norm == pytest.approx(0.365)
        assert diag.rest_norm == pytest.approx(0.30)

    def test_completion_zero_when_idle_and_still(self):
        det = StrikeDetector()
        limb = _limb()

        _, diag = det.update(limb, _sample(35.0, 0.05), 1.0, NORM)

        assert diag.completion == 0.0
