from __future__ import annotations

import pytest

from punch_tracker.analysis.scoring import (
    LimbStats,
    ScoreEngine,
    ScoreHistory,
    percentile,
    round_half_up,
)
from punch_tracker.config.engine_config import ScoreConfig
from punch_tracker.storage.history_store import HistoryRecord, InMemoryHistoryStore


class _Clock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestPercentile:
    def test_empty_is_none(self):
        assert percentile([], 0.9) is None

    def test_nearest_rank_rounds_half_up(self):
        assert percentile([0.4, 0.6, 0.9], 0.9) == pytest.approx(0.9)
        # 0.5 * (2 - 1) = 0.5 -> index 1
        assert percentile([1.0, 2.0], 0.5) == pytest.approx(2.0)
        assert percentile([5.0, 1.0, 3.0, 2.0, 4.0], 0.9) == pytest.approx(5.0)

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(0.0) == 0


class TestScoreHistory:
    def test_fifo_eviction_at_capacity(self):
        history = ScoreHistory(capacity=50)
        for v in range(60):
            history.push(float(v))

        assert len(history) == 50
        assert history.values()[0] == 10.0
        assert history.values()[-1] == 59.0

    def test_recent(self):
        history = ScoreHistory(capacity=5, values=[1.0, 2.0, 3.0])

        assert history.recent(2) == [2.0, 3.0]
        assert history.recent(10) == [1.0, 2.0, 3.0]
        assert history.recent(0) == []


class TestScoreEngine:
    def test_first_strike_scores_100(self):
        engine = ScoreEngine()

        assert engine.record("left", 1.3) == 100
        assert engine.baseline("left") == pytest.approx(1.3)
        assert engine.baseline("right") == 0.0

    def test_percent_without_history_uses_power_itself(self):
        engine = ScoreEngine()

        assert engine.percent("right", 2.0) == 100

    def test_percent_relative_to_baseline(self):
        engine = ScoreEngine()
        engine.histories["left"].extend([0.4, 0.6, 0.9])

        assert engine.percent("left", 0.45) == 50

    def test_percent_is_capped(self):
        engine = ScoreEngine()
        engine.histories["left"].extend([1.0, 1.0, 1.0])

        assert engine.percent("left", 2.0) == 150
        assert engine.percent("left", 0.0) == 0

    def test_average_percent_over_recent_window(self):
        engine = ScoreEngine()
        engine.histories["left"].extend([1.0, 1.0, 1.0, 1.0, 2.0])

        # baseline 2.0, mean 1.2
        assert engine.average_percent("left") == 60
        assert engine.average_percent("right") == 0

    def test_record_saves_both_limbs(self):
        store = InMemoryHistoryStore()
        engine = ScoreEngine(store=store, clock=_Clock(123.0))

        engine.record("right", 0.7)

        assert store.save_count == 1
        assert store.record == HistoryRecord(saved_at=123.0, left=[], right=[0.7])

    def test_fill_stats(self):
        engine = ScoreEngine()
        engine.histories["right"].extend([0.5, 1.0])
        stats = LimbStats(total=2)

        engine.fill_stats("right", stats)

        assert stats.baseline == pytest.approx(1.0)
        assert stats.average_percent == 75
        assert stats.total == 2


class TestRestore:
    def _store(self) -> InMemoryHistoryStore:
        return InMemoryHistoryStore(HistoryRecord(saved_at=1000.0, left=[0.4, 0.6, 0.9]))

    def test_reloads_within_expiry(self):
        engine = ScoreEngine(store=self._store(), clock=_Clock(1000.0 + 10 * 60))

        assert engine.restore()
        assert engine.history("left") == [0.4, 0.6, 0.9]
        assert engine.history("right") == []

    def test_expired_record_is_discarded(self):
        engine = ScoreEngine(store=self._store(), clock=_Clock(1000.0 + 31 * 60))

        assert not engine.restore()
        assert engine.history("left") == []

    def test_restore_without_store(self):
        assert not ScoreEngine().restore()

    def test_restore_truncates_to_capacity(self):
        store = InMemoryHistoryStore(HistoryRecord(saved_at=0.0, right=[float(v) for v in range(8)]))
        engine = ScoreEngine(ScoreConfig(history_size=5), store=store, clock=_Clock(1.0))

        engine.restore()

        assert engine.history("right") == [3.0, 4.0, 5.0, 6.0, 7.0]
