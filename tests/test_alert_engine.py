"""
Tests for threshold evaluation and per-symbol signal state.

Run with: pytest tests/test_alert_engine.py -v
"""
import threading

import pytest

from crypto_rsi_bot.cogs.alert_engine import SignalKind, SignalStateTracker, evaluate_signal
from crypto_rsi_bot.repositories.settings_store import RunConfig


@pytest.fixture
def tracker():
    return SignalStateTracker()


class TestEvaluateSignal:
    """Tests for mapping RSI values to signal kinds."""

    def test_overbought_is_short(self):
        config = RunConfig(overbought=80, oversold=20)
        assert evaluate_signal(85.0, config) is SignalKind.SHORT

    def test_oversold_is_long(self):
        config = RunConfig(overbought=80, oversold=20)
        assert evaluate_signal(15.0, config) is SignalKind.LONG

    def test_thresholds_are_inclusive(self):
        config = RunConfig(overbought=80, oversold=20)
        assert evaluate_signal(80.0, config) is SignalKind.SHORT
        assert evaluate_signal(20.0, config) is SignalKind.LONG

    def test_neutral_zone(self):
        config = RunConfig(overbought=80, oversold=20)
        assert evaluate_signal(50.0, config) is None
        assert evaluate_signal(79.99, config) is None
        assert evaluate_signal(20.01, config) is None

    def test_kind_compares_equal_to_string(self):
        assert SignalKind.SHORT == "SHORT"
        assert SignalKind.LONG == "LONG"


class TestSignalStateTracker:
    """Tests for duplicate suppression and reset."""

    def test_first_signal_is_emitted(self, tracker):
        assert tracker.should_emit("BTCUSDT", "SHORT") is True
        assert tracker.last_signal("BTCUSDT") == "SHORT"

    def test_repeated_signal_is_suppressed(self, tracker):
        assert tracker.should_emit("BTCUSDT", "SHORT") is True
        assert tracker.should_emit("BTCUSDT", "SHORT") is False
        assert tracker.should_emit("BTCUSDT", "SHORT") is False

    def test_kind_change_is_emitted(self, tracker):
        tracker.should_emit("BTCUSDT", "SHORT")
        assert tracker.should_emit("BTCUSDT", "LONG") is True
        assert tracker.should_emit("BTCUSDT", "SHORT") is True

    def test_clear_rearms_same_kind(self, tracker):
        tracker.should_emit("BTCUSDT", "SHORT")
        tracker.clear("BTCUSDT")

        assert tracker.last_signal("BTCUSDT") is None
        assert tracker.should_emit("BTCUSDT", "SHORT") is True

    def test_symbols_are_independent(self, tracker):
        tracker.should_emit("BTCUSDT", "SHORT")
        assert tracker.should_emit("ETHUSDT", "SHORT") is True

        tracker.clear("ETHUSDT")
        assert tracker.should_emit("BTCUSDT", "SHORT") is False

    def test_enum_and_string_kinds_are_the_same(self, tracker):
        assert tracker.should_emit("BTCUSDT", SignalKind.LONG) is True
        assert tracker.should_emit("BTCUSDT", "LONG") is False

    def test_snapshot_skips_neutral_and_is_a_copy(self, tracker):
        tracker.should_emit("BTCUSDT", "SHORT")
        tracker.should_emit("ETHUSDT", "LONG")
        tracker.clear("ETHUSDT")

        snapshot = tracker.snapshot()
        snapshot["XRPUSDT"] = "LONG"

        assert tracker.snapshot() == {"BTCUSDT": "SHORT"}

    def test_concurrent_emit_fires_once(self, tracker):
        """Only one of many threads racing on the same kind wins."""
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(tracker.should_emit("BTCUSDT", "SHORT"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
