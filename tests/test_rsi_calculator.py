"""
Tests for the local RSI calculation.

Run with: pytest tests/test_rsi_calculator.py -v
"""
import pytest

from crypto_rsi_bot.services.market_data.rsi_calculator import calculate_rsi


class TestInsufficientData:
    """Series shorter than period + 1 produce no value."""

    @pytest.mark.parametrize("length", [0, 1, 13, 14])
    def test_short_series_returns_none(self, length):
        closes = [100.0 + i for i in range(length)]
        assert calculate_rsi(closes, 14) is None

    def test_exactly_period_plus_one_is_enough(self):
        closes = [100.0 + i for i in range(15)]
        assert calculate_rsi(closes, 14) is not None

    def test_invalid_period_raises(self):
        with pytest.raises(ValueError):
            calculate_rsi([1.0, 2.0, 3.0], 0)


class TestRSIValues:
    """Known values of the simple-average RSI."""

    def test_strictly_increasing_is_100(self):
        closes = [float(i) for i in range(1, 16)]
        assert calculate_rsi(closes, 14) == 100.0

    def test_strictly_decreasing_is_0(self):
        closes = [float(i) for i in range(15, 0, -1)]
        assert calculate_rsi(closes, 14) == 0.0

    def test_flat_series_is_100(self):
        """No losses at all counts as maximal strength."""
        assert calculate_rsi([5.0] * 15, 14) == 100.0

    def test_rise_then_fall_reference_value(self):
        """4 up-steps of 1 then 10 down-steps of 1 over period 14."""
        closes = [10, 11, 12, 13, 14, 13, 12, 11, 10, 9, 8, 7, 6, 5, 4]
        avg_gain = 4 / 14
        avg_loss = 10 / 14
        expected = 100 - 100 / (1 + avg_gain / avg_loss)

        result = calculate_rsi(closes, 14)

        assert result == pytest.approx(expected, abs=1e-9)
        assert result == pytest.approx(28.5714285714, abs=1e-6)

    def test_only_first_period_changes_are_used(self):
        """Prices after index `period` do not affect the value."""
        base = [float(i) for i in range(1, 16)]
        with_tail = base + [1.0, 0.5, 0.1]

        assert calculate_rsi(with_tail, 14) == calculate_rsi(base, 14) == 100.0

    def test_order_matters(self):
        closes = [1.0, 2.0, 4.0, 3.0]
        forward = calculate_rsi(closes, 3)
        backward = calculate_rsi(list(reversed(closes)), 3)

        # gains 1 + 2, loss 1 -> RS 3 -> 75
        assert forward == pytest.approx(75.0)
        assert backward == pytest.approx(25.0)

    def test_result_in_bounds(self):
        closes = [10.0, 10.5, 9.8, 10.2, 10.1, 11.0, 10.7, 10.9]
        value = calculate_rsi(closes, 7)
        assert 0.0 <= value <= 100.0
