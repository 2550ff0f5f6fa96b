"""Tests for SMA, EMA, MACD and RSI."""

import pytest

from stocksignal.core.exceptions import ConfigurationError, InsufficientDataError
from stocksignal.services.indicators.technical import (
    MACD,
    RSI,
    SMA,
    ema_series,
    macd_min_length,
    macd_series,
    rsi,
    sma,
)
from tests.conftest import make_records


class TestSMA:
    def test_constant_series(self):
        assert sma(make_records([5.0] * 10), 3) == pytest.approx(5.0)

    def test_uses_last_window(self):
        assert SMA(3).calculate(make_records([1, 2, 3, 4, 5])) == pytest.approx(4.0)

    def test_window_equal_to_length(self):
        assert sma(make_records([2, 4, 6]), 3) == pytest.approx(4.0)

    def test_too_short(self):
        with pytest.raises(InsufficientDataError) as exc:
            sma(make_records([1, 2]), 3)
        assert exc.value.available == 2
        assert exc.value.required == 3

    def test_non_positive_window(self):
        with pytest.raises(ConfigurationError):
            SMA(0)
        with pytest.raises(ConfigurationError):
            sma(make_records([1, 2, 3]), -1)


class TestEMA:
    def test_seeded_with_simple_mean(self):
        # seed mean(1,2,3)=2, multiplier 0.5
        assert ema_series([1, 2, 3, 4, 5], 3) == pytest.approx([2.0, 3.0, 4.0])

    def test_length(self):
        assert len(ema_series(list(range(1, 21)), 5)) == 16

    def test_constant_series(self):
        assert ema_series([7.0] * 10, 4) == pytest.approx([7.0] * 7)

    def test_too_short(self):
        with pytest.raises(InsufficientDataError):
            ema_series([1.0, 2.0], 3)


class TestMACD:
    def test_constant_series_is_flat(self):
        line, signal, histogram = MACD().calculate(make_records([10.0] * 40), include_signal=True)
        assert line == pytest.approx(0.0, abs=1e-12)
        assert signal == pytest.approx(0.0, abs=1e-12)
        assert histogram == pytest.approx(0.0, abs=1e-12)

    def test_line_only(self):
        assert MACD(3, 6, 2).calculate(make_records([10.0] * 6)) == pytest.approx(0.0, abs=1e-12)

    def test_series_alignment(self):
        values = [float(v) for v in range(1, 31)]
        result = macd_series(values, 3, 6, 4)
        assert len(result.line) == 30 - 6 + 1
        assert len(result.signal) == len(result.line) - 4 + 1
        assert len(result.histogram) == len(result.signal)
        assert result.histogram[-1] == pytest.approx(result.line[-1] - result.signal[-1])

    def test_rising_series_has_positive_line(self):
        values = [float(v) for v in range(1, 41)]
        assert macd_series(values, 12, 26, 9).line[-1] > 0

    def test_min_length(self):
        assert macd_min_length(26, 9) == 34
        assert macd_min_length(26, 9, with_previous=True) == 35
        assert MACD().min_length == 34

    def test_too_short_for_signal(self):
        with pytest.raises(InsufficientDataError) as exc:
            MACD().calculate(make_records([10.0] * 33), include_signal=True)
        assert exc.value.required == 34

    def test_short_must_be_below_long(self):
        with pytest.raises(ConfigurationError):
            MACD(26, 12, 9)
        with pytest.raises(ConfigurationError):
            MACD(12, 12, 9)


class TestRSI:
    def test_strictly_increasing_is_100(self):
        assert RSI(14).calculate(make_records(range(1, 20))) == pytest.approx(100.0)

    def test_strictly_decreasing_is_0(self):
        assert rsi(make_records(range(20, 1, -1)), 14) == pytest.approx(0.0)

    def test_flat_series_is_0(self):
        assert rsi(make_records([5.0] * 16), 14) == pytest.approx(0.0)

    def test_wilder_smoothing(self):
        # deltas -1,-1,+2,+2 -> avg gain 1.5, avg loss 0.25 -> RS 6
        assert rsi(make_records([8, 7, 6, 8, 10]), 2) == pytest.approx(100 - 100 / 7)

    def test_within_bounds(self):
        value = rsi(make_records([10, 11, 10.5, 12, 11, 13, 12.5, 12, 14, 13]), 5)
        assert 0.0 <= value <= 100.0

    def test_needs_period_plus_one(self):
        with pytest.raises(InsufficientDataError) as exc:
            rsi(make_records(range(1, 15)), 14)
        assert exc.value.required == 15

    def test_non_positive_period(self):
        with pytest.raises(ConfigurationError):
            RSI(0)
