"""Tests for P/E ratio and earnings growth."""

import math

import pytest

from stocksignal.core.exceptions import ConfigurationError, DataError
from stocksignal.services.indicators.fundamental import (
    EarningsGrowth,
    PERatio,
    earnings_growth,
    pe_ratio,
)


class TestPERatio:
    def test_basic(self):
        assert PERatio(150.0, 10.0).calculate() == pytest.approx(15.0)

    def test_zero_eps_is_infinite(self):
        assert math.isinf(pe_ratio(100.0, 0.0))
        assert PERatio(10.0, 0.0).calculate() == math.inf

    def test_negative_eps_gives_negative_ratio(self):
        assert pe_ratio(100.0, -5.0) == pytest.approx(-20.0)

    def test_non_positive_price(self):
        with pytest.raises(ConfigurationError):
            PERatio(0.0, 5.0)
        with pytest.raises(ConfigurationError):
            pe_ratio(-1.0, 5.0)


class TestEarningsGrowth:
    def test_growth(self):
        assert EarningsGrowth(120.0, 100.0).calculate_growth() == pytest.approx(20.0)

    def test_decline(self):
        assert earnings_growth(80.0, 100.0) == pytest.approx(-20.0)

    def test_zero_previous(self):
        with pytest.raises(DataError):
            EarningsGrowth(5.0, 0.0).calculate_growth()

    def test_negative_inputs(self):
        with pytest.raises(DataError):
            EarningsGrowth(-1.0, 2.0)
        with pytest.raises(DataError):
            EarningsGrowth(1.0, -2.0)
        with pytest.raises(DataError):
            earnings_growth(-1.0, 2.0)
