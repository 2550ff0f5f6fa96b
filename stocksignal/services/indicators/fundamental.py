"""
Fundamental indicators: P/E ratio and earnings growth.
"""

import math

from stocksignal.core.exceptions import ConfigurationError, DataError


def pe_ratio(price: float, eps: float) -> float:
    """Price divided by earnings per share.

    Zero EPS yields +inf; negative EPS yields a negative ratio.
    """
    if not price > 0:
        raise ConfigurationError("Current price must be greater than zero for PE Ratio calculation.")
    if eps == 0:
        return math.inf
    return price / eps


def earnings_growth(current: float, previous: float) -> float:
    """Percentage change from `previous` to `current` earnings."""
    if current < 0 or previous < 0:
        raise DataError("Earnings must not be negative when calculating growth.")
    if previous == 0:
        raise DataError("Previous earnings cannot be zero when calculating growth.")
    return (current - previous) / previous * 100


class PERatio:
    def __init__(self, price: float, eps: float):
        if not price > 0:
            raise ConfigurationError("Current price must be greater than zero for PE Ratio calculation.")
        self.price = price
        self.eps = eps

    def calculate(self) -> float:
        return pe_ratio(self.price, self.eps)


class EarningsGrowth:
    def __init__(self, current: float, previous: float):
        if current < 0:
            raise DataError("Current earnings must not be negative.")
        if previous < 0:
            raise DataError("Previous earnings must not be negative.")
        self.current = current
        self.previous = previous

    def calculate_growth(self) -> float:
        return earnings_growth(self.current, self.previous)
