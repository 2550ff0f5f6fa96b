"""
Indicator library
"""

from stocksignal.services.indicators.technical import (
    SMA,
    MACD,
    RSI,
    MACDSeries,
    sma,
    ema_series,
    macd_series,
    rsi,
)
from stocksignal.services.indicators.fundamental import (
    PERatio,
    EarningsGrowth,
    pe_ratio,
    earnings_growth,
)

__all__ = [
    "SMA",
    "MACD",
    "RSI",
    "MACDSeries",
    "sma",
    "ema_series",
    "macd_series",
    "rsi",
    "PERatio",
    "EarningsGrowth",
    "pe_ratio",
    "earnings_growth",
]
