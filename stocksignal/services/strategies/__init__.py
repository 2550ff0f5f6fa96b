"""
Signal strategies
"""

from stocksignal.services.strategies.base import Strategy
from stocksignal.services.strategies.trend_following import TrendFollowingStrategy, TrendFollowingState
from stocksignal.services.strategies.golden_cross import GoldenCrossStrategy, GoldenCrossState
from stocksignal.services.strategies.value_investing import ValueInvestingStrategy, ValueInvestingState

__all__ = [
    "Strategy",
    "TrendFollowingStrategy",
    "TrendFollowingState",
    "GoldenCrossStrategy",
    "GoldenCrossState",
    "ValueInvestingStrategy",
    "ValueInvestingState",
]
