"""
Backtesting Engine for Stock Signal

Replays historical daily data through a signal strategy and tracks an
all-in / all-out portfolio.
"""

from stocksignal.services.backtesting.engine import (
    BacktestConfig,
    BacktestEngine,
    BacktestResult,
    BacktestSummary,
    PortfolioState,
    TradeEvent,
    compare_strategies,
    rank_results,
)

__all__ = [
    "BacktestConfig",
    "BacktestEngine",
    "BacktestResult",
    "BacktestSummary",
    "PortfolioState",
    "TradeEvent",
    "compare_strategies",
    "rank_results",
]
