"""
Core Backtesting Engine

Replays a price series day by day through a strategy with an
all-in / all-out position policy: a buy converts all cash to shares, a
sell converts all shares back to cash, each paying a flat fee.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
import logging

import pandas as pd

from stocksignal.config import settings
from stocksignal.core.exceptions import (
    ConfigurationError,
    InsufficientDataError,
    StockSignalError,
    TradingError,
)
from stocksignal.services.market_data.models import PriceRecord
from stocksignal.services.notification_service import TradeNotifier
from stocksignal.services.strategies.base import Strategy

logger = logging.getLogger(__name__)


@dataclass
class BacktestConfig:
    """Configuration for backtesting."""
    initial_capital: float = 10_000.0
    transaction_fee: float = 0.0  # flat fee per trade
    verbose: bool = False  # log every trade and the full trade log

    def __post_init__(self):
        if self.initial_capital <= 0:
            raise ConfigurationError(f"Initial capital must be positive (got {self.initial_capital}).")
        if self.transaction_fee < 0:
            raise ConfigurationError(f"Transaction fee must not be negative (got {self.transaction_fee}).")

    @classmethod
    def from_settings(cls) -> "BacktestConfig":
        return cls(
            initial_capital=settings.initial_capital,
            transaction_fee=settings.transaction_fee,
            verbose=settings.verbose,
        )


@dataclass
class TradeEvent:
    """One executed trade."""
    date: date
    action: str  # "BUY" or "SELL"
    price: float
    shares: float
    cash_after: float
    fee: float
    pnl: Optional[float] = None  # realised on SELL, gross of fees

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "action": self.action,
            "price": self.price,
            "shares": self.shares,
            "cash_after": self.cash_after,
            "fee": self.fee,
            "pnl": self.pnl,
        }


@dataclass
class PortfolioState:
    """Cash and share holdings during a run."""
    cash: float
    shares_held: float = 0.0
    entry_price: Optional[float] = None
    trade_log: List[str] = field(default_factory=list)
    trades: List[TradeEvent] = field(default_factory=list)
    total_fees: float = 0.0
    realized_pnl: float = 0.0

    def value(self, price: float) -> float:
        return self.cash + self.shares_held * price

    def unrealized_pnl(self, price: float) -> float:
        if self.shares_held <= 0 or self.entry_price is None:
            return 0.0
        return self.shares_held * (price - self.entry_price)


@dataclass
class BacktestSummary:
    initial_capital: float
    final_value: float
    return_pct: float
    trade_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial_capital": self.initial_capital,
            "final_value": self.final_value,
            "return_pct": self.return_pct,
            "trade_count": self.trade_count,
        }


@dataclass
class BacktestResult:
    """Complete backtest results."""
    strategy_name: str
    config: BacktestConfig
    start_date: date
    end_date: date
    summary: BacktestSummary
    trade_log: List[str]
    trades: List[TradeEvent]
    cash: float
    shares_held: float
    final_price: float
    total_fees: float
    realized_pnl: float
    unrealized_pnl: float
    equity_curve: pd.DataFrame

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary."""
        equity = self.equity_curve.reset_index()
        equity["date"] = pd.to_datetime(equity["date"]).dt.strftime("%Y-%m-%d")
        return {
            "strategy_name": self.strategy_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            **self.summary.to_dict(),
            "cash": self.cash,
            "shares_held": self.shares_held,
            "final_price": self.final_price,
            "total_fees": self.total_fees,
            "realized_pnl": self.realized_pnl,
            "unrealized_pnl": self.unrealized_pnl,
            "trade_log": list(self.trade_log),
            "trades": [t.to_dict() for t in self.trades],
            "equity_curve": equity.to_dict(orient="records"),
        }


class BacktestEngine:
    """
    Replays historical data through a strategy.

    The strategy is seeded with the first `lookback` records, then fed one
    record per day. Signals are read after each update.

    Example usage:
        strategy = TrendFollowingStrategy(sma_period=20)
        engine = BacktestEngine(strategy, records, BacktestConfig(initial_capital=10_000))
        result = engine.run()
    """

    def __init__(
        self,
        strategy: Strategy,
        historical_data: Sequence[PriceRecord],
        config: Optional[BacktestConfig] = None,
        notifier: Optional[TradeNotifier] = None,
    ):
        self.strategy = strategy
        self.historical_data = list(historical_data)
        self.config = config or BacktestConfig()
        self.notifier = notifier
        self.state = PortfolioState(cash=self.config.initial_capital)
        self._has_run = False

    def run(self) -> BacktestResult:
        """
        Run the backtest.

        Returns:
            BacktestResult with the summary, trade log and equity curve

        Raises:
            TradingError: the engine has already been run
            InsufficientDataError: fewer records than the strategy lookback
            DataError: the strategy could not evaluate a day
        """
        if self._has_run:
            raise TradingError("Backtest has already been run; create a new engine.")
        self._has_run = True

        data = self.historical_data
        lookback = self.strategy.get_lookback_period()
        if len(data) < lookback:
            raise InsufficientDataError(
                f"Insufficient historical data ({len(data)}) for {self.strategy.name}. "
                f"Required: {lookback}",
                available=len(data),
                required=lookback,
            )

        logger.info(
            f"Starting backtest: {self.strategy.name} from {data[0].date} to {data[-1].date} "
            f"with {len(data) - lookback} trading days after a {lookback}-day lookback"
        )

        self.strategy.load_history(data[:lookback])
        equity_rows = []

        for record in data[lookback:]:
            self.strategy.update_data([record])

            buy_signal = self.strategy.should_buy()
            sell_signal = self.strategy.should_sell()
            logger.debug(
                f"Day {record.date}: should_buy={buy_signal}, should_sell={sell_signal}, "
                f"cash={self.state.cash:.2f}, shares={self.state.shares_held:.2f}"
            )

            if buy_signal and self.state.cash > 0:
                self._buy(record)
            elif sell_signal and self.state.shares_held > 0:
                self._sell(record)

            equity_rows.append({
                "date": pd.Timestamp(record.date),
                "close": record.close,
                "cash": self.state.cash,
                "shares": self.state.shares_held,
                "equity": self.state.value(record.close),
            })

        final_price = data[-1].close
        final_value = self.state.value(final_price)
        summary = BacktestSummary(
            initial_capital=self.config.initial_capital,
            final_value=final_value,
            return_pct=(final_value - self.config.initial_capital) / self.config.initial_capital * 100.0,
            trade_count=len(self.state.trades),
        )
        self._log_summary(summary)

        equity_curve = pd.DataFrame(
            equity_rows,
            columns=["date", "close", "cash", "shares", "equity"],
        )
        equity_curve.set_index("date", inplace=True)

        return BacktestResult(
            strategy_name=self.strategy.name,
            config=self.config,
            start_date=data[0].date,
            end_date=data[-1].date,
            summary=summary,
            trade_log=list(self.state.trade_log),
            trades=list(self.state.trades),
            cash=self.state.cash,
            shares_held=self.state.shares_held,
            final_price=final_price,
            total_fees=self.state.total_fees,
            realized_pnl=self.state.realized_pnl,
            unrealized_pnl=self.state.unrealized_pnl(final_price),
            equity_curve=equity_curve,
        )

    def _buy(self, record: PriceRecord) -> None:
        """Convert all cash to shares at the closing price."""
        price = record.close
        fee = self.config.transaction_fee

        if price <= 0:
            logger.warning(f"Attempted to buy with zero or negative price on {record.date}")
            return
        if self.state.cash <= fee:
            logger.warning(
                f"Skipping buy on {record.date}: cash {self.state.cash:.2f} does not cover fee {fee:.2f}"
            )
            return

        shares = (self.state.cash - fee) / price
        self.state.shares_held = shares
        self.state.cash = 0.0
        self.state.entry_price = price
        self.state.total_fees += fee

        self._record_trade(
            f"BUY on {record.date} @ {price:.2f}. Shares acquired: {shares:.2f}",
            TradeEvent(date=record.date, action="BUY", price=price, shares=shares, cash_after=0.0, fee=fee),
        )

    def _sell(self, record: PriceRecord) -> None:
        """Convert all shares to cash at the closing price."""
        price = record.close
        fee = self.config.transaction_fee

        if price <= 0:
            logger.warning(f"Attempted to sell with zero or negative price on {record.date}")
            return

        shares = self.state.shares_held
        proceeds = shares * price
        if proceeds <= fee:
            logger.warning(
                f"Skipping sell on {record.date}: proceeds {proceeds:.2f} do not cover fee {fee:.2f}"
            )
            return

        pnl = self.state.unrealized_pnl(price)
        self.state.cash = proceeds - fee
        self.state.shares_held = 0.0
        self.state.entry_price = None
        self.state.total_fees += fee
        self.state.realized_pnl += pnl

        self._record_trade(
            f"SELL on {record.date} @ {price:.2f}. Cash received: ${self.state.cash:.2f}",
            TradeEvent(
                date=record.date,
                action="SELL",
                price=price,
                shares=shares,
                cash_after=self.state.cash,
                fee=fee,
                pnl=pnl,
            ),
        )

    def _record_trade(self, entry: str, event: TradeEvent) -> None:
        self.state.trade_log.append(entry)
        self.state.trades.append(event)
        if self.config.verbose:
            logger.info(entry, extra={"strategy": self.strategy.name})
        if self.notifier is not None:
            self.notifier.notify(entry)

    def _log_summary(self, summary: BacktestSummary) -> None:
        logger.info("---------- Backtest Summary ----------")
        logger.info(f"Strategy:        {self.strategy.name}")
        logger.info(f"Initial Capital: ${summary.initial_capital:.2f}")
        logger.info(f"Final Value:     ${summary.final_value:.2f}")
        logger.info(f"Return:          {summary.return_pct:.2f}%")
        logger.info(f"Trades executed: {summary.trade_count}")
        logger.info("--------------------------------------")

        if self.config.verbose:
            logger.info("Trade Log:")
            for entry in self.state.trade_log:
                logger.info(entry)


def compare_strategies(
    strategies: Sequence[Strategy],
    data: Sequence[PriceRecord],
    config: Optional[BacktestConfig] = None,
    notifier: Optional[TradeNotifier] = None,
) -> Dict[str, Optional[BacktestResult]]:
    """
    Run several strategies on the same data, one engine each.

    Strategy instances must not be shared; each run reseeds its strategy.
    Every engine forwards its trades to the same notifier.

    Returns:
        Dictionary of strategy name -> BacktestResult (None when the run failed)
    """
    results: Dict[str, Optional[BacktestResult]] = {}

    for strategy in strategies:
        try:
            results[strategy.name] = BacktestEngine(strategy, data, config, notifier=notifier).run()
        except StockSignalError as e:
            logger.error(f"Error running strategy {strategy.name}: {e}")
            results[strategy.name] = None

    return results


def rank_results(
    results: Dict[str, Optional[BacktestResult]],
) -> List[tuple]:
    """(strategy_name, return_pct) sorted best first, skipping failed runs."""
    rankings = [
        (name, result.summary.return_pct)
        for name, result in results.items()
        if result is not None
    ]
    return sorted(rankings, key=lambda x: x[1], reverse=True)
