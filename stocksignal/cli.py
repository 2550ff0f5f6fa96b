"""
Command line entry point.

    stocksignal backtest --csv prices.csv --strategy trend --sma-period 20
    stocksignal backtest --symbol AAPL --points 300 --strategy golden-cross --average ema
    stocksignal compare --csv prices.csv
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional, Sequence

from stocksignal.config import settings
from stocksignal.core.constants import (
    DEFAULT_LONG_PERIOD,
    DEFAULT_MACD_FAST,
    DEFAULT_MACD_SIGNAL,
    DEFAULT_MACD_SLOW,
    DEFAULT_MAX_PE_RATIO,
    DEFAULT_MIN_EARNINGS_GROWTH,
    DEFAULT_RSI_BUY_THRESHOLD,
    DEFAULT_RSI_SELL_THRESHOLD,
    DEFAULT_SHORT_PERIOD,
    DEFAULT_SMA_PERIOD,
)
from stocksignal.core.exceptions import StockSignalError
from stocksignal.core.logging_config import configure_logging
from stocksignal.services.backtesting import (
    BacktestConfig,
    BacktestEngine,
    BacktestResult,
    compare_strategies,
    rank_results,
)
from stocksignal.services.market_data import PriceRecord, load_csv
from stocksignal.services.market_data.alpha_vantage import AlphaVantageClient
from stocksignal.services.notification_service import build_notifier
from stocksignal.services.strategies import (
    GoldenCrossStrategy,
    Strategy,
    TrendFollowingStrategy,
    ValueInvestingStrategy,
)

logger = logging.getLogger(__name__)

STRATEGY_CHOICES = ("trend", "golden-cross", "value")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=str, help="CSV file with date,open,high,low,close,volume columns")
    source.add_argument("--symbol", type=str, help="Ticker to fetch from Alpha Vantage (e.g. AAPL)")
    parser.add_argument("--points", type=int, default=250, help="Trading days to fetch with --symbol")

    parser.add_argument("--capital", type=float, default=settings.initial_capital, help="Initial capital")
    parser.add_argument("--fee", type=float, default=settings.transaction_fee, help="Flat fee per trade")
    parser.add_argument("--history-buffer", type=int, default=settings.history_buffer,
                        help="Records retained beyond the lookback")
    parser.add_argument("--verbose", action="store_true", default=settings.verbose, help="Log every trade")
    parser.add_argument("--json-logs", action="store_true", default=settings.log_json, help="JSON log lines")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--notify", action="store_true", help="Send trades to the configured Discord webhook")

    trend = parser.add_argument_group("trend following")
    trend.add_argument("--sma-period", type=int, default=DEFAULT_SMA_PERIOD)
    trend.add_argument("--macd-fast", type=int, default=DEFAULT_MACD_FAST)
    trend.add_argument("--macd-slow", type=int, default=DEFAULT_MACD_SLOW)
    trend.add_argument("--macd-signal", type=int, default=DEFAULT_MACD_SIGNAL)

    cross = parser.add_argument_group("golden cross")
    cross.add_argument("--short-period", type=int, default=DEFAULT_SHORT_PERIOD)
    cross.add_argument("--long-period", type=int, default=DEFAULT_LONG_PERIOD)
    cross.add_argument("--average", choices=("sma", "ema"), default="sma")
    cross.add_argument("--rsi-period", type=int, default=None, help="Enable RSI confirmation")
    cross.add_argument("--rsi-buy", type=float, default=DEFAULT_RSI_BUY_THRESHOLD)
    cross.add_argument("--rsi-sell", type=float, default=DEFAULT_RSI_SELL_THRESHOLD)

    value = parser.add_argument_group("value investing")
    value.add_argument("--max-pe", type=float, default=DEFAULT_MAX_PE_RATIO)
    value.add_argument("--min-growth", type=float, default=DEFAULT_MIN_EARNINGS_GROWTH)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stocksignal",
        description="Backtest technical and fundamental stock signal strategies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    backtest = subparsers.add_parser("backtest", help="Run one strategy")
    backtest.add_argument("--strategy", choices=STRATEGY_CHOICES, required=True)
    _add_common_arguments(backtest)

    compare = subparsers.add_parser("compare", help="Run all strategies on the same data")
    _add_common_arguments(compare)

    return parser


def build_strategy(name: str, args: argparse.Namespace) -> Strategy:
    """Create a fresh strategy instance from parsed options."""
    if name == "trend":
        return TrendFollowingStrategy(
            sma_period=args.sma_period,
            macd_fast_period=args.macd_fast,
            macd_slow_period=args.macd_slow,
            macd_signal_period=args.macd_signal,
            history_buffer=args.history_buffer,
        )
    if name == "golden-cross":
        return GoldenCrossStrategy(
            short_period=args.short_period,
            long_period=args.long_period,
            average=args.average,
            rsi_period=args.rsi_period,
            rsi_buy_threshold=args.rsi_buy,
            rsi_sell_threshold=args.rsi_sell,
            history_buffer=args.history_buffer,
        )
    if name == "value":
        return ValueInvestingStrategy(
            max_pe_ratio=args.max_pe,
            min_earnings_growth=args.min_growth,
            history_buffer=args.history_buffer,
        )
    raise ValueError(f"Unknown strategy: {name}")


def load_data(args: argparse.Namespace, include_eps: bool) -> List[PriceRecord]:
    if args.csv:
        return load_csv(args.csv)

    client = AlphaVantageClient()
    return asyncio.run(
        client.fetch_daily_series(args.symbol, args.points, include_eps=include_eps)
    )


def _print_result(result: BacktestResult) -> None:
    summary = result.summary
    print(f"Strategy:        {result.strategy_name}")
    print(f"Period:          {result.start_date} -> {result.end_date}")
    print(f"Initial Capital: ${summary.initial_capital:.2f}")
    print(f"Final Value:     ${summary.final_value:.2f}")
    print(f"Return:          {summary.return_pct:.2f}%")
    print(f"Trades executed: {summary.trade_count}")


def _run_backtest(args: argparse.Namespace, data: Sequence[PriceRecord], config: BacktestConfig) -> None:
    notifier = build_notifier(settings.discord_webhook_url) if args.notify else None
    strategy = build_strategy(args.strategy, args)
    result = BacktestEngine(strategy, data, config, notifier=notifier).run()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    _print_result(result)
    if result.trade_log:
        print("\nTrade Log:")
        for entry in result.trade_log:
            print(f"  {entry}")


def _run_compare(args: argparse.Namespace, data: Sequence[PriceRecord], config: BacktestConfig) -> None:
    strategies = [build_strategy(name, args) for name in STRATEGY_CHOICES]
    notifier = build_notifier(settings.discord_webhook_url) if args.notify else None
    results = compare_strategies(strategies, data, config, notifier=notifier)

    if args.json:
        payload = {
            name: (result.to_dict() if result is not None else None)
            for name, result in results.items()
        }
        print(json.dumps(payload, indent=2, default=str))
        return

    for name, return_pct in rank_results(results):
        print(f"{return_pct:>8.2f}%  {name}")
    for name, result in results.items():
        if result is None:
            print(f"{'failed':>9}  {name}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # results go to stdout, logs to stderr
    configure_logging(json_output=args.json_logs, level=settings.log_level, stream=sys.stderr)

    try:
        config = BacktestConfig(
            initial_capital=args.capital,
            transaction_fee=args.fee,
            verbose=args.verbose,
        )
        include_eps = args.command == "compare" or args.strategy == "value"
        data = load_data(args, include_eps=include_eps)

        if args.command == "backtest":
            _run_backtest(args, data, config)
        else:
            _run_compare(args, data, config)
    except StockSignalError as e:
        logger.error(f"{e.code}: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return 0
