"""
Technical indicators

Pure functions over oldest-first series. Record-based helpers read the
closing price; series-based helpers take plain floats.

Index alignment: an EMA series of period p over n values has
n - p + 1 entries, the first one belonging to input index p - 1.
MACD relies on this to line up the short and long EMA series.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from stocksignal.core.constants import (
    DEFAULT_MACD_FAST,
    DEFAULT_MACD_SIGNAL,
    DEFAULT_MACD_SLOW,
    DEFAULT_RSI_PERIOD,
)
from stocksignal.core.exceptions import ConfigurationError, InsufficientDataError
from stocksignal.services.market_data.models import PriceRecord


def closes(records: Sequence[PriceRecord]) -> List[float]:
    """Closing prices in series order."""
    return [r.close for r in records]


def _require_period(period: int, label: str) -> None:
    if period <= 0:
        raise ConfigurationError(f"{label} must be a positive integer (got {period}).")


def _require_length(available: int, required: int, label: str) -> None:
    if available < required:
        raise InsufficientDataError(
            f"Not enough data to calculate {label}. Required: {required}, Available: {available}",
            available=available,
            required=required,
        )


def sma(records: Sequence[PriceRecord], window: int) -> float:
    """Mean close over the last `window` records."""
    _require_period(window, "SMA window")
    _require_length(len(records), window, "SMA")
    tail = records[len(records) - window:]
    return sum(r.close for r in tail) / window


def ema_series(values: Sequence[float], period: int) -> List[float]:
    """EMA seeded with the simple mean of the first `period` values.

    Returns:
        len(values) - period + 1 values aligned to input indices period-1 .. n-1
    """
    _require_period(period, "EMA period")
    _require_length(len(values), period, "EMA series")

    multiplier = 2.0 / (period + 1)
    current = sum(values[:period]) / period
    series = [current]

    for value in values[period:]:
        current = (value - current) * multiplier + current
        series.append(current)

    return series


def ema_series_from_records(records: Sequence[PriceRecord], period: int) -> List[float]:
    return ema_series(closes(records), period)


@dataclass(frozen=True)
class MACDSeries:
    """MACD output series.

    `line` starts at input index long_period - 1; `signal` and `histogram`
    start at line index signal_period - 1.
    """
    line: List[float]
    signal: List[float]
    histogram: List[float]


def validate_macd_periods(short_period: int, long_period: int, signal_period: int) -> None:
    _require_period(short_period, "MACD short period")
    _require_period(long_period, "MACD long period")
    _require_period(signal_period, "MACD signal period")
    if short_period >= long_period:
        raise ConfigurationError(
            f"MACD short period ({short_period}) must be less than long period ({long_period})."
        )


def macd_min_length(long_period: int, signal_period: int, with_previous: bool = False) -> int:
    """Input length needed for a current (and optionally previous) signal value."""
    required = long_period + signal_period - 1
    return required + 1 if with_previous else required


def macd_series(
    values: Sequence[float],
    short_period: int,
    long_period: int,
    signal_period: int,
) -> MACDSeries:
    """MACD line, signal line and histogram over a value series."""
    validate_macd_periods(short_period, long_period, signal_period)
    _require_length(
        len(values),
        macd_min_length(long_period, signal_period),
        f"MACD({short_period},{long_period},{signal_period})",
    )

    short_ema = ema_series(values, short_period)
    long_ema = ema_series(values, long_period)
    offset = long_period - short_period

    line = [short_ema[i + offset] - long_ema[i] for i in range(len(long_ema))]
    signal = ema_series(line, signal_period)
    aligned_line = line[signal_period - 1:]
    histogram = [m - s for m, s in zip(aligned_line, signal)]

    return MACDSeries(line=line, signal=signal, histogram=histogram)


def macd_line(values: Sequence[float], short_period: int, long_period: int) -> float:
    """Current MACD line only; needs `long_period` values."""
    _require_period(short_period, "MACD short period")
    _require_period(long_period, "MACD long period")
    if short_period >= long_period:
        raise ConfigurationError(
            f"MACD short period ({short_period}) must be less than long period ({long_period})."
        )
    return ema_series(values, short_period)[-1] - ema_series(values, long_period)[-1]


def rsi(records: Sequence[PriceRecord], period: int) -> float:
    """Relative Strength Index with Wilder smoothing.

    The first average gain/loss is the simple mean of the first `period`
    deltas; later deltas are folded in as (avg * (period - 1) + x) / period.
    """
    _require_period(period, "RSI period")
    _require_length(len(records), period + 1, f"RSI({period})")

    prices = closes(records)
    deltas = [b - a for a, b in zip(prices, prices[1:])]
    gains = [d if d > 0 else 0.0 for d in deltas]
    losses = [-d if d < 0 else 0.0 for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 0.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


class SMA:
    """Simple moving average over a fixed window."""

    def __init__(self, window: int):
        _require_period(window, "SMA window")
        self.window = window

    def calculate(self, records: Sequence[PriceRecord]) -> float:
        return sma(records, self.window)


class MACD:
    """MACD with fixed periods.

    `calculate(records)` returns the current line; with
    `include_signal=True` it returns (line, signal, histogram).
    """

    def __init__(
        self,
        short_period: int = DEFAULT_MACD_FAST,
        long_period: int = DEFAULT_MACD_SLOW,
        signal_period: int = DEFAULT_MACD_SIGNAL,
    ):
        validate_macd_periods(short_period, long_period, signal_period)
        self.short_period = short_period
        self.long_period = long_period
        self.signal_period = signal_period

    @property
    def min_length(self) -> int:
        return macd_min_length(self.long_period, self.signal_period)

    def series(self, records: Sequence[PriceRecord]) -> MACDSeries:
        return macd_series(closes(records), self.short_period, self.long_period, self.signal_period)

    def calculate(self, records: Sequence[PriceRecord], include_signal: bool = False):
        if not include_signal:
            return macd_line(closes(records), self.short_period, self.long_period)
        result = self.series(records)
        return result.line[-1], result.signal[-1], result.histogram[-1]


class RSI:
    """RSI with a fixed period."""

    def __init__(self, period: int = DEFAULT_RSI_PERIOD):
        _require_period(period, "RSI period")
        self.period = period

    def calculate(self, records: Sequence[PriceRecord]) -> float:
        return rsi(records, self.period)
