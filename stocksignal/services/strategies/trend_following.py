"""
Trend following: SMA trend filter + MACD crossover.

Buy when the close is above the SMA and the MACD line crosses above its
signal line; sell on the mirror image.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from stocksignal.core.constants import (
    DEFAULT_HISTORY_BUFFER,
    DEFAULT_MACD_FAST,
    DEFAULT_MACD_SIGNAL,
    DEFAULT_MACD_SLOW,
    DEFAULT_SMA_PERIOD,
)
from stocksignal.core.exceptions import ConfigurationError
from stocksignal.services.indicators.technical import (
    closes,
    macd_min_length,
    macd_series,
    sma,
    validate_macd_periods,
)
from stocksignal.services.market_data.models import PriceRecord
from stocksignal.services.strategies.base import Strategy


@dataclass(frozen=True)
class TrendFollowingState:
    current_sma: float
    current_macd_line: float
    current_macd_signal: float
    previous_macd_line: float
    previous_macd_signal: float


class TrendFollowingStrategy(Strategy):
    """SMA + MACD trend following strategy."""

    def __init__(
        self,
        sma_period: int = DEFAULT_SMA_PERIOD,
        macd_fast_period: int = DEFAULT_MACD_FAST,
        macd_slow_period: int = DEFAULT_MACD_SLOW,
        macd_signal_period: int = DEFAULT_MACD_SIGNAL,
        initial_data: Optional[Iterable[PriceRecord]] = None,
        history_buffer: int = DEFAULT_HISTORY_BUFFER,
    ):
        self.sma_period = sma_period
        self.macd_fast_period = macd_fast_period
        self.macd_slow_period = macd_slow_period
        self.macd_signal_period = macd_signal_period
        super().__init__(
            name=f"Trend Following (SMA {sma_period}, MACD {macd_fast_period}/{macd_slow_period}/{macd_signal_period})",
            description="Price above SMA with a bullish MACD crossover",
            initial_data=initial_data,
            history_buffer=history_buffer,
            sma_period=sma_period,
            macd_fast_period=macd_fast_period,
            macd_slow_period=macd_slow_period,
            macd_signal_period=macd_signal_period,
        )

    def validate_parameters(self) -> None:
        if self.sma_period <= 0:
            raise ConfigurationError("SMA period must be positive.")
        validate_macd_periods(self.macd_fast_period, self.macd_slow_period, self.macd_signal_period)

    def get_lookback_period(self) -> int:
        return max(self.sma_period, self.macd_slow_period + self.macd_signal_period)

    def _macd_at_end(self, records: Sequence[PriceRecord]):
        result = macd_series(
            closes(records),
            self.macd_fast_period,
            self.macd_slow_period,
            self.macd_signal_period,
        )
        return result.line[-1], result.signal[-1]

    def _compute_state(self, records: Sequence[PriceRecord]) -> TrendFollowingState:
        n = len(records)
        window = macd_min_length(self.macd_slow_period, self.macd_signal_period)

        # "previous" window ends exactly one record before "current"
        current_line, current_signal = self._macd_at_end(records[n - window:])
        previous_line, previous_signal = self._macd_at_end(records[n - window - 1:n - 1])

        return TrendFollowingState(
            current_sma=sma(records, self.sma_period),
            current_macd_line=current_line,
            current_macd_signal=current_signal,
            previous_macd_line=previous_line,
            previous_macd_signal=previous_signal,
        )

    def _buy_condition(self, state: TrendFollowingState, latest: PriceRecord) -> bool:
        bullish_crossover = (
            state.previous_macd_line <= state.previous_macd_signal
            and state.current_macd_line > state.current_macd_signal
        )
        return latest.close > state.current_sma and bullish_crossover

    def _sell_condition(self, state: TrendFollowingState, latest: PriceRecord) -> bool:
        bearish_crossover = (
            state.previous_macd_line >= state.previous_macd_signal
            and state.current_macd_line < state.current_macd_signal
        )
        return latest.close < state.current_sma and bearish_crossover
