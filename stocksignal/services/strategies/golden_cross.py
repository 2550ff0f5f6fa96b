"""
Golden cross / death cross on a short and a long moving average.

`average="sma"` compares simple moving averages; `average="ema"` compares
EMAs. Passing `rsi_period` adds RSI confirmation: buys need RSI above
`rsi_buy_threshold`, sells need RSI below `rsi_sell_threshold`.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from stocksignal.core.constants import (
    DEFAULT_HISTORY_BUFFER,
    DEFAULT_LONG_PERIOD,
    DEFAULT_RSI_BUY_THRESHOLD,
    DEFAULT_RSI_SELL_THRESHOLD,
    DEFAULT_SHORT_PERIOD,
)
from stocksignal.core.exceptions import ConfigurationError
from stocksignal.services.indicators.technical import ema_series_from_records, rsi, sma
from stocksignal.services.market_data.models import PriceRecord
from stocksignal.services.strategies.base import Strategy

AVERAGE_TYPES = ("sma", "ema")


@dataclass(frozen=True)
class GoldenCrossState:
    current_short: float
    current_long: float
    previous_short: float
    previous_long: float
    current_rsi: Optional[float] = None


class GoldenCrossStrategy(Strategy):
    """Moving average crossover strategy with optional RSI confirmation."""

    def __init__(
        self,
        short_period: int = DEFAULT_SHORT_PERIOD,
        long_period: int = DEFAULT_LONG_PERIOD,
        average: str = "sma",
        rsi_period: Optional[int] = None,
        rsi_buy_threshold: float = DEFAULT_RSI_BUY_THRESHOLD,
        rsi_sell_threshold: float = DEFAULT_RSI_SELL_THRESHOLD,
        initial_data: Optional[Iterable[PriceRecord]] = None,
        history_buffer: int = DEFAULT_HISTORY_BUFFER,
    ):
        self.short_period = short_period
        self.long_period = long_period
        self.average = average.lower()
        self.rsi_period = rsi_period
        self.rsi_buy_threshold = rsi_buy_threshold
        self.rsi_sell_threshold = rsi_sell_threshold

        label = f"{self.average.upper()} {short_period}/{long_period}"
        if rsi_period is not None:
            label += f", RSI {rsi_period}"
        super().__init__(
            name=f"Golden Cross ({label})",
            description="Short average crossing the long average",
            initial_data=initial_data,
            history_buffer=history_buffer,
            short_period=short_period,
            long_period=long_period,
            average=self.average,
            rsi_period=rsi_period,
            rsi_buy_threshold=rsi_buy_threshold,
            rsi_sell_threshold=rsi_sell_threshold,
        )

    @property
    def uses_rsi(self) -> bool:
        return self.rsi_period is not None

    def validate_parameters(self) -> None:
        if self.short_period <= 0:
            raise ConfigurationError("Short period must be positive.")
        if self.long_period <= 0:
            raise ConfigurationError("Long period must be positive.")
        if self.short_period >= self.long_period:
            raise ConfigurationError(
                f"Short period ({self.short_period}) must be less than long period ({self.long_period})."
            )
        if self.average not in AVERAGE_TYPES:
            raise ConfigurationError(f"Average must be one of {AVERAGE_TYPES} (got '{self.average}').")
        if self.uses_rsi:
            if self.rsi_period <= 0:
                raise ConfigurationError("RSI period must be positive.")
            for label, value in (("buy", self.rsi_buy_threshold), ("sell", self.rsi_sell_threshold)):
                if not 0 <= value <= 100:
                    raise ConfigurationError(f"RSI {label} threshold must be within 0-100 (got {value}).")

    def get_lookback_period(self) -> int:
        lookback = self.long_period + 1
        if self.uses_rsi:
            lookback = max(lookback, self.rsi_period + 1)
        return lookback

    def _current_and_previous(self, records: Sequence[PriceRecord], period: int) -> Tuple[float, float]:
        n = len(records)
        if self.average == "ema":
            series = ema_series_from_records(records[n - period - 1:], period)
            return series[-1], series[-2]
        return sma(records, period), sma(records[:n - 1], period)

    def _compute_state(self, records: Sequence[PriceRecord]) -> GoldenCrossState:
        current_short, previous_short = self._current_and_previous(records, self.short_period)
        current_long, previous_long = self._current_and_previous(records, self.long_period)

        current_rsi = None
        if self.uses_rsi:
            window = self.rsi_period + 1
            current_rsi = rsi(records[len(records) - window:], self.rsi_period)

        return GoldenCrossState(
            current_short=current_short,
            current_long=current_long,
            previous_short=previous_short,
            previous_long=previous_long,
            current_rsi=current_rsi,
        )

    def _buy_condition(self, state: GoldenCrossState, latest: PriceRecord) -> bool:
        golden_cross = (
            state.previous_short <= state.previous_long
            and state.current_short > state.current_long
        )
        if not golden_cross:
            return False
        if self.uses_rsi:
            return state.current_rsi > self.rsi_buy_threshold
        return True

    def _sell_condition(self, state: GoldenCrossState, latest: PriceRecord) -> bool:
        death_cross = (
            state.previous_short >= state.previous_long
            and state.current_short < state.current_long
        )
        if not death_cross:
            return False
        if self.uses_rsi:
            return state.current_rsi < self.rsi_sell_threshold
        return True
