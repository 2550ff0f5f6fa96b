"""
Value investing on P/E ratio and earnings growth of the latest record.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from stocksignal.core.constants import (
    DEFAULT_HISTORY_BUFFER,
    DEFAULT_MAX_PE_RATIO,
    DEFAULT_MIN_EARNINGS_GROWTH,
)
from stocksignal.core.exceptions import ConfigurationError, DataError
from stocksignal.services.indicators.fundamental import earnings_growth, pe_ratio
from stocksignal.services.market_data.models import PriceRecord
from stocksignal.services.strategies.base import Strategy


@dataclass(frozen=True)
class ValueInvestingState:
    pe_ratio: float
    earnings_growth: float


class ValueInvestingStrategy(Strategy):
    """Buy cheap, growing companies; sell expensive or shrinking ones."""

    def __init__(
        self,
        max_pe_ratio: float = DEFAULT_MAX_PE_RATIO,
        min_earnings_growth: float = DEFAULT_MIN_EARNINGS_GROWTH,
        initial_data: Optional[Iterable[PriceRecord]] = None,
        history_buffer: int = DEFAULT_HISTORY_BUFFER,
    ):
        self.max_pe_ratio = max_pe_ratio
        self.min_earnings_growth = min_earnings_growth
        super().__init__(
            name=f"Value Investing (P/E < {max_pe_ratio}, growth >= {min_earnings_growth}%)",
            description="P/E ratio and earnings growth screen",
            initial_data=initial_data,
            history_buffer=history_buffer,
            max_pe_ratio=max_pe_ratio,
            min_earnings_growth=min_earnings_growth,
        )

    def validate_parameters(self) -> None:
        if self.max_pe_ratio <= 0:
            raise ConfigurationError("Maximum P/E ratio must be positive.")
        if self.min_earnings_growth <= 0:
            raise ConfigurationError("Minimum earnings growth must be positive.")

    def get_lookback_period(self) -> int:
        return 1

    def _compute_state(self, records: Sequence[PriceRecord]) -> ValueInvestingState:
        latest = records[-1]
        if latest.close <= 0 or latest.current_eps <= 0 or latest.previous_eps <= 0:
            raise DataError(
                f"Price and EPS must be positive on {latest.date} "
                f"(close={latest.close}, current_eps={latest.current_eps}, "
                f"previous_eps={latest.previous_eps})."
            )
        return ValueInvestingState(
            pe_ratio=pe_ratio(latest.close, latest.current_eps),
            earnings_growth=earnings_growth(latest.current_eps, latest.previous_eps),
        )

    def _buy_condition(self, state: ValueInvestingState, latest: PriceRecord) -> bool:
        return (
            state.pe_ratio < self.max_pe_ratio
            and state.earnings_growth >= self.min_earnings_growth
        )

    def _sell_condition(self, state: ValueInvestingState, latest: PriceRecord) -> bool:
        return state.pe_ratio >= self.max_pe_ratio or state.earnings_growth < 0
