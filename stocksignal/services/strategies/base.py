"""
Strategy base class

A strategy owns a rolling window of price records and a snapshot of the
indicator values computed from it. Signals are read from the snapshot;
they never trigger a recomputation.

Lifecycle:
    strategy.load_history(first_window)     # replace series, recompute
    strategy.update_data([next_record])     # append, trim, recompute
    strategy.should_buy() / should_sell()   # read last snapshot
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from stocksignal.core.constants import DEFAULT_HISTORY_BUFFER
from stocksignal.core.exceptions import ConfigurationError, InsufficientDataError
from stocksignal.services.market_data.models import PriceRecord

logger = logging.getLogger(__name__)


class Strategy(ABC):
    """Base class for signal strategies."""

    def __init__(
        self,
        name: str,
        description: str = "",
        initial_data: Optional[Iterable[PriceRecord]] = None,
        history_buffer: int = DEFAULT_HISTORY_BUFFER,
        **parameters: Any,
    ):
        if history_buffer < 0:
            raise ConfigurationError("History buffer must not be negative.")

        self.name = name
        self.description = description
        self.history_buffer = history_buffer
        self.parameters: Dict[str, Any] = parameters
        self._records: List[PriceRecord] = []
        self._state = None

        self.validate_parameters()

        if initial_data is not None:
            self.load_history(initial_data)

    # ── Subclass hooks ──

    @abstractmethod
    def validate_parameters(self) -> None:
        """Raise ConfigurationError for invalid parameters."""

    @abstractmethod
    def get_lookback_period(self) -> int:
        """Minimum series length for valid signals."""

    @abstractmethod
    def _compute_state(self, records: Sequence[PriceRecord]):
        """Build a fresh indicator snapshot from `records`."""

    @abstractmethod
    def _buy_condition(self, state, latest: PriceRecord) -> bool:
        pass

    @abstractmethod
    def _sell_condition(self, state, latest: PriceRecord) -> bool:
        pass

    # ── Series management ──

    @property
    def records(self) -> Tuple[PriceRecord, ...]:
        return tuple(self._records)

    @property
    def state(self):
        """Last computed indicator snapshot, or None before the first computation."""
        return self._state

    @property
    def max_retained(self) -> int:
        return self.get_lookback_period() + self.history_buffer

    def load_history(self, records: Iterable[PriceRecord]) -> None:
        """Replace the retained series and recompute when it is long enough."""
        self._records = list(records)
        self._state = None
        self._trim()
        self._recompute_if_ready()

    def update_data(self, new_records: Iterable[PriceRecord]) -> None:
        """Append records, trim to lookback + buffer and recompute.

        A series still shorter than the lookback is kept without
        recomputation; signals stay unavailable until it fills up.
        """
        new_records = list(new_records)
        if not new_records:
            return

        self._records.extend(new_records)
        self._trim()
        self._recompute_if_ready()

    def calculate_indicators(self) -> None:
        """Recompute the indicator snapshot from the retained series."""
        self._require_lookback("calculate indicators")
        # a failed recompute leaves no snapshot behind
        self._state = None
        try:
            self._state = self._compute_state(self._records)
        except IndexError as e:
            raise InsufficientDataError(
                f"Index out of range while calculating indicators for {self.name}. "
                f"Data size: {len(self._records)}, parameters: {self._describe_parameters()}, "
                f"required: {self.get_lookback_period()}",
                available=len(self._records),
                required=self.get_lookback_period(),
            ) from e

    def _trim(self) -> None:
        excess = len(self._records) - self.max_retained
        if excess > 0:
            del self._records[:excess]

    def _recompute_if_ready(self) -> None:
        if len(self._records) >= self.get_lookback_period():
            self.calculate_indicators()
        else:
            self._state = None
            logger.debug(
                f"{self.name}: {len(self._records)}/{self.get_lookback_period()} records, "
                f"waiting for more data"
            )

    # ── Signals ──

    def should_buy(self) -> bool:
        self._require_signal_ready("determine buy signal")
        return self._buy_condition(self._state, self._records[-1])

    def should_sell(self) -> bool:
        self._require_signal_ready("determine sell signal")
        return self._sell_condition(self._state, self._records[-1])

    def _require_lookback(self, action: str) -> None:
        required = self.get_lookback_period()
        available = len(self._records)
        if available < required:
            raise InsufficientDataError(
                f"Insufficient historical data ({available}) to {action}. Required: {required}",
                available=available,
                required=required,
            )

    def _require_signal_ready(self, action: str) -> None:
        self._require_lookback(action)
        if self._state is None:
            raise InsufficientDataError(
                f"Indicators have not been calculated; cannot {action}.",
                available=len(self._records),
                required=self.get_lookback_period(),
            )

    def _describe_parameters(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.parameters.items())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._describe_parameters()})"
