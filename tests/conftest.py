"""Shared test fixtures and record factories."""

from datetime import date, timedelta
from typing import Iterable, List, Optional

import pytest

from stocksignal.services.market_data.models import PriceRecord

START_DATE = date(2024, 1, 1)


def make_record(
    day: int,
    close: float,
    *,
    current_eps: float = 0.0,
    previous_eps: float = 0.0,
    volume: int = 1_000,
    start: date = START_DATE,
) -> PriceRecord:
    """One record `day` days after `start`, OHLC all equal to `close`."""
    return PriceRecord(
        date=start + timedelta(days=day),
        open=close,
        high=close,
        low=close,
        close=close,
        volume=volume,
        current_eps=current_eps,
        previous_eps=previous_eps,
        symbol="TEST",
    )


def make_records(
    prices: Iterable[float],
    *,
    current_eps: float = 0.0,
    previous_eps: float = 0.0,
    start: date = START_DATE,
) -> List[PriceRecord]:
    """Consecutive daily records, oldest first."""
    return [
        make_record(i, p, current_eps=current_eps, previous_eps=previous_eps, start=start)
        for i, p in enumerate(prices)
    ]


@pytest.fixture
def trend_prices() -> List[float]:
    """Dip to a trough at index 4, peak at index 7, then fall back."""
    return [10.0, 9.5, 9.0, 8.0, 6.0, 7.5, 9.0, 11.0, 9.5, 8.0]


@pytest.fixture
def cross_prices() -> List[float]:
    """Falling then rising: the 2/4 averages cross upward at index 6."""
    return [10.0, 9.0, 8.0, 7.0, 6.0, 8.0, 10.0, 12.0, 14.0]


@pytest.fixture(autouse=True)
def _isolate_from_env(monkeypatch):
    """Keep shell configuration out of Settings-dependent tests."""
    for name in (
        "APP_ENV",
        "DEBUG",
        "ALPHA_VANTAGE_API_KEY",
        "DISCORD_WEBHOOK_URL",
        "INITIAL_CAPITAL",
        "TRANSACTION_FEE",
        "HISTORY_BUFFER",
    ):
        monkeypatch.delenv(name, raising=False)
