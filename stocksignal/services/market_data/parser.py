"""
Alpha Vantage payload parsing

TIME_SERIES_DAILY:
    {"Time Series (Daily)": {"2024-01-02": {"1. open": "...", ...}, ...}}
EARNINGS:
    {"annualEarnings": [{"fiscalDateEnding": "...", "reportedEPS": "..."}, ...]}
"""

import logging
from datetime import date
from typing import Any, Dict, List, Tuple

from stocksignal.core.constants import ANNUAL_EARNINGS_KEY, TIME_SERIES_DAILY_KEY
from stocksignal.core.exceptions import DataError, MarketDataError
from stocksignal.services.market_data.models import PriceRecord

logger = logging.getLogger(__name__)

# Keys the API uses to report errors and throttling instead of data
_ERROR_KEYS = ("Error Message", "Note", "Information")

_FIELDS = {
    "open": "1. open",
    "high": "2. high",
    "low": "3. low",
    "close": "4. close",
    "volume": "5. volume",
}


def _raise_for_api_error(payload: Dict[str, Any]) -> None:
    for key in _ERROR_KEYS:
        if key in payload:
            raise MarketDataError(f"Alpha Vantage: {payload[key]}")


def parse_daily_time_series(
    payload: Dict[str, Any],
    symbol: str = "",
    current_eps: float = 0.0,
    previous_eps: float = 0.0,
) -> List[PriceRecord]:
    """Parse a TIME_SERIES_DAILY response.

    Entries with a missing field are skipped. Records come back in
    payload order (newest first for Alpha Vantage); run them through
    `preprocess` before use.

    Args:
        payload: Decoded JSON response
        symbol: Ticker stamped on each record
        current_eps: Latest annual EPS to attach
        previous_eps: Prior annual EPS to attach

    Returns:
        Parsed records
    """
    _raise_for_api_error(payload)

    series = payload.get(TIME_SERIES_DAILY_KEY)
    if not isinstance(series, dict):
        raise DataError(f"Response has no '{TIME_SERIES_DAILY_KEY}' section")

    records = []
    skipped = 0
    for day, values in series.items():
        if not isinstance(values, dict) or any(f not in values for f in _FIELDS.values()):
            skipped += 1
            continue
        try:
            records.append(
                PriceRecord(
                    date=date.fromisoformat(day),
                    open=float(values[_FIELDS["open"]]),
                    high=float(values[_FIELDS["high"]]),
                    low=float(values[_FIELDS["low"]]),
                    close=float(values[_FIELDS["close"]]),
                    volume=int(float(values[_FIELDS["volume"]])),
                    current_eps=current_eps,
                    previous_eps=previous_eps,
                    symbol=symbol,
                )
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise DataError(f"Error parsing stock data for {day}: {e}") from e

    if skipped:
        logger.warning(f"[{symbol}] Skipped {skipped} incomplete daily entries")

    return records


def parse_annual_eps(payload: Dict[str, Any]) -> Tuple[float, float]:
    """Return (current, previous) reported EPS from an EARNINGS response."""
    _raise_for_api_error(payload)

    earnings = payload.get(ANNUAL_EARNINGS_KEY)
    if not isinstance(earnings, list) or len(earnings) < 2:
        raise DataError("Insufficient annual earnings data")

    try:
        current = float(earnings[0]["reportedEPS"])
        previous = float(earnings[1]["reportedEPS"])
    except (KeyError, TypeError, ValueError) as e:
        raise DataError(f"Malformed annual earnings entry: {e}") from e

    return current, previous
