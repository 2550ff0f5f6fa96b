"""
Data preprocessing

Filters invalid records and orders a series oldest-first. Every indicator
and strategy downstream assumes this has been applied.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Union

import numpy as np
import pandas as pd

from stocksignal.core.exceptions import DataError
from stocksignal.services.market_data.models import PriceRecord

logger = logging.getLogger(__name__)

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]
EPS_COLUMNS = ["current_eps", "previous_eps"]


def preprocess(records: Iterable[PriceRecord]) -> List[PriceRecord]:
    """Drop invalid records, de-duplicate by date and sort ascending.

    When two records share a date the later one in the input wins.

    Args:
        records: Raw records in any order

    Returns:
        Valid records, oldest first, one per date
    """
    by_date: Dict[date, PriceRecord] = {}
    dropped = 0
    total = 0

    for record in records:
        total += 1
        if not record.is_valid():
            dropped += 1
            continue
        if record.date in by_date:
            logger.debug(f"Duplicate record for {record.date}, keeping latest")
        by_date[record.date] = record

    if dropped:
        logger.warning(f"Dropped {dropped} invalid records out of {total}")

    return [by_date[d] for d in sorted(by_date)]


def records_to_frame(records: Iterable[PriceRecord]) -> pd.DataFrame:
    """Build an OHLCV DataFrame indexed by date."""
    rows = [
        {
            "date": pd.Timestamp(r.date),
            "open": r.open,
            "high": r.high,
            "low": r.low,
            "close": r.close,
            "volume": r.volume,
            "current_eps": r.current_eps,
            "previous_eps": r.previous_eps,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=["date"] + OHLCV_COLUMNS + EPS_COLUMNS)
    df.set_index("date", inplace=True)
    return df


def frame_to_records(df: pd.DataFrame, symbol: str = "") -> List[PriceRecord]:
    """Convert an OHLCV DataFrame (date index or column) to preprocessed records.

    Rows with missing or non-finite prices are dropped.
    """
    frame = df.copy()
    frame.columns = [str(c).strip().lower() for c in frame.columns]

    if "date" in frame.columns:
        frame = frame.set_index("date")
    elif not isinstance(frame.index, pd.DatetimeIndex):
        raise DataError("Price data has no date column or date index")

    missing = [c for c in OHLCV_COLUMNS if c not in frame.columns]
    if missing:
        raise DataError(f"Price data is missing columns: {', '.join(missing)}")

    try:
        frame.index = pd.to_datetime(frame.index)
    except (TypeError, ValueError) as e:
        raise DataError(f"Unparseable date in price data: {e}") from e
    for column in EPS_COLUMNS:
        if column not in frame.columns:
            frame[column] = 0.0

    numeric = frame[OHLCV_COLUMNS + EPS_COLUMNS].apply(pd.to_numeric, errors="coerce")
    price_ok = np.isfinite(numeric[["open", "high", "low", "close"]].to_numpy(dtype=float)).all(axis=1)
    volume_ok = np.isfinite(numeric["volume"].to_numpy(dtype=float))
    numeric = numeric[price_ok & volume_ok].copy()
    numeric[EPS_COLUMNS] = numeric[EPS_COLUMNS].fillna(0.0)

    records = [
        PriceRecord(
            date=row.Index.date(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=int(row.volume),
            current_eps=float(row.current_eps),
            previous_eps=float(row.previous_eps),
            symbol=symbol,
        )
        for row in numeric.itertuples()
    ]
    return preprocess(records)


def load_csv(path: Union[str, Path], symbol: str = "") -> List[PriceRecord]:
    """Read `date,open,high,low,close,volume[,current_eps,previous_eps]` from CSV."""
    try:
        df = pd.read_csv(path)
    except (OSError, ValueError) as e:  # ParserError and EmptyDataError are ValueErrors
        raise DataError(f"Failed to read price data from {path}: {e}") from e

    records = frame_to_records(df, symbol=symbol)
    logger.info(f"Loaded {len(records)} records from {path}")
    return records
