"""
Market data: price records, preprocessing and the Alpha Vantage source.
"""

from stocksignal.services.market_data.models import PriceRecord
from stocksignal.services.market_data.preprocessor import (
    preprocess,
    records_to_frame,
    frame_to_records,
    load_csv,
)
from stocksignal.services.market_data.parser import parse_daily_time_series, parse_annual_eps

__all__ = [
    "PriceRecord",
    "preprocess",
    "records_to_frame",
    "frame_to_records",
    "load_csv",
    "parse_daily_time_series",
    "parse_annual_eps",
]
