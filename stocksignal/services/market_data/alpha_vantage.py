"""
Alpha Vantage API client

Daily OHLCV and annual EPS for a single symbol.

API docs: https://www.alphavantage.co/documentation/
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from stocksignal.config import settings
from stocksignal.core.constants import ALPHA_VANTAGE_COMPACT_LIMIT
from stocksignal.core.exceptions import ConfigurationError, DataError, MarketDataError
from stocksignal.services.market_data.models import PriceRecord
from stocksignal.services.market_data.parser import parse_annual_eps, parse_daily_time_series
from stocksignal.services.market_data.preprocessor import preprocess

logger = logging.getLogger(__name__)


class AlphaVantageClient:
    """Alpha Vantage API client"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key or settings.alpha_vantage_api_key
        if not self._api_key:
            raise ConfigurationError("ALPHA_VANTAGE_API_KEY is not set")
        self.base_url = base_url or settings.alpha_vantage_base_url
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    async def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """API request"""
        request_params = {"apikey": self._api_key}
        request_params.update(params)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=request_params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise MarketDataError(
                f"API request failed ({params.get('function')}): HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise MarketDataError(f"API request failed ({params.get('function')}): {e}") from e
        except ValueError as e:
            raise MarketDataError(f"API returned invalid JSON ({params.get('function')})") from e

    async def fetch_annual_eps(self, symbol: str) -> Tuple[float, float]:
        """Latest and prior annual reported EPS."""
        payload = await self._request({"function": "EARNINGS", "symbol": symbol})
        try:
            return parse_annual_eps(payload)
        except DataError as e:
            raise DataError(f"[{symbol}] {e.message}") from e

    async def fetch_daily_series(
        self,
        symbol: str,
        data_points: int,
        include_eps: bool = False,
    ) -> List[PriceRecord]:
        """Fetch daily records, oldest first.

        Args:
            symbol: Ticker symbol
            data_points: Number of most recent trading days to return
            include_eps: Also fetch annual EPS and attach it to every record

        Returns:
            Up to `data_points` preprocessed records
        """
        if data_points <= 0:
            raise ConfigurationError("data_points must be positive")

        output_size = "full" if data_points > ALPHA_VANTAGE_COMPACT_LIMIT else "compact"
        payload = await self._request({
            "function": "TIME_SERIES_DAILY",
            "symbol": symbol,
            "outputsize": output_size,
        })

        current_eps, previous_eps = 0.0, 0.0
        if include_eps:
            current_eps, previous_eps = await self.fetch_annual_eps(symbol)

        records = preprocess(
            parse_daily_time_series(payload, symbol, current_eps, previous_eps)
        )
        logger.info(f"Fetched {len(records)} daily records ({output_size})", extra={"symbol": symbol})
        return records[-data_points:]

    async def fetch_latest(self, symbol: str) -> PriceRecord:
        """Most recent trading day with EPS attached."""
        records = await self.fetch_daily_series(symbol, 1, include_eps=True)
        if not records:
            raise DataError(f"[{symbol}] No daily data returned")
        return records[-1]
