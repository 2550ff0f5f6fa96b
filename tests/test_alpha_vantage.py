"""Tests for Alpha Vantage parsing and the async client (httpx.MockTransport)."""

from datetime import date

import httpx
import pytest

from stocksignal.core.exceptions import ConfigurationError, DataError, MarketDataError
from stocksignal.services.market_data import alpha_vantage
from stocksignal.services.market_data.alpha_vantage import AlphaVantageClient
from stocksignal.services.market_data.parser import parse_annual_eps, parse_daily_time_series


def _day(close, volume=1000):
    return {
        "1. open": str(close),
        "2. high": str(close + 1),
        "3. low": str(close - 1),
        "4. close": str(close),
        "5. volume": str(volume),
    }


DAILY_PAYLOAD = {
    "Meta Data": {"2. Symbol": "IBM"},
    "Time Series (Daily)": {
        "2024-01-05": _day(105.0),
        "2024-01-04": _day(104.0),
        "2024-01-03": _day(103.0),
        "2024-01-02": _day(102.0),
    },
}

EARNINGS_PAYLOAD = {
    "symbol": "IBM",
    "annualEarnings": [
        {"fiscalDateEnding": "2023-12-31", "reportedEPS": "9.6"},
        {"fiscalDateEnding": "2022-12-31", "reportedEPS": "9.12"},
        {"fiscalDateEnding": "2021-12-31", "reportedEPS": "7.93"},
    ],
}


class _Recorder:
    """MockTransport handler answering by `function` query parameter."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[request.url.params["function"]]
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)


def _client(responses):
    recorder = _Recorder(responses)
    client = AlphaVantageClient(api_key="demo", transport=httpx.MockTransport(recorder))
    return client, recorder


# ── Parser ──


class TestParseDailyTimeSeries:
    def test_parses_entries(self):
        records = parse_daily_time_series(DAILY_PAYLOAD, "IBM", 9.6, 9.12)
        assert len(records) == 4
        first = records[0]
        assert first.date == date(2024, 1, 5)
        assert first.close == 105.0
        assert first.high == 106.0
        assert first.volume == 1000
        assert first.symbol == "IBM"
        assert first.current_eps == 9.6

    def test_skips_incomplete_entries(self):
        payload = {"Time Series (Daily)": {"2024-01-02": _day(10.0), "2024-01-03": {"4. close": "11"}}}
        assert len(parse_daily_time_series(payload)) == 1

    def test_api_error_payloads(self):
        for key in ("Error Message", "Note", "Information"):
            with pytest.raises(MarketDataError):
                parse_daily_time_series({key: "something went wrong"})

    def test_overflowing_volume(self):
        payload = {"Time Series (Daily)": {"2024-01-02": {**_day(10.0), "5. volume": "Infinity"}}}
        with pytest.raises(DataError):
            parse_daily_time_series(payload)

    def test_missing_section(self):
        with pytest.raises(DataError):
            parse_daily_time_series({"Meta Data": {}})

    def test_bad_values(self):
        payload = {"Time Series (Daily)": {"2024-01-02": {**_day(10.0), "4. close": "n/a"}}}
        with pytest.raises(DataError):
            parse_daily_time_series(payload)


class TestParseAnnualEps:
    def test_latest_two(self):
        assert parse_annual_eps(EARNINGS_PAYLOAD) == (9.6, 9.12)

    def test_fewer_than_two(self):
        with pytest.raises(DataError):
            parse_annual_eps({"annualEarnings": [{"reportedEPS": "1.0"}]})

    def test_malformed(self):
        with pytest.raises(DataError):
            parse_annual_eps({"annualEarnings": [{"reportedEPS": "None"}, {"reportedEPS": "1.0"}]})


# ── Client ──


class TestAlphaVantageClient:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(alpha_vantage.settings, "alpha_vantage_api_key", None)
        with pytest.raises(ConfigurationError):
            AlphaVantageClient()

    @pytest.mark.asyncio
    async def test_fetch_daily_series(self):
        client, recorder = _client({"TIME_SERIES_DAILY": DAILY_PAYLOAD})

        records = await client.fetch_daily_series("IBM", 3)

        assert [r.date for r in records] == [date(2024, 1, 3), date(2024, 1, 4), date(2024, 1, 5)]
        assert records[-1].current_eps == 0.0
        params = recorder.requests[0].url.params
        assert params["apikey"] == "demo"
        assert params["symbol"] == "IBM"
        assert params["outputsize"] == "compact"

    @pytest.mark.asyncio
    async def test_full_output_for_long_history(self):
        client, recorder = _client({"TIME_SERIES_DAILY": DAILY_PAYLOAD})
        await client.fetch_daily_series("IBM", 250)
        assert recorder.requests[0].url.params["outputsize"] == "full"

    @pytest.mark.asyncio
    async def test_include_eps(self):
        client, recorder = _client({"TIME_SERIES_DAILY": DAILY_PAYLOAD, "EARNINGS": EARNINGS_PAYLOAD})

        records = await client.fetch_daily_series("IBM", 10, include_eps=True)

        assert len(records) == 4
        assert all(r.current_eps == 9.6 and r.previous_eps == 9.12 for r in records)
        assert [r.url.params["function"] for r in recorder.requests] == ["TIME_SERIES_DAILY", "EARNINGS"]

    @pytest.mark.asyncio
    async def test_fetch_latest(self):
        client, _ = _client({"TIME_SERIES_DAILY": DAILY_PAYLOAD, "EARNINGS": EARNINGS_PAYLOAD})
        latest = await client.fetch_latest("IBM")
        assert latest.date == date(2024, 1, 5)
        assert latest.current_eps == 9.6

    @pytest.mark.asyncio
    async def test_rate_limit_note(self):
        client, _ = _client({"TIME_SERIES_DAILY": {"Note": "Thank you for using Alpha Vantage!"}})
        with pytest.raises(MarketDataError):
            await client.fetch_daily_series("IBM", 10)

    @pytest.mark.asyncio
    async def test_http_error(self):
        client, _ = _client({"TIME_SERIES_DAILY": httpx.Response(503)})
        with pytest.raises(MarketDataError, match="503"):
            await client.fetch_daily_series("IBM", 10)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client, _ = _client({"TIME_SERIES_DAILY": httpx.Response(200, text="<html>")})
        with pytest.raises(MarketDataError):
            await client.fetch_daily_series("IBM", 10)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = AlphaVantageClient(api_key="demo", transport=httpx.MockTransport(handler))
        with pytest.raises(MarketDataError):
            await client.fetch_annual_eps("IBM")

    @pytest.mark.asyncio
    async def test_non_positive_points(self):
        client, _ = _client({})
        with pytest.raises(ConfigurationError):
            await client.fetch_daily_series("IBM", 0)
