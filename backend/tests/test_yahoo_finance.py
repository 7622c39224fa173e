"""Yahoo Finance client tests."""

from __future__ import annotations

from datetime import date

import httpx
import pytest

from app.providers.yahoo_finance import (
    YahooFinanceClient,
    YahooFinanceError,
    parse_chart_payload,
    parse_search_payload,
)

CHART_PAYLOAD = {
    "chart": {
        "result": [
            {
                "meta": {
                    "symbol": "SPY",
                    "longName": "SPDR S&P 500 ETF Trust",
                    "currency": "USD",
                    "regularMarketPrice": 102.5,
                },
                "timestamp": [1704153600, 1704240000, 1704326400],
                "indicators": {"quote": [{"close": [100.5, None, 101.0]}]},
            }
        ],
        "error": None,
    }
}

SEARCH_PAYLOAD = {
    "finance": {
        "result": [
            {
                "documents": [
                    {"symbol": "SPY", "shortName": "SPDR S&P 500", "quoteType": "etf", "regularMarketPrice": {"raw": 500.1}},
                    {"symbol": "AAPL", "shortName": "Apple", "quoteType": "equity", "exchange": "NMS"},
                    {"symbol": "^GSPC", "shortName": "S&P 500", "quoteType": "index"},
                ]
            }
        ],
        "error": None,
    }
}


def _client(handler) -> YahooFinanceClient:
    transport = httpx.MockTransport(handler)
    return YahooFinanceClient("https://finance.test", client=httpx.AsyncClient(transport=transport))


def test_parse_chart_payload_skips_missing_closes():
    history = parse_chart_payload("SPY", CHART_PAYLOAD)

    assert history.series == {"2024-01-02": 100.5, "2024-01-04": 101.0}
    assert history.display_name == "SPDR S&P 500 ETF Trust"
    assert history.last_known_price == 102.5
    assert history.currency_code == "USD"


def test_parse_chart_payload_without_result_is_empty():
    history = parse_chart_payload("NOPE", {"chart": {"result": [], "error": None}})
    assert history.is_empty


def test_parse_chart_payload_raises_on_error():
    with pytest.raises(YahooFinanceError):
        parse_chart_payload("NOPE", {"chart": {"result": None, "error": {"description": "No data found"}}})


def test_parse_search_payload_keeps_equities_and_etfs():
    results = parse_search_payload(SEARCH_PAYLOAD)

    assert [result.symbol for result in results] == ["SPY", "AAPL"]
    assert results[0].price == 500.1
    assert results[1].exchange == "NMS"


@pytest.mark.asyncio
async def test_fetch_historical_data_requests_chart():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=CHART_PAYLOAD)

    async with _client(handler) as client:
        history = await client.fetch_historical_data("SPY", date(2024, 1, 1), date(2024, 2, 1))

    assert history.series["2024-01-02"] == 100.5
    request = requests[0]
    assert request.url.path == "/v8/finance/chart/SPY"
    assert request.url.params["period1"] == "1704067200"
    assert request.url.params["interval"] == "1d"


@pytest.mark.asyncio
async def test_fetch_historical_data_honours_explicit_interval():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params["interval"])
        return httpx.Response(200, json=CHART_PAYLOAD)

    async with _client(handler) as client:
        await client.fetch_historical_data("SPY", date(2000, 1, 1), date(2024, 1, 1), interval="1wk")

    assert seen == ["1wk"]


@pytest.mark.asyncio
async def test_http_errors_raise_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    async with _client(handler) as client:
        with pytest.raises(YahooFinanceError):
            await client.fetch_historical_data("SPY", date(2024, 1, 1), date(2024, 2, 1))


@pytest.mark.asyncio
async def test_invalid_json_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    async with _client(handler) as client:
        with pytest.raises(YahooFinanceError):
            await client.search_assets("spy")


@pytest.mark.asyncio
async def test_search_assets():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/finance/lookup"
        assert request.url.params["query"] == "s&p"
        return httpx.Response(200, json=SEARCH_PAYLOAD)

    async with _client(handler) as client:
        results = await client.search_assets("s&p")

    assert {result.quote_type for result in results} == {"etf", "equity"}
