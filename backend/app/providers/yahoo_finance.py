"""Yahoo Finance client used to load historical price series."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any

import httpx

from app.config import get_settings
from app.schemas.market import AssetSearchResult, HistoricalSeries
from portfolio_sim.intervals import interval_based_on_date_range
from portfolio_sim.models import DateRange

logger = logging.getLogger(__name__)

SEARCHABLE_QUOTE_TYPES = {"equity", "etf"}


class YahooFinanceError(RuntimeError):
    """Raised when Yahoo Finance cannot be reached or returns an error payload."""


def _to_epoch(d: date) -> int:
    return int(datetime.combine(d, time.min, tzinfo=timezone.utc).timestamp())


def _raw(value: Any) -> float | None:
    if isinstance(value, dict):
        value = value.get("raw")
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_chart_payload(symbol: str, payload: dict[str, Any]) -> HistoricalSeries:
    """Normalize a ``/v8/finance/chart`` payload into a ``HistoricalSeries``."""

    chart = payload.get("chart") or {}
    error = chart.get("error")
    if error:
        description = error.get("description") if isinstance(error, dict) else error
        raise YahooFinanceError(f"Yahoo Finance chart error for {symbol}: {description}")

    results = chart.get("result") or []
    if not results:
        return HistoricalSeries(symbol=symbol)
    result = results[0]
    meta = result.get("meta") or {}
    timestamps = result.get("timestamp") or []
    quotes = ((result.get("indicators") or {}).get("quote") or [{}])[0]
    closes = quotes.get("close") or []

    series: dict[str, float] = {}
    for timestamp, close in zip(timestamps, closes):
        if close is None:
            continue
        day = datetime.fromtimestamp(timestamp, tz=timezone.utc).date()
        series[day.isoformat()] = float(close)

    last_known = _raw(meta.get("regularMarketPrice"))
    if last_known is None and series:
        last_known = series[max(series)]
    return HistoricalSeries(
        symbol=meta.get("symbol") or symbol,
        series=dict(sorted(series.items())),
        display_name=meta.get("longName") or meta.get("shortName") or "",
        last_known_price=last_known,
        currency_code=meta.get("currency"),
    )


def parse_search_payload(payload: dict[str, Any]) -> list[AssetSearchResult]:
    """Normalize a ``/v1/finance/lookup`` payload, keeping equities and ETFs only."""

    finance = payload.get("finance") or {}
    if finance.get("error"):
        raise YahooFinanceError(f"Yahoo Finance lookup error: {finance['error']}")
    results = finance.get("result") or []
    documents = (results[0] or {}).get("documents") if results else None
    if not documents:
        return []

    matches: list[AssetSearchResult] = []
    for document in documents:
        if not isinstance(document, dict):
            continue
        quote_type = str(document.get("quoteType", "")).lower()
        if quote_type not in SEARCHABLE_QUOTE_TYPES:
            continue
        symbol = str(document.get("symbol") or "").strip()
        if not symbol:
            continue
        matches.append(
            AssetSearchResult(
                symbol=symbol,
                name=document.get("shortName") or symbol,
                quote_type=quote_type,
                rank=document.get("rank"),
                exchange=document.get("exchange"),
                price=_raw(document.get("regularMarketPrice")),
                price_change=_raw(document.get("regularMarketChange")),
                price_change_percent=_raw(document.get("regularMarketPercentChange")),
            )
        )
    return matches


class YahooFinanceClient:
    """Async client for the Yahoo Finance chart and lookup endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.yahoo_api_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.yahoo_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.timeout_seconds,
            headers={"User-Agent": settings.yahoo_user_agent},
        )

    async def __aenter__(self) -> "YahooFinanceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise YahooFinanceError(f"Failed to reach Yahoo Finance: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("Yahoo Finance error %s for %s", response.status_code, url)
            raise YahooFinanceError(f"Yahoo Finance error {response.status_code} for {path}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise YahooFinanceError("Yahoo Finance returned invalid JSON payload") from exc
        if not isinstance(payload, dict):
            raise YahooFinanceError("Yahoo Finance response is not a JSON object")
        return payload

    async def fetch_historical_data(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        interval: str | None = None,
    ) -> HistoricalSeries:
        """Fetch closing prices for ``symbol`` between ``start_date`` and ``end_date``.

        The sampling interval defaults to the one chosen for the date range.
        """

        interval = interval or interval_based_on_date_range(DateRange(start_date, end_date))
        params = {
            "period1": _to_epoch(start_date),
            "period2": _to_epoch(end_date),
            "interval": interval,
        }
        payload = await self._get_json(f"/v8/finance/chart/{symbol}", params)
        history = parse_chart_payload(symbol, payload)
        if history.is_empty:
            logger.info("No price data for %s between %s and %s", symbol, start_date, end_date)
        return history

    async def search_assets(self, query: str) -> list[AssetSearchResult]:
        params = {"query": query, "lang": "en-US", "type": "equity,etf", "longName": "true"}
        payload = await self._get_json("/v1/finance/lookup", params)
        return parse_search_payload(payload)


__all__ = [
    "YahooFinanceClient",
    "YahooFinanceError",
    "parse_chart_payload",
    "parse_search_payload",
]
