"""Schemas for historical price retrieval and asset search."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class HistoricalSeries(BaseModel):
    """Normalized result of a historical price fetch."""

    symbol: str
    series: dict[str, float] = Field(default_factory=dict, description="ISO date -> close price")
    display_name: str = ""
    last_known_price: Optional[float] = None
    currency_code: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.series


class AssetSearchResult(BaseModel):
    symbol: str
    name: str
    quote_type: str
    rank: Optional[str] = None
    exchange: Optional[str] = None
    price: Optional[float] = None
    price_change: Optional[float] = None
    price_change_percent: Optional[float] = None


__all__ = ["AssetSearchResult", "HistoricalSeries"]
