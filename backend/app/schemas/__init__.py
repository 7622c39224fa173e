"""Pydantic schema exports."""

from .market import AssetSearchResult, HistoricalSeries

__all__ = [
    "AssetSearchResult",
    "HistoricalSeries",
]
