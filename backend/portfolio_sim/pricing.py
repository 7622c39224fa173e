"""Point-in-time price lookups over an asset's price series.

Two buy-in resolution policies live here side by side:

* ``valuation_buy_in`` (used for share counting in time series): exact
  match, else the first positive price on or after the date, else the last
  positive price on or before it.
* ``nearest_buy_in`` (used for per-investment performance): exact match,
  else the closest positive price in either direction, preferring the
  earlier one when both are equally far away.
"""
from __future__ import annotations

from bisect import bisect_left, bisect_right
from datetime import date
from typing import Mapping, Optional, Tuple

from .dates import parse_iso


class PriceLookup:
    """Sorted, read-only view of a ``{iso_date: price}`` series."""

    def __init__(self, series: Mapping[str, float]):
        items = sorted(
            ((parse_iso(key), float(value)) for key, value in series.items() if value is not None),
            key=lambda item: item[0],
        )
        self._by_date: dict[date, float] = dict(items)
        self._dates: list[date] = [d for d, _ in items]
        self._positive: list[Tuple[date, float]] = [(d, p) for d, p in items if p > 0]
        self._positive_dates: list[date] = [d for d, _ in self._positive]

    def __bool__(self) -> bool:
        return bool(self._dates)

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def first_price(self) -> float:
        return self._by_date[self._dates[0]] if self._dates else 0.0

    @property
    def last_price(self) -> float:
        return self._by_date[self._dates[-1]] if self._dates else 0.0

    @property
    def first_date(self) -> Optional[date]:
        return self._dates[0] if self._dates else None

    def exact(self, day: date) -> float:
        return self._by_date.get(day, 0.0)

    def has(self, day: date) -> bool:
        return day in self._by_date

    def next_positive(self, day: date, *, inclusive: bool = True) -> Optional[Tuple[date, float]]:
        idx = bisect_left(self._positive_dates, day) if inclusive else bisect_right(self._positive_dates, day)
        if idx < len(self._positive):
            return self._positive[idx]
        return None

    def previous_positive(self, day: date, *, inclusive: bool = True) -> Optional[Tuple[date, float]]:
        idx = (bisect_right(self._positive_dates, day) if inclusive else bisect_left(self._positive_dates, day)) - 1
        if idx >= 0:
            return self._positive[idx]
        return None

    def valuation_buy_in(self, day: date) -> float:
        price = self.exact(day)
        if price > 0:
            return price
        later = self.next_positive(day)
        if later is not None:
            return later[1]
        earlier = self.previous_positive(day)
        if earlier is not None:
            return earlier[1]
        return 0.0

    def nearest_buy_in(self, day: date) -> float:
        price = self.exact(day)
        if price > 0:
            return price
        earlier = self.previous_positive(day, inclusive=False)
        later = self.next_positive(day, inclusive=False)
        if earlier is None and later is None:
            return 0.0
        if later is None:
            return earlier[1]  # type: ignore[index]
        if earlier is None:
            return later[1]
        if (day - earlier[0]) <= (later[0] - day):
            return earlier[1]
        return later[1]

    def year_bounds(self, year_start: date, year_end: date) -> Tuple[float, float]:
        """Return the first and last positive prices inside ``[year_start, year_end]``."""

        start = self.next_positive(year_start)
        end = self.previous_positive(year_end)
        start_price = start[1] if start is not None and start[0] <= year_end else 0.0
        end_price = end[1] if end is not None and end[0] >= year_start else 0.0
        return start_price, end_price


__all__ = ["PriceLookup"]
