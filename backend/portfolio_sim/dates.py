"""Calendar arithmetic helpers shared by the engine."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Iterator

from dateutil.relativedelta import relativedelta


def add_months(d: date, months: int) -> date:
    """Add ``months`` to ``d``, clamping to the last day of the target month."""

    return d + relativedelta(months=months)


def set_day(d: date, day: int) -> date:
    """Set the day of month, overflowing into following months when ``day`` is too large."""

    return date(d.year, d.month, 1) + timedelta(days=day - 1)


def first_of_next_month(d: date) -> date:
    return add_months(date(d.year, d.month, 1), 1)


def years_between(later: date, earlier: date) -> int:
    """Number of full calendar years between two dates (sign follows ``later - earlier``)."""

    return relativedelta(later, earlier).years


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from ``start`` up to but excluding ``end``."""

    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


def parse_iso(value: str) -> date:
    return date.fromisoformat(value[:10])


def sorted_series_dates(keys: Iterable[str]) -> list[str]:
    return sorted(keys, key=parse_iso)


__all__ = [
    "add_months",
    "first_of_next_month",
    "iter_days",
    "parse_iso",
    "set_day",
    "sorted_series_dates",
    "years_between",
]
