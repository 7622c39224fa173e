"""Sampling interval selection for historical price requests."""
from __future__ import annotations

import math

from .models import DateRange

# Bucketing uses a 360 day "year".
ONE_YEAR_DAYS = 360

MINUTE = "60m"
HOURLY = "1h"
DAILY = "1d"
FIVE_DAYS = "5d"
WEEKLY = "1wk"
MONTHLY = "1mo"


def _span_days(date_range: DateRange) -> int:
    delta = abs((date_range.end_date - date_range.start_date).total_seconds())
    return math.ceil(delta / 86400)


def interval_based_on_date_range(date_range: DateRange, with_sub_days: bool = False) -> str:
    """Return the price sampling interval token for ``date_range``.

    Ranges between 15 and 30 years fall through to daily sampling; monthly
    sampling only starts at 30 years.
    """

    diff_days = _span_days(date_range)
    if with_sub_days and diff_days <= 60:
        return MINUTE
    if with_sub_days and 60 < diff_days < 100:
        return HOURLY
    if diff_days < ONE_YEAR_DAYS * 2.5:
        return DAILY
    if ONE_YEAR_DAYS * 2.5 <= diff_days < ONE_YEAR_DAYS * 6:
        return FIVE_DAYS
    if ONE_YEAR_DAYS * 6 <= diff_days < ONE_YEAR_DAYS * 15:
        return WEEKLY
    if diff_days >= ONE_YEAR_DAYS * 30:
        return MONTHLY
    return DAILY


__all__ = [
    "DAILY",
    "FIVE_DAYS",
    "HOURLY",
    "MINUTE",
    "MONTHLY",
    "WEEKLY",
    "interval_based_on_date_range",
]
