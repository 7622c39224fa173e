"""Expansion of savings-plan rules into dated periodic investments."""
from __future__ import annotations

import logging
import math
import uuid
from datetime import date, timedelta
from typing import List

from .dates import add_months, first_of_next_month, set_day
from .models import (
    DynamicGrowth,
    GrowthType,
    IntervalUnit,
    Investment,
    InvestmentType,
    PeriodicSettings,
)

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365

# Units whose installments are pinned to ``day_of_month``.
_ANCHORED_UNITS = {IntervalUnit.MONTHS, IntervalUnit.QUARTERS, IntervalUnit.YEARS}
_MONTHS_PER_UNIT = {IntervalUnit.MONTHS: 1, IntervalUnit.QUARTERS: 3, IntervalUnit.YEARS: 12}


def _advance(current: date, settings: PeriodicSettings) -> date:
    unit = settings.interval_unit
    if unit == IntervalUnit.DAYS:
        return current + timedelta(days=settings.interval)
    if unit == IntervalUnit.WEEKS:
        return current + timedelta(weeks=settings.interval)
    nxt = add_months(current, settings.interval * _MONTHS_PER_UNIT[unit])
    if nxt.day != settings.day_of_month:
        # Short months push the installment to the anchor day of the following month.
        nxt = set_day(first_of_next_month(nxt), settings.day_of_month)
    return nxt


def _growth_boundaries_crossed(dynamic: DynamicGrowth, start_date: date, current: date) -> int:
    years_since_start = (current - start_date).days / DAYS_PER_YEAR
    if years_since_start <= 0 or dynamic.year_interval <= 0:
        return 0
    return math.floor(years_since_start / dynamic.year_interval)


def _grow(amount: float, dynamic: DynamicGrowth) -> float:
    if dynamic.type == GrowthType.PERCENTAGE:
        return amount * (1 + dynamic.value / 100)
    return amount + dynamic.value


def generate_periodic_investments(
    settings: PeriodicSettings,
    end_date: date,
    asset_id: str,
) -> List[Investment]:
    """Expand ``settings`` into investments dated up to and including ``end_date``.

    All generated investments share one freshly generated periodic group id.
    Dynamic growth is applied once for every ``year_interval`` boundary the
    installment date has passed since ``start_date``.
    """

    if settings.interval < 1:
        logger.warning("Ignoring savings plan with non-positive interval %s", settings.interval)
        return []

    periodic_group_id = str(uuid.uuid4())
    anchored = settings.interval_unit in _ANCHORED_UNITS
    current = settings.start_date
    if anchored:
        current = set_day(current, settings.day_of_month)

    investments: List[Investment] = []
    current_amount = settings.amount
    applied_boundaries = 0
    while current <= end_date:
        if not anchored or current.day == settings.day_of_month:
            if settings.dynamic is not None:
                crossed = _growth_boundaries_crossed(settings.dynamic, settings.start_date, current)
                while applied_boundaries < crossed:
                    current_amount = _grow(current_amount, settings.dynamic)
                    applied_boundaries += 1
            investments.append(
                Investment(
                    id=str(uuid.uuid4()),
                    asset_id=asset_id,
                    kind=InvestmentType.PERIODIC,
                    amount=current_amount,
                    date=current,
                    periodic_group_id=periodic_group_id,
                )
            )
        current = _advance(current, settings)

    logger.debug(
        "Generated %d installments for asset %s (group %s)",
        len(investments),
        asset_id,
        periodic_group_id,
    )
    return investments


__all__ = ["generate_periodic_investments"]
