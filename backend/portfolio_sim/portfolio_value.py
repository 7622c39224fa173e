"""Day-by-day aggregation of all assets into portfolio totals."""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence

from .asset_value import calculate_asset_value_at_date
from .dates import iter_days
from .models import Asset, DateRange, DayData
from .pricing import PriceLookup

logger = logging.getLogger(__name__)


def calculate_portfolio_value(assets: Sequence[Asset], date_range: DateRange) -> List[DayData]:
    """Build one ``DayData`` per calendar day in ``[start_date, end_date)``.

    Missing prices are carried forward from the previous day. Days on which
    any asset still has no known price are dropped from the result.

    ``weighted_percentage_change`` is the average of per-asset performance
    weighted by each asset's current value. ``percentage_change`` replaces it
    with ``(total - invested) / invested`` whenever both totals are positive.
    """

    lookups = {asset.id: PriceLookup(asset.price_series) for asset in assets}
    last_known: Dict[str, float] = {asset.id: 0.0 for asset in assets}
    data: List[DayData] = []

    for day in iter_days(date_range.start_date, date_range.end_date):
        total = 0.0
        invested = 0.0
        weighted_sum = 0.0
        weight_total = 0.0
        prices: Dict[str, float] = {}

        for asset in assets:
            lookup = lookups[asset.id]
            invested += sum(inv.amount for inv in asset.investments if inv.date <= day)

            price = lookup.exact(day) or last_known[asset.id]
            last_known[asset.id] = price
            prices[asset.id] = price

            value = calculate_asset_value_at_date(asset, day, price, lookup)
            total += value.invested_value
            if math.isnan(value.avg_buy_in) or value.avg_buy_in == 0:
                continue
            asset_percent = (price - value.avg_buy_in) / value.avg_buy_in * 100
            weighted_sum += asset_percent * value.invested_value
            weight_total += value.invested_value

        weighted = weighted_sum / weight_total if weight_total > 0 else 0.0
        percentage = (total - invested) / invested * 100 if total > 0 and invested > 0 else weighted

        data.append(
            DayData(
                date=day,
                total=total,
                invested=invested,
                weighted_percentage_change=weighted,
                percentage_change=percentage,
                assets=prices,
            )
        )

    complete = [day for day in data if not any(price == 0 for price in day.assets.values())]
    logger.debug("Built %d portfolio days (%d dropped for missing prices)", len(complete), len(data) - len(complete))
    return complete


__all__ = ["calculate_portfolio_value"]
