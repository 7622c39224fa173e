"""Share accumulation and valuation of a single asset at a point in time."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .models import Asset
from .pricing import PriceLookup


@dataclass(frozen=True)
class AssetValue:
    invested_value: float
    avg_buy_in: float
    shares: float = 0.0


def calculate_asset_value_at_date(
    asset: Asset,
    valuation_date: date,
    current_price: float,
    lookup: Optional[PriceLookup] = None,
) -> AssetValue:
    """Value the shares bought by investments dated strictly before ``valuation_date``.

    ``avg_buy_in`` is the plain mean of the buy-in prices used and is NaN when
    no investment qualified. Pass a prebuilt ``lookup`` to avoid re-sorting the
    price series on every call.
    """

    prices = lookup if lookup is not None else PriceLookup(asset.price_series)
    total_shares = 0.0
    buy_ins: list[float] = []
    for investment in asset.investments:
        if investment.date >= valuation_date:
            continue
        buy_in = prices.valuation_buy_in(investment.date)
        if buy_in > 0:
            total_shares += investment.amount / buy_in
            buy_ins.append(buy_in)

    avg_buy_in = sum(buy_ins) / len(buy_ins) if buy_ins else float("nan")
    return AssetValue(
        invested_value=total_shares * current_price,
        avg_buy_in=avg_buy_in,
        shares=total_shares,
    )


__all__ = ["AssetValue", "calculate_asset_value_at_date"]
