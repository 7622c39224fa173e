"""Per-investment and portfolio-level performance analysis."""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Sequence

from .models import (
    AnnualPerformance,
    Asset,
    InvestmentPerformance,
    PerformanceSummary,
    PortfolioPerformance,
)
from .pricing import PriceLookup

logger = logging.getLogger(__name__)


def _percent_change(start: float, end: float) -> float:
    return (end - start) / start * 100


def calculate_ttwor_value(assets: Sequence[Asset], lookups: Dict[str, PriceLookup]) -> float:
    """Value of all capital invested per asset at that asset's first price."""

    ttwor_value = 0.0
    for asset in assets:
        lookup = lookups[asset.id]
        first_price, last_price = lookup.first_price, lookup.last_price
        if first_price > 0 and last_price:
            invested = sum(inv.amount for inv in asset.investments)
            ttwor_value += invested / first_price * last_price
    return ttwor_value


def _asset_annual_performances(lookup: PriceLookup, as_of: date) -> List[AnnualPerformance]:
    first_date = lookup.first_date
    if first_date is None:
        return []
    performances: List[AnnualPerformance] = []
    for year in range(first_date.year, as_of.year + 1):
        start_price, end_price = lookup.year_bounds(date(year, 1, 1), date(year, 12, 31))
        if start_price and end_price:
            performances.append(
                AnnualPerformance(
                    year=year,
                    percentage=_percent_change(start_price, end_price),
                    price=(start_price + end_price) / 2,
                )
            )
    return performances


def _portfolio_annual_performances(
    assets: Sequence[Asset],
    lookups: Dict[str, PriceLookup],
    as_of: date,
) -> List[AnnualPerformance]:
    investment_dates = [inv.date for asset in assets for inv in asset.investments]
    start_year = min(investment_dates).year if investment_dates else as_of.year

    performances: List[AnnualPerformance] = []
    for year in range(start_year, as_of.year + 1):
        year_start = date(year, 1, 1)
        year_end = as_of if year == as_of.year else date(year, 12, 31)
        weighted: list[tuple[float, float]] = []

        for asset in assets:
            lookup = lookups[asset.id]
            start_price, end_price = lookup.year_bounds(year_start, year_end)
            if not start_price or not end_price:
                logger.warning("Skipping asset %s for year %s due to missing start or end price", asset.id, year)
                continue
            for investment in asset.investments:
                if not year_start <= investment.date <= year_end:
                    continue
                buy_in = lookup.nearest_buy_in(investment.date)
                if buy_in <= 0:
                    continue
                shares = investment.amount / buy_in
                start_value = shares * start_price
                end_value = shares * end_price
                weighted.append((_percent_change(start_value, end_value), start_value))

        total_weight = sum(weight for _, weight in weighted)
        if not weighted or total_weight <= 0:
            logger.warning("Skipping year %s due to zero portfolio values", year)
            continue
        percentage = sum(percent * (weight / total_weight) for percent, weight in weighted)
        performances.append(AnnualPerformance(year=year, percentage=percentage))
    return performances


def calculate_investment_performance(
    assets: Sequence[Asset],
    as_of: Optional[date] = None,
) -> PortfolioPerformance:
    """Summarize every investment against the latest known price of its asset.

    Includes the TTWOR baseline ("all capital invested on day one") and the
    yearly performance breakdown up to ``as_of`` (defaults to today).
    """

    today = as_of or date.today()
    lookups = {asset.id: PriceLookup(asset.price_series) for asset in assets}

    investments: List[InvestmentPerformance] = []
    total_invested = 0.0
    total_current_value = 0.0
    for asset in assets:
        lookup = lookups[asset.id]
        current_price = lookup.last_price
        for investment in asset.investments:
            buy_in = lookup.nearest_buy_in(investment.date)
            shares = investment.amount / buy_in if buy_in > 0 else 0.0
            current_value = shares * current_price
            investments.append(
                InvestmentPerformance(
                    id=investment.id,
                    asset_name=asset.name,
                    date=investment.date,
                    invested_amount=investment.amount,
                    invested_at_price=buy_in,
                    current_value=current_value,
                    performance_percentage=(
                        _percent_change(investment.amount, current_value) if investment.amount > 0 else 0.0
                    ),
                    periodic_group_id=investment.periodic_group_id,
                )
            )
            total_invested += investment.amount
            total_current_value += current_value

    ttwor_value = calculate_ttwor_value(assets, lookups)
    annual = _portfolio_annual_performances(assets, lookups, today)
    best = sorted(annual, key=lambda perf: perf.percentage, reverse=True)
    worst = list(reversed(best))

    summary = PerformanceSummary(
        total_invested=total_invested,
        current_value=total_current_value,
        performance_percentage=(
            _percent_change(total_invested, total_current_value) if total_invested > 0 else 0.0
        ),
        performance_per_anno=sum(p.percentage for p in annual) / len(annual) if annual else 0.0,
        ttwor_value=ttwor_value,
        ttwor_percentage=_percent_change(total_invested, ttwor_value) if total_invested > 0 else 0.0,
        annual_performances=annual,
        best_performance_per_anno=best,
        worst_performance_per_anno=worst,
        annual_performances_per_asset={
            asset.id: _asset_annual_performances(lookups[asset.id], today) for asset in assets
        },
    )
    return PortfolioPerformance(investments=investments, summary=summary)


__all__ = ["calculate_investment_performance", "calculate_ttwor_value"]
