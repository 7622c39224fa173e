"""Backtest a savings plan on one symbol and project the portfolio forward."""

from __future__ import annotations

import argparse
import asyncio
import logging
import uuid
from datetime import date

from app.config import get_settings
from app.core.logging import setup_logging
from app.providers.yahoo_finance import YahooFinanceClient
from app.services.export import projection_frame, to_csv
from app.services.portfolio_store import PortfolioStore
from portfolio_sim import (
    Asset,
    DateRange,
    PeriodicSettings,
    WithdrawalPlan,
    calculate_investment_performance,
    calculate_portfolio_value,
    project_scenarios,
)
from portfolio_sim.models import AutoStrategy, AutoStrategyType, IntervalUnit, StartTrigger, WithdrawalInterval

logger = logging.getLogger(__name__)


async def _run(args: argparse.Namespace) -> None:
    settings = get_settings()
    today = date.today()
    start = date.fromisoformat(args.start)
    store = PortfolioStore(DateRange(start, today))

    async with YahooFinanceClient() as client:
        history = await client.fetch_historical_data(args.symbol, start, today)
    if history.is_empty:
        print(f"No price data for {args.symbol}")
        return
    logger.info("Fetched %d prices for %s", len(history.series), history.symbol)

    asset = Asset(
        id=str(uuid.uuid4()),
        name=history.display_name or history.symbol,
        symbol=history.symbol,
        price_series=history.series,
    )
    store.add_asset(asset)
    plan = PeriodicSettings(
        start_date=start,
        day_of_month=args.day,
        interval=1,
        amount=args.amount,
        interval_unit=IntervalUnit.MONTHS,
    )
    store.add_savings_plan(asset.id, plan, today)

    assets, date_range = store.snapshot()
    days = calculate_portfolio_value(assets, date_range)
    performance = calculate_investment_performance(assets, as_of=today)
    summary = performance.summary
    print(f"Days valued: {len(days)}")
    print(f"Total invested: {summary.total_invested:.2f}")
    print(f"Current value: {summary.current_value:.2f} ({summary.performance_percentage:.2f}%)")
    print(f"Per anno: {summary.performance_per_anno:.2f}%")
    print(f"TTWOR: {summary.ttwor_value:.2f} ({summary.ttwor_percentage:.2f}%)")

    withdrawal = None
    if args.withdraw:
        withdrawal = WithdrawalPlan(
            amount=args.withdraw,
            interval=WithdrawalInterval.MONTHLY,
            start_trigger=StartTrigger.AUTO,
            auto_strategy=AutoStrategy(AutoStrategyType.MAINTAIN),
        )
    years = args.years or settings.default_projection_years
    scenarios = await project_scenarios(assets, years, summary, withdrawal)
    for name, scenario in scenarios.items():
        sustainability = scenario.result.sustainability
        final = scenario.result.projection[-1]
        print(
            f"{name}: {scenario.annual_return_rate:.2f}% p.a. -> {final.value:.2f} after {years} years,"
            f" sustainable years: {sustainability.sustainable_years}"
        )
    if args.csv:
        print(to_csv(projection_frame(scenarios["base"].result.projection)))


def main() -> None:
    parser = argparse.ArgumentParser(description="Project a monthly savings plan on one symbol")
    parser.add_argument("--symbol", required=True)
    parser.add_argument("--start", required=True, help="First installment date (YYYY-MM-DD)")
    parser.add_argument("--amount", type=float, default=100.0)
    parser.add_argument("--day", type=int, default=1, help="Day of month of each installment")
    parser.add_argument("--years", type=int, default=None)
    parser.add_argument("--withdraw", type=float, default=None, help="Monthly withdrawal amount")
    parser.add_argument("--csv", action="store_true", help="Print the base projection as CSV")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
