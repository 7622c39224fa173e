"""In-memory portfolio state container.

The store owns the assets and the selected date range. Every mutation
replaces immutable records so snapshots handed to the engine never change
underneath it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, Mapping, Sequence

from portfolio_sim.models import Asset, DateRange, Investment, PeriodicSettings
from portfolio_sim.periodic import generate_periodic_investments

logger = logging.getLogger(__name__)


def default_date_range(today: date | None = None) -> DateRange:
    today = today or date.today()
    return DateRange(start_date=date(today.year, 1, 1), end_date=today)


class PortfolioStore:
    """Minimal in-memory portfolio repository."""

    def __init__(self, date_range: DateRange | None = None):
        self._assets: Dict[str, Asset] = {}
        self._date_range = date_range or default_date_range()

    @property
    def assets(self) -> list[Asset]:
        return list(self._assets.values())

    @property
    def date_range(self) -> DateRange:
        return self._date_range

    def snapshot(self) -> tuple[list[Asset], DateRange]:
        """Return a consistent ``(assets, date_range)`` pair for the engine."""

        return list(self._assets.values()), self._date_range

    def get_asset(self, asset_id: str) -> Asset:
        if asset_id not in self._assets:
            raise KeyError(f"Asset {asset_id} does not exist")
        return self._assets[asset_id]

    def add_asset(self, asset: Asset) -> Asset:
        if asset.id in self._assets:
            raise ValueError(f"Asset {asset.id} already exists")
        self._assets[asset.id] = asset
        logger.info("Added asset %s (%s)", asset.id, asset.symbol)
        return asset

    def remove_asset(self, asset_id: str) -> None:
        self.get_asset(asset_id)
        del self._assets[asset_id]

    def clear_assets(self) -> None:
        self._assets = {}

    def set_assets(self, assets: Iterable[Asset]) -> None:
        self._assets = {asset.id: asset for asset in assets}

    def update_date_range(self, date_range: DateRange) -> None:
        if date_range.start_date > date_range.end_date:
            raise ValueError("start_date cannot be after end_date")
        self._date_range = date_range

    def update_price_series(self, asset_id: str, price_series: Mapping[str, float]) -> Asset:
        return self._store(replace(self.get_asset(asset_id), price_series=dict(price_series)))

    def add_investment(self, asset_id: str, investment: Investment) -> Asset:
        return self.add_investments(asset_id, [investment])

    def add_investments(self, asset_id: str, investments: Sequence[Investment]) -> Asset:
        for investment in investments:
            if investment.asset_id != asset_id:
                raise ValueError(f"Investment {investment.id} belongs to asset {investment.asset_id}")
        asset = self.get_asset(asset_id)
        return self._store(replace(asset, investments=asset.investments + tuple(investments)))

    def add_savings_plan(self, asset_id: str, settings: PeriodicSettings, end_date: date) -> list[Investment]:
        """Generate a savings plan's installments and attach them to the asset."""

        investments = generate_periodic_investments(settings, end_date, asset_id)
        self.add_investments(asset_id, investments)
        return investments

    def remove_investment(self, asset_id: str, investment_id: str) -> Asset:
        asset = self.get_asset(asset_id)
        remaining = tuple(inv for inv in asset.investments if inv.id != investment_id)
        if len(remaining) == len(asset.investments):
            raise KeyError(f"Investment {investment_id} does not exist")
        return self._store(replace(asset, investments=remaining))

    def update_investment(self, asset_id: str, investment_id: str, updated: Investment) -> Asset:
        asset = self.get_asset(asset_id)
        if not any(inv.id == investment_id for inv in asset.investments):
            raise KeyError(f"Investment {investment_id} does not exist")
        investments = tuple(updated if inv.id == investment_id else inv for inv in asset.investments)
        return self._store(replace(asset, investments=investments))

    def remove_periodic_group(self, asset_id: str, periodic_group_id: str) -> int:
        """Delete every installment of one savings plan; return how many were removed."""

        asset = self.get_asset(asset_id)
        remaining = tuple(inv for inv in asset.investments if inv.periodic_group_id != periodic_group_id)
        self._store(replace(asset, investments=remaining))
        return len(asset.investments) - len(remaining)

    def replace_savings_plan(
        self,
        asset_id: str,
        periodic_group_id: str,
        settings: PeriodicSettings,
        end_date: date,
    ) -> list[Investment]:
        """Edit a savings plan by deleting its group and regenerating it."""

        self.remove_periodic_group(asset_id, periodic_group_id)
        return self.add_savings_plan(asset_id, settings, end_date)

    def clear_investments(self) -> None:
        self._assets = {asset_id: replace(asset, investments=()) for asset_id, asset in self._assets.items()}

    def _store(self, asset: Asset) -> Asset:
        self._assets[asset.id] = asset
        return asset


__all__ = ["PortfolioStore", "default_date_range"]
