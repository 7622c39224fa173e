"""Portfolio store tests."""

from __future__ import annotations

from datetime import date

import pytest

from app.services.portfolio_store import PortfolioStore, default_date_range
from portfolio_sim.models import Asset, DateRange, Investment, InvestmentType, PeriodicSettings


def _asset(asset_id: str = "a") -> Asset:
    return Asset(id=asset_id, name="Fund", symbol="F", price_series={"2024-01-01": 10.0})


def _single(inv_id: str, asset_id: str = "a", amount: float = 100.0) -> Investment:
    return Investment(id=inv_id, asset_id=asset_id, kind=InvestmentType.SINGLE, amount=amount, date=date(2024, 1, 1))


def _plan() -> PeriodicSettings:
    return PeriodicSettings(start_date=date(2024, 1, 1), day_of_month=1, interval=1, amount=50.0)


def test_default_range_starts_at_new_year():
    assert default_date_range(date(2024, 8, 20)) == DateRange(date(2024, 1, 1), date(2024, 8, 20))


def test_add_and_remove_assets():
    store = PortfolioStore()
    store.add_asset(_asset("a"))
    store.add_asset(_asset("b"))

    with pytest.raises(ValueError):
        store.add_asset(_asset("a"))

    store.remove_asset("a")
    assert [asset.id for asset in store.assets] == ["b"]
    with pytest.raises(KeyError):
        store.get_asset("a")

    store.clear_assets()
    assert store.assets == []


def test_investment_crud():
    store = PortfolioStore()
    store.add_asset(_asset())
    store.add_investment("a", _single("inv-1"))
    store.add_investment("a", _single("inv-2"))

    store.update_investment("a", "inv-1", _single("inv-1", amount=250.0))
    assert [inv.amount for inv in store.get_asset("a").investments] == [250.0, 100.0]

    store.remove_investment("a", "inv-2")
    assert [inv.id for inv in store.get_asset("a").investments] == ["inv-1"]

    with pytest.raises(KeyError):
        store.remove_investment("a", "missing")
    with pytest.raises(KeyError):
        store.update_investment("a", "missing", _single("missing"))
    with pytest.raises(ValueError):
        store.add_investment("a", _single("inv-3", asset_id="b"))


def test_savings_plan_lifecycle():
    store = PortfolioStore()
    store.add_asset(_asset())
    store.add_investment("a", _single("lump"))

    generated = store.add_savings_plan("a", _plan(), date(2024, 6, 1))
    group_id = generated[0].periodic_group_id
    assert len(generated) == 6
    assert len(store.get_asset("a").investments) == 7

    regenerated = store.replace_savings_plan("a", group_id, _plan(), date(2024, 3, 1))
    investments = store.get_asset("a").investments
    assert len(regenerated) == 3
    assert len(investments) == 4
    assert all(inv.periodic_group_id != group_id for inv in investments)

    removed = store.remove_periodic_group("a", regenerated[0].periodic_group_id)
    assert removed == 3
    assert [inv.id for inv in store.get_asset("a").investments] == ["lump"]


def test_snapshots_are_not_affected_by_later_mutations():
    store = PortfolioStore(DateRange(date(2024, 1, 1), date(2024, 2, 1)))
    store.add_asset(_asset())
    assets, date_range = store.snapshot()

    store.add_investment("a", _single("inv-1"))
    store.update_price_series("a", {"2024-01-01": 12.0})

    assert assets[0].investments == ()
    assert assets[0].price_series == {"2024-01-01": 10.0}
    assert date_range == DateRange(date(2024, 1, 1), date(2024, 2, 1))


def test_update_date_range_rejects_inverted_range():
    store = PortfolioStore()
    with pytest.raises(ValueError):
        store.update_date_range(DateRange(date(2024, 2, 1), date(2024, 1, 1)))

    store.update_date_range(DateRange(date(2020, 1, 1), date(2024, 1, 1)))
    assert store.date_range.start_date == date(2020, 1, 1)


def test_clear_investments_keeps_assets():
    store = PortfolioStore()
    store.set_assets([_asset("a"), _asset("b")])
    store.add_investment("a", _single("inv-1"))
    store.add_investment("b", _single("inv-2", asset_id="b"))

    store.clear_investments()

    assert [asset.id for asset in store.assets] == ["a", "b"]
    assert all(asset.investments == () for asset in store.assets)
