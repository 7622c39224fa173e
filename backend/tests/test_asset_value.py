"""Single asset valuation tests."""

from __future__ import annotations

import math
from datetime import date

import pytest

from portfolio_sim.asset_value import calculate_asset_value_at_date
from portfolio_sim.models import Asset, Investment, InvestmentType


def _investment(day: date, amount: float = 100.0, inv_id: str = "inv-1") -> Investment:
    return Investment(id=inv_id, asset_id="a", kind=InvestmentType.SINGLE, amount=amount, date=day)


def _asset(series: dict[str, float], *investments: Investment) -> Asset:
    return Asset(id="a", name="Asset", symbol="AAA", price_series=series, investments=investments)


def test_value_at_unchanged_price_equals_amount():
    asset = _asset({"2024-01-01": 25.0, "2024-02-01": 30.0}, _investment(date(2024, 1, 1), 1000.0))

    value = calculate_asset_value_at_date(asset, date(2024, 3, 1), 25.0)

    assert value.invested_value == pytest.approx(1000.0)
    assert value.shares == pytest.approx(40.0)
    assert value.avg_buy_in == pytest.approx(25.0)


def test_investment_on_valuation_date_is_not_counted():
    asset = _asset({"2024-01-01": 10.0}, _investment(date(2024, 1, 1)))

    value = calculate_asset_value_at_date(asset, date(2024, 1, 1), 10.0)

    assert value.invested_value == 0.0
    assert math.isnan(value.avg_buy_in)


def test_missing_buy_in_uses_next_price_then_previous_price():
    asset = _asset(
        {"2024-01-02": 10.0, "2024-01-03": 20.0},
        _investment(date(2024, 1, 1), 100.0, "before"),
        _investment(date(2024, 1, 10), 100.0, "after"),
    )

    value = calculate_asset_value_at_date(asset, date(2024, 2, 1), 20.0)

    # 10 shares at the next price (10) plus 5 shares at the last price (20).
    assert value.shares == pytest.approx(15.0)
    assert value.invested_value == pytest.approx(300.0)
    assert value.avg_buy_in == pytest.approx(15.0)


def test_zero_prices_are_skipped_for_buy_in():
    asset = _asset({"2024-01-01": 0.0, "2024-01-02": 50.0}, _investment(date(2024, 1, 1)))

    value = calculate_asset_value_at_date(asset, date(2024, 1, 5), 50.0)

    assert value.shares == pytest.approx(2.0)


def test_empty_series_contributes_nothing():
    asset = _asset({}, _investment(date(2024, 1, 1)))

    value = calculate_asset_value_at_date(asset, date(2024, 6, 1), 0.0)

    assert value.shares == 0.0
    assert value.invested_value == 0.0
    assert math.isnan(value.avg_buy_in)
