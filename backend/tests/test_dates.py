"""Calendar helper tests."""

from __future__ import annotations

from datetime import date

from portfolio_sim.dates import add_months, first_of_next_month, iter_days, set_day, years_between


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 14) == date(2026, 1, 15)


def test_set_day_overflows_into_next_month():
    assert set_day(date(2024, 2, 10), 31) == date(2024, 3, 2)
    assert set_day(date(2024, 1, 10), 31) == date(2024, 1, 31)


def test_first_of_next_month():
    assert first_of_next_month(date(2024, 12, 31)) == date(2025, 1, 1)


def test_years_between_counts_full_years():
    assert years_between(date(2034, 1, 1), date(2024, 1, 1)) == 10
    assert years_between(date(2033, 12, 31), date(2024, 1, 1)) == 9
    assert years_between(date(2024, 2, 28), date(2023, 2, 28)) == 1
    assert years_between(date(2024, 1, 1), date(2034, 1, 1)) == -10


def test_iter_days_excludes_end():
    assert list(iter_days(date(2024, 1, 30), date(2024, 2, 1))) == [date(2024, 1, 30), date(2024, 1, 31)]
