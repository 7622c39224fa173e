"""Tabular export of engine results via pandas."""

from __future__ import annotations

from dataclasses import asdict
from typing import Iterable, Sequence

import pandas as pd

from portfolio_sim.models import DayData, InvestmentPerformance, ProjectionData


def _is_identifier(column: str) -> bool:
    return column == "id" or column.endswith("_id")


def _frame(rows: Iterable[object]) -> pd.DataFrame:
    return pd.DataFrame([asdict(row) for row in rows])


def performance_frame(rows: Sequence[InvestmentPerformance]) -> pd.DataFrame:
    return _frame(rows)


def projection_frame(rows: Sequence[ProjectionData]) -> pd.DataFrame:
    df = _frame(rows)
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"])
        df = df.set_index("date")
    return df


def day_frame(rows: Sequence[DayData]) -> pd.DataFrame:
    """One row per day with the totals and one price column per asset."""

    records = []
    for row in rows:
        record = {
            "date": row.date,
            "total": row.total,
            "invested": row.invested,
            "weighted_percentage_change": row.weighted_percentage_change,
            "percentage_change": row.percentage_change,
        }
        record.update({f"price_{asset_id}": price for asset_id, price in row.assets.items()})
        records.append(record)
    df = pd.DataFrame(records)
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"])
        df = df.set_index("date")
    return df


def to_csv(df: pd.DataFrame) -> str:
    """Render ``df`` as CSV without identifier columns and with capitalized headers."""

    if df.empty:
        return ""
    exported = df.drop(columns=[col for col in df.columns if _is_identifier(str(col))])
    exported = exported.rename(columns=lambda col: str(col)[:1].upper() + str(col)[1:])
    if exported.index.name:
        exported.index.name = exported.index.name[:1].upper() + exported.index.name[1:]
        return exported.to_csv(float_format="%.2f", date_format="%Y-%m-%d")
    return exported.to_csv(index=False, float_format="%.2f", date_format="%Y-%m-%d")


__all__ = ["day_frame", "performance_frame", "projection_frame", "to_csv"]
