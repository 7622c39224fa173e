"""Core package for the portfolio simulation engine."""

from .asset_value import AssetValue, calculate_asset_value_at_date
from .intervals import interval_based_on_date_range
from .models import (
    Asset,
    AutoStrategy,
    DateRange,
    DayData,
    DynamicGrowth,
    Investment,
    PeriodicSettings,
    PortfolioPerformance,
    ProjectionData,
    ProjectionResult,
    SustainabilityAnalysis,
    WithdrawalPlan,
)
from .performance import calculate_investment_performance
from .periodic import generate_periodic_investments
from .portfolio_value import calculate_portfolio_value
from .projection import calculate_future_projection, find_optimal_starting_point, project_scenarios

__all__ = [
    "Asset",
    "AssetValue",
    "AutoStrategy",
    "DateRange",
    "DayData",
    "DynamicGrowth",
    "Investment",
    "PeriodicSettings",
    "PortfolioPerformance",
    "ProjectionData",
    "ProjectionResult",
    "SustainabilityAnalysis",
    "WithdrawalPlan",
    "calculate_asset_value_at_date",
    "calculate_future_projection",
    "calculate_investment_performance",
    "calculate_portfolio_value",
    "find_optimal_starting_point",
    "generate_periodic_investments",
    "interval_based_on_date_range",
    "project_scenarios",
]
