"""Domain models used by the portfolio simulation engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Literal, Mapping, Optional, Tuple, Union


class InvestmentType(str, Enum):
    SINGLE = "single"
    PERIODIC = "periodic"


class IntervalUnit(str, Enum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    QUARTERS = "quarters"
    YEARS = "years"


class GrowthType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class WithdrawalInterval(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class StartTrigger(str, Enum):
    DATE = "date"
    PORTFOLIO_VALUE = "portfolioValue"
    AUTO = "auto"


class AutoStrategyType(str, Enum):
    MAINTAIN = "maintain"
    DEPLETE = "deplete"
    GROW = "grow"


@dataclass(frozen=True)
class Investment:
    """A single capital contribution to one asset."""

    id: str
    asset_id: str
    kind: InvestmentType
    amount: float
    date: date
    periodic_group_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind == InvestmentType.PERIODIC and not self.periodic_group_id:
            raise ValueError("periodic investments require a periodic_group_id")
        if self.kind == InvestmentType.SINGLE and self.periodic_group_id:
            raise ValueError("single investments cannot carry a periodic_group_id")


@dataclass(frozen=True)
class Asset:
    """A tradable instrument with its price history and investments.

    ``price_series`` maps ISO ``YYYY-MM-DD`` strings to prices.
    """

    id: str
    name: str
    symbol: str
    price_series: Mapping[str, float] = field(default_factory=dict)
    investments: Tuple[Investment, ...] = ()
    isin: str = ""
    wkn: str = ""
    quote_type: str = ""
    rank: str = ""


@dataclass(frozen=True)
class DynamicGrowth:
    type: GrowthType
    value: float
    year_interval: int


@dataclass(frozen=True)
class PeriodicSettings:
    """Recurrence rule expanded into periodic investments."""

    start_date: date
    day_of_month: int
    interval: int
    amount: float
    interval_unit: IntervalUnit = IntervalUnit.MONTHS
    dynamic: Optional[DynamicGrowth] = None


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date


@dataclass(frozen=True)
class DayData:
    """Portfolio totals for one sampled calendar day."""

    date: date
    total: float
    invested: float
    weighted_percentage_change: float
    percentage_change: float
    assets: Dict[str, float]


@dataclass(frozen=True)
class AutoStrategy:
    type: AutoStrategyType
    target_years: int = 30
    target_growth: float = 2.0


@dataclass(frozen=True)
class WithdrawalPlan:
    """Withdrawal configuration for the future projection."""

    amount: float
    interval: WithdrawalInterval = WithdrawalInterval.MONTHLY
    start_trigger: StartTrigger = StartTrigger.DATE
    start_date: Optional[date] = None
    start_portfolio_value: float = 0.0
    enabled: bool = True
    auto_strategy: Optional[AutoStrategy] = None


@dataclass(frozen=True)
class ProjectionData:
    date: date
    value: float
    invested: float
    withdrawals: float
    total_withdrawn: float


SustainableYears = Union[int, Literal["infinite"]]


@dataclass(frozen=True)
class SustainabilityAnalysis:
    years_to_reach_target: int
    target_value: float
    sustainable_years: SustainableYears


@dataclass(frozen=True)
class ProjectionResult:
    projection: list[ProjectionData]
    sustainability: SustainabilityAnalysis
    withdrawal_plan: Optional[WithdrawalPlan] = None


@dataclass(frozen=True)
class InvestmentPerformance:
    id: str
    asset_name: str
    date: date
    invested_amount: float
    invested_at_price: float
    current_value: float
    performance_percentage: float
    periodic_group_id: Optional[str] = None


@dataclass(frozen=True)
class AnnualPerformance:
    year: int
    percentage: float
    price: Optional[float] = None


@dataclass(frozen=True)
class PerformanceSummary:
    total_invested: float
    current_value: float
    performance_percentage: float
    performance_per_anno: float
    ttwor_value: float
    ttwor_percentage: float
    annual_performances: list[AnnualPerformance] = field(default_factory=list)
    best_performance_per_anno: list[AnnualPerformance] = field(default_factory=list)
    worst_performance_per_anno: list[AnnualPerformance] = field(default_factory=list)
    annual_performances_per_asset: Dict[str, list[AnnualPerformance]] = field(default_factory=dict)


@dataclass(frozen=True)
class PortfolioPerformance:
    investments: list[InvestmentPerformance]
    summary: PerformanceSummary


@dataclass(frozen=True)
class ScenarioProjection:
    """A projection run at one assumed annual return rate."""

    result: ProjectionResult
    annual_return_rate: float
    unaveraged_rate: float
    averaged_years: int
