"""Forward simulation of portfolio value with savings plans and withdrawals."""
from __future__ import annotations

import asyncio
import logging
import math
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .dates import add_months, years_between
from .models import (
    AnnualPerformance,
    Asset,
    AutoStrategy,
    AutoStrategyType,
    Investment,
    InvestmentType,
    PerformanceSummary,
    ProjectionData,
    ProjectionResult,
    ScenarioProjection,
    StartTrigger,
    SustainabilityAnalysis,
    SustainableYears,
    WithdrawalInterval,
    WithdrawalPlan,
)

logger = logging.getLogger(__name__)

# Internal horizon; sustainability needs it even for short display ranges.
MAX_PROJECTION_YEARS = 100
DEFAULT_TARGET_YEARS = 30
DEFAULT_TARGET_GROWTH = 2.0


class WithdrawalState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    ACTIVE = "ACTIVE"
    DEPLETED = "DEPLETED"


@dataclass(frozen=True)
class OptimalStart:
    start_date: Optional[date]
    required_portfolio_value: float
    months_to_reach: Optional[int]


def monthly_rate(annual_return_rate: float) -> float:
    """Convert an annual percentage return to the equivalent monthly rate."""

    base = 1 + annual_return_rate / 100
    if base <= 0:
        return -1.0
    return base ** (1 / 12) - 1


def _divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _sustainable(monthly_withdrawal: float, net_growth: float) -> float:
    # Unreachable unless net growth is positive.
    if net_growth <= 0:
        return math.inf
    return monthly_withdrawal / net_growth


def required_portfolio_value(
    monthly_withdrawal: float,
    monthly_growth: float,
    strategy: Optional[AutoStrategy],
) -> float:
    """Portfolio value that sustains ``monthly_withdrawal`` under ``strategy``."""

    if strategy is None:
        return 0.0
    r = monthly_growth
    if strategy.type == AutoStrategyType.MAINTAIN:
        return _sustainable(monthly_withdrawal, r)
    if strategy.type == AutoStrategyType.DEPLETE:
        months = (strategy.target_years or DEFAULT_TARGET_YEARS) * 12
        if r == 0:
            return monthly_withdrawal * months
        growth = (1 + r) ** months
        required = _divide(monthly_withdrawal * (growth - 1), r * growth)
        return required if required >= 0 else math.inf
    if strategy.type == AutoStrategyType.GROW:
        target_growth = (strategy.target_growth or DEFAULT_TARGET_GROWTH) / 100
        target_monthly_growth = (1 + target_growth) ** (1 / 12) - 1
        return _sustainable(monthly_withdrawal, r - target_monthly_growth)
    return 0.0


def _months_to_reach(required: float, current: float, monthly_growth: float) -> Optional[int]:
    if math.isnan(required):
        return None
    if required <= current:
        return 0
    if current <= 0 or monthly_growth <= 0 or math.isinf(required):
        return None
    return max(0, math.ceil(math.log(required / current) / math.log(1 + monthly_growth)))


def find_optimal_starting_point(
    current_portfolio_value: float,
    monthly_growth: float,
    desired_withdrawal: float,
    strategy: Optional[AutoStrategy],
    interval: WithdrawalInterval,
    today: date,
) -> OptimalStart:
    """Solve for when the portfolio can start funding ``desired_withdrawal``.

    ``start_date`` is ``None`` when the required value can never be reached.
    """

    monthly_withdrawal = desired_withdrawal / 12 if interval == WithdrawalInterval.YEARLY else desired_withdrawal
    required = required_portfolio_value(monthly_withdrawal, monthly_growth, strategy)
    months = _months_to_reach(required, current_portfolio_value, monthly_growth)
    start_date = add_months(today, months) if months is not None else None
    return OptimalStart(start_date=start_date, required_portfolio_value=required, months_to_reach=months)


def detect_periodic_patterns(assets: Sequence[Asset]) -> List[List[Investment]]:
    """Group periodic investments by periodic group id, each group sorted by date."""

    patterns: List[List[Investment]] = []
    for asset in assets:
        groups: Dict[str, List[Investment]] = {}
        for investment in asset.investments:
            if investment.kind == InvestmentType.PERIODIC and investment.periodic_group_id:
                groups.setdefault(investment.periodic_group_id, []).append(investment)
        patterns.extend(sorted(group, key=lambda inv: inv.date) for group in groups.values())
    return patterns


def project_future_installments(
    patterns: Sequence[Sequence[Investment]],
    horizon: date,
) -> Dict[Tuple[int, int], float]:
    """Continue each pattern's last cadence and amount step out to ``horizon``.

    Returns installment totals bucketed by ``(year, month)``.
    """

    buckets: Dict[Tuple[int, int], float] = defaultdict(float)
    for pattern in patterns:
        if len(pattern) < 2:
            continue
        last, second_last = pattern[-1], pattern[-2]
        step = last.date - second_last.date
        if step.days <= 0:
            logger.warning("Skipping periodic group %s with non-increasing dates", last.periodic_group_id)
            continue
        amount_diff = last.amount - second_last.amount
        current_date = last.date
        current_amount = last.amount
        while current_date <= horizon:
            current_date = current_date + step
            current_amount += amount_diff
            buckets[(current_date.year, current_date.month)] += current_amount
    return buckets


def _resolve_plan(
    withdrawal_plan: Optional[WithdrawalPlan],
    portfolio_value: float,
    monthly_growth: float,
    today: date,
) -> Optional[WithdrawalPlan]:
    if withdrawal_plan is None or not withdrawal_plan.enabled:
        return None
    if withdrawal_plan.start_trigger != StartTrigger.AUTO:
        return withdrawal_plan
    optimal = find_optimal_starting_point(
        portfolio_value,
        monthly_growth,
        withdrawal_plan.amount,
        withdrawal_plan.auto_strategy,
        withdrawal_plan.interval,
        today,
    )
    logger.debug(
        "Auto withdrawal start %s at required value %.2f",
        optimal.start_date,
        optimal.required_portfolio_value,
    )
    return replace(
        withdrawal_plan,
        start_date=optimal.start_date,
        start_portfolio_value=optimal.required_portfolio_value,
    )


def _should_start(plan: WithdrawalPlan, current_date: date, portfolio_value: float) -> bool:
    if plan.start_trigger == StartTrigger.DATE:
        return plan.start_date is not None and current_date >= plan.start_date
    # Auto plans start once the solved portfolio value is reached.
    return portfolio_value >= (plan.start_portfolio_value or 0)


def _withdrawal_for_month(plan: WithdrawalPlan, current_date: date) -> float:
    if plan.interval == WithdrawalInterval.MONTHLY:
        return plan.amount
    return plan.amount if current_date.month == 1 else 0.0


def calculate_future_projection(
    assets: Sequence[Asset],
    years_to_project: int,
    annual_return_rate: float,
    withdrawal_plan: Optional[WithdrawalPlan] = None,
    start: Optional[date] = None,
) -> ProjectionResult:
    """Simulate the portfolio month by month for ``MAX_PROJECTION_YEARS``.

    Rows are only recorded for the first ``years_to_project`` years. The
    portfolio starts at the total invested capital and compounds at the
    monthly equivalent of ``annual_return_rate`` (percent). Future savings
    plan installments are added until withdrawals start.
    """

    today = start or date.today()
    end_for_display = add_months(today, years_to_project * 12)
    end_for_calculation = add_months(today, MAX_PROJECTION_YEARS * 12)
    future_installments = project_future_installments(detect_periodic_patterns(assets), end_for_calculation)

    total_invested = sum(inv.amount for asset in assets for inv in asset.investments)
    portfolio_value = total_invested
    monthly_growth = monthly_rate(annual_return_rate)
    plan = _resolve_plan(withdrawal_plan, portfolio_value, monthly_growth, today)

    state = WithdrawalState.NOT_STARTED
    withdrawal_start: Optional[date] = None
    depletion_date: Optional[date] = None
    depleted_with_withdrawal = False
    target_value = 0.0
    years_to_reach_target = 0
    total_withdrawn = 0.0
    projection: List[ProjectionData] = []

    month_index = 0
    current_date = today
    while current_date <= end_for_calculation:
        if plan is not None and state == WithdrawalState.NOT_STARTED:
            if _should_start(plan, current_date, portfolio_value):
                state = WithdrawalState.ACTIVE
                withdrawal_start = current_date

        if portfolio_value > 0:
            portfolio_value *= 1 + monthly_growth

        if state == WithdrawalState.NOT_STARTED:
            installment = future_installments.get((current_date.year, current_date.month), 0.0)
            total_invested += installment
            portfolio_value += installment

        withdrawal = 0.0
        if plan is not None and state == WithdrawalState.ACTIVE:
            if portfolio_value > 0:
                withdrawal = _withdrawal_for_month(plan, current_date)
                portfolio_value -= withdrawal
                if portfolio_value < 0:
                    withdrawal += portfolio_value
                    portfolio_value = 0.0
                total_withdrawn += withdrawal
            if portfolio_value <= 0:
                state = WithdrawalState.DEPLETED
                depletion_date = current_date
                depleted_with_withdrawal = withdrawal > 0

        if withdrawal_start == current_date:
            target_value = portfolio_value
            years_to_reach_target = years_between(current_date, today)

        if current_date <= end_for_display:
            projection.append(
                ProjectionData(
                    date=current_date,
                    value=max(0.0, portfolio_value),
                    invested=total_invested,
                    withdrawals=withdrawal,
                    total_withdrawn=total_withdrawn,
                )
            )

        month_index += 1
        current_date = add_months(today, month_index)

    if withdrawal_start is None and plan is not None and plan.start_date is not None:
        years_to_reach_target = years_between(plan.start_date, today)

    sustainable_years: SustainableYears = "infinite"
    if depletion_date is not None and withdrawal_start is not None:
        # The last withdrawal covers one full withdrawal period.
        covered_months = 12 if plan is not None and plan.interval == WithdrawalInterval.YEARLY else 1
        depleted_after = add_months(depletion_date, covered_months) if depleted_with_withdrawal else depletion_date
        sustainable_years = years_between(depleted_after, withdrawal_start)

    return ProjectionResult(
        projection=projection,
        sustainability=SustainabilityAnalysis(
            years_to_reach_target=years_to_reach_target,
            target_value=target_value,
            sustainable_years=sustainable_years,
        ),
        withdrawal_plan=plan,
    )


def _scenario_rate(performances: Sequence[AnnualPerformance]) -> Tuple[float, int]:
    count = len(performances) // 2 if len(performances) > 1 else 1
    sliced = list(performances[:count])
    if not sliced:
        return 0.0, 0
    return sum(p.percentage for p in sliced) / len(sliced), len(sliced)


async def project_scenarios(
    assets: Sequence[Asset],
    years_to_project: int,
    summary: PerformanceSummary,
    withdrawal_plan: Optional[WithdrawalPlan] = None,
    start: Optional[date] = None,
) -> Dict[str, ScenarioProjection]:
    """Run base, best and worst case projections concurrently.

    Best and worst rates average the top (bottom) half of the yearly
    performances and then blend that with the average yearly performance.
    """

    base_rate = summary.performance_per_anno
    best_rate, best_count = _scenario_rate(summary.best_performance_per_anno)
    worst_rate, worst_count = _scenario_rate(summary.worst_performance_per_anno)
    best_averaged = (best_rate + base_rate) / 2
    worst_averaged = (worst_rate + base_rate) / 2

    base, best, worst = await asyncio.gather(
        asyncio.to_thread(calculate_future_projection, assets, years_to_project, base_rate, withdrawal_plan, start),
        asyncio.to_thread(calculate_future_projection, assets, years_to_project, best_averaged, withdrawal_plan, start),
        asyncio.to_thread(calculate_future_projection, assets, years_to_project, worst_averaged, withdrawal_plan, start),
    )
    return {
        "base": ScenarioProjection(
            result=base,
            annual_return_rate=base_rate,
            unaveraged_rate=base_rate,
            averaged_years=len(summary.annual_performances),
        ),
        "best": ScenarioProjection(
            result=best,
            annual_return_rate=best_averaged,
            unaveraged_rate=best_rate,
            averaged_years=best_count,
        ),
        "worst": ScenarioProjection(
            result=worst,
            annual_return_rate=worst_averaged,
            unaveraged_rate=worst_rate,
            averaged_years=worst_count,
        ),
    }


__all__ = [
    "MAX_PROJECTION_YEARS",
    "OptimalStart",
    "WithdrawalState",
    "calculate_future_projection",
    "detect_periodic_patterns",
    "find_optimal_starting_point",
    "monthly_rate",
    "project_future_installments",
    "project_scenarios",
    "required_portfolio_value",
]
