import math
from dataclasses import replace
from typing import Dict, List

from .errors import InvalidInput
from .formatters import compact_money, money
from .schemas import (
    Band,
    GrowthResult,
    HorizonAdvice,
    Projection,
    ProjectionInsight,
    ProjectionParams,
    ProjectionSummary,
    RequiredContribution,
    RetirementNeeds,
    RiskAdjustedReturns,
    ScenarioOutcome,
    YearBreakdown,
)
from .validators import require_choice, require_non_negative, require_range

# Expected annual return as a decimal, by asset mix and risk appetite.
HISTORICAL_RETURNS: Dict[str, Dict[str, float]] = {
    "stocks": {"conservative": 0.07, "moderate": 0.10, "aggressive": 0.12},
    "bonds": {"conservative": 0.03, "moderate": 0.04, "aggressive": 0.05},
    "mixed": {"conservative": 0.05, "moderate": 0.075, "aggressive": 0.095},
}

# One standard deviation of the final balance, per risk tier. A rough band,
# not a distribution model.
VOLATILITY = {
    "conservative": 0.05,
    "moderate": 0.15,
    "aggressive": 0.25,
}

MAX_YEARS = 100

SCENARIO_FACTORS = {
    "conservative": 0.7,
    "expected": 1.0,
    "optimistic": 1.3,
}


def annual_return(asset_type: str, risk_tolerance: str) -> float:
    asset_type = require_choice("asset_type", asset_type, HISTORICAL_RETURNS)
    risk_tolerance = require_choice("risk_tolerance", risk_tolerance, HISTORICAL_RETURNS[asset_type])
    return HISTORICAL_RETURNS[asset_type][risk_tolerance]


def project_growth(initial: float, monthly: float, months: int, monthly_rate: float) -> GrowthResult:
    """Month-by-month compounding; `monthly_rate` is a decimal (0.00625, not 0.625)."""
    balance = initial
    contributions = initial
    for _ in range(months):
        balance = balance * (1 + monthly_rate) + monthly
        contributions += monthly

    gains = balance - contributions
    roi = round(gains / contributions * 100, 2) if contributions > 0 else 0.0
    return GrowthResult(
        final_balance=round(balance, 2),
        total_contributions=contributions,
        total_gains=round(gains, 2),
        roi=roi,
    )


def yearly_breakdown(initial: float, monthly: float, total_months: int, monthly_rate: float) -> List[YearBreakdown]:
    breakdown: List[YearBreakdown] = []
    balance = initial
    contributions = initial
    for year in range(1, math.ceil(total_months / 12) + 1):
        months_this_year = min(12, total_months - (year - 1) * 12)
        for _ in range(months_this_year):
            balance = balance * (1 + monthly_rate) + monthly
            contributions += monthly
        breakdown.append(YearBreakdown(
            year=year,
            balance=round(balance, 2),
            contributions=round(contributions, 2),
            gains=round(balance - contributions, 2),
        ))
    return breakdown


def projection_summary(initial: float, monthly: float, years: int, expected: GrowthResult) -> ProjectionSummary:
    total_invested = initial + monthly * years * 12
    gains = expected.total_gains
    insights = [
        ProjectionInsight(
            title="Time is Your Asset",
            message=(
                f"Over {years} years, compound interest can turn your {compact_money(total_invested)} "
                f"into {compact_money(expected.final_balance)}."
            ),
        )
    ]
    if monthly > 0:
        insights.append(ProjectionInsight(
            title="Consistency Pays Off",
            message=(
                f"Your regular {money(monthly)}/month contributions will generate approximately "
                f"{compact_money(expected.final_balance - total_invested)} in gains."
            ),
        ))
    if expected.roi > 50:
        insights.append(ProjectionInsight(
            title="Strong Returns Expected",
            message=f"With {expected.roi:.2f}% ROI, you're on track for excellent wealth building. Stay the course!",
        ))

    return ProjectionSummary(
        total_invested=total_invested,
        expected_value=expected.final_balance,
        expected_gains=gains,
        avg_monthly_gain=round(gains / (years * 12), 2),
        roi=expected.roi,
        insights=insights,
    )


def calculate_projection(params: ProjectionParams) -> Projection:
    initial = require_non_negative("initial_amount", params.initial_amount)
    monthly = require_non_negative("monthly_contribution", params.monthly_contribution)
    years = int(require_range("years", params.years, 1, MAX_YEARS))
    rate = annual_return(params.asset_type, params.risk_tolerance)

    base_monthly_rate = rate / 12
    months = years * 12
    scenarios = {
        name: project_growth(initial, monthly, months, base_monthly_rate * factor)
        for name, factor in SCENARIO_FACTORS.items()
    }
    return Projection(
        annual_return=rate,
        conservative=scenarios["conservative"],
        expected=scenarios["expected"],
        optimistic=scenarios["optimistic"],
        summary=projection_summary(initial, monthly, years, scenarios["expected"]),
        breakdown=yearly_breakdown(initial, monthly, months, base_monthly_rate),
    )


def required_contribution(target_amount: float, years: int, risk_tolerance: str = "moderate") -> RequiredContribution:
    """Level monthly saving whose ordinary-annuity future value hits the target."""
    target_amount = require_non_negative("target_amount", target_amount)
    years = int(require_range("years", years, 1, MAX_YEARS))
    r = annual_return("mixed", risk_tolerance) / 12
    months = years * 12

    if r == 0:
        payment = target_amount / months
    else:
        payment = target_amount * r / ((1 + r) ** months - 1)

    return RequiredContribution(
        monthly_contribution=round(payment, 2),
        total_contributions=round(payment * months, 2),
        total_gains=target_amount - payment * months,
        years=years,
        target_amount=target_amount,
    )


def retirement_needs(
    current_age: int,
    retirement_age: int = 65,
    desired_annual_income: float = 50_000,
    current_savings: float = 0.0,
    life_expectancy: int = 90,
    inflation_pct: float = 3.0,
) -> RetirementNeeds:
    """Lump sum needed at retirement, ignoring growth during drawdown."""
    years_to_retirement = retirement_age - current_age
    years_in_retirement = life_expectancy - retirement_age
    if years_to_retirement <= 0:
        raise InvalidInput("retirement_age", "must be greater than current_age")
    if years_in_retirement <= 0:
        raise InvalidInput("life_expectancy", "must be greater than retirement_age")
    current_savings = require_non_negative("current_savings", current_savings)

    future_income = desired_annual_income * (1 + inflation_pct / 100.0) ** years_to_retirement
    total_needed = future_income * years_in_retirement
    gap = total_needed - current_savings
    monthly_required = 0.0
    if gap > 0:
        monthly_required = required_contribution(gap, years_to_retirement, "moderate").monthly_contribution

    if years_to_retirement > 10:
        confidence = "high"
    elif years_to_retirement > 5:
        confidence = "medium"
    else:
        confidence = "low"

    return RetirementNeeds(
        years_to_retirement=years_to_retirement,
        years_in_retirement=years_in_retirement,
        future_annual_income=round(future_income),
        total_needed=round(total_needed),
        current_savings=current_savings,
        gap=round(gap),
        monthly_required=monthly_required,
        confidence=confidence,
    )


def horizon_advice(risk_tolerance: str, years: int) -> HorizonAdvice:
    if years < 3 and risk_tolerance == "aggressive":
        return HorizonAdvice(
            type="warning",
            message=(
                "Aggressive strategy with short timeline (<3 years) increases risk of losses. "
                "Consider moderating risk."
            ),
        )
    if years > 20 and risk_tolerance == "conservative":
        return HorizonAdvice(
            type="info",
            message=(
                "Long timeline (20+ years) allows for more aggressive growth. "
                "Consider increasing stock allocation."
            ),
        )
    return HorizonAdvice(type="success", message="Your risk tolerance aligns well with your investment timeline.")


def risk_adjusted_returns(params: ProjectionParams) -> RiskAdjustedReturns:
    projection = calculate_projection(params)
    std_dev = VOLATILITY[params.risk_tolerance]
    expected = projection.expected.final_balance
    spread = expected * std_dev
    return RiskAdjustedReturns(
        expected=expected,
        std_dev=std_dev,
        range68=Band(low=expected - spread, high=expected + spread),
        range95=Band(low=expected - 2 * spread, high=expected + 2 * spread),
        recommendation=horizon_advice(params.risk_tolerance, params.years),
    )


def compare_scenarios(params: ProjectionParams) -> List[ScenarioOutcome]:
    scenarios = [ScenarioOutcome(name="Start Today", projection=calculate_projection(params))]

    if params.years > 5:
        delayed = calculate_projection(replace(params, years=params.years - 5))
        cost = scenarios[0].projection.expected.final_balance - delayed.expected.final_balance
        scenarios.append(ScenarioOutcome(name="Wait 5 Years", projection=delayed, opportunity_cost=round(cost)))

    doubled = replace(params, monthly_contribution=params.monthly_contribution * 2)
    scenarios.append(ScenarioOutcome(name="Double Contributions", projection=calculate_projection(doubled)))
    return scenarios
