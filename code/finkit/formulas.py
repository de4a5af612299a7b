"""Closed-form savings, deposit and planning formulas.

Every rate argument is a whole-number percent (12 means 12% a year). The
conversion to a decimal periodic rate happens inside each function.
"""

import math
import os
from typing import Optional

from .errors import InvalidInput
from .schemas import (
    AgeAllocation,
    CompoundInterestResult,
    EmergencyFundResult,
    FdResult,
    RatioResult,
    RetirementResult,
    SipResult,
)
from .utils import clamp, monthly_rate, safe_div
from .validators import (
    require_choice,
    require_non_negative,
    require_positive,
    require_range,
)

FD_COMPOUNDING_PER_YEAR = int(os.getenv("NEXTOMIC_FD_COMPOUNDING", "4"))
LIFE_EXPECTANCY = int(os.getenv("NEXTOMIC_LIFE_EXPECTANCY", "80"))

RISK_ADJUSTMENTS = {
    "conservative": -10,
    "moderate": 0,
    "aggressive": 10,
}
STOCK_SPLIT = {
    "large_cap": 0.6,
    "international": 0.3,
    "small_cap": 0.1,
}


def sip_future_value(monthly_investment: float, annual_rate_pct: float, years: float) -> SipResult:
    monthly_investment = require_positive("monthly_investment", monthly_investment)
    annual_rate_pct = require_non_negative("annual_rate_pct", annual_rate_pct)
    years = require_positive("years", years)

    r = monthly_rate(annual_rate_pct)
    n = int(round(years * 12))
    if n == 0:
        raise InvalidInput("years", "must cover at least one month")
    if r == 0:
        future_value = monthly_investment * n
    else:
        future_value = monthly_investment * ((1 + r) ** n - 1) / r * (1 + r)
    invested = monthly_investment * n
    return SipResult(months=n, invested=invested, returns=future_value - invested, future_value=future_value)


def fd_maturity(
    principal: float,
    annual_rate_pct: float,
    years: float,
    compounding_per_year: Optional[int] = None,
) -> FdResult:
    principal = require_positive("principal", principal)
    annual_rate_pct = require_non_negative("annual_rate_pct", annual_rate_pct)
    years = require_positive("years", years)
    k = compounding_per_year if compounding_per_year is not None else FD_COMPOUNDING_PER_YEAR
    k = int(require_positive("compounding_per_year", k))

    r = annual_rate_pct / 100.0
    maturity = principal * (1 + r / k) ** (k * years)
    return FdResult(
        principal=principal,
        interest=maturity - principal,
        maturity_amount=maturity,
        compounding_per_year=k,
    )


def retirement_corpus(
    current_age: int,
    retire_age: int,
    monthly_expense: float,
    inflation_pct: float,
    return_pct: float,
    life_expectancy: Optional[int] = None,
) -> RetirementResult:
    """Corpus needed at retirement and the level monthly saving that builds it.

    Today's expense is inflated to the retirement date, then funded for every
    month of retirement as an annuity-due discounted at the real (inflation
    adjusted) rate. The pre-retirement saving is an annuity-due at the nominal
    rate whose future value equals that corpus.
    """
    life_expectancy = life_expectancy if life_expectancy is not None else LIFE_EXPECTANCY
    monthly_expense = require_positive("monthly_expense", monthly_expense)
    inflation_pct = require_non_negative("inflation_pct", inflation_pct)
    return_pct = require_non_negative("return_pct", return_pct)
    current_age = int(require_non_negative("current_age", current_age))
    retire_age = int(require_range("retire_age", retire_age, current_age + 1, 150))
    life_expectancy = int(require_range("life_expectancy", life_expectancy, retire_age + 1, 150))

    years_to_retirement = retire_age - current_age
    years_in_retirement = life_expectancy - retire_age
    future_expense = monthly_expense * (1 + inflation_pct / 100.0) ** years_to_retirement

    real_rate = (return_pct - inflation_pct) / 1200.0
    payout_months = years_in_retirement * 12
    if real_rate == 0:
        corpus = future_expense * payout_months
    else:
        corpus = future_expense * (1 - (1 + real_rate) ** -payout_months) / real_rate * (1 + real_rate)

    nominal_rate = monthly_rate(return_pct)
    saving_months = years_to_retirement * 12
    if nominal_rate == 0:
        contribution = corpus / saving_months
    else:
        contribution = corpus * nominal_rate / (((1 + nominal_rate) ** saving_months - 1) * (1 + nominal_rate))

    return RetirementResult(
        years_to_retirement=years_to_retirement,
        years_in_retirement=years_in_retirement,
        future_monthly_expense=future_expense,
        corpus_needed=corpus,
        monthly_contribution=contribution,
    )


def asset_allocation_by_age(age: int, risk_tolerance: str = "moderate") -> AgeAllocation:
    age = require_range("age", age, 0, 120)
    risk_tolerance = require_choice("risk_tolerance", risk_tolerance, RISK_ADJUSTMENTS)

    stocks = clamp(110 - age + RISK_ADJUSTMENTS[risk_tolerance], 20, 90)
    bonds = 100 - stocks
    recommended = {name: round(stocks * share) for name, share in STOCK_SPLIT.items()}
    recommended["bonds"] = bonds
    return AgeAllocation(stocks=stocks, bonds=bonds, recommended=recommended)


def compound_interest(principal: float, annual_rate_pct: float, years: float, frequency: int = 12) -> CompoundInterestResult:
    principal = require_positive("principal", principal)
    annual_rate_pct = require_non_negative("annual_rate_pct", annual_rate_pct)
    years = require_positive("years", years)
    frequency = int(require_positive("frequency", frequency))

    amount = principal * (1 + annual_rate_pct / 100.0 / frequency) ** (frequency * years)
    return CompoundInterestResult(
        principal=principal,
        final_amount=round(amount, 2),
        interest=round(amount - principal, 2),
    )


def emergency_fund(monthly_expenses: float, months: int = 6) -> EmergencyFundResult:
    monthly_expenses = require_non_negative("monthly_expenses", monthly_expenses)
    return EmergencyFundResult(
        minimum=monthly_expenses * 3,
        recommended=monthly_expenses * months,
        ideal=monthly_expenses * 12,
    )


def _dti_recommendation(ratio: float) -> str:
    if ratio <= 28:
        return "Your debt-to-income ratio is excellent. You have good financial flexibility."
    if ratio <= 36:
        return "Your debt-to-income ratio is good. Consider paying down debt to improve it further."
    if ratio <= 43:
        return "Your debt-to-income ratio is manageable but high. Focus on reducing debt."
    return "Your debt-to-income ratio is high. Prioritize debt reduction immediately."


def debt_to_income(monthly_debt: float, monthly_income: float) -> RatioResult:
    monthly_debt = require_non_negative("monthly_debt", monthly_debt)
    monthly_income = require_non_negative("monthly_income", monthly_income)
    ratio = safe_div(monthly_debt, monthly_income, 0.0) * 100

    rating = "Excellent"
    if ratio > 43:
        rating = "Poor"
    elif ratio > 36:
        rating = "Fair"
    elif ratio > 28:
        rating = "Good"
    return RatioResult(value=round(ratio, 1), rating=rating, recommendation=_dti_recommendation(ratio))


def _savings_recommendation(rate: float) -> str:
    if rate >= 20:
        return "Excellent savings rate! You're on track for strong financial security."
    if rate >= 10:
        return "Good savings rate. Try to increase to 20% or more for faster wealth building."
    if rate >= 5:
        return "You're saving, but try to increase your rate. Start with the 20% rule."
    return "Your savings rate is low. Start with at least 5% and increase gradually."


def savings_rate(monthly_income: float, monthly_savings: float) -> RatioResult:
    monthly_income = require_non_negative("monthly_income", monthly_income)
    monthly_savings = require_non_negative("monthly_savings", monthly_savings)
    rate = safe_div(monthly_savings, monthly_income, 0.0) * 100

    rating = "Excellent"
    if rate < 5:
        rating = "Poor"
    elif rate < 10:
        rating = "Fair"
    elif rate < 20:
        rating = "Good"
    return RatioResult(value=round(rate, 1), rating=rating, recommendation=_savings_recommendation(rate))


def break_even(fixed_costs: float, price_per_unit: float, variable_cost_per_unit: float) -> Optional[int]:
    """Units to sell before covering fixed costs; None when no margin is earned per unit."""
    fixed_costs = require_non_negative("fixed_costs", fixed_costs)
    margin = price_per_unit - variable_cost_per_unit
    if margin <= 0:
        return None
    return math.ceil(fixed_costs / margin)
