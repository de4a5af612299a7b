from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RiskTolerance = Literal["conservative", "moderate", "aggressive"]
AssetType = Literal["stocks", "bonds", "mixed"]
RiskCategory = Literal["time", "financial", "comfort", "experience"]
TaxRegime = Literal["Old Regime", "New Regime"]


class Result(BaseModel):
    model_config = ConfigDict(frozen=True)


class NotAvailable(Result):
    available: Literal[False] = False
    reason: str


# --- FinanceMath -----------------------------------------------------------

class LoanResult(Result):
    principal: float
    months: int
    emi: float
    total_payment: float
    total_interest: float


class AmortizationRow(Result):
    month: int
    payment: float
    principal: float
    interest: float
    balance: float


class SipResult(Result):
    months: int
    invested: float
    returns: float
    future_value: float


class FdResult(Result):
    principal: float
    interest: float
    maturity_amount: float
    compounding_per_year: int


class RetirementResult(Result):
    years_to_retirement: int
    years_in_retirement: int
    future_monthly_expense: float
    corpus_needed: float
    monthly_contribution: float


class IncomeTaxResult(Result):
    regime: TaxRegime
    gross_income: float
    deductions: float
    taxable_income: float
    tax: float
    cess: float
    total_tax: float
    net_income: float


class BracketTaxResult(Result):
    filing_status: str
    total_tax: float
    effective_rate: float
    after_tax: float


class AgeAllocation(Result):
    stocks: float
    bonds: float
    recommended: Dict[str, float]


class CompoundInterestResult(Result):
    principal: float
    final_amount: float
    interest: float


class EmergencyFundResult(Result):
    minimum: float
    recommended: float
    ideal: float


class RatioResult(Result):
    value: float
    rating: str
    recommendation: str


# --- ExpenseCategorizer ----------------------------------------------------

class Expense(BaseModel):
    id: int
    description: str
    amount: float = Field(gt=0)
    date: datetime
    category: str
    created_at: datetime


class Insight(Result):
    type: Literal["warning", "tip", "info", "success"]
    title: str
    message: str


class SubscriptionCandidate(Result):
    description: str
    amount: float
    frequency: int
    category: str


class TopDay(Result):
    day: Optional[date] = None
    amount: float = 0.0


class WeeklyReport(Result):
    total: float
    daily: float
    count: int
    categories: Dict[str, float]
    top_day: TopDay


# --- BudgetEngine ----------------------------------------------------------

class Ratios(BaseModel):
    needs: float = Field(ge=0)
    wants: float = Field(ge=0)
    savings: float = Field(ge=0)


class Budget(BaseModel):
    income: float = Field(gt=0)
    rule: str
    needs: float
    wants: float
    savings: float
    categories: Dict[str, float]
    created: datetime


class BudgetLine(Result):
    category: str
    budgeted: float
    actual: float
    difference: float
    percent_diff: float


class BudgetRecommendation(Result):
    priority: Literal["high", "medium", "low"]
    category: str
    message: str
    action: str


class BudgetAnalysis(Result):
    over_budget: List[BudgetLine] = []
    under_budget: List[BudgetLine] = []
    on_track: List[BudgetLine] = []
    total_overage: float = 0.0
    total_underused: float = 0.0
    recommendations: List[BudgetRecommendation] = []


class Goal(BaseModel):
    name: str
    target_amount: float = Field(gt=0)


class GoalPlan(Result):
    name: str
    target_amount: float
    monthly_contribution: float
    months_needed: Optional[int]
    completion_date: Optional[date]


class BudgetSummary(Result):
    income: float
    rule: str
    needs: float
    wants: float
    savings: float
    needs_percent: float
    wants_percent: float
    savings_percent: float


# --- RiskScorer ------------------------------------------------------------

class RiskOption(Result):
    text: str
    score: int
    explanation: str


class RiskQuestion(Result):
    id: int
    category: RiskCategory
    question: str
    options: List[RiskOption]


class RiskAnswer(BaseModel):
    question_id: int
    category: RiskCategory
    score: int = Field(ge=1, le=4)


class RiskAllocation(Result):
    stocks: int
    bonds: int
    cash: int


class RiskRecommendation(Result):
    type: Literal["info", "warning", "success"]
    title: str
    description: str


class RiskProfile(Result):
    total_score: int
    max_score: int
    score_pct: float
    profile: str
    categories: Dict[str, int]
    allocation: RiskAllocation
    recommendations: List[RiskRecommendation]


# --- InvestmentProjector ---------------------------------------------------

@dataclass
class ProjectionParams:
    initial_amount: float
    monthly_contribution: float
    years: int
    asset_type: AssetType = "mixed"
    risk_tolerance: RiskTolerance = "moderate"


class GrowthResult(Result):
    final_balance: float
    total_contributions: float
    total_gains: float
    roi: float


class YearBreakdown(Result):
    year: int
    balance: float
    contributions: float
    gains: float


class ProjectionInsight(Result):
    title: str
    message: str


class ProjectionSummary(Result):
    total_invested: float
    expected_value: float
    expected_gains: float
    avg_monthly_gain: float
    roi: float
    insights: List[ProjectionInsight]


class Projection(Result):
    annual_return: float
    conservative: GrowthResult
    expected: GrowthResult
    optimistic: GrowthResult
    summary: ProjectionSummary
    breakdown: List[YearBreakdown]


class RequiredContribution(Result):
    monthly_contribution: float
    total_contributions: float
    total_gains: float
    years: int
    target_amount: float


class RetirementNeeds(Result):
    years_to_retirement: int
    years_in_retirement: int
    future_annual_income: float
    total_needed: float
    current_savings: float
    gap: float
    monthly_required: float
    confidence: Literal["high", "medium", "low"]


class Band(Result):
    low: float
    high: float


class HorizonAdvice(Result):
    type: Literal["warning", "info", "success"]
    message: str


class RiskAdjustedReturns(Result):
    expected: float
    std_dev: float
    range68: Band
    range95: Band
    recommendation: HorizonAdvice


class ScenarioOutcome(Result):
    name: str
    projection: Projection
    opportunity_cost: Optional[float] = None
