from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finkit.schemas import AssetType, Goal, Ratios, RiskTolerance, TaxRegime


# --- Calculator inputs: one variant per calculator, tagged by `kind` --------

class LoanInput(BaseModel):
    kind: Literal["home-loan", "car-loan", "personal-loan", "education-loan"] = "home-loan"
    loan_amount: float = Field(default=5_000_000, ge=100_000, le=100_000_000)
    interest_rate: float = Field(default=8.5, ge=1, le=20)
    loan_tenure: int = Field(default=20, ge=1, le=30)


class SipInput(BaseModel):
    kind: Literal["sip", "lumpsum", "mutual-fund"] = "sip"
    monthly_investment: float = Field(default=5_000, ge=500, le=100_000)
    expected_return: float = Field(default=12, ge=1, le=30)
    time_period: int = Field(default=10, ge=1, le=40)


class FdInput(BaseModel):
    kind: Literal["fd", "rd", "ppf"] = "fd"
    deposit_amount: float = Field(default=100_000, ge=1_000, le=10_000_000)
    interest_rate: float = Field(default=6.5, ge=1, le=15)
    tenure: int = Field(default=5, ge=1, le=10)


class RetirementInput(BaseModel):
    kind: Literal["retirement"] = "retirement"
    current_age: int = Field(default=30, ge=18, le=60)
    retirement_age: int = Field(default=60, ge=50, le=70)
    monthly_expense: float = Field(default=50_000, ge=10_000, le=500_000)
    inflation_rate: float = Field(default=6, ge=1, le=15)
    expected_return: float = Field(default=10, ge=1, le=20)


class IncomeTaxInput(BaseModel):
    kind: Literal["income-tax"] = "income-tax"
    annual_income: float = Field(default=1_000_000, ge=0, le=100_000_000)
    deductions: float = Field(default=150_000, ge=0, le=500_000)
    regime: TaxRegime = "Old Regime"


class UsTaxInput(BaseModel):
    kind: Literal["us-tax"] = "us-tax"
    income: float = Field(default=75_000, ge=0, le=100_000_000)
    filing_status: Literal["single", "married_jointly"] = "single"


class AssetAllocationInput(BaseModel):
    kind: Literal["asset-allocation"] = "asset-allocation"
    age: int = Field(default=30, ge=18, le=100)
    risk_tolerance: RiskTolerance = "moderate"


class DebtToIncomeInput(BaseModel):
    kind: Literal["debt-to-income"] = "debt-to-income"
    monthly_debt: float = Field(default=15_000, ge=0, le=10_000_000)
    monthly_income: float = Field(default=80_000, ge=0, le=100_000_000)


class SavingsRateInput(BaseModel):
    kind: Literal["savings-rate"] = "savings-rate"
    monthly_income: float = Field(default=80_000, ge=0, le=100_000_000)
    monthly_savings: float = Field(default=12_000, ge=0, le=100_000_000)


class EmergencyFundInput(BaseModel):
    kind: Literal["emergency-fund"] = "emergency-fund"
    monthly_expenses: float = Field(default=40_000, ge=0, le=10_000_000)
    months: int = Field(default=6, ge=1, le=24)


class CompoundInterestInput(BaseModel):
    kind: Literal["compound-interest"] = "compound-interest"
    principal: float = Field(default=100_000, gt=0, le=100_000_000)
    interest_rate: float = Field(default=7, ge=0, le=50)
    years: int = Field(default=10, ge=1, le=50)
    frequency: Literal[1, 2, 4, 12, 365] = 12


class BreakEvenInput(BaseModel):
    kind: Literal["break-even"] = "break-even"
    fixed_costs: float = Field(default=50_000, ge=0)
    price_per_unit: float = Field(default=500, ge=0)
    variable_cost_per_unit: float = Field(default=300, ge=0)


class AmortizationInput(BaseModel):
    kind: Literal["amortization"] = "amortization"
    principal: float = Field(default=1_000_000, ge=1_000, le=100_000_000)
    interest_rate: float = Field(default=9, ge=0, le=30)
    years: int = Field(default=5, ge=1, le=30)


CalculatorInput = Annotated[
    Union[
        LoanInput,
        SipInput,
        FdInput,
        RetirementInput,
        IncomeTaxInput,
        UsTaxInput,
        AssetAllocationInput,
        DebtToIncomeInput,
        SavingsRateInput,
        EmergencyFundInput,
        CompoundInterestInput,
        BreakEvenInput,
        AmortizationInput,
    ],
    Field(discriminator="kind"),
]


# --- Calculator output -----------------------------------------------------

class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str
    sublabel: Optional[str] = None


class ListItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class ChartSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data: List[float]


class Chart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["pie", "doughnut", "bar", "line"]
    labels: List[str]
    series: List[ChartSeries]


class CalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    title: str
    cards: List[Card]
    list: Optional[List[ListItem]] = None
    chart: Optional[Chart] = None
    tip: Optional[str] = None


class CalculatorInfo(BaseModel):
    kind: str
    title: str
    description: str
    tip: str
    defaults: Dict[str, object]


# --- Stateful component requests -------------------------------------------

class ExpenseRequest(BaseModel):
    description: str = Field(min_length=1)
    amount: float = Field(gt=0)
    date: Optional[datetime] = None


class BudgetRequest(BaseModel):
    monthly_income: float = Field(gt=0)
    rule: Literal["50/30/20", "70/20/10", "80/20", "custom"] = "50/30/20"
    custom_ratios: Optional[Ratios] = None


class SpendingRequest(BaseModel):
    actual_spending: Dict[str, float]


class GoalsRequest(BaseModel):
    goals: List[Goal]


class RiskAnswersRequest(BaseModel):
    scores: List[int] = Field(min_length=10, max_length=10)


class ProjectionRequest(BaseModel):
    initial_amount: float = Field(default=10_000, ge=0)
    monthly_contribution: float = Field(default=500, ge=0)
    years: int = Field(default=10, ge=1, le=60)
    asset_type: AssetType = "mixed"
    risk_tolerance: RiskTolerance = "moderate"


class RequiredContributionRequest(BaseModel):
    target_amount: float = Field(gt=0)
    years: int = Field(ge=1, le=60)
    risk_tolerance: RiskTolerance = "moderate"


class RetirementNeedsRequest(BaseModel):
    current_age: int = Field(ge=0, le=100)
    retirement_age: int = Field(default=65, ge=1, le=100)
    desired_annual_income: float = Field(default=50_000, ge=0)
    current_savings: float = Field(default=0, ge=0)
    life_expectancy: int = Field(default=90, ge=1, le=120)
    inflation_pct: float = Field(default=3.0, ge=0, le=20)
