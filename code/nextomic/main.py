import logging
import os
from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from finkit import projector
from finkit.budget import BudgetEngine
from finkit.errors import FinanceError, InvalidInput, InvalidTransition
from finkit.expenses import ExpenseLedger
from finkit.risk import QUESTIONS, RISK_PROFILE_KEY, RiskQuestionnaire
from finkit.schemas import Expense, NotAvailable, ProjectionParams, RiskProfile, RiskQuestion
from finkit.storage import Storage, create_storage

from nextomic.core.models import (
    BudgetRequest,
    CalculationResult,
    CalculatorInfo,
    ExpenseRequest,
    GoalsRequest,
    ProjectionRequest,
    RequiredContributionRequest,
    RetirementNeedsRequest,
    RiskAnswersRequest,
    SpendingRequest,
)
from nextomic.core.pipeline import calculate_raw, calculator_catalog
from nextomic.core.sample_payloads import SAMPLE_CALCULATIONS

LOG_LEVEL = os.getenv("NEXTOMIC_LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Nextomic Core API")

_storage = create_storage()


def get_storage() -> Storage:
    return _storage


def get_ledger(storage: Storage = Depends(get_storage)) -> ExpenseLedger:
    return ExpenseLedger(storage)


def get_budget_engine(storage: Storage = Depends(get_storage)) -> BudgetEngine:
    return BudgetEngine(storage)


@app.exception_handler(InvalidInput)
def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(InvalidTransition)
def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(FinanceError)
def finance_error_handler(request: Request, exc: FinanceError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    err = exc.errors()[0]
    loc = [str(part) for part in err["loc"] if part != "body"]
    field = ".".join(loc) or "body"
    return JSONResponse(status_code=422, content={"field": field, "constraint": err["msg"]})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/calculators", response_model=List[CalculatorInfo])
def calculators():
    return calculator_catalog()


@app.get("/calculators/samples")
def calculator_samples():
    return SAMPLE_CALCULATIONS


@app.post("/calculate", response_model=CalculationResult)
def calculate(payload: Dict[str, Any] = Body(...)):
    return calculate_raw(payload)


# --- Expenses --------------------------------------------------------------

@app.post("/expenses", response_model=Expense)
def add_expense(payload: ExpenseRequest, ledger: ExpenseLedger = Depends(get_ledger)):
    return ledger.add_expense(payload.description, payload.amount, payload.date)


@app.get("/expenses", response_model=List[Expense])
def list_expenses(ledger: ExpenseLedger = Depends(get_ledger)):
    return ledger.expenses


@app.delete("/expenses")
def clear_expenses(ledger: ExpenseLedger = Depends(get_ledger)):
    ledger.clear()
    return {"status": "cleared"}


@app.get("/expenses/insights")
def expense_insights(ledger: ExpenseLedger = Depends(get_ledger)):
    return {"categories": ledger.category_totals(), "insights": ledger.insights()}


@app.get("/expenses/report")
def expense_report(ledger: ExpenseLedger = Depends(get_ledger)):
    return ledger.weekly_report()


# --- Budget ----------------------------------------------------------------

@app.post("/budget")
def create_budget(payload: BudgetRequest, engine: BudgetEngine = Depends(get_budget_engine)):
    return engine.create_budget(payload.monthly_income, payload.rule, payload.custom_ratios)


@app.get("/budget")
def budget_summary(engine: BudgetEngine = Depends(get_budget_engine)):
    return engine.summary()


@app.delete("/budget")
def clear_budget(engine: BudgetEngine = Depends(get_budget_engine)):
    engine.clear()
    return {"status": "cleared"}


@app.post("/budget/analyze")
def analyze_budget(payload: SpendingRequest, engine: BudgetEngine = Depends(get_budget_engine)):
    return engine.analyze(payload.actual_spending)


@app.post("/budget/goals")
def budget_goals(payload: GoalsRequest, engine: BudgetEngine = Depends(get_budget_engine)):
    return engine.goal_contributions(payload.goals)


# --- Risk ------------------------------------------------------------------

@app.get("/risk/questions", response_model=List[RiskQuestion])
def risk_questions():
    return QUESTIONS


@app.post("/risk/profile", response_model=RiskProfile)
def risk_profile(payload: RiskAnswersRequest, storage: Storage = Depends(get_storage)):
    questionnaire = RiskQuestionnaire(storage)
    result = None
    for score in payload.scores:
        result = questionnaire.answer(score)
    return result


@app.get("/risk/profile")
def saved_risk_profile(storage: Storage = Depends(get_storage)):
    saved = storage.get(RISK_PROFILE_KEY)
    if saved is None:
        return NotAvailable(reason="Risk assessment not completed yet")
    return saved


# --- Investments -----------------------------------------------------------

def _params(payload: ProjectionRequest) -> ProjectionParams:
    return ProjectionParams(**payload.model_dump())


@app.post("/investments/projection")
def investment_projection(payload: ProjectionRequest):
    params = _params(payload)
    return {
        "projection": projector.calculate_projection(params),
        "risk": projector.risk_adjusted_returns(params),
        "scenarios": projector.compare_scenarios(params),
    }


@app.post("/investments/required")
def investment_required(payload: RequiredContributionRequest):
    return projector.required_contribution(payload.target_amount, payload.years, payload.risk_tolerance)


@app.post("/investments/retirement")
def investment_retirement(payload: RetirementNeedsRequest):
    return projector.retirement_needs(**payload.model_dump())
