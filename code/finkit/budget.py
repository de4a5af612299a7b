import logging
import math
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

from .errors import InvalidInput
from .formatters import format_category, money
from .schemas import (
    Budget,
    BudgetAnalysis,
    BudgetLine,
    BudgetRecommendation,
    BudgetSummary,
    Goal,
    GoalPlan,
    NotAvailable,
    Ratios,
)
from .storage import Storage
from .validators import require_choice, require_positive

logger = logging.getLogger(__name__)

BUDGET_KEY = "budget"
NO_BUDGET = "No budget created yet"

BUDGET_RULES: Dict[str, Optional[Ratios]] = {
    "50/30/20": Ratios(needs=0.50, wants=0.30, savings=0.20),
    "70/20/10": Ratios(needs=0.70, wants=0.20, savings=0.10),
    "80/20": Ratios(needs=0.80, wants=0.0, savings=0.20),
    "custom": None,
}

# Share of each bucket given to its sub-categories. Every bucket sums to 1.
CATEGORY_WEIGHTS: Dict[str, Dict[str, float]] = {
    "needs": {
        "housing": 0.35,
        "transportation": 0.15,
        "groceries": 0.12,
        "utilities": 0.10,
        "insurance": 0.10,
        "healthcare": 0.08,
        "debt_payments": 0.10,
    },
    "wants": {
        "dining_out": 0.30,
        "entertainment": 0.25,
        "shopping": 0.25,
        "subscriptions": 0.20,
    },
    "savings": {
        "emergency_fund": 0.40,
        "retirement": 0.35,
        "goals": 0.25,
    },
}

ON_TRACK_PCT = 5.0
MIN_SAVINGS_RATE = 15.0
TARGET_SAVINGS_RATE = 20.0
MAX_DISCRETIONARY_RATE = 35.0


def allocate_categories(income: float, ratios: Ratios, weights: Mapping[str, Mapping[str, float]] = CATEGORY_WEIGHTS) -> Dict[str, float]:
    buckets = {"needs": income * ratios.needs, "wants": income * ratios.wants, "savings": income * ratios.savings}
    categories: Dict[str, float] = {}
    for bucket, shares in weights.items():
        for category, share in shares.items():
            categories[category] = buckets[bucket] * share
    return categories


def analyze(budget: Budget, actual_spending: Mapping[str, float]) -> BudgetAnalysis:
    over: List[BudgetLine] = []
    under: List[BudgetLine] = []
    on_track: List[BudgetLine] = []
    total_overage = 0.0
    total_underused = 0.0

    for category, budgeted in budget.categories.items():
        actual = float(actual_spending.get(category, 0.0) or 0.0)
        difference = actual - budgeted
        percent_diff = difference / budgeted * 100 if budgeted > 0 else 0.0
        line = BudgetLine(
            category=category,
            budgeted=budgeted,
            actual=actual,
            difference=difference,
            percent_diff=percent_diff,
        )
        if abs(percent_diff) < ON_TRACK_PCT:
            on_track.append(line)
        elif difference > 0:
            over.append(line)
            total_overage += difference
        else:
            under.append(line)
            total_underused += abs(difference)

    over.sort(key=lambda item: item.difference, reverse=True)
    under.sort(key=lambda item: abs(item.difference), reverse=True)
    analysis = BudgetAnalysis(
        over_budget=over,
        under_budget=under,
        on_track=on_track,
        total_overage=total_overage,
        total_underused=total_underused,
    )
    return analysis.model_copy(update={"recommendations": recommendations(analysis, budget)})


def recommendations(analysis: BudgetAnalysis, budget: Budget) -> List[BudgetRecommendation]:
    """All rules that apply, in priority order. Expects the analysis lists
    sorted largest-first, as `analyze` returns them."""
    recs: List[BudgetRecommendation] = []

    if analysis.over_budget:
        top = analysis.over_budget[0]
        recs.append(BudgetRecommendation(
            priority="high",
            category=top.category,
            message=(
                f"You're {money(top.difference)} over budget on {format_category(top.category)}. "
                f"Consider reducing spending by {abs(top.percent_diff):.0f}%."
            ),
            action=f"Set a weekly limit of {money(top.budgeted / 4)} to stay on track.",
        ))

    if analysis.over_budget and analysis.under_budget:
        underused = analysis.under_budget[0]
        overspent = analysis.over_budget[0]
        recs.append(BudgetRecommendation(
            priority="medium",
            category="reallocation",
            message=f"You have {money(abs(underused.difference))} unused in {format_category(underused.category)}.",
            action=f"Consider reallocating some to {format_category(overspent.category)} where you're over budget.",
        ))

    savings_rate = budget.savings / budget.income * 100
    if savings_rate < MIN_SAVINGS_RATE:
        shortfall = budget.income * TARGET_SAVINGS_RATE / 100 - budget.savings
        recs.append(BudgetRecommendation(
            priority="medium",
            category="savings",
            message=f"Your savings rate is {savings_rate:.1f}%, below the recommended {TARGET_SAVINGS_RATE:.0f}%.",
            action=f"Try to increase savings by {money(shortfall)}/month.",
        ))

    discretionary = budget.wants / budget.income * 100
    if discretionary > MAX_DISCRETIONARY_RATE:
        recs.append(BudgetRecommendation(
            priority="low",
            category="discretionary",
            message=f"{discretionary:.0f}% of income goes to discretionary spending.",
            action="Look for subscription services or entertainment costs you can reduce.",
        ))

    return recs


class BudgetEngine:
    """Holds the single active budget for a session."""

    def __init__(self, storage: Storage, weights: Optional[Mapping[str, Mapping[str, float]]] = None):
        self.storage = storage
        self.weights = weights if weights is not None else CATEGORY_WEIGHTS
        stored = storage.get(BUDGET_KEY)
        self.budget: Optional[Budget] = Budget.model_validate(stored) if stored else None

    def create_budget(
        self,
        monthly_income: float,
        rule: str = "50/30/20",
        custom_ratios: Optional[Union[Ratios, Mapping[str, float]]] = None,
    ) -> Budget:
        """Replace the active budget.

        For the `custom` rule the caller's ratios are used as given; they are
        not checked to sum to 1.
        """
        monthly_income = require_positive("monthly_income", monthly_income)
        rule = require_choice("rule", rule, BUDGET_RULES)

        ratios = BUDGET_RULES[rule]
        if rule == "custom":
            if custom_ratios is None:
                raise InvalidInput("custom_ratios", "required when rule is custom")
            ratios = custom_ratios if isinstance(custom_ratios, Ratios) else Ratios(**custom_ratios)

        self.budget = Budget(
            income=monthly_income,
            rule=rule,
            needs=monthly_income * ratios.needs,
            wants=monthly_income * ratios.wants,
            savings=monthly_income * ratios.savings,
            categories=allocate_categories(monthly_income, ratios, self.weights),
            created=datetime.now(),
        )
        self.save()
        logger.info("Created %s budget for income %.2f", rule, monthly_income)
        return self.budget

    def analyze(self, actual_spending: Mapping[str, float]) -> Union[BudgetAnalysis, NotAvailable]:
        if self.budget is None:
            return NotAvailable(reason=NO_BUDGET)
        return analyze(self.budget, actual_spending)

    def goal_contributions(self, goals: Sequence[Goal], today: Optional[date] = None) -> Union[List[GoalPlan], NotAvailable]:
        if self.budget is None:
            return NotAvailable(reason=NO_BUDGET)
        today = today or date.today()
        available = self.budget.categories.get("goals", 0.0)
        total_target = sum(goal.target_amount for goal in goals)

        plans = []
        for goal in goals:
            monthly = available * goal.target_amount / total_target if total_target > 0 else 0.0
            months = math.ceil(goal.target_amount / monthly) if monthly > 0 else None
            plans.append(GoalPlan(
                name=goal.name,
                target_amount=goal.target_amount,
                monthly_contribution=monthly,
                months_needed=months,
                completion_date=today + relativedelta(months=months) if months is not None else None,
            ))
        return plans

    def summary(self) -> Union[BudgetSummary, NotAvailable]:
        if self.budget is None:
            return NotAvailable(reason=NO_BUDGET)
        b = self.budget
        return BudgetSummary(
            income=b.income,
            rule=b.rule,
            needs=b.needs,
            wants=b.wants,
            savings=b.savings,
            needs_percent=b.needs / b.income * 100,
            wants_percent=b.wants / b.income * 100,
            savings_percent=b.savings / b.income * 100,
        )

    def save(self) -> None:
        self.storage.set(BUDGET_KEY, self.budget.model_dump(mode="json"))

    def clear(self) -> None:
        self.budget = None
        self.storage.remove(BUDGET_KEY)
