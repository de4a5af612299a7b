import logging
import math
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .errors import InvalidInput, InvalidTransition
from .schemas import (
    RiskAllocation,
    RiskAnswer,
    RiskOption,
    RiskProfile,
    RiskQuestion,
    RiskRecommendation,
)
from .storage import Storage

logger = logging.getLogger(__name__)

RISK_PROFILE_KEY = "risk_profile"
MAX_OPTION_SCORE = 4
MAX_RECOMMENDATIONS = 5
CATEGORIES = ("time", "financial", "comfort", "experience")


def _question(qid: int, category: str, text: str, options: Sequence[tuple]) -> RiskQuestion:
    return RiskQuestion(
        id=qid,
        category=category,
        question=text,
        options=[RiskOption(text=t, score=i + 1, explanation=e) for i, (t, e) in enumerate(options)],
    )


QUESTIONS: List[RiskQuestion] = [
    _question(1, "time", "What is your investment time horizon?", [
        ("Less than 3 years", "Short-term goal"),
        ("3-5 years", "Mid-term goal"),
        ("5-10 years", "Long-term goal"),
        ("More than 10 years", "Very long-term goal"),
    ]),
    _question(2, "financial", "How much of your annual income can you invest?", [
        ("Less than 10%", "Limited capacity"),
        ("10-20%", "Moderate capacity"),
        ("20-30%", "Good capacity"),
        ("More than 30%", "Strong capacity"),
    ]),
    _question(3, "comfort", "If your investment lost 20% in a month, what would you do?", [
        ("Sell immediately", "Very risk-averse"),
        ("Worry but hold", "Cautious"),
        ("Hold without worry", "Comfortable with volatility"),
        ("Buy more at lower price", "Opportunistic investor"),
    ]),
    _question(4, "experience", "What is your investment experience level?", [
        ("Beginner", "New to investing"),
        ("Some experience", "1-3 years"),
        ("Experienced", "3-7 years"),
        ("Very experienced", "7+ years"),
    ]),
    _question(5, "financial", "Do you have an emergency fund covering 6 months of expenses?", [
        ("No emergency fund", "Build this first"),
        ("1-3 months", "Getting there"),
        ("3-6 months", "Almost ideal"),
        ("Yes, 6+ months", "Well prepared"),
    ]),
    _question(6, "comfort", "What matters most to you?", [
        ("Preserving capital", "Safety first"),
        ("Stable modest returns", "Conservative growth"),
        ("Balanced growth", "Moderate risk"),
        ("Maximum growth", "Aggressive growth"),
    ]),
    _question(7, "time", "When do you plan to retire?", [
        ("Within 5 years", "Soon"),
        ("5-10 years", "Mid-term"),
        ("10-20 years", "Long way"),
        ("More than 20 years", "Very long term"),
    ]),
    _question(8, "financial", "How stable is your income?", [
        ("Irregular/uncertain", "Variable income"),
        ("Somewhat stable", "Some variation"),
        ("Very stable", "Predictable"),
        ("Multiple income streams", "Diversified income"),
    ]),
    _question(9, "experience", "How comfortable are you with complex financial products?", [
        ("Not comfortable", "Stick to simple"),
        ("Somewhat comfortable", "Learning"),
        ("Very comfortable", "Knowledgeable"),
        ("Expert level", "Advanced investor"),
    ]),
    _question(10, "comfort", "How do you typically make investment decisions?", [
        ("Always seek advice", "Guidance needed"),
        ("Research + advice", "Collaborative"),
        ("Mostly own research", "Self-directed"),
        ("Fully independent", "Confident decision-maker"),
    ]),
]

# (exclusive upper bound of score %, profile, stocks/bonds/cash)
PROFILE_BANDS = [
    (30, "Conservative", (20, 60, 20)),
    (50, "Moderately Conservative", (40, 50, 10)),
    (70, "Moderate", (60, 35, 5)),
    (85, "Moderately Aggressive", (75, 20, 5)),
    (float("inf"), "Aggressive", (90, 10, 0)),
]


def _band(score_pct: float):
    for upper, profile, allocation in PROFILE_BANDS:
        if score_pct < upper:
            return profile, allocation
    return PROFILE_BANDS[-1][1], PROFILE_BANDS[-1][2]


def profile_for(score_pct: float) -> str:
    return _band(score_pct)[0]


def asset_allocation(score_pct: float) -> RiskAllocation:
    stocks, bonds, cash = _band(score_pct)[1]
    return RiskAllocation(stocks=stocks, bonds=bonds, cash=cash)


def category_score(answers: Sequence[RiskAnswer], category: str) -> int:
    scores = [a.score for a in answers if a.category == category]
    if not scores:
        return 0
    # half-up, so 62.5 reads as 63
    return math.floor(sum(scores) / (len(scores) * MAX_OPTION_SCORE) * 100 + 0.5)


def recommendations(profile: str, score_pct: float, categories: Dict[str, int]) -> List[RiskRecommendation]:
    conditional: List[RiskRecommendation] = []

    if profile in ("Conservative", "Moderately Conservative"):
        conditional.append(RiskRecommendation(
            type="info",
            title="Focus on Capital Preservation",
            description=(
                "Prioritize low-risk investments like bonds, treasury securities, and stable dividend stocks. "
                "Consider certificates of deposit (CDs) for guaranteed returns."
            ),
        ))
    elif profile in ("Aggressive", "Moderately Aggressive"):
        conditional.append(RiskRecommendation(
            type="warning",
            title="Embrace Growth Opportunities",
            description=(
                "Your risk tolerance allows for higher growth potential. Consider growth stocks, emerging markets, "
                "and sector-specific funds. Maintain diversification despite aggressive stance."
            ),
        ))

    time_score = categories.get("time", 0)
    if time_score < 40:
        conditional.append(RiskRecommendation(
            type="info",
            title="Short-Term Focus",
            description=(
                "With a shorter time horizon, prioritize liquidity and stability. Avoid high-volatility "
                "investments and focus on preserving capital you'll need soon."
            ),
        ))
    elif time_score > 70:
        conditional.append(RiskRecommendation(
            type="success",
            title="Long-Term Growth Advantage",
            description=(
                "Your long timeline allows you to weather market volatility. Take advantage by investing in "
                "growth-oriented assets that historically outperform over long periods."
            ),
        ))

    if categories.get("experience", 0) < 50:
        conditional.append(RiskRecommendation(
            type="info",
            title="Build Your Knowledge",
            description=(
                "Start with simple, diversified investments like index funds and ETFs. Gradually expand into "
                "more complex products as you gain experience and confidence."
            ),
        ))

    if categories.get("financial", 0) < 40:
        conditional.append(RiskRecommendation(
            type="warning",
            title="Strengthen Your Foundation",
            description=(
                "Before aggressive investing, ensure you have a solid emergency fund and manageable debt levels. "
                "Start investing small amounts regularly to build the habit."
            ),
        ))

    always = [
        RiskRecommendation(
            type="success",
            title="Diversify Your Portfolio",
            description=(
                f"As a {profile} investor, spread your investments across different asset classes, sectors, "
                "and geographies to manage risk effectively."
            ),
        ),
        RiskRecommendation(
            type="info",
            title="Regular Rebalancing",
            description=(
                "Review and rebalance your portfolio quarterly or annually to maintain your target asset "
                "allocation and risk level."
            ),
        ),
    ]
    # The two standing notes always make the cut; conditional ones fill the rest in order.
    return conditional[: MAX_RECOMMENDATIONS - len(always)] + always


def compute_profile(answers: Sequence[RiskAnswer], questions: Sequence[RiskQuestion] = QUESTIONS) -> RiskProfile:
    if len(answers) != len(questions):
        raise InvalidInput("answers", f"exactly {len(questions)} answers are required")
    for answer in answers:
        if not 1 <= answer.score <= MAX_OPTION_SCORE:
            raise InvalidInput("score", f"must be between 1 and {MAX_OPTION_SCORE}")

    total = sum(a.score for a in answers)
    max_score = len(questions) * MAX_OPTION_SCORE
    score_pct = total / max_score * 100
    categories = {c: category_score(answers, c) for c in CATEGORIES}
    profile = profile_for(score_pct)

    return RiskProfile(
        total_score=total,
        max_score=max_score,
        score_pct=score_pct,
        profile=profile,
        categories=categories,
        allocation=asset_allocation(score_pct),
        recommendations=recommendations(profile, score_pct, categories),
    )


class RiskQuestionnaire:
    """Walks the fixed question list one answer at a time.

    States are `AwaitingAnswer(index)` and `Complete`. Going back keeps the
    earlier answer until it is answered again.
    """

    def __init__(self, storage: Optional[Storage] = None, questions: Sequence[RiskQuestion] = QUESTIONS):
        self.storage = storage
        self.questions = list(questions)
        self.current = 0
        self.answers: List[Optional[RiskAnswer]] = [None] * len(self.questions)
        self.result: Optional[RiskProfile] = None

    @property
    def is_complete(self) -> bool:
        return self.result is not None

    @property
    def state(self) -> str:
        if self.is_complete:
            return "Complete"
        return f"AwaitingAnswer({self.current})"

    @property
    def current_question(self) -> Optional[RiskQuestion]:
        if self.is_complete:
            return None
        return self.questions[self.current]

    def answer(self, score: int) -> Optional[RiskProfile]:
        if self.is_complete:
            raise InvalidTransition("Questionnaire is already complete")
        if not 1 <= score <= MAX_OPTION_SCORE:
            raise InvalidInput("score", f"must be between 1 and {MAX_OPTION_SCORE}")

        question = self.questions[self.current]
        self.answers[self.current] = RiskAnswer(question_id=question.id, category=question.category, score=score)

        if self.current < len(self.questions) - 1:
            self.current += 1
            return None

        self.result = compute_profile(self.answers, self.questions)
        self._save()
        return self.result

    def previous(self) -> None:
        if self.is_complete or self.current == 0:
            raise InvalidTransition(f"Cannot go back from {self.state}")
        self.current -= 1

    def _save(self) -> None:
        if self.storage is None:
            return
        self.storage.set(RISK_PROFILE_KEY, {
            "score": self.result.score_pct,
            "profile": self.result.profile,
            "categories": self.result.categories,
            "date": datetime.now().isoformat(),
        })
        logger.info("Saved risk profile %s (%.0f%%)", self.result.profile, self.result.score_pct)
