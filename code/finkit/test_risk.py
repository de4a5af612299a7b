import pytest

from finkit.errors import InvalidInput, InvalidTransition
from finkit.risk import (
    QUESTIONS,
    RISK_PROFILE_KEY,
    RiskQuestionnaire,
    asset_allocation,
    compute_profile,
    profile_for,
)
from finkit.schemas import RiskAnswer
from finkit.storage import MemoryStorage


def answers_for(scores):
    return [RiskAnswer(question_id=q.id, category=q.category, score=s) for q, s in zip(QUESTIONS, scores)]


def test_question_bank_shape():
    assert len(QUESTIONS) == 10
    assert {q.category for q in QUESTIONS} == {"time", "financial", "comfort", "experience"}
    for q in QUESTIONS:
        assert [o.score for o in q.options] == [1, 2, 3, 4]


def test_all_lowest_answers():
    profile = compute_profile(answers_for([1] * 10))
    assert profile.total_score == 10
    assert profile.score_pct == 25
    assert profile.profile == "Conservative"
    assert (profile.allocation.stocks, profile.allocation.bonds, profile.allocation.cash) == (20, 60, 20)


def test_all_highest_answers():
    profile = compute_profile(answers_for([4] * 10))
    assert profile.total_score == 40
    assert profile.score_pct == 100
    assert profile.profile == "Aggressive"
    assert profile.allocation.cash == 0


@pytest.mark.parametrize("pct,expected", [
    (29.9, "Conservative"),
    (30, "Moderately Conservative"),
    (50, "Moderate"),
    (70, "Moderately Aggressive"),
    (85, "Aggressive"),
])
def test_profile_band_edges(pct, expected):
    assert profile_for(pct) == expected


def test_allocation_tiers_sum_to_hundred():
    for pct in (10, 40, 60, 80, 95):
        mix = asset_allocation(pct)
        assert mix.stocks + mix.bonds + mix.cash == 100


def test_category_score_rounds_half_up():
    # time questions are 1 and 7: (2 + 3) / 8 = 62.5%
    scores = [2, 1, 1, 1, 1, 1, 3, 1, 1, 1]
    assert compute_profile(answers_for(scores)).categories["time"] == 63


def test_recommendations_capped_with_standing_notes():
    recs = compute_profile(answers_for([1] * 10)).recommendations
    assert len(recs) == 5
    assert [r.title for r in recs[-2:]] == ["Diversify Your Portfolio", "Regular Rebalancing"]
    assert recs[0].title == "Focus on Capital Preservation"


def test_requires_all_answers():
    with pytest.raises(InvalidInput):
        compute_profile(answers_for([3] * 9))


def test_questionnaire_walkthrough():
    storage = MemoryStorage(prefix="test_")
    quiz = RiskQuestionnaire(storage)
    assert quiz.state == "AwaitingAnswer(0)"

    with pytest.raises(InvalidTransition):
        quiz.previous()

    assert quiz.answer(2) is None
    quiz.previous()
    assert quiz.state == "AwaitingAnswer(0)"
    assert quiz.answers[0].score == 2

    result = None
    for _ in QUESTIONS:
        result = quiz.answer(4)
    assert quiz.state == "Complete"
    assert quiz.current_question is None
    assert result.profile == "Aggressive"

    saved = storage.get(RISK_PROFILE_KEY)
    assert saved["profile"] == "Aggressive"
    assert saved["score"] == 100

    with pytest.raises(InvalidTransition):
        quiz.answer(3)
    with pytest.raises(InvalidTransition):
        quiz.previous()


def test_questionnaire_rejects_out_of_range_score():
    quiz = RiskQuestionnaire()
    with pytest.raises(InvalidInput):
        quiz.answer(5)
    assert quiz.state == "AwaitingAnswer(0)"
