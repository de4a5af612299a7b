import pytest

from finkit import formatters, projector
from finkit.errors import InvalidInput
from finkit.schemas import ProjectionParams


def test_project_growth_without_rate():
    growth = projector.project_growth(1000, 100, 12, 0)
    assert growth.final_balance == 2200
    assert growth.total_gains == 0
    assert growth.roi == 0


def test_project_growth_zero_contributions():
    assert projector.project_growth(0, 0, 12, 0.01).roi == 0


def test_projection_scenarios_are_ordered():
    proj = projector.calculate_projection(ProjectionParams(10_000, 500, 10))
    assert proj.annual_return == 0.075
    assert proj.conservative.final_balance < proj.expected.final_balance < proj.optimistic.final_balance
    assert len(proj.breakdown) == 10
    assert proj.breakdown[-1].balance == pytest.approx(proj.expected.final_balance)
    assert proj.summary.total_invested == 10_000 + 500 * 120
    assert proj.summary.insights[0].title == "Time is Your Asset"


def test_projection_rejects_unknown_asset():
    with pytest.raises(InvalidInput) as exc:
        projector.calculate_projection(ProjectionParams(1000, 0, 5, asset_type="crypto"))
    assert exc.value.field == "asset_type"


@pytest.mark.parametrize("years", [0, 0.5])
def test_projection_needs_at_least_one_year(years):
    with pytest.raises(InvalidInput) as exc:
        projector.calculate_projection(ProjectionParams(1000, 100, years))
    assert exc.value.field == "years"


def test_required_contribution_needs_at_least_one_year():
    with pytest.raises(InvalidInput) as exc:
        projector.required_contribution(100_000, 0.5)
    assert exc.value.field == "years"


def test_required_contribution_reaches_target():
    plan = projector.required_contribution(100_000, 10, "moderate")
    reached = projector.project_growth(0, plan.monthly_contribution, 120, 0.075 / 12)
    assert reached.final_balance == pytest.approx(100_000, rel=1e-4)


def test_retirement_needs():
    needs = projector.retirement_needs(30, 65, 50_000, 0, 90, 3.0)
    assert needs.years_to_retirement == 35
    assert needs.years_in_retirement == 25
    assert needs.confidence == "high"
    assert needs.gap == needs.total_needed
    assert needs.monthly_required > 0


def test_retirement_needs_confidence_bands():
    assert projector.retirement_needs(57, 65).confidence == "medium"
    assert projector.retirement_needs(62, 65).confidence == "low"


def test_retirement_needs_covered_by_savings():
    needs = projector.retirement_needs(60, 65, 1000, 1_000_000, 70)
    assert needs.gap < 0
    assert needs.monthly_required == 0


def test_retirement_needs_bad_ages():
    with pytest.raises(InvalidInput) as exc:
        projector.retirement_needs(70, 65)
    assert exc.value.field == "retirement_age"
    with pytest.raises(InvalidInput):
        projector.retirement_needs(30, 65, life_expectancy=60)


def test_risk_adjusted_bands():
    result = projector.risk_adjusted_returns(ProjectionParams(10_000, 500, 10))
    assert result.std_dev == 0.15
    assert result.range95.low < result.range68.low < result.expected < result.range68.high < result.range95.high
    assert result.recommendation.type == "success"


def test_horizon_advice():
    assert projector.horizon_advice("aggressive", 2).type == "warning"
    assert projector.horizon_advice("conservative", 25).type == "info"


def test_compare_scenarios():
    scenarios = projector.compare_scenarios(ProjectionParams(10_000, 500, 10))
    assert [s.name for s in scenarios] == ["Start Today", "Wait 5 Years", "Double Contributions"]
    assert scenarios[1].opportunity_cost > 0

    short = projector.compare_scenarios(ProjectionParams(10_000, 500, 5))
    assert [s.name for s in short] == ["Start Today", "Double Contributions"]


def test_summary_text_follows_session_currency(monkeypatch):
    monkeypatch.setattr(formatters, "DEFAULT_CURRENCY", "INR")
    proj = projector.calculate_projection(ProjectionParams(10_000, 500, 10))
    messages = [i.message for i in proj.summary.insights]
    assert "turn your ₹70.0K into ₹" in messages[0]
    assert messages[1].startswith("Your regular ₹500/month contributions")
    assert not any("$" in m for m in messages)
