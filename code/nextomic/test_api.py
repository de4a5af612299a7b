import pytest
from fastapi.testclient import TestClient

from finkit.storage import MemoryStorage
from nextomic.core.sample_payloads import (
    SAMPLE_BUDGET,
    SAMPLE_CALCULATIONS,
    SAMPLE_EXPENSES,
    SAMPLE_GOALS,
    SAMPLE_RISK_SCORES,
    SAMPLE_SPENDING,
)
from nextomic.main import app, get_storage


@pytest.fixture
def client():
    storage = MemoryStorage(prefix="api_")
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_calculator_catalog(client):
    catalog = client.get("/calculators").json()
    kinds = [c["kind"] for c in catalog]
    assert "home-loan" in kinds and "ppf" in kinds
    assert client.get("/calculators/samples").json()["sip"]["kind"] == "sip"


def test_calculate(client):
    resp = client.post("/calculate", json=SAMPLE_CALCULATIONS["home-loan"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Home Loan EMI Calculator"
    assert body["cards"][0]["value"] == "₹43,391"


def test_calculate_out_of_range(client):
    resp = client.post("/calculate", json={"kind": "home-loan", "interest_rate": 99})
    assert resp.status_code == 422
    assert resp.json()["field"] == "interest_rate"


def test_calculate_unknown_kind(client):
    resp = client.post("/calculate", json={"kind": "horoscope"})
    assert resp.status_code == 422
    assert resp.json() == {"field": "kind", "constraint": "unknown calculator"}


def test_expense_flow(client):
    ids = [client.post("/expenses", json=e).json()["id"] for e in SAMPLE_EXPENSES]
    assert ids == sorted(ids) and len(set(ids)) == len(ids)

    assert len(client.get("/expenses").json()) == len(SAMPLE_EXPENSES)
    insights = client.get("/expenses/insights").json()
    assert insights["insights"][0]["title"].startswith("Highest Spending")
    assert "Subscription Alert" in [i["title"] for i in insights["insights"]]

    report = client.get("/expenses/report").json()
    assert report["count"] == len(SAMPLE_EXPENSES)

    client.delete("/expenses")
    assert client.get("/expenses").json() == []


def test_expense_requires_positive_amount(client):
    resp = client.post("/expenses", json={"description": "Lunch", "amount": -5})
    assert resp.status_code == 422
    assert resp.json()["field"] == "amount"


def test_budget_flow(client):
    assert client.post("/budget/analyze", json={"actual_spending": {}}).json()["available"] is False

    budget = client.post("/budget", json=SAMPLE_BUDGET).json()
    assert budget["needs"] + budget["wants"] + budget["savings"] == pytest.approx(5000)

    analysis = client.post("/budget/analyze", json={"actual_spending": SAMPLE_SPENDING}).json()
    assert analysis["over_budget"][0]["category"] == "dining_out"
    assert analysis["recommendations"][0]["priority"] == "high"

    plans = client.post("/budget/goals", json={"goals": SAMPLE_GOALS}).json()
    assert [p["name"] for p in plans] == ["Vacation", "New Laptop"]

    assert client.get("/budget").json()["savings_percent"] == pytest.approx(20)


def test_custom_budget_without_ratios(client):
    resp = client.post("/budget", json={"monthly_income": 4000, "rule": "custom"})
    assert resp.status_code == 422
    assert resp.json()["field"] == "custom_ratios"


def test_risk_profile(client):
    assert len(client.get("/risk/questions").json()) == 10
    assert client.get("/risk/profile").json()["available"] is False

    profile = client.post("/risk/profile", json={"scores": SAMPLE_RISK_SCORES}).json()
    assert profile["total_score"] == sum(SAMPLE_RISK_SCORES)
    assert profile["profile"] == "Moderately Aggressive"

    assert client.get("/risk/profile").json()["profile"] == "Moderately Aggressive"


def test_risk_profile_rejects_bad_score(client):
    resp = client.post("/risk/profile", json={"scores": [1, 2, 3, 4, 5, 1, 2, 3, 4, 1]})
    assert resp.status_code == 422
    assert resp.json()["field"] == "score"


def test_investments(client):
    body = client.post("/investments/projection", json={"years": 10}).json()
    assert set(body) == {"projection", "risk", "scenarios"}
    assert len(body["projection"]["breakdown"]) == 10

    required = client.post("/investments/required", json={"target_amount": 100_000, "years": 10}).json()
    assert required["monthly_contribution"] > 0

    resp = client.post("/investments/retirement", json={"current_age": 70})
    assert resp.status_code == 422
    assert resp.json()["field"] == "retirement_age"
