from datetime import datetime, timedelta

import pytest

from finkit import formatters
from finkit.errors import InvalidInput
from finkit.expenses import FOOD, OTHER, ExpenseLedger, categorize
from finkit.storage import MemoryStorage

NOW = datetime(2024, 3, 15, 12, 0)


def make_ledger():
    return ExpenseLedger(MemoryStorage(prefix="test_"))


def test_categorize_keyword_match():
    assert categorize("Starbucks Coffee") == FOOD
    assert categorize("UBER trip") == "Transportation"
    assert categorize("qwerty") == OTHER
    assert categorize("") == OTHER


def test_categorize_with_custom_table():
    table = {"Pets": ["vet", "kibble"], OTHER: []}
    ledger = ExpenseLedger(MemoryStorage(prefix="test_"), categories=table)
    assert ledger.categorize("Vet visit") == "Pets"
    assert ledger.categorize("Pizza") == OTHER


def test_ids_increase_and_snapshot_persists():
    storage = MemoryStorage(prefix="test_")
    ledger = ExpenseLedger(storage)
    first = ledger.add_expense("Lunch", 12.5)
    second = ledger.add_expense("Taxi", 20)
    assert second.id > first.id

    reloaded = ExpenseLedger(storage)
    assert [e.id for e in reloaded.expenses] == [first.id, second.id]
    assert reloaded.add_expense("Book", 9).id > second.id


def test_rejects_non_positive_amount():
    with pytest.raises(InvalidInput) as exc:
        make_ledger().add_expense("Lunch", 0)
    assert exc.value.field == "amount"


def test_category_totals_include_every_category():
    ledger = make_ledger()
    ledger.add_expense("Pizza", 10)
    totals = ledger.category_totals()
    assert totals[FOOD] == 10
    assert totals["Healthcare"] == 0
    assert OTHER in totals


def test_subscription_detection():
    ledger = make_ledger()
    ledger.add_expense("Netflix", 9.99)
    ledger.add_expense("netflix ", 9.99)
    ledger.add_expense("Gym", 9.99)
    ledger.add_expense("Gym", 50.00)
    subs = ledger.detect_subscriptions()
    assert [s.description for s in subs] == ["Netflix"]
    assert subs[0].frequency == 2
    assert subs[0].amount == pytest.approx(9.99)


def test_empty_ledger_has_no_insights():
    assert make_ledger().insights(NOW) == []


def test_food_share_insight():
    ledger = make_ledger()
    ledger.add_expense("Pizza night", 80, NOW)
    ledger.add_expense("Taxi", 20, NOW)
    titles = [i.title for i in ledger.insights(NOW)]
    assert titles[0] == f"Highest Spending: {FOOD}"
    assert "Reduce Dining Out" in titles


def test_month_over_month_increase():
    ledger = make_ledger()
    ledger.add_expense("Rent February", 100, datetime(2024, 2, 10))
    ledger.add_expense("Rent March", 200, datetime(2024, 3, 10))
    insights = ledger.insights(NOW)
    assert insights[-1].title == "Spending Increased"
    assert insights[-1].type == "warning"
    assert "100%" in insights[-1].message


def test_month_over_month_decrease():
    ledger = make_ledger()
    ledger.add_expense("Rent February", 200, datetime(2024, 2, 10))
    ledger.add_expense("Rent March", 100, datetime(2024, 3, 10))
    assert ledger.insights(NOW)[-1].type == "success"


def test_weekly_report():
    ledger = make_ledger()
    ledger.add_expense("Lunch", 50, NOW - timedelta(days=1))
    ledger.add_expense("Taxi", 30, NOW - timedelta(days=2))
    ledger.add_expense("Movie", 40, NOW - timedelta(days=2))
    ledger.add_expense("Old bill", 999, NOW - timedelta(days=10))
    report = ledger.weekly_report(NOW)
    assert report.count == 3
    assert report.total == 120
    assert report.daily == pytest.approx(120 / 7)
    assert report.top_day.day == (NOW - timedelta(days=2)).date()
    assert report.top_day.amount == 70


def test_clear_empties_and_persists():
    storage = MemoryStorage(prefix="test_")
    ledger = ExpenseLedger(storage)
    ledger.add_expense("Lunch", 10)
    ledger.clear()
    assert ExpenseLedger(storage).expenses == []


def test_insight_text_uses_session_currency(monkeypatch):
    monkeypatch.setattr(formatters, "DEFAULT_CURRENCY", "INR")
    ledger = make_ledger()
    ledger.add_expense("Pizza night", 1500, NOW)
    ledger.add_expense("Pizza night", 1500, NOW)
    messages = [i.message for i in ledger.insights(NOW)]
    assert messages[0].startswith("You spent ₹3,000")
    assert "save ₹600/month" in messages[1]
    assert not any("$" in m for m in messages)


def test_subscription_alert_names_are_shortened():
    ledger = make_ledger()
    ledger.add_expense("Premium streaming bundle with sports", 19.99)
    ledger.add_expense("Premium streaming bundle with sports", 19.99)
    alert = next(i for i in ledger.insights(NOW) if i.title == "Subscription Alert")
    assert "(Premium streaming bu...)" in alert.message
