import logging
from collections import OrderedDict, defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from dateutil.relativedelta import relativedelta

from .formatters import money, truncate
from .schemas import Expense, Insight, SubscriptionCandidate, TopDay, WeeklyReport
from .storage import Storage
from .validators import require_positive

logger = logging.getLogger(__name__)

EXPENSES_KEY = "expenses"
OTHER = "Other"
FOOD = "Food & Dining"

# Checked top to bottom; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: "OrderedDict[str, List[str]]" = OrderedDict(
    [
        (FOOD, ["restaurant", "food", "cafe", "grocery", "meal", "lunch", "dinner", "breakfast",
                "pizza", "burger", "starbucks", "mcdonald", "subway"]),
        ("Transportation", ["uber", "lyft", "gas", "fuel", "parking", "metro", "bus", "train", "taxi",
                            "car", "auto"]),
        ("Entertainment", ["netflix", "spotify", "movie", "theater", "concert", "game", "steam", "ps",
                           "xbox", "entertainment"]),
        ("Shopping", ["amazon", "walmart", "target", "mall", "store", "shop", "clothing", "fashion", "ebay"]),
        ("Bills & Utilities", ["electric", "water", "gas", "internet", "phone", "utility", "bill", "rent",
                               "mortgage"]),
        ("Healthcare", ["hospital", "doctor", "pharmacy", "medical", "health", "medicine", "dental", "cvs",
                        "walgreens"]),
        ("Education", ["tuition", "school", "course", "book", "education", "university", "college"]),
        (OTHER, []),
    ]
)

FOOD_SHARE_LIMIT = 0.35
SUBSCRIPTION_TOLERANCE = 0.05
TREND_THRESHOLD_PCT = 10.0
SUBSCRIPTION_NAME_LENGTH = 20


def categorize(description: str, table: Mapping[str, Sequence[str]] = CATEGORY_KEYWORDS) -> str:
    lowered = (description or "").lower()
    for category, keywords in table.items():
        for keyword in keywords:
            if keyword in lowered:
                return category
    return OTHER


def _naive(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when
    return when.astimezone().replace(tzinfo=None)


def _month_bounds(now: datetime, months_back: int):
    start = (now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
             - relativedelta(months=months_back))
    end = start + relativedelta(months=1) - timedelta(microseconds=1)
    return start, end


class ExpenseLedger:
    """Append-only expense ledger persisted as one snapshot per mutation."""

    def __init__(self, storage: Storage, categories: Optional[Mapping[str, Sequence[str]]] = None):
        self.storage = storage
        self.categories = categories if categories is not None else CATEGORY_KEYWORDS
        self.expenses: List[Expense] = [
            Expense.model_validate(item) for item in storage.get(EXPENSES_KEY, []) or []
        ]

    def categorize(self, description: str) -> str:
        return categorize(description, self.categories)

    def _next_id(self) -> int:
        return self.expenses[-1].id + 1 if self.expenses else 1

    def add_expense(self, description: str, amount: float, date: Optional[datetime] = None) -> Expense:
        amount = require_positive("amount", amount)
        now = datetime.now()
        expense = Expense(
            id=self._next_id(),
            description=description,
            amount=amount,
            date=_naive(date) if date else now,
            category=self.categorize(description),
            created_at=now,
        )
        self.expenses.append(expense)
        self.save()
        logger.info("Recorded expense %s in %s", expense.id, expense.category)
        return expense

    def save(self) -> None:
        self.storage.set(EXPENSES_KEY, [e.model_dump(mode="json") for e in self.expenses])

    def clear(self) -> None:
        self.expenses = []
        self.save()

    def expenses_between(self, start: datetime, end: datetime) -> List[Expense]:
        return [e for e in self.expenses if start <= e.date <= end]

    def category_totals(self, expenses: Optional[Iterable[Expense]] = None) -> Dict[str, float]:
        data = self.expenses if expenses is None else expenses
        totals = {category: 0.0 for category in self.categories}
        totals.setdefault(OTHER, 0.0)
        for expense in data:
            totals[expense.category] = totals.get(expense.category, 0.0) + expense.amount
        return totals

    def month_total(self, now: datetime, months_back: int = 0) -> float:
        start, end = _month_bounds(now, months_back)
        return sum(e.amount for e in self.expenses_between(start, end))

    def detect_subscriptions(self) -> List[SubscriptionCandidate]:
        groups: Dict[str, List[Expense]] = defaultdict(list)
        for expense in self.expenses:
            groups[expense.description.lower().strip()].append(expense)

        recurring = []
        for items in groups.values():
            if len(items) < 2:
                continue
            amounts = [e.amount for e in items]
            mean = sum(amounts) / len(amounts)
            deviation = sum(abs(a - mean) for a in amounts) / len(amounts)
            if deviation < mean * SUBSCRIPTION_TOLERANCE:
                recurring.append(
                    SubscriptionCandidate(
                        description=items[0].description,
                        amount=mean,
                        frequency=len(items),
                        category=items[0].category,
                    )
                )
        return recurring

    def insights(self, now: Optional[datetime] = None) -> List[Insight]:
        now = _naive(now) if now else datetime.now()
        insights: List[Insight] = []
        totals = self.category_totals()
        total = sum(totals.values())

        top_category, top_amount = "", 0.0
        for category, amount in totals.items():
            if amount > top_amount:
                top_category, top_amount = category, amount

        if top_amount > 0:
            share = top_amount / total * 100
            insights.append(Insight(
                type="warning",
                title=f"Highest Spending: {top_category}",
                message=f"You spent {money(top_amount)} ({share:.1f}%) on {top_category} this month.",
            ))

        food = totals.get(FOOD, 0.0)
        if total > 0 and food > total * FOOD_SHARE_LIMIT:
            insights.append(Insight(
                type="tip",
                title="Reduce Dining Out",
                message=(
                    f"{FOOD} is {food / total * 100:.0f}% of spending. "
                    f"Try meal planning to save {money(food * 0.2)}/month."
                ),
            ))

        subscriptions = self.detect_subscriptions()
        if subscriptions:
            monthly = sum(s.amount for s in subscriptions)
            names = ", ".join(truncate(s.description, SUBSCRIPTION_NAME_LENGTH) for s in subscriptions)
            insights.append(Insight(
                type="info",
                title="Subscription Alert",
                message=(
                    f"You have {len(subscriptions)} recurring subscriptions ({names}) totaling "
                    f"{money(monthly)}/month. Consider canceling unused ones."
                ),
            ))

        last_month = self.month_total(now, months_back=1)
        this_month = self.month_total(now)
        if last_month > 0:
            change = (this_month - last_month) / last_month * 100
            if abs(change) > TREND_THRESHOLD_PCT:
                rising = change > 0
                insights.append(Insight(
                    type="warning" if rising else "success",
                    title=f"Spending {'Increased' if rising else 'Decreased'}",
                    message=(
                        f"Your spending is {abs(change):.0f}% {'higher' if rising else 'lower'} "
                        "than last month."
                    ),
                ))

        return insights

    def weekly_report(self, now: Optional[datetime] = None) -> WeeklyReport:
        now = _naive(now) if now else datetime.now()
        week = self.expenses_between(now - timedelta(days=7), now)
        total = sum(e.amount for e in week)
        return WeeklyReport(
            total=total,
            daily=total / 7,
            count=len(week),
            categories=self.category_totals(week),
            top_day=top_spending_day(week),
        )


def top_spending_day(expenses: Iterable[Expense]) -> TopDay:
    per_day: Dict = defaultdict(float)
    for expense in expenses:
        per_day[expense.date.date()] += expense.amount

    top = TopDay()
    for day, amount in per_day.items():
        if amount > top.amount:
            top = TopDay(day=day, amount=amount)
    return top
