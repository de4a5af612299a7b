from typing import Dict, List, Optional, Sequence

from finkit.formatters import money, percentage

from .models import Card, Chart, ChartSeries, ListItem

CHART_POINT_LIMIT = 360


def card(label: str, amount: float, sublabel: Optional[str] = None) -> Card:
    return Card(label=label, value=money(amount), sublabel=sublabel)


def text_card(label: str, value: str, sublabel: Optional[str] = None) -> Card:
    return Card(label=label, value=value, sublabel=sublabel)


def pct_card(label: str, value: float, sublabel: Optional[str] = None, decimals: int = 1) -> Card:
    return Card(label=label, value=percentage(value, decimals), sublabel=sublabel)


def money_rows(rows: Dict[str, float]) -> List[ListItem]:
    return [ListItem(label=label, value=money(amount)) for label, amount in rows.items()]


def split_chart(kind: str, labels: Sequence[str], values: Sequence[float]) -> Chart:
    return Chart(
        type=kind,
        labels=list(labels),
        series=[ChartSeries(name="amount", data=[round(v, 2) for v in values])],
    )


def line_chart(labels: Sequence[str], series: Dict[str, Sequence[float]]) -> Chart:
    points = min(len(labels), CHART_POINT_LIMIT)
    return Chart(
        type="line",
        labels=list(labels)[:points],
        series=[ChartSeries(name=name, data=[round(v, 2) for v in data][:points]) for name, data in series.items()],
    )


def calculator_title(kind: str, base_title: str, base_kind: str) -> str:
    """Alias calculators borrow their base calculator but get their own title:
    `car-loan` -> `Car Loan Calculator`."""
    if kind == base_kind:
        return base_title
    return " ".join(word.capitalize() for word in kind.split("-")) + " Calculator"
