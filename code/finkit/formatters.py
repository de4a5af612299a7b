import os
from typing import Optional

DEFAULT_CURRENCY = os.getenv("NEXTOMIC_CURRENCY", "INR")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}


def currency(amount: float, code: str = "USD", decimals: int = 2) -> str:
    symbol = CURRENCY_SYMBOLS.get(code, "$")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(float(amount)):,.{decimals}f}"


def _indian_grouping(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def inr(amount: float) -> str:
    """Rupee amount with lakh/crore grouping and no decimals: ₹43,391 / ₹11,61,695."""
    rounded = round(float(amount))
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{_indian_grouping(str(abs(rounded)))}"


def money(amount: float, code: Optional[str] = None) -> str:
    code = code or DEFAULT_CURRENCY
    if code == "INR":
        return inr(amount)
    return currency(amount, code, decimals=0)


def compact_number(num: float) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return f"{num:g}"


def compact_money(amount: float, code: Optional[str] = None) -> str:
    symbol = CURRENCY_SYMBOLS.get(code or DEFAULT_CURRENCY, "$")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{compact_number(abs(amount))}"


def percentage(value: float, decimals: int = 1) -> str:
    return f"{float(value):.{decimals}f}%"


def format_category(key: str) -> str:
    """`debt_payments` -> `Debt Payments`."""
    return " ".join(word[:1].upper() + word[1:] for word in key.split("_"))


def truncate(text: str, length: int = 50, suffix: str = "...") -> str:
    if len(text) <= length:
        return text
    return text[:length].strip() + suffix

