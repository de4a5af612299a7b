from typing import Optional


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def safe_div(a: float, b: float, default: Optional[float] = None) -> Optional[float]:
    if b == 0:
        return default
    return a / b


def monthly_rate(annual_rate_pct: float) -> float:
    """Whole-number annual percent to a decimal monthly rate: 12 -> 0.01."""
    return annual_rate_pct / 1200.0
