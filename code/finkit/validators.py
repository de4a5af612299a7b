import math
from typing import Any, Iterable, Optional

from .errors import InvalidInput


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(num):
        return None
    return num


# Raising checks used by the calculators. Each one names the field and the
# violated constraint so callers can point at the offending input.

def require_number(field: str, value: Any) -> float:
    num = _to_number(value)
    if num is None or math.isinf(num):
        raise InvalidInput(field, "must be a number")
    return num


def require_range(field: str, value: Any, lo: float, hi: float) -> float:
    num = require_number(field, value)
    if not lo <= num <= hi:
        raise InvalidInput(field, f"must be between {lo} and {hi}")
    return num


def require_positive(field: str, value: Any) -> float:
    num = require_number(field, value)
    if num <= 0:
        raise InvalidInput(field, "must be greater than 0")
    return num


def require_non_negative(field: str, value: Any) -> float:
    num = require_number(field, value)
    if num < 0:
        raise InvalidInput(field, "must not be negative")
    return num


def require_choice(field: str, value: Any, choices: Iterable[str]) -> str:
    options = list(choices)
    if value not in options:
        raise InvalidInput(field, f"must be one of {', '.join(options)}")
    return value
