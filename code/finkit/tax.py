import math
from typing import Dict, List, Optional, Sequence, Tuple

from .schemas import BracketTaxResult, IncomeTaxResult
from .validators import require_choice, require_non_negative

# (upper limit of band, marginal rate). The last band is open-ended.
Bracket = Tuple[float, float]

INDIA_SLABS: List[Bracket] = [
    (250_000, 0.0),
    (500_000, 0.05),
    (1_000_000, 0.20),
    (math.inf, 0.30),
]
CESS_RATE = 0.04
TAX_REGIMES = ("Old Regime", "New Regime")

US_BRACKETS: Dict[str, List[Bracket]] = {
    "single": [
        (11_000, 0.10),
        (44_725, 0.12),
        (95_375, 0.22),
        (182_100, 0.24),
        (231_250, 0.32),
        (578_125, 0.35),
        (math.inf, 0.37),
    ],
    "married_jointly": [
        (22_000, 0.10),
        (89_450, 0.12),
        (190_750, 0.22),
        (364_200, 0.24),
        (462_500, 0.32),
        (693_750, 0.35),
        (math.inf, 0.37),
    ],
}


def progressive_tax(income: float, brackets: Sequence[Bracket]) -> float:
    """Tax each band only on the slice of income that falls inside it."""
    tax = 0.0
    previous_limit = 0.0
    for limit, rate in brackets:
        if income <= previous_limit:
            break
        taxable_in_band = min(income, limit) - previous_limit
        tax += taxable_in_band * rate
        previous_limit = limit
    return tax


def income_tax(annual_income: float, deductions: float = 0.0, regime: str = "Old Regime") -> IncomeTaxResult:
    """Indian income tax with 4% health and education cess.

    The New Regime reuses the Old Regime slabs and only drops deductions.
    That is a known simplification, not the real New Regime slab table.
    """
    annual_income = require_non_negative("annual_income", annual_income)
    deductions = require_non_negative("deductions", deductions)
    regime = require_choice("regime", regime, TAX_REGIMES)

    applied_deductions = deductions if regime == "Old Regime" else 0.0
    taxable_income = max(annual_income - applied_deductions, 0.0)
    tax = progressive_tax(taxable_income, INDIA_SLABS)
    cess = tax * CESS_RATE
    total_tax = tax + cess

    return IncomeTaxResult(
        regime=regime,
        gross_income=annual_income,
        deductions=applied_deductions,
        taxable_income=taxable_income,
        tax=tax,
        cess=cess,
        total_tax=total_tax,
        net_income=annual_income - total_tax,
    )


def tax_brackets_us(income: float, filing_status: str = "single", brackets: Optional[Dict[str, List[Bracket]]] = None) -> BracketTaxResult:
    table = brackets if brackets is not None else US_BRACKETS
    income = require_non_negative("income", income)
    filing_status = require_choice("filing_status", filing_status, table.keys())

    tax = progressive_tax(income, table[filing_status])
    effective_rate = round(tax / income * 100, 1) if income > 0 else 0.0
    return BracketTaxResult(
        filing_status=filing_status,
        total_tax=round(tax),
        effective_rate=effective_rate,
        after_tax=round(income - tax),
    )
