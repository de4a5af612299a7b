from typing import List

from .errors import InvalidInput
from .schemas import AmortizationRow, LoanResult
from .utils import monthly_rate
from .validators import require_non_negative, require_positive


def compute_monthly_payment(principal: float, annual_rate_pct: float, term_months: int) -> float:
    if term_months <= 0 or principal <= 0:
        return 0.0
    r = monthly_rate(annual_rate_pct)
    if r == 0:
        return principal / term_months
    growth = (1 + r) ** term_months
    return principal * r * growth / (growth - 1)


def loan_emi(principal: float, annual_rate_pct: float, years: float) -> LoanResult:
    """Equated monthly installment for an amortizing loan.

    `annual_rate_pct` is a whole-number percent (8.5 means 8.5% a year).
    A zero rate degrades to straight-line repayment `P / n`.
    """
    principal = require_positive("principal", principal)
    annual_rate_pct = require_non_negative("annual_rate_pct", annual_rate_pct)
    years = require_positive("years", years)

    months = int(round(years * 12))
    if months == 0:
        raise InvalidInput("years", "must cover at least one month")
    emi = compute_monthly_payment(principal, annual_rate_pct, months)
    total_payment = emi * months
    return LoanResult(
        principal=principal,
        months=months,
        emi=emi,
        total_payment=total_payment,
        total_interest=total_payment - principal,
    )


def amortization_schedule(principal: float, annual_rate_pct: float, years: float) -> List[AmortizationRow]:
    loan = loan_emi(principal, annual_rate_pct, years)
    r = monthly_rate(annual_rate_pct)
    payment = loan.emi

    balance = principal
    schedule: List[AmortizationRow] = []
    for month in range(1, loan.months + 1):
        interest = balance * r
        principal_paid = payment - interest
        balance -= principal_paid
        # float drift leaves a few paise either side of zero on the last row
        if month == loan.months or balance < 0:
            balance = max(0.0, round(balance, 6))
        schedule.append(
            AmortizationRow(
                month=month,
                payment=round(payment, 2),
                principal=round(principal_paid, 2),
                interest=round(interest, 2),
                balance=round(balance, 2),
            )
        )
    return schedule

