import logging
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Type, get_args

from pydantic import BaseModel, TypeAdapter, ValidationError

from finkit import debt, formulas, tax
from finkit.errors import InvalidInput
from finkit.formatters import inr, money

from .models import (
    AmortizationInput,
    AssetAllocationInput,
    BreakEvenInput,
    CalculationResult,
    CalculatorInfo,
    CalculatorInput,
    CompoundInterestInput,
    DebtToIncomeInput,
    EmergencyFundInput,
    FdInput,
    IncomeTaxInput,
    ListItem,
    LoanInput,
    RetirementInput,
    SavingsRateInput,
    SipInput,
    UsTaxInput,
)
from .tools import calculator_title, card, line_chart, money_rows, pct_card, split_chart, text_card

logger = logging.getLogger(__name__)

_INPUT_ADAPTER = TypeAdapter(CalculatorInput)
_TAG_ERRORS = {"union_tag_invalid", "union_tag_not_found"}


def parse_calculator_input(raw: Mapping[str, Any]) -> BaseModel:
    """Validate a raw field mapping into its calculator variant, or raise InvalidInput."""
    try:
        return _INPUT_ADAPTER.validate_python(dict(raw))
    except ValidationError as exc:
        err = exc.errors()[0]
        if err["type"] in _TAG_ERRORS:
            raise InvalidInput("kind", "unknown calculator") from exc
        loc = [str(part) for part in err["loc"][1:]] or ["kind"]
        raise InvalidInput(".".join(loc), err["msg"]) from exc


def _loan(inp: LoanInput) -> Dict[str, Any]:
    loan = debt.loan_emi(inp.loan_amount, inp.interest_rate, inp.loan_tenure)
    return {
        "cards": [
            card("Monthly EMI", loan.emi, "Per Month"),
            card("Total Interest", loan.total_interest, f"Over {inp.loan_tenure} years"),
            card("Total Payment", loan.total_payment, "Principal + Interest"),
        ],
        "chart": split_chart("pie", ["Principal Amount", "Total Interest"], [loan.principal, loan.total_interest]),
    }


def _sip(inp: SipInput) -> Dict[str, Any]:
    sip = formulas.sip_future_value(inp.monthly_investment, inp.expected_return, inp.time_period)
    return {
        "cards": [
            card("Invested Amount", sip.invested, f"{sip.months} months"),
            card("Estimated Returns", sip.returns, f"{inp.expected_return:g}% p.a."),
            card("Total Value", sip.future_value, "Maturity Amount"),
        ],
        "chart": split_chart("doughnut", ["Invested Amount", "Estimated Returns"], [sip.invested, sip.returns]),
    }


def _fd(inp: FdInput) -> Dict[str, Any]:
    fd = formulas.fd_maturity(inp.deposit_amount, inp.interest_rate, inp.tenure)
    return {
        "cards": [
            card("Deposit Amount", fd.principal, "Principal"),
            card("Interest Earned", fd.interest, f"@ {inp.interest_rate:g}%"),
            card("Maturity Amount", fd.maturity_amount, f"After {inp.tenure} years"),
        ],
        "list": money_rows({
            "Principal Deposited": fd.principal,
            "Total Interest": fd.interest,
            "Maturity Value": fd.maturity_amount,
        }),
    }


def _retirement(inp: RetirementInput) -> Dict[str, Any]:
    plan = formulas.retirement_corpus(
        inp.current_age,
        inp.retirement_age,
        inp.monthly_expense,
        inp.inflation_rate,
        inp.expected_return,
    )
    return {
        "cards": [
            card("Corpus Needed", plan.corpus_needed, "At Retirement"),
            card("Monthly SIP Required", plan.monthly_contribution, f"For {plan.years_to_retirement} years"),
            card("Future Monthly Expense", plan.future_monthly_expense, "At Retirement"),
        ],
    }


def _income_tax(inp: IncomeTaxInput) -> Dict[str, Any]:
    result = tax.income_tax(inp.annual_income, inp.deductions, inp.regime)
    return {
        "cards": [
            card("Taxable Income", result.taxable_income, "After Deductions"),
            card("Tax Liability", result.total_tax, "Including Cess"),
            card("Net Income", result.net_income, "After Tax"),
        ],
        "list": money_rows({
            "Gross Income": result.gross_income,
            "Deductions": result.deductions,
            "Taxable Income": result.taxable_income,
            "Income Tax": result.tax,
            "Health & Education Cess (4%)": result.cess,
            "Total Tax Payable": result.total_tax,
        }),
    }


def _us_tax(inp: UsTaxInput) -> Dict[str, Any]:
    result = tax.tax_brackets_us(inp.income, inp.filing_status)
    return {
        "cards": [
            text_card("Federal Tax", money(result.total_tax, "USD"), inp.filing_status.replace("_", " ").title()),
            pct_card("Effective Rate", result.effective_rate, "Of gross income"),
            text_card("After-Tax Income", money(result.after_tax, "USD"), "Take home"),
        ],
    }


def _asset_allocation(inp: AssetAllocationInput) -> Dict[str, Any]:
    mix = formulas.asset_allocation_by_age(inp.age, inp.risk_tolerance)
    rec = mix.recommended
    return {
        "cards": [
            pct_card("Stocks", mix.stocks, f"Age {inp.age}, {inp.risk_tolerance}", 0),
            pct_card("Bonds", mix.bonds, "Fixed income", 0),
        ],
        "chart": split_chart(
            "pie",
            ["Large Cap", "International", "Small Cap", "Bonds"],
            [rec["large_cap"], rec["international"], rec["small_cap"], rec["bonds"]],
        ),
    }


def _debt_to_income(inp: DebtToIncomeInput) -> Dict[str, Any]:
    dti = formulas.debt_to_income(inp.monthly_debt, inp.monthly_income)
    return {
        "cards": [pct_card("Debt-to-Income", dti.value, dti.rating)],
        "tip": dti.recommendation,
    }


def _savings_rate(inp: SavingsRateInput) -> Dict[str, Any]:
    rate = formulas.savings_rate(inp.monthly_income, inp.monthly_savings)
    return {
        "cards": [pct_card("Savings Rate", rate.value, rate.rating)],
        "tip": rate.recommendation,
    }


def _emergency_fund(inp: EmergencyFundInput) -> Dict[str, Any]:
    fund = formulas.emergency_fund(inp.monthly_expenses, inp.months)
    return {
        "cards": [
            card("Minimum", fund.minimum, "3 months"),
            card("Recommended", fund.recommended, f"{inp.months} months"),
            card("Ideal", fund.ideal, "12 months"),
        ],
    }


def _compound_interest(inp: CompoundInterestInput) -> Dict[str, Any]:
    growth = formulas.compound_interest(inp.principal, inp.interest_rate, inp.years, inp.frequency)
    return {
        "cards": [
            card("Principal", growth.principal),
            card("Interest Earned", growth.interest, f"@ {inp.interest_rate:g}%"),
            card("Final Amount", growth.final_amount, f"After {inp.years} years"),
        ],
        "chart": split_chart("doughnut", ["Principal", "Interest"], [growth.principal, growth.interest]),
    }


def _break_even(inp: BreakEvenInput) -> Dict[str, Any]:
    units = formulas.break_even(inp.fixed_costs, inp.price_per_unit, inp.variable_cost_per_unit)
    margin = inp.price_per_unit - inp.variable_cost_per_unit
    if units is None:
        return {"cards": [text_card("Break-even Units", "Not reachable", "Price does not cover variable cost")]}
    return {
        "cards": [
            text_card("Break-even Units", f"{units:,}", "Units to sell"),
            card("Contribution Margin", margin, "Per unit"),
            card("Break-even Revenue", units * inp.price_per_unit),
        ],
    }


def _amortization(inp: AmortizationInput) -> Dict[str, Any]:
    schedule = debt.amortization_schedule(inp.principal, inp.interest_rate, inp.years)
    total_interest = sum(row.interest for row in schedule)
    return {
        "cards": [
            card("Monthly Payment", schedule[0].payment, "Per Month"),
            card("Total Interest", total_interest, f"Over {inp.years} years"),
            text_card("Payments", str(len(schedule)), "Months"),
        ],
        "list": [
            ListItem(label=f"Year {row.month // 12}", value=f"{inr(row.balance)} remaining")
            for row in schedule
            if row.month % 12 == 0
        ],
        "chart": line_chart(
            [str(row.month) for row in schedule],
            {
                "balance": [row.balance for row in schedule],
                "principal": [row.principal for row in schedule],
                "interest": [row.interest for row in schedule],
            },
        ),
    }


class CalculatorSpec(NamedTuple):
    base_kind: str
    title: str
    description: str
    tip: str
    handler: Callable[[Any], Dict[str, Any]]


CALCULATORS: Dict[Type[BaseModel], CalculatorSpec] = {
    LoanInput: CalculatorSpec(
        "home-loan",
        "Home Loan EMI Calculator",
        "Calculate your monthly EMI, total interest, and loan details",
        "Making prepayments can significantly reduce your total interest burden and loan tenure.",
        _loan,
    ),
    SipInput: CalculatorSpec(
        "sip",
        "SIP Calculator",
        "Calculate returns on your Systematic Investment Plan",
        "SIP helps you benefit from rupee cost averaging and power of compounding.",
        _sip,
    ),
    FdInput: CalculatorSpec(
        "fd",
        "Fixed Deposit (FD) Calculator",
        "Calculate your FD maturity amount and interest earned",
        "FD interest is taxable. Senior citizens often get 0.5% higher interest rates.",
        _fd,
    ),
    RetirementInput: CalculatorSpec(
        "retirement",
        "Retirement Planning Calculator",
        "Calculate the corpus needed for a comfortable retirement",
        "Start early and invest regularly to build a substantial retirement corpus.",
        _retirement,
    ),
    IncomeTaxInput: CalculatorSpec(
        "income-tax",
        "Income Tax Calculator",
        "Calculate your income tax liability for the financial year",
        "Utilize tax-saving instruments under Section 80C to reduce your tax liability.",
        _income_tax,
    ),
    UsTaxInput: CalculatorSpec(
        "us-tax",
        "US Federal Tax Estimator",
        "Estimate federal income tax with progressive brackets",
        "Only the income inside each bracket is taxed at that bracket's rate.",
        _us_tax,
    ),
    AssetAllocationInput: CalculatorSpec(
        "asset-allocation",
        "Asset Allocation Calculator",
        "Split your portfolio between stocks and bonds by age",
        "Revisit your allocation every few years as your horizon shortens.",
        _asset_allocation,
    ),
    DebtToIncomeInput: CalculatorSpec(
        "debt-to-income",
        "Debt-to-Income Calculator",
        "See how much of your income goes to debt repayment",
        "Lenders generally prefer a debt-to-income ratio under 36%.",
        _debt_to_income,
    ),
    SavingsRateInput: CalculatorSpec(
        "savings-rate",
        "Savings Rate Calculator",
        "Measure what share of your income you save",
        "Automate savings on payday so the money never reaches your spending account.",
        _savings_rate,
    ),
    EmergencyFundInput: CalculatorSpec(
        "emergency-fund",
        "Emergency Fund Calculator",
        "Work out how large your safety net should be",
        "Keep your emergency fund in a liquid, low-risk account.",
        _emergency_fund,
    ),
    CompoundInterestInput: CalculatorSpec(
        "compound-interest",
        "Compound Interest Calculator",
        "Grow a lump sum with periodic compounding",
        "More frequent compounding earns slightly more at the same nominal rate.",
        _compound_interest,
    ),
    BreakEvenInput: CalculatorSpec(
        "break-even",
        "Break-even Calculator",
        "Find how many units cover your fixed costs",
        "Raising price or cutting variable cost both lower the break-even point.",
        _break_even,
    ),
    AmortizationInput: CalculatorSpec(
        "amortization",
        "Loan Amortization Schedule",
        "Month-by-month split of each payment into principal and interest",
        "Early payments are mostly interest; extra principal early saves the most.",
        _amortization,
    ),
}

_VARIANTS = get_args(get_args(CalculatorInput)[0])
_unhandled = [v.__name__ for v in _VARIANTS if v not in CALCULATORS]
if _unhandled:
    raise RuntimeError(f"No calculator registered for {', '.join(_unhandled)}")


def calculate(inputs: BaseModel) -> CalculationResult:
    spec = CALCULATORS[type(inputs)]
    logger.debug("Running %s calculator", inputs.kind)
    parts = spec.handler(inputs)
    return CalculationResult(
        kind=inputs.kind,
        title=calculator_title(inputs.kind, spec.title, spec.base_kind),
        cards=parts["cards"],
        list=parts.get("list"),
        chart=parts.get("chart"),
        tip=parts.get("tip", spec.tip),
    )


def calculate_raw(raw: Mapping[str, Any]) -> CalculationResult:
    return calculate(parse_calculator_input(raw))


def calculator_catalog() -> List[CalculatorInfo]:
    catalog = []
    for model, spec in CALCULATORS.items():
        for kind in get_args(model.model_fields["kind"].annotation):
            defaults = model(kind=kind).model_dump()
            catalog.append(CalculatorInfo(
                kind=kind,
                title=calculator_title(kind, spec.title, spec.base_kind),
                description=spec.description,
                tip=spec.tip,
                defaults=defaults,
            ))
    return catalog
