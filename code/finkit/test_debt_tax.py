import pytest

from finkit import debt, tax
from finkit.errors import InvalidInput


def test_home_loan_emi():
    loan = debt.loan_emi(5_000_000, 8.5, 20)
    assert loan.months == 240
    assert loan.emi == pytest.approx(43_391, abs=1)
    assert loan.total_payment == pytest.approx(loan.emi * 240)
    assert loan.total_interest == pytest.approx(loan.total_payment - 5_000_000)


def test_rate_is_whole_percent():
    percent = debt.loan_emi(100_000, 8.5, 1).emi
    tiny = debt.loan_emi(100_000, 0.085, 1).emi
    assert percent == pytest.approx(8722, abs=1)
    assert tiny == pytest.approx(100_000 / 12, rel=1e-3)


def test_zero_rate_loan():
    loan = debt.loan_emi(120_000, 0, 1)
    assert loan.emi == 10_000
    assert loan.total_interest == pytest.approx(0)


def test_loan_rejects_negative_principal():
    with pytest.raises(InvalidInput):
        debt.loan_emi(-1, 8.5, 20)


@pytest.mark.parametrize("years", [0.01, 0.04])
def test_term_shorter_than_a_month_is_rejected(years):
    with pytest.raises(InvalidInput) as exc:
        debt.loan_emi(100_000, 8.5, years)
    assert exc.value.field == "years"
    with pytest.raises(InvalidInput):
        debt.amortization_schedule(100_000, 8.5, years)


def test_amortization_pays_off():
    rows = debt.amortization_schedule(1_000_000, 9, 5)
    assert len(rows) == 60
    assert rows[-1].balance == 0
    assert sum(r.principal for r in rows) == pytest.approx(1_000_000, abs=1)
    assert rows[0].interest > rows[-1].interest


def test_income_tax_threshold():
    assert tax.income_tax(250_000).total_tax == 0
    assert tax.income_tax(250_001).total_tax > 0


def test_income_tax_old_regime():
    result = tax.income_tax(1_000_000, 150_000, "Old Regime")
    assert result.taxable_income == 850_000
    assert result.tax == pytest.approx(82_500)
    assert result.cess == pytest.approx(3_300)
    assert result.total_tax == pytest.approx(85_800)
    assert result.net_income == pytest.approx(1_000_000 - 85_800)


def test_new_regime_ignores_deductions():
    result = tax.income_tax(1_000_000, 150_000, "New Regime")
    assert result.deductions == 0
    assert result.taxable_income == 1_000_000


def test_deductions_above_income_floor_at_zero():
    result = tax.income_tax(100_000, 400_000)
    assert result.taxable_income == 0
    assert result.total_tax == 0


def test_unknown_regime():
    with pytest.raises(InvalidInput) as exc:
        tax.income_tax(500_000, 0, "Flat")
    assert exc.value.field == "regime"


def test_us_brackets():
    result = tax.tax_brackets_us(75_000)
    assert result.total_tax == pytest.approx(11_807.5, abs=1)
    assert result.effective_rate == pytest.approx(15.7, abs=0.1)
    assert tax.tax_brackets_us(0).effective_rate == 0


def test_us_brackets_custom_table():
    table = {"flat": [(float("inf"), 0.1)]}
    assert tax.tax_brackets_us(1000, "flat", brackets=table).total_tax == 100
    assert tax.tax_brackets_us(75_000, brackets=None) == tax.tax_brackets_us(75_000)
