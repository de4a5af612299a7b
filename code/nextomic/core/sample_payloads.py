SAMPLE_CALCULATIONS = {
    "home-loan": {"kind": "home-loan", "loan_amount": 5_000_000, "interest_rate": 8.5, "loan_tenure": 20},
    "car-loan": {"kind": "car-loan", "loan_amount": 800_000, "interest_rate": 9.5, "loan_tenure": 5},
    "sip": {"kind": "sip", "monthly_investment": 5_000, "expected_return": 12, "time_period": 10},
    "fd": {"kind": "fd", "deposit_amount": 100_000, "interest_rate": 6.5, "tenure": 5},
    "retirement": {
        "kind": "retirement",
        "current_age": 30,
        "retirement_age": 60,
        "monthly_expense": 50_000,
        "inflation_rate": 6,
        "expected_return": 10,
    },
    "income-tax": {"kind": "income-tax", "annual_income": 1_000_000, "deductions": 150_000, "regime": "Old Regime"},
    "us-tax": {"kind": "us-tax", "income": 75_000, "filing_status": "single"},
    "amortization": {"kind": "amortization", "principal": 1_000_000, "interest_rate": 9, "years": 5},
}

SAMPLE_EXPENSES = [
    {"description": "Starbucks Coffee", "amount": 5.75},
    {"description": "Uber ride home", "amount": 18.40},
    {"description": "Netflix", "amount": 9.99},
    {"description": "Grocery run", "amount": 82.10},
    {"description": "Netflix", "amount": 9.99},
    {"description": "Electric bill", "amount": 64.00},
]

SAMPLE_BUDGET = {"monthly_income": 5_000, "rule": "50/30/20"}

SAMPLE_SPENDING = {
    "housing": 1_000,
    "transportation": 300,
    "groceries": 350,
    "dining_out": 600,
    "entertainment": 200,
}

SAMPLE_GOALS = [
    {"name": "Vacation", "target_amount": 2_000},
    {"name": "New Laptop", "target_amount": 1_500},
]

SAMPLE_RISK_SCORES = [3, 2, 3, 2, 4, 3, 4, 3, 2, 3]
