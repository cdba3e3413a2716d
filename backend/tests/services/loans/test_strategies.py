# tests/services/loans/test_strategies.py
"""
Tests for payoff strategies, debt-to-income and upcoming payments.
"""

from datetime import date
from decimal import Decimal

import pytest

from finance_engine.services.loans.strategies import (
    assess_debt_to_income,
    calculate_debt_to_income_from_payments,
    calculate_payoff_strategies,
    calculate_total_monthly_payment,
    get_upcoming_payments,
)
from tests.conftest import create_loan


@pytest.fixture
def loans():
    return [
        create_loan(balance=5000, rate=3, payment=200, id="car"),
        create_loan(balance=2000, rate=4, payment=100, id="personal"),
        create_loan(balance=8000, rate=18, payment=300, id="card"),
        create_loan(balance=0, rate=25, payment=50, id="closed", principal=1000),
    ]


class TestPayoffStrategies:
    """Tests for snowball and avalanche orderings."""

    def test_snowball_smallest_balance_first(self, loans):
        strategies = calculate_payoff_strategies(loans, as_of=date(2024, 6, 1))

        assert [loan.id for loan in strategies.snowball.order] == ["personal", "car", "card"]

    def test_avalanche_highest_rate_first(self, loans):
        strategies = calculate_payoff_strategies(loans, as_of=date(2024, 6, 1))

        assert [loan.id for loan in strategies.avalanche.order] == ["card", "personal", "car"]

    def test_shared_totals(self, loans):
        strategies = calculate_payoff_strategies(loans, as_of=date(2024, 6, 1))

        for strategy in (strategies.snowball, strategies.avalanche):
            assert strategy.total_debt == Decimal("15000")
            assert strategy.total_monthly_payment == Decimal("600")
            assert strategy.estimated_payoff_months == 25
            assert strategy.total_interest > Decimal("0")
        assert strategies.snowball.total_interest == strategies.avalanche.total_interest

    def test_names_and_descriptions(self, loans):
        strategies = calculate_payoff_strategies(loans)

        assert strategies.snowball.name == "snowball"
        assert strategies.avalanche.name == "avalanche"
        assert "smallest balance" in strategies.snowball.description
        assert "highest interest rate" in strategies.avalanche.description

    def test_loan_without_payment_does_not_break_the_list(self, loans):
        loans.append(create_loan(balance=1000, rate=10, payment=0, id="stalled"))

        strategies = calculate_payoff_strategies(loans, as_of=date(2024, 6, 1))

        assert "stalled" in [loan.id for loan in strategies.snowball.order]
        assert strategies.snowball.total_debt == Decimal("16000")
        assert strategies.snowball.total_monthly_payment == Decimal("600")
        assert strategies.snowball.total_interest > Decimal("0")

    def test_no_active_loans(self):
        strategies = calculate_payoff_strategies([create_loan(balance=0, principal=500)])

        assert strategies.snowball.order == []
        assert strategies.snowball.total_debt == Decimal("0")
        assert strategies.snowball.estimated_payoff_months == 0


class TestDebtToIncome:
    def test_payments_over_income(self, loans):
        assert calculate_total_monthly_payment(loans) == Decimal("600")
        assert calculate_debt_to_income_from_payments(loans, Decimal("5000")) == Decimal("12")

    def test_no_income(self, loans):
        assert calculate_debt_to_income_from_payments(loans, Decimal("0")) == Decimal("0")


class TestAssessDebtToIncome:
    """Tests for the debt-to-income risk bands."""

    @pytest.mark.parametrize("ratio, level", [
        ("0", "low"),
        ("20", "low"),
        ("20.01", "medium"),
        ("36", "medium"),
        ("36.01", "high"),
        ("80", "high"),
    ])
    def test_bands(self, ratio, level):
        assessment = assess_debt_to_income(Decimal(ratio), Decimal("5000"))

        assert assessment.risk_level == level
        assert assessment.ratio == Decimal(ratio)

    def test_recommendations_differ_per_band(self):
        low = assess_debt_to_income(Decimal("10"), Decimal("5000"))
        medium = assess_debt_to_income(Decimal("30"), Decimal("5000"))
        high = assess_debt_to_income(Decimal("50"), Decimal("5000"))

        assert "excellent" in low.recommendation
        assert "high-interest debt" in medium.recommendation
        assert "reducing debt" in high.recommendation

    def test_missing_income_asks_for_it(self):
        assessment = assess_debt_to_income(Decimal("0"), Decimal("0"))

        assert assessment.risk_level == "medium"
        assert assessment.recommendation.startswith("Add your income information")


class TestUpcomingPayments:
    """Tests for payments due within the next days."""

    def test_window_and_order(self):
        loans = [
            create_loan(id="later", next_payment_date=date(2024, 7, 10)),
            create_loan(id="soon", next_payment_date=date(2024, 7, 1)),
            create_loan(id="overdue", next_payment_date=date(2024, 6, 20)),
            create_loan(id="edge", next_payment_date=date(2024, 7, 5)),
            create_loan(id="closed", balance=0, principal=100, next_payment_date=date(2024, 6, 29)),
        ]

        upcoming = get_upcoming_payments(loans, as_of=date(2024, 6, 28))

        assert [loan.id for loan in upcoming] == ["overdue", "soon", "edge"]

    def test_custom_window(self):
        loans = [create_loan(id="later", next_payment_date=date(2024, 7, 10))]

        assert get_upcoming_payments(loans, as_of=date(2024, 6, 28), days=14)
