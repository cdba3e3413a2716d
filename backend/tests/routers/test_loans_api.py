# tests/routers/test_loans_api.py
"""
API tests for the loan endpoints.
"""

from decimal import Decimal

import pytest


def loan_payload(**overrides) -> dict:
    payload = {
        "id": "car",
        "name": "Car loan",
        "currency": "USD",
        "principal": "12000",
        "currentBalance": "12000",
        "interestRate": "0",
        "termMonths": 60,
        "monthlyPayment": "500",
        "startDate": "2024-01-01",
        "nextPaymentDate": "2024-07-01",
    }
    payload.update(overrides)
    return payload


class TestAmortization:
    def test_schedule(self, client):
        response = client.post("/loans/amortization", json={"loan": loan_payload(), "asOf": "2024-06-01"})

        assert response.status_code == 200
        data = response.json()
        assert data["loanId"] == "car"
        assert data["totalPayments"] == 24
        assert data["payoffDate"] == "2026-06-01"
        assert data["isPaidOff"] is False
        assert data["schedule"][0]["paymentDate"] == "2024-07-01"
        assert Decimal(data["schedule"][-1]["remainingBalance"]) == 0
        assert isinstance(data["totalInterest"], str)

    def test_paid_off_loan(self, client):
        response = client.post(
            "/loans/amortization",
            json={"loan": loan_payload(currentBalance="0"), "asOf": "2024-06-01"},
        )

        data = response.json()
        assert data["isPaidOff"] is True
        assert data["schedule"] == []
        assert data["message"] == "This loan has been paid off"

    def test_zero_payment_returns_empty_schedule(self, client):
        response = client.post(
            "/loans/amortization",
            json={"loan": loan_payload(monthlyPayment="0"), "asOf": "2024-06-01"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["schedule"] == []
        assert data["totalPayments"] == 0
        assert data["payoffDate"] == "2024-06-01"
        assert data["isPaidOff"] is False

    def test_negative_balance_is_422(self, client):
        response = client.post("/loans/amortization", json={"loan": loan_payload(currentBalance="-1")})

        assert response.status_code == 422


class TestPayment:
    def test_standard_payment(self, client):
        response = client.post(
            "/loans/payment",
            json={"principal": "25000", "annualRate": "5.5", "termMonths": 60},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["monthlyPayment"]["amount"] == "477.53"
        assert data["monthlyPayment"]["currency"] == "USD"
        assert data["totalPaid"] == "28651.80"
        assert data["totalInterest"] == "3651.80"

    def test_zero_principal_is_400(self, client):
        response = client.post(
            "/loans/payment",
            json={"principal": "0", "annualRate": "5", "termMonths": 12},
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "principal"}

    @pytest.mark.parametrize("body", [
        {"principal": "1000", "annualRate": "5", "termMonths": 0},
        {"principal": "1000", "annualRate": "-1", "termMonths": 12},
        {"principal": "1000", "annualRate": "5"},
    ])
    def test_invalid_request_is_422(self, client, body):
        assert client.post("/loans/payment", json=body).status_code == 422


class TestStrategies:
    def test_orders_and_upcoming(self, client):
        loans = [
            loan_payload(id="car", currentBalance="5000", interestRate="3", monthlyPayment="200"),
            loan_payload(id="personal", currentBalance="2000", interestRate="4", monthlyPayment="100",
                         nextPaymentDate="2024-08-15"),
            loan_payload(id="card", currentBalance="8000", interestRate="18", monthlyPayment="300"),
        ]

        response = client.post("/loans/strategies", json={"loans": loans, "asOf": "2024-06-28"})

        assert response.status_code == 200
        data = response.json()
        assert data["snowball"]["order"] == ["personal", "car", "card"]
        assert data["avalanche"]["order"] == ["card", "personal", "car"]
        assert data["snowball"]["estimatedPayoffMonths"] == 25
        assert data["upcomingPayments"] == ["car", "card"]

    def test_debt_to_income(self, client):
        loans = [loan_payload(monthlyPayment="400"), loan_payload(id="b", monthlyPayment="200")]

        response = client.post("/loans/debt-to-income", json={"loans": loans, "monthlyIncome": "5000"})

        assert response.json()["ratio"] == "12.00"
        assert response.json()["totalMonthlyPayment"] == "600.00"
        assert response.json()["riskLevel"] == "low"
        assert "excellent" in response.json()["recommendation"]

    def test_debt_to_income_high(self, client):
        loans = [loan_payload(monthlyPayment="2000")]

        response = client.post("/loans/debt-to-income", json={"loans": loans, "monthlyIncome": "5000"})

        assert response.json()["ratio"] == "40.00"
        assert response.json()["riskLevel"] == "high"

    def test_debt_to_income_without_income(self, client):
        response = client.post("/loans/debt-to-income", json={"loans": [loan_payload()], "monthlyIncome": "0"})

        assert response.status_code == 200
        assert response.json()["ratio"] == "0.00"
        assert response.json()["riskLevel"] == "medium"
        assert response.json()["recommendation"].startswith("Add your income information")


class TestMultiCurrency:
    def test_currency_exposure(self, client):
        loans = [
            loan_payload(id="a", currentBalance="1000"),
            loan_payload(id="b", currentBalance="1000", currency="EUR"),
        ]

        response = client.post("/loans/currency-exposure", json={"loans": loans, "baseCurrency": "USD"})

        assert response.status_code == 200
        data = response.json()
        assert data["baseCurrency"] == "USD"
        assert [e["currency"] for e in data["exposures"]] == ["EUR", "USD"]
        assert data["exposures"][0]["percentage"] == "52.38"
        assert data["exposures"][0]["loanCount"] == 1

    def test_unsupported_base_is_400(self, client):
        response = client.post("/loans/currency-exposure", json={"loans": [], "baseCurrency": "QQQ"})

        assert response.status_code == 400

    def test_projections(self, client):
        loan = loan_payload(currentBalance="1000", monthlyPayment="100", currency="EUR")

        response = client.post(
            "/loans/multi-currency-projections",
            json={"loans": [loan], "targetCurrency": "USD", "months": 2},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["targetCurrency"] == "USD"
        assert len(data["projections"]) == 2
        first = data["projections"][0]
        assert first["month"].endswith("-01")
        assert Decimal(first["totalDebt"]) == Decimal("990.00")
        assert Decimal(first["currencyBreakdown"]["EUR"]) == Decimal("990.00")
        assert Decimal(first["exchangeRateImpact"]) == 0
