# tests/routers/test_records_api.py
"""
API tests for the investment, income, dashboard and budget endpoints.
"""

from decimal import Decimal


def investment(currency="USD", quantity="10", price="100", **extra) -> dict:
    return {"name": "Holding", "currency": currency, "quantity": quantity, "purchasePrice": price, **extra}


def income(amount="5000", currency="USD", **extra) -> dict:
    return {"source": "Employer", "amount": amount, "currency": currency, "startDate": "2024-01-01", **extra}


def expense(amount="1000", currency="USD", category="Housing", **extra) -> dict:
    return {"category": category, "amount": amount, "currency": currency, **extra}


class TestInvestmentsApi:
    """Tests for exposure and risk analysis."""

    def test_currency_exposure(self, client):
        response = client.post("/investments/currency-exposure", json={
            "investments": [investment("USD"), investment("EUR")],
            "baseCurrency": "USD",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["baseCurrency"] == "USD"
        eur = data["exposures"][0]
        assert eur["currency"] == "EUR"
        assert eur["percentage"] == "52.38"
        assert eur["riskLevel"] == "low"
        assert Decimal(eur["totalValue"]["convertedAmount"]) == Decimal("1100")

    def test_currency_risk(self, client):
        response = client.post("/investments/currency-risk", json={
            "investments": [investment("USD"), investment("BRL", price="500")],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["baseCurrency"] == "USD"
        assert Decimal("0") <= Decimal(data["riskScore"]) <= Decimal("100")
        assert any(h["instrument"] == "Currency ETFs" for h in data["hedgingOptions"])
        assert data["volatility"][0]["currency"] == "BRL"
        assert data["volatility"][0]["volatility1y"] is None
        assert data["analyzedAt"]

    def test_volatility_keys_keep_lower_case_suffix(self, client):
        response = client.post("/investments/currency-risk", json={
            "investments": [investment("USD"), investment("EUR")],
        })

        assert response.status_code == 200
        entry = response.json()["volatility"][0]
        assert {"volatility30d", "volatility90d", "volatility1y"} <= set(entry)
        assert not {"volatility30D", "volatility90D", "volatility1Y"} & set(entry)

    def test_missing_name_is_422(self, client):
        response = client.post("/investments/currency-exposure", json={
            "investments": [{"currency": "USD", "quantity": "1", "purchasePrice": "1"}],
        })

        assert response.status_code == 422


class TestIncomesApi:
    def test_cash_flow_projection(self, client):
        response = client.post("/incomes/projections", json={
            "incomes": [income("1000", "EUR")],
            "expenses": [expense("500")],
            "startMonth": "2024-06-15",
            "months": 3,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["baseCurrency"] == "USD"
        assert [p["month"] for p in data["projections"]] == ["2024-06-01", "2024-07-01", "2024-08-01"]
        assert data["projections"][0]["income"] == "1100.00"
        assert data["projections"][0]["net"] == "600.00"

    def test_end_before_start_is_422(self, client):
        response = client.post("/incomes/projections", json={
            "incomes": [income(endDate="2023-01-01")],
        })

        assert response.status_code == 422


class TestDashboardApi:
    def test_metrics(self, client):
        response = client.post("/dashboard/metrics", json={
            "investments": [investment(quantity="300")],
            "incomes": [income("5000")],
            "expenses": [expense("4000")],
            "loans": [{
                "name": "Car", "currency": "USD", "principal": "12000", "currentBalance": "12000",
                "interestRate": "5", "termMonths": 60, "monthlyPayment": "300",
                "startDate": "2024-01-01", "nextPaymentDate": "2024-07-01",
            }],
            "goals": [{"name": "Fund", "currency": "USD", "targetAmount": "10000", "currentAmount": "2500"}],
            "cashSavings": "1000",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["netWorth"] == "19000.00"
        assert data["savingsRate"] == "20.00"
        assert data["debtToIncomeRatio"] == "20.00"
        assert data["financialHealthScore"] == 100
        assert data["healthStatus"]["status"] == "excellent"
        assert data["goalProgress"][0]["progress"] == "25.00"
        assert data["currency"] == "USD"
        assert data["unconvertedCurrencies"] == []

    def test_unconverted_currency_reported(self, client):
        response = client.post("/dashboard/metrics", json={
            "investments": [investment("CHF")],
            "baseCurrency": "USD",
        })

        assert response.json()["unconvertedCurrencies"] == ["CHF"]

    def test_empty_request(self, client):
        response = client.post("/dashboard/metrics", json={})

        assert response.status_code == 200
        assert response.json()["netWorth"] == "0.00"


class TestBudgetApi:
    """Tests for budget alerts."""

    def test_spend_from_expenses(self, client):
        response = client.post("/budget/alerts", json={
            "budgets": [
                {"category": "Food", "limit": {"amount": "500", "currency": "USD"}},
                {"category": "Fun", "limit": {"amount": "200", "currency": "USD"}},
            ],
            "expenses": [expense("600", category="Food")],
        })

        assert response.status_code == 200
        data = response.json()
        food, fun = data["alerts"]
        assert food["category"] == "Food"
        assert food["alertLevel"] == "danger"
        assert food["percentageUsed"] == "120.00"
        assert fun["alertLevel"] == "info"
        assert Decimal(fun["spent"]["amount"]) == 0
        assert data["summary"]["overBudgetCategories"] == ["Food"]
        assert data["currency"] == "USD"

    def test_explicit_spend_in_other_currency(self, client):
        response = client.post("/budget/alerts", json={
            "budgets": [{
                "category": "Travel",
                "limit": {"amount": "1000", "currency": "USD"},
                "spent": {"amount": "800", "currency": "EUR"},
            }],
            "targetCurrency": "USD",
        })

        alert = response.json()["alerts"][0]
        assert alert["percentageUsed"] == "88.00"
        assert alert["alertLevel"] == "warning"
        assert alert["currencyMismatch"] is True

    def test_duplicate_categories_are_422(self, client):
        budget = {"category": "Food", "limit": {"amount": "500", "currency": "USD"}}

        response = client.post("/budget/alerts", json={"budgets": [budget, budget]})

        assert response.status_code == 422

    def test_no_budgets_is_422(self, client):
        assert client.post("/budget/alerts", json={"budgets": []}).status_code == 422
