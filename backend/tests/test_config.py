# tests/test_config.py
"""
Tests for settings validation.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from finance_engine.config import Settings


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)

        assert s.hedge_ratio == Decimal("0.5")
        assert s.projection_horizon_months == 12
        assert "EUR" in s.low_risk_currencies

    def test_currency_codes_normalized(self):
        s = Settings(
            _env_file=None,
            primary_currency=" eur ",
            low_risk_currencies=["usd", " "],
            medium_risk_currencies=["cad"],
        )

        assert s.primary_currency == "EUR"
        assert s.low_risk_currencies == ["USD"]
        assert s.medium_risk_currencies == ["CAD"]

    def test_primary_currency_from_environment_is_stripped(self, monkeypatch):
        monkeypatch.setenv("PRIMARY_CURRENCY", " gbp ")

        assert Settings(_env_file=None).primary_currency == "GBP"

    @pytest.mark.parametrize("code", ["EURO", " eu "])
    def test_primary_currency_length_checked_after_strip(self, code):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, primary_currency=code)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="must sum to 1"):
            Settings(_env_file=None, risk_concentration_weight=Decimal("0.5"))

    def test_tiers_must_be_disjoint(self):
        with pytest.raises(ValidationError, match="both low and medium"):
            Settings(_env_file=None, low_risk_currencies=["USD", "CAD"], medium_risk_currencies=["CAD"])

    @pytest.mark.parametrize("ratio", ["0", "1.5"])
    def test_hedge_ratio_bounds(self, ratio):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, hedge_ratio=Decimal(ratio))

    def test_environment_flags(self):
        assert Settings(_env_file=None, environment="production").is_production
        assert Settings(_env_file=None, environment="test").is_test
