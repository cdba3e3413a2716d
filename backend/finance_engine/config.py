# backend/finance_engine/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- PRIMARY_CURRENCY: Currency that aggregates are reported in
- RATE_PROVIDER: Exchange rate source (yahoo, static)
- RATE_CACHE_TTL_SECONDS: How long a fetched rate stays fresh

Risk analysis knobs (tiers, weights, hedge ratio) are configuration data,
not algorithm constants, so they can be revised without code changes.

Configuration is validated on application startup. Invalid configuration
will raise a ValueError with a descriptive message.

Usage:
    from finance_engine.config import settings

    if settings.rate_provider == "static":
        ...
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Single .env in the project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Personal Finance Engine")
        - DEBUG: Enable debug mode (default: False)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: text or json (default: "text")

    Exchange rates:
        - RATE_PROVIDER: yahoo (live) or static (reference table)
        - RATE_CACHE_TTL_SECONDS: Freshness window for cached rates (default: 900)
        - RATE_PROVIDER_TIMEOUT: Provider request timeout in seconds (default: 10)

    Currency risk:
        - LOW_RISK_CURRENCIES / MEDIUM_RISK_CURRENCIES: Risk tier lists,
          anything not listed is high risk
        - HEDGE_RATIO: Fraction of a foreign exposure suggested for hedging
        - RISK_*_WEIGHT: Weights of the risk score components (sum to 1)
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format (text for humans, json for aggregators)"
    )

    app_name: str = "Personal Finance Engine"
    debug: bool = False

    # =========================================================================
    # CURRENCY
    # =========================================================================
    primary_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency used for portfolio-wide aggregates"
    )

    # =========================================================================
    # EXCHANGE RATES
    # =========================================================================
    rate_provider: Literal["yahoo", "static"] = Field(
        default="yahoo",
        description="Exchange rate provider (yahoo or static reference table)"
    )
    rate_cache_ttl_seconds: int = Field(
        default=900,
        ge=1,
        le=86400,
        description="Seconds a fetched rate is served from cache"
    )
    rate_provider_timeout: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Timeout in seconds for a single provider request"
    )
    circuit_breaker_failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive provider failures before the circuit opens"
    )
    circuit_breaker_recovery_timeout: float = Field(
        default=60.0,
        ge=0,
        description="Seconds the circuit stays open before a trial call"
    )

    # =========================================================================
    # CURRENCY RISK
    # =========================================================================
    low_risk_currencies: list[str] = Field(
        default=["USD", "EUR", "JPY", "GBP", "CHF"],
        description="Major reserve currencies (low risk tier)"
    )
    medium_risk_currencies: list[str] = Field(
        default=["CAD", "AUD", "NZD", "SEK", "NOK", "DKK", "SGD", "HKD"],
        description="Developed-market currencies (medium risk tier)"
    )
    hedge_ratio: Decimal = Field(
        default=Decimal("0.5"),
        gt=0,
        le=1,
        description="Fraction of a foreign exposure suggested for hedging"
    )
    hedge_exposure_threshold: Decimal = Field(
        default=Decimal("25"),
        ge=0,
        le=100,
        description="Foreign exposure percentage above which hedging is suggested"
    )
    diversification_score_threshold: Decimal = Field(
        default=Decimal("60"),
        ge=0,
        le=100,
        description="Risk score above which diversification is recommended"
    )
    risk_concentration_weight: Decimal = Field(
        default=Decimal("0.4"),
        ge=0,
        le=1,
        description="Weight of Herfindahl concentration in the risk score"
    )
    risk_foreign_weight: Decimal = Field(
        default=Decimal("0.3"),
        ge=0,
        le=1,
        description="Weight of the non-primary-currency share in the risk score"
    )
    risk_volatility_weight: Decimal = Field(
        default=Decimal("0.3"),
        ge=0,
        le=1,
        description="Weight of exchange rate volatility in the risk score"
    )
    volatility_cap_percent: Decimal = Field(
        default=Decimal("20"),
        gt=0,
        description="Annualized volatility (%) at which the volatility component saturates"
    )

    # =========================================================================
    # PROJECTIONS
    # =========================================================================
    projection_horizon_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="Months covered by income, expense and loan projections"
    )

    # =========================================================================
    # CORS / PROXIES
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    trust_proxy_headers: bool = Field(
        default=False,
        description="Trust X-Forwarded-For from any client (only behind a load balancer)"
    )
    trusted_proxy_ips: list[str] = Field(
        default=["127.0.0.1"],
        description="Proxy addresses whose forwarded headers are trusted"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("primary_currency", mode="before")
    @classmethod
    def normalize_primary_currency(cls, v):
        """Normalize currency before the length check: uppercase and strip."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("low_risk_currencies", "medium_risk_currencies")
    @classmethod
    def normalize_currency_lists(cls, v: list[str]) -> list[str]:
        return [code.strip().upper() for code in v if code.strip()]

    @model_validator(mode="after")
    def validate_risk_config(self) -> "Settings":
        """
        Validate currency risk configuration.

        Rules:
        - Risk score weights must sum to 1
        - A currency cannot sit in both the low and medium tier
        """
        total_weight = (
            self.risk_concentration_weight
            + self.risk_foreign_weight
            + self.risk_volatility_weight
        )
        if total_weight != Decimal("1"):
            raise ValueError(
                "Risk score weights must sum to 1 "
                f"(concentration + foreign + volatility = {total_weight})"
            )

        overlap = set(self.low_risk_currencies) & set(self.medium_risk_currencies)
        if overlap:
            raise ValueError(
                f"Currencies listed in both low and medium risk tiers: {sorted(overlap)}"
            )

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
