# backend/finance_engine/services/constants.py
"""
Centralized constants for the finance engine services.

Single source of truth for calculation constants that are part of the
financial conventions themselves (calendar averages, score breakpoints,
precision). Tunable policy values (risk tiers, hedge ratio, cache TTL)
live in config.py instead.

Usage:
    from finance_engine.services.constants import (
        FREQUENCY_MULTIPLIERS,
        CURRENCY_PRECISION,
        ZERO,
    )
"""

from decimal import Decimal


# =============================================================================
# FINANCIAL CALENDAR CONSTANTS
# =============================================================================

# Trading days per year, used to annualize daily FX volatility
TRADING_DAYS_PER_YEAR: int = 252

MONTHS_PER_YEAR: int = 12

# Look-back windows (calendar days) for currency volatility
VOLATILITY_WINDOW_30D: int = 30
VOLATILITY_WINDOW_90D: int = 90
VOLATILITY_WINDOW_1Y: int = 365

# Need at least this many rate observations for a standard deviation of returns
MIN_OBSERVATIONS_FOR_VOLATILITY: int = 3

# 30d volatility must differ from 90d by more than this fraction to be a trend
VOLATILITY_TREND_THRESHOLD: Decimal = Decimal("0.10")


# =============================================================================
# PAYMENT FREQUENCY NORMALIZATION
# =============================================================================

# Multipliers converting a per-period amount to a monthly equivalent.
# Calendar averages: 365.25 / 12 days, 52 / 12 weeks, 26 / 12 fortnights.
FREQUENCY_MULTIPLIERS: dict[str, Decimal] = {
    "daily": Decimal("30.44"),
    "weekly": Decimal("4.33"),
    "bi-weekly": Decimal("2.17"),
    "monthly": Decimal("1"),
}

# Longer periods divide instead, so annually(60000) is exactly 5000
FREQUENCY_DIVISORS: dict[str, Decimal] = {
    "quarterly": Decimal("3"),
    "annually": Decimal("12"),
}


# =============================================================================
# LOAN AMORTIZATION
# =============================================================================

# Balance below which a loan counts as repaid
PAYOFF_TOLERANCE: Decimal = Decimal("0.01")

# Hard cap on schedule length (60 years of monthly payments)
MAX_AMORTIZATION_MONTHS: int = 720

# Term assumed when a loan record carries no term
DEFAULT_TERM_MONTHS: int = 360

# Window for "upcoming payment" reminders
UPCOMING_PAYMENT_DAYS: int = 7


# =============================================================================
# FINANCIAL HEALTH SCORE
# =============================================================================
# Each bucket is a list of (breakpoint, points), checked in order.

SAVINGS_RATE_POINTS: list[tuple[Decimal, int]] = [
    (Decimal("20"), 30),
    (Decimal("10"), 20),
    (Decimal("5"), 10),
]

# Lower is better for debt-to-income
DEBT_TO_INCOME_POINTS: list[tuple[Decimal, int]] = [
    (Decimal("20"), 25),
    (Decimal("36"), 15),
    (Decimal("50"), 5),
]

EMERGENCY_FUND_POINTS: list[tuple[Decimal, int]] = [
    (Decimal("6"), 25),
    (Decimal("3"), 15),
    (Decimal("1"), 5),
]

PORTFOLIO_BONUS_POINTS: int = 20

MAX_HEALTH_SCORE: int = 100

# Minimum score per status, highest first
HEALTH_STATUS_THRESHOLDS: list[tuple[int, str, str]] = [
    (80, "excellent", "Your finances are in great shape. Keep it up!"),
    (60, "good", "Solid foundation with room to strengthen savings or reduce debt."),
    (40, "fair", "Some areas need attention. Focus on savings and an emergency fund."),
    (0, "poor", "Your finances need attention. Start with a budget and paying down debt."),
]

# Highest ratio per debt-to-income risk level, lowest first; above the last is high
DEBT_TO_INCOME_RISK_BANDS: list[tuple[Decimal, str, str]] = [
    (
        Decimal("20"),
        "low",
        "Your debt-to-income ratio is excellent. You have good financial flexibility.",
    ),
    (
        Decimal("36"),
        "medium",
        "Your debt-to-income ratio is manageable but could be improved. "
        "Consider paying down high-interest debt first.",
    ),
]

DEBT_TO_INCOME_HIGH_RECOMMENDATION: str = (
    "Your debt-to-income ratio is high. Focus on reducing debt and increasing income "
    "to improve your financial health."
)

DEBT_TO_INCOME_NO_INCOME_RECOMMENDATION: str = (
    "Add your income information to get a complete debt-to-income analysis."
)


# =============================================================================
# BUDGET ALERTS
# =============================================================================

# Percentage of the limit at which a category becomes a warning
BUDGET_WARNING_PERCENT: Decimal = Decimal("80")

# Percentage of the limit at which a category is over budget
BUDGET_DANGER_PERCENT: Decimal = Decimal("100")

# Highest-spend category is called out above this utilization
BUDGET_HIGHLIGHT_PERCENT: Decimal = Decimal("50")


# =============================================================================
# CURRENCY RISK RECOMMENDATIONS
# =============================================================================

# Any single exposure above this share is a concentration warning
CONCENTRATION_WARNING_PERCENT: Decimal = Decimal("70")

# Fewer currencies than this suggests diversifying
MIN_DIVERSIFIED_CURRENCIES: int = 3

# High-risk-tier exposure above this share triggers a caution
HIGH_RISK_EXPOSURE_PERCENT: Decimal = Decimal("20")

MAX_RISK_SCORE: Decimal = Decimal("100")


# =============================================================================
# DECIMAL PRECISION CONSTANTS
# =============================================================================

# Currency amounts: 2 decimal places
CURRENCY_PRECISION: Decimal = Decimal("0.01")

# Exchange rates: 8 decimal places
RATE_PRECISION: Decimal = Decimal("0.00000001")

# Percentages: 2 decimal places (e.g. 12.34%)
PERCENTAGE_PRECISION: Decimal = Decimal("0.01")

ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Pure calculation endpoints
RATE_LIMIT_DEFAULT: str = "100/minute"

# Endpoints that may reach the external rate provider
RATE_LIMIT_RATES: str = "30/minute"

# Cache refresh (forces provider calls for every pair afterwards)
RATE_LIMIT_REFRESH: str = "5/minute"

# Health checks, polled by monitors
RATE_LIMIT_HEALTH: str = "300/minute"


# =============================================================================
# RESOURCE LIMIT CONSTANTS
# =============================================================================

# Maximum items in a single batch conversion
MAX_BATCH_SIZE: int = 500

# Maximum records of one kind in a single calculation request
MAX_RECORDS_PER_REQUEST: int = 5000

# Maximum date range for historical rates (days)
MAX_HISTORY_DAYS: int = 365 * 5 + 2
