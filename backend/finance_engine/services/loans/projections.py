# backend/finance_engine/services/loans/projections.py
"""
Multi-currency loan projections.

Projects outstanding debt held in several currencies into one target
currency over a rolling horizon, and splits each month's figure into the
part explained by amortization and the part explained by exchange rates.

Formulas:
    balance_(l,m)  native balance of loan l after month m's payment
    rate_(c,m)     projected rate of currency c into the target in month m
    total_debt_m   = Σ_l balance_(l,m) × rate_(c(l),m)
    impact_m       = Σ_l balance_(l,m) × rate_(c(l),m) − Σ_l balance_(l,m) × rate_(c(l),0)

Rate paths come from build_rate_path: the spot rate projected forward with
the mean month-over-month drift of the last year of daily rates (flat when
there is no history). LoanProjectionService resolves spot rates and history
through ExchangeRateService; everything else here is pure.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Sequence

from finance_engine.config import settings
from finance_engine.models import Loan
from finance_engine.services.circuit_breaker import CircuitBreakerOpen
from finance_engine.services.constants import (
    CURRENCY_PRECISION,
    HUNDRED,
    ONE,
    PERCENTAGE_PRECISION,
    RATE_PRECISION,
    VOLATILITY_WINDOW_1Y,
    ZERO,
)
from finance_engine.services.currency.registry import require_supported
from finance_engine.services.currency.types import CurrencyAmount
from finance_engine.services.exceptions import RateError, ValidationError
from finance_engine.services.loans.amortization import monthly_rate
from finance_engine.services.loans.types import LoanCurrencyExposure, LoanProjectionMonth
from finance_engine.services.protocols import ExchangeRateServiceProtocol
from finance_engine.utils.date_utils import add_months, month_start

logger = logging.getLogger(__name__)


# =============================================================================
# RATE PATHS
# =============================================================================

def build_rate_path(spot: Decimal, observations: Sequence, months: int) -> list[Decimal]:
    """
    Project `spot` forward for `months` months.

    Args:
        spot: Current rate (month 0)
        observations: Daily rates with `.date` and `.rate`, any order
        months: Path length

    Returns:
        [spot, spot × (1 + d), spot × (1 + d)², ...] where d is the mean
        change between consecutive month-end rates; a flat path when fewer
        than two months of history exist.
    """
    month_end_rates: dict[tuple[int, int], Decimal] = {}
    for obs in sorted(observations, key=lambda o: o.date):
        month_end_rates[(obs.date.year, obs.date.month)] = obs.rate

    closes = [month_end_rates[k] for k in sorted(month_end_rates)]
    changes = [curr / prev - ONE for prev, curr in zip(closes, closes[1:]) if prev > ZERO]
    drift = sum(changes, ZERO) / len(changes) if changes else ZERO

    return [(spot * (ONE + drift) ** m).quantize(RATE_PRECISION) for m in range(months)]


# =============================================================================
# PROJECTION
# =============================================================================

def _native_balances(loan: Loan, months: int) -> list[tuple[Decimal, Decimal]]:
    """(balance after payment, payment) for each month, in the loan's currency."""
    r = monthly_rate(loan.interest_rate)
    balance = loan.current_balance.amount
    payment = loan.monthly_payment.amount
    rows = []

    for _ in range(months):
        if balance <= ZERO:
            rows.append((ZERO, ZERO))
            continue
        interest = balance * r
        paid = min(payment, balance + interest)
        balance = max(ZERO, balance + interest - paid)
        rows.append((balance, paid))

    return rows


def project_multi_currency_loans(
        loans: Iterable[Loan],
        target_currency: str,
        rate_paths: Mapping[str, Sequence[Decimal]],
        start_month: date,
        months: int | None = None,
) -> list[LoanProjectionMonth]:
    """
    Month-by-month debt and payments converted into target_currency.

    Args:
        rate_paths: Per-currency rate into the target, one per month. The
            target currency needs no path. Loans in a currency without a
            path are projected at their native amounts.
        start_month: Any day in the first projected month
    """
    months = settings.projection_horizon_months if months is None else months
    loans = list(loans)
    first = month_start(start_month)

    per_loan = []
    for loan in loans:
        if loan.currency == target_currency:
            path = [ONE] * months
        elif loan.currency in rate_paths and len(rate_paths[loan.currency]) >= months:
            path = list(rate_paths[loan.currency])
        else:
            logger.warning(f"No rate path for {loan.currency}; projecting loan {loan.id} unconverted")
            path = [ONE] * months
        per_loan.append((loan, path, _native_balances(loan, months)))

    projection = []
    for m in range(months):
        total_debt = ZERO
        total_payments = ZERO
        at_spot = ZERO
        breakdown: dict[str, Decimal] = {}

        for loan, path, rows in per_loan:
            balance, paid = rows[m]
            converted = balance * path[m]
            total_debt += converted
            total_payments += paid * path[m]
            at_spot += balance * path[0]
            breakdown[loan.currency] = breakdown.get(loan.currency, ZERO) + converted

        projection.append(LoanProjectionMonth(
            month=add_months(first, m),
            total_debt=total_debt.quantize(CURRENCY_PRECISION),
            total_payments=total_payments.quantize(CURRENCY_PRECISION),
            currency_breakdown={c: v.quantize(CURRENCY_PRECISION) for c, v in sorted(breakdown.items())},
            exchange_rate_impact=(total_debt - at_spot).quantize(CURRENCY_PRECISION),
        ))

    return projection


def calculate_loan_currency_exposure(
        loans: Iterable[Loan],
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> list[LoanCurrencyExposure]:
    """
    Outstanding debt per currency, with its share of total debt.

    Shares use converted balances where a rate is known. Sorted by
    descending percentage.
    """
    balances: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for loan in loans:
        if loan.current_balance.amount <= ZERO:
            continue
        balances[loan.currency] = balances.get(loan.currency, ZERO) + loan.current_balance.amount
        counts[loan.currency] = counts.get(loan.currency, 0) + 1

    amounts = {}
    for code, native in balances.items():
        rate = (rates_to_base or {}).get(code)
        if rate is not None:
            amounts[code] = CurrencyAmount(native, code, converted_amount=native * rate, exchange_rate=rate)
        else:
            amounts[code] = CurrencyAmount(native, code)

    total = sum((a.effective_amount for a in amounts.values()), ZERO)
    if total <= ZERO:
        return []

    exposures = [
        LoanCurrencyExposure(
            currency=code,
            total_balance=amount,
            percentage=(amount.effective_amount / total * HUNDRED).quantize(PERCENTAGE_PRECISION),
            loan_count=counts[code],
        )
        for code, amount in amounts.items()
    ]
    exposures.sort(key=lambda e: (-e.percentage, e.currency))
    return exposures


# =============================================================================
# SERVICE
# =============================================================================

class LoanProjectionService:
    """
    Resolves rate paths through ExchangeRateService, then projects.

    A currency whose spot rate is unavailable gets no path (its loans are
    projected unconverted); a history failure gives a flat path.
    """

    def __init__(
            self,
            rate_service: ExchangeRateServiceProtocol,
            today: Callable[[], date] = date.today,
    ) -> None:
        self._rates = rate_service
        self._today = today

    def rate_paths(self, currencies: Iterable[str], target_currency: str, months: int) -> dict[str, list[Decimal]]:
        as_of = self._today()
        start = as_of - timedelta(days=VOLATILITY_WINDOW_1Y)
        paths = {}

        for currency in sorted(set(currencies) - {target_currency}):
            try:
                spot = self._rates.get_rate(currency, target_currency).rate
            except (RateError, ValidationError) as e:
                logger.warning(f"No spot rate {currency}->{target_currency}: {e}")
                continue
            try:
                history = list(self._rates.get_historical_rates(currency, target_currency, start, as_of))
            except (RateError, CircuitBreakerOpen) as e:
                logger.warning(f"No history {currency}->{target_currency}, using a flat path: {e}")
                history = []
            paths[currency] = build_rate_path(spot, history, months)

        return paths

    def project(
            self,
            loans: Iterable[Loan],
            target_currency: str | None = None,
            months: int | None = None,
    ) -> list[LoanProjectionMonth]:
        loans = list(loans)
        target = require_supported(target_currency or settings.primary_currency, field="target_currency")
        months = settings.projection_horizon_months if months is None else months
        paths = self.rate_paths({loan.currency for loan in loans}, target, months)
        return project_multi_currency_loans(loans, target, paths, self._today(), months)
