# backend/finance_engine/services/analytics/exposure.py
"""
Currency exposure and risk scoring.

Pure functions: investments and already-resolved rates in, exposures and
scores out. No I/O; CurrencyRiskService resolves rates and history first.

Formulas:
    value_g = Σ quantity × (current_price or purchase_price)   per currency g
    share_g = value_g(base) / Σ value(base)
    HHI = Σ share_g²                                     (1 = one currency)
    foreign = Σ share_g for g != base
    vol = Σ share_g × volatility_g / cap, clipped to 1   (no data -> 0)
    risk_score = 100 × (w_c·HHI + w_f·foreign + w_v·vol), clamped to [0, 100]
"""

import logging
from decimal import Decimal
from typing import Iterable, Mapping

from finance_engine.config import settings
from finance_engine.models import Investment
from finance_engine.services.constants import (
    CONCENTRATION_WARNING_PERCENT,
    HIGH_RISK_EXPOSURE_PERCENT,
    HUNDRED,
    MAX_RISK_SCORE,
    MIN_DIVERSIFIED_CURRENCIES,
    ONE,
    PERCENTAGE_PRECISION,
    ZERO,
)
from finance_engine.services.currency.registry import get_risk_level
from finance_engine.services.currency.types import (
    CurrencyAmount,
    CurrencyExposure,
    CurrencyVolatility,
    HedgingOption,
    RiskLevel,
)
from finance_engine.services.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Instrument name -> description
HEDGING_INSTRUMENTS: dict[str, str] = {
    "Currency Forward Contracts": (
        "Lock in exchange rates for future dates to eliminate currency uncertainty"
    ),
    "Currency Options": (
        "Purchase the right (but not obligation) to exchange currencies at specific rates"
    ),
    "Currency ETFs": (
        "Invest in currency-hedged ETFs that automatically manage foreign exchange risk"
    ),
}


# =============================================================================
# EXPOSURE
# =============================================================================

def calculate_currency_exposure(
        investments: Iterable[Investment],
        base_currency: str | None = None,
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> list[CurrencyExposure]:
    """
    Group holdings by native currency and compute each group's share.

    Args:
        investments: Holdings to analyze
        base_currency: Currency percentages are computed in
        rates_to_base: Rate from each currency into base_currency. Groups
            without a rate are weighted by their native amount.

    Returns:
        Exposures sorted by descending percentage (currency code breaks ties).
        Empty when there is nothing of value.
    """
    totals: dict[str, Decimal] = {}
    for investment in investments:
        totals[investment.currency] = totals.get(investment.currency, ZERO) + investment.market_value

    values: dict[str, CurrencyAmount] = {}
    for code, native in totals.items():
        rate = None
        if base_currency and rates_to_base:
            rate = rates_to_base.get(code)
            if rate is None:
                logger.warning(f"No {code}->{base_currency} rate; weighting {code} by native amount")
        if rate is not None and code != base_currency:
            values[code] = CurrencyAmount(
                amount=native,
                currency=code,
                converted_amount=native * rate,
                exchange_rate=rate,
            )
        else:
            values[code] = CurrencyAmount(amount=native, currency=code)

    grand_total = sum((v.effective_amount for v in values.values()), ZERO)
    if grand_total <= ZERO:
        return []

    exposures = [
        CurrencyExposure(
            currency=code,
            total_value=value,
            percentage=(value.effective_amount / grand_total * HUNDRED).quantize(PERCENTAGE_PRECISION),
            risk_level=get_risk_level(code),
        )
        for code, value in values.items()
    ]
    exposures.sort(key=lambda e: (-e.percentage, e.currency))
    return exposures


# =============================================================================
# RISK SCORE
# =============================================================================

def _volatility_by_currency(
        volatility: Mapping[str, CurrencyVolatility] | Iterable[CurrencyVolatility] | None,
) -> dict[str, CurrencyVolatility]:
    if volatility is None:
        return {}
    if isinstance(volatility, Mapping):
        return dict(volatility)
    return {v.currency: v for v in volatility}


def calculate_risk_score(
        exposures: list[CurrencyExposure],
        base_currency: str,
        volatility: Mapping[str, CurrencyVolatility] | Iterable[CurrencyVolatility] | None = None,
        concentration_weight: Decimal | None = None,
        foreign_weight: Decimal | None = None,
        volatility_weight: Decimal | None = None,
        volatility_cap: Decimal | None = None,
) -> Decimal:
    """
    Weighted 0-100 currency risk score.

    Higher concentration, a larger foreign share and higher volatility all
    increase the score. Weights and the volatility cap default to settings.
    """
    if not exposures:
        return ZERO

    w_c = settings.risk_concentration_weight if concentration_weight is None else concentration_weight
    w_f = settings.risk_foreign_weight if foreign_weight is None else foreign_weight
    w_v = settings.risk_volatility_weight if volatility_weight is None else volatility_weight
    cap = settings.volatility_cap_percent if volatility_cap is None else volatility_cap
    by_currency = _volatility_by_currency(volatility)

    hhi = ZERO
    foreign = ZERO
    weighted_vol = ZERO
    for exposure in exposures:
        share = exposure.percentage / HUNDRED
        hhi += share * share
        if exposure.currency != base_currency:
            foreign += share
        vol = by_currency.get(exposure.currency)
        if vol is not None and vol.representative is not None:
            weighted_vol += share * vol.representative

    vol_component = min(weighted_vol / cap, ONE) if cap > ZERO else ZERO

    score = HUNDRED * (w_c * hhi + w_f * foreign + w_v * vol_component)
    score = max(ZERO, min(MAX_RISK_SCORE, score))
    return score.quantize(PERCENTAGE_PRECISION)


# =============================================================================
# RECOMMENDATIONS & HEDGING
# =============================================================================

def generate_recommendations(
        exposures: list[CurrencyExposure],
        base_currency: str,
        risk_score: Decimal,
        score_threshold: Decimal | None = None,
        hedge_threshold: Decimal | None = None,
) -> list[str]:
    """Textual recommendations for an exposure snapshot."""
    if not exposures:
        return []

    score_threshold = settings.diversification_score_threshold if score_threshold is None else score_threshold
    hedge_threshold = settings.hedge_exposure_threshold if hedge_threshold is None else hedge_threshold
    recommendations: list[str] = []

    if risk_score > score_threshold:
        recommendations.append(
            f"Your currency risk score is {risk_score:.1f}. Consider diversifying your "
            f"holdings across more currencies to reduce risk."
        )

    for exposure in exposures:
        if exposure.currency != base_currency and exposure.percentage > hedge_threshold:
            recommendations.append(
                f"Consider hedging your {exposure.currency} exposure "
                f"({exposure.percentage:.1f}% of portfolio) to reduce exchange rate risk."
            )

    concentrated = next((e for e in exposures if e.percentage > CONCENTRATION_WARNING_PERCENT), None)
    if concentrated is not None:
        recommendations.append(
            f"Consider reducing {concentrated.currency} exposure (currently "
            f"{concentrated.percentage:.1f}%) by diversifying into other currencies."
        )

    if len(exposures) < MIN_DIVERSIFIED_CURRENCIES:
        recommendations.append(
            "Consider diversifying across more currencies to reduce concentration risk."
        )

    high_risk = [
        e.currency for e in exposures
        if e.risk_level == RiskLevel.HIGH and e.percentage > HIGH_RISK_EXPOSURE_PERCENT
    ]
    if high_risk:
        recommendations.append(
            f"Consider hedging or reducing exposure to high-risk currencies: {', '.join(high_risk)}."
        )

    return recommendations


def _scale(amount: CurrencyAmount, ratio: Decimal) -> CurrencyAmount:
    return CurrencyAmount(
        amount=amount.amount * ratio,
        currency=amount.currency,
        converted_amount=amount.converted_amount * ratio if amount.converted_amount is not None else None,
        exchange_rate=amount.exchange_rate,
        last_updated=amount.last_updated,
    )


def suggest_hedging_options(
        exposures: list[CurrencyExposure],
        base_currency: str,
        hedge_ratio: Decimal | None = None,
        hedge_threshold: Decimal | None = None,
) -> list[HedgingOption]:
    """
    Hedge suggestions for every significant foreign exposure.

    The suggested size is the exposure value times `hedge_ratio`
    (settings.hedge_ratio by default, 0 < ratio <= 1). Currency ETFs are only
    suggested for high-risk-tier currencies.
    """
    ratio = settings.hedge_ratio if hedge_ratio is None else hedge_ratio
    if not ZERO < ratio <= ONE:
        raise ValidationError(f"hedge_ratio must be in (0, 1], got {ratio}", field="hedge_ratio")
    hedge_threshold = settings.hedge_exposure_threshold if hedge_threshold is None else hedge_threshold

    options: list[HedgingOption] = []
    for exposure in exposures:
        if exposure.currency == base_currency or exposure.percentage <= hedge_threshold:
            continue

        instruments = ["Currency Forward Contracts", "Currency Options"]
        if exposure.risk_level == RiskLevel.HIGH:
            instruments.append("Currency ETFs")

        hedge_amount = _scale(exposure.total_value, ratio)
        for instrument in instruments:
            options.append(HedgingOption(
                instrument=instrument,
                currency=exposure.currency,
                hedge_amount=hedge_amount,
                hedge_ratio=ratio,
                description=HEDGING_INSTRUMENTS[instrument],
            ))
    return options
