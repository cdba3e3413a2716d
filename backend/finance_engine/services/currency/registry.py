# backend/finance_engine/services/currency/registry.py
"""
Supported currency registry.

Static reference data plus lookups derived from it:
- Supported currencies (code, name, symbol, minor units, countries)
- Currency detection from an ISO country code or a listing symbol suffix
- Risk tier classification (configured in settings, not inferred)
- Code normalization and validation used at every service boundary
"""

import re

from finance_engine.config import settings
from finance_engine.services.currency.types import Currency, RiskLevel
from finance_engine.services.exceptions import CurrencyNotSupportedError, ValidationError

_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")

DEFAULT_CURRENCY = "USD"

_EURO_AREA = (
    "Germany", "France", "Italy", "Spain", "Netherlands", "Belgium", "Austria",
    "Portugal", "Finland", "Ireland", "Luxembourg", "Slovenia", "Slovakia",
    "Estonia", "Latvia", "Lithuania", "Malta", "Cyprus",
)

SUPPORTED_CURRENCIES: tuple[Currency, ...] = (
    Currency("USD", "US Dollar", "$", 2, ("United States",)),
    Currency("EUR", "Euro", "€", 2, _EURO_AREA),
    Currency("GBP", "British Pound Sterling", "£", 2, ("United Kingdom",)),
    Currency("JPY", "Japanese Yen", "¥", 0, ("Japan",)),
    Currency("CHF", "Swiss Franc", "CHF", 2, ("Switzerland", "Liechtenstein")),
    Currency("CAD", "Canadian Dollar", "C$", 2, ("Canada",)),
    Currency("AUD", "Australian Dollar", "A$", 2, ("Australia",)),
    Currency("CNY", "Chinese Yuan", "¥", 2, ("China",)),
    Currency("INR", "Indian Rupee", "₹", 2, ("India",)),
    Currency("KRW", "South Korean Won", "₩", 0, ("South Korea",)),
    Currency("SGD", "Singapore Dollar", "S$", 2, ("Singapore",)),
    Currency("HKD", "Hong Kong Dollar", "HK$", 2, ("Hong Kong",)),
    Currency("NOK", "Norwegian Krone", "kr", 2, ("Norway",)),
    Currency("SEK", "Swedish Krona", "kr", 2, ("Sweden",)),
    Currency("DKK", "Danish Krone", "kr", 2, ("Denmark",)),
    Currency("NZD", "New Zealand Dollar", "NZ$", 2, ("New Zealand",)),
    Currency("MXN", "Mexican Peso", "$", 2, ("Mexico",)),
    Currency("BRL", "Brazilian Real", "R$", 2, ("Brazil",)),
    Currency("RUB", "Russian Ruble", "₽", 2, ("Russia",)),
    Currency("ZAR", "South African Rand", "R", 2, ("South Africa",)),
)

_BY_CODE: dict[str, Currency] = {c.code: c for c in SUPPORTED_CURRENCIES}

# ISO 3166 alpha-2 country -> currency
COUNTRY_CURRENCY_MAP: dict[str, str] = {
    "US": "USD", "CA": "CAD", "GB": "GBP",
    "DE": "EUR", "FR": "EUR", "IT": "EUR", "ES": "EUR", "NL": "EUR", "BE": "EUR",
    "AT": "EUR", "PT": "EUR", "FI": "EUR", "IE": "EUR", "LU": "EUR", "SI": "EUR",
    "SK": "EUR", "EE": "EUR", "LV": "EUR", "LT": "EUR", "MT": "EUR", "CY": "EUR",
    "JP": "JPY", "CH": "CHF", "LI": "CHF", "AU": "AUD", "CN": "CNY", "IN": "INR",
    "KR": "KRW", "SG": "SGD", "HK": "HKD", "NO": "NOK", "SE": "SEK", "DK": "DKK",
    "NZ": "NZD", "MX": "MXN", "BR": "BRL", "RU": "RUB", "ZA": "ZAR",
}

# Listing suffix (Yahoo style) -> trading currency. No suffix means a US listing.
MARKET_SUFFIX_CURRENCY: dict[str, str] = {
    ".L": "GBP",    # London
    ".TO": "CAD",   # Toronto
    ".T": "JPY",    # Tokyo
    ".HK": "HKD",   # Hong Kong
    ".AX": "AUD",   # ASX
    ".PA": "EUR",   # Euronext Paris
    ".DE": "EUR",   # XETRA
    ".MI": "EUR",   # Borsa Italiana
    ".AS": "EUR",   # Euronext Amsterdam
    ".BR": "EUR",   # Euronext Brussels
    ".SW": "CHF",   # SIX
    ".ST": "SEK",   # Stockholm
    ".OL": "NOK",   # Oslo
    ".CO": "DKK",   # Copenhagen
}


def normalize_currency_code(code: str, field: str = "currency") -> str:
    """
    Uppercase and strip a currency code, rejecting malformed input.

    Raises:
        ValidationError: If the code is not three letters
    """
    if not isinstance(code, str):
        raise ValidationError(f"Currency code must be a string, got {type(code).__name__}", field=field)
    normalized = code.strip().upper()
    if not _CODE_PATTERN.match(normalized):
        raise ValidationError(f"Invalid currency code: '{code}'", field=field)
    return normalized


def require_supported(code: str, field: str = "currency") -> str:
    """Normalize a code and make sure the registry knows it."""
    normalized = normalize_currency_code(code, field=field)
    if normalized not in _BY_CODE:
        raise CurrencyNotSupportedError(normalized, field=field)
    return normalized


def get_supported_currencies() -> list[Currency]:
    return list(SUPPORTED_CURRENCIES)


def get_currency(code: str) -> Currency:
    """
    Look up reference data for a currency.

    Raises:
        ValidationError: Malformed code
        CurrencyNotSupportedError: Well-formed but unknown code
    """
    return _BY_CODE[require_supported(code)]


def detect_currency_from_country(country_code: str) -> str:
    """Currency for an ISO 3166 alpha-2 country, USD when unknown."""
    return COUNTRY_CURRENCY_MAP.get(country_code.strip().upper(), DEFAULT_CURRENCY)


def detect_currency_from_symbol(symbol: str) -> str:
    """
    Trading currency implied by a listing symbol suffix.

    "VOD.L" -> GBP, "7203.T" -> JPY. Symbols without a known suffix
    are treated as US listings.
    """
    normalized = symbol.strip().upper()
    # Longest suffix first so ".TO" wins over ".T"
    for suffix in sorted(MARKET_SUFFIX_CURRENCY, key=len, reverse=True):
        if normalized.endswith(suffix):
            return MARKET_SUFFIX_CURRENCY[suffix]
    return DEFAULT_CURRENCY


def get_risk_level(
        code: str,
        low_risk: list[str] | None = None,
        medium_risk: list[str] | None = None,
) -> RiskLevel:
    """
    Risk tier of a currency.

    Tiers come from configuration: major reserve currencies are low,
    developed-market currencies medium, anything else high.
    """
    low = settings.low_risk_currencies if low_risk is None else low_risk
    medium = settings.medium_risk_currencies if medium_risk is None else medium_risk
    if code in low:
        return RiskLevel.LOW
    if code in medium:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
