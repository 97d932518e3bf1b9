# projectdollar/utils/fx_conversion.py
"""
EUR/USD conversion helpers.

There is exactly one rate convention in ProjectDollar:

    rate = "1 EUR = rate USD"     (e.g. 1.10)

So:
    USD → EUR:  eur = usd ÷ rate
    EUR → USD:  usd = eur × rate

These functions do not round; callers quantize for display or storage.
"""

from decimal import Decimal

from projectdollar.services.exceptions import FXConversionError, UnsupportedCurrencyError

SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "EUR")


def _check_rate(rate: Decimal) -> None:
    if rate is None or rate <= 0:
        raise FXConversionError(f"rate must be positive, got {rate}")


def usd_to_eur(amount_usd: Decimal, rate: Decimal) -> Decimal:
    """
    Convert USD to EUR.

    Example:
        usd_to_eur(Decimal("1200"), Decimal("1.10"))  # 1090.9090...
    """
    _check_rate(rate)
    return amount_usd / rate


def eur_to_usd(amount_eur: Decimal, rate: Decimal) -> Decimal:
    """Convert EUR to USD."""
    _check_rate(rate)
    return amount_eur * rate


def normalize_currency(currency: str) -> str:
    """Upper-case a currency code and check it is USD or EUR."""
    code = (currency or "").strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise UnsupportedCurrencyError(currency)
    return code


def convert(amount: Decimal, from_currency: str, to_currency: str, rate: Decimal) -> Decimal:
    """
    Convert between USD and EUR in either direction.

    Same-currency conversion returns the amount unchanged (the rate is still
    validated so a bad rate never passes silently).
    """
    source = normalize_currency(from_currency)
    target = normalize_currency(to_currency)
    _check_rate(rate)

    if source == target:
        return amount
    if source == "USD":
        return usd_to_eur(amount, rate)
    return eur_to_usd(amount, rate)
