"""
Currency Registry

Static table of supported currencies plus lookup, formatting and
validation helpers:
- Case-insensitive lookup with USD fallback
- Symbol-prefixed, locale-grouped amount formatting
- Selector options for the UI
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class Currency:
    """A supported currency and how to display it."""
    code: str
    name: str
    symbol: str
    locale: str
    decimal_places: int


# Declaration order is the order of get_currency_options()
SUPPORTED_CURRENCIES: Tuple[Currency, ...] = (
    Currency("USD", "US Dollar", "$", "en-US", 2),
    Currency("EUR", "Euro", "€", "de-DE", 2),
    Currency("GBP", "British Pound", "£", "en-GB", 2),
    Currency("CAD", "Canadian Dollar", "C$", "en-CA", 2),
    Currency("AUD", "Australian Dollar", "A$", "en-AU", 2),
    Currency("JPY", "Japanese Yen", "¥", "ja-JP", 0),
    Currency("CHF", "Swiss Franc", "CHF", "de-CH", 2),
    Currency("SEK", "Swedish Krona", "kr", "sv-SE", 2),
    Currency("NOK", "Norwegian Krone", "kr", "nb-NO", 2),
    Currency("DKK", "Danish Krone", "kr", "da-DK", 2),
    Currency("PLN", "Polish Złoty", "zł", "pl-PL", 2),
    Currency("CZK", "Czech Koruna", "Kč", "cs-CZ", 2),
    Currency("HUF", "Hungarian Forint", "Ft", "hu-HU", 0),
    Currency("INR", "Indian Rupee", "₹", "en-IN", 2),
    Currency("SGD", "Singapore Dollar", "S$", "en-SG", 2),
    Currency("HKD", "Hong Kong Dollar", "HK$", "en-HK", 2),
    Currency("NZD", "New Zealand Dollar", "NZ$", "en-NZ", 2),
    Currency("ZAR", "South African Rand", "R", "en-ZA", 2),
    Currency("BRL", "Brazilian Real", "R$", "pt-BR", 2),
    Currency("MXN", "Mexican Peso", "$", "es-MX", 2),
)

CURRENCY_MAP: Dict[str, Currency] = {currency.code: currency for currency in SUPPORTED_CURRENCIES}

_NBSP = "\u00a0"

# locale -> (group separator, decimal separator, indian grouping)
LOCALE_SEPARATORS: Dict[str, Tuple[str, str, bool]] = {
    "en-US": (",", ".", False),
    "en-GB": (",", ".", False),
    "en-CA": (",", ".", False),
    "en-AU": (",", ".", False),
    "en-SG": (",", ".", False),
    "en-HK": (",", ".", False),
    "en-NZ": (",", ".", False),
    "en-IN": (",", ".", True),
    "en-ZA": (_NBSP, ",", False),
    "ja-JP": (",", ".", False),
    "es-MX": (",", ".", False),
    "de-DE": (".", ",", False),
    "da-DK": (".", ",", False),
    "pt-BR": (".", ",", False),
    "de-CH": ("’", ".", False),
    "sv-SE": (_NBSP, ",", False),
    "nb-NO": (_NBSP, ",", False),
    "pl-PL": (_NBSP, ",", False),
    "cs-CZ": (_NBSP, ",", False),
    "hu-HU": (_NBSP, ",", False),
}


def get_currency(code: str) -> Currency:
    """Get currency information by code, falling back to USD."""
    currency = CURRENCY_MAP.get(str(code or "").upper())
    if currency is None:
        return CURRENCY_MAP[DEFAULT_CURRENCY]
    return currency


def get_currency_symbol(code: str) -> str:
    return get_currency(code).symbol


def get_currency_name(code: str) -> str:
    return get_currency(code).name


def is_supported_currency(code: str) -> bool:
    return isinstance(code, str) and code.upper() in CURRENCY_MAP


def get_supported_currency_codes() -> List[str]:
    return [currency.code for currency in SUPPORTED_CURRENCIES]


def validate_currency_code(code: Any) -> bool:
    """A code is valid when it is a 3-letter string present in the registry."""
    return isinstance(code, str) and len(code) == 3 and is_supported_currency(code)


def get_currency_options() -> List[Dict[str, str]]:
    """Currency options for select components."""
    return [
        {
            "value": currency.code,
            "label": f"{currency.code} - {currency.name} ({currency.symbol})",
        }
        for currency in SUPPORTED_CURRENCIES
    ]


def parse_currency_amount(value: str) -> float:
    """Parse an amount typed with symbols or grouping, e.g. "$1,234.50"."""
    cleaned = re.sub(r"[^\d.-]", "", str(value or ""))
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0.0
    return 0.0 if math.isnan(parsed) else parsed


def _to_number(amount: Any) -> float:
    if isinstance(amount, str):
        try:
            return float(amount.strip())
        except ValueError:
            return math.nan
    try:
        return float(amount)
    except (TypeError, ValueError):
        return math.nan


def _group_digits(whole: str, separator: str, indian: bool) -> str:
    if indian and len(whole) > 3:
        head, groups = whole[:-3], [whole[-3:]]
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        return separator.join(groups)

    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    return separator.join(groups)


def _format_number(
    amount: float,
    locale: str,
    minimum_fraction_digits: int,
    maximum_fraction_digits: int,
) -> str:
    group_sep, decimal_sep, indian = LOCALE_SEPARATORS[locale]
    maximum_fraction_digits = max(maximum_fraction_digits, minimum_fraction_digits)

    quantum = Decimal(1).scaleb(-maximum_fraction_digits)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):f}".partition(".")
    fraction = fraction.rstrip("0").ljust(minimum_fraction_digits, "0")

    number = _group_digits(whole, group_sep, indian)
    if fraction:
        number = f"{number}{decimal_sep}{fraction}"
    return sign + number


def format_currency(
    amount: Any,
    currency_code: str = DEFAULT_CURRENCY,
    *,
    show_symbol: bool = True,
    locale: Optional[str] = None,
    minimum_fraction_digits: Optional[int] = None,
    maximum_fraction_digits: Optional[int] = None,
) -> str:
    """
    Format an amount prefixed with the registry's own symbol.

    The registry symbol is used rather than a generic "$" so regional
    variants (A$, C$, NZ$) stay distinguishable. Invalid amounts render as
    "{symbol}0.00"; an unknown locale falls back to fixed decimals.
    """
    currency = get_currency(currency_code)
    numeric_amount = _to_number(amount)

    if not math.isfinite(numeric_amount):
        return currency.symbol + "0.00"

    locale = locale or currency.locale
    if minimum_fraction_digits is None:
        minimum_fraction_digits = currency.decimal_places
    if maximum_fraction_digits is None:
        maximum_fraction_digits = currency.decimal_places

    try:
        number = _format_number(
            numeric_amount, locale, minimum_fraction_digits, maximum_fraction_digits
        )
    except (KeyError, ValueError, InvalidOperation) as exc:
        logger.debug("Locale formatting failed for %s (%s): %s", currency.code, locale, exc)
        number = f"{numeric_amount:.{currency.decimal_places}f}"
        return f"{currency.symbol}{number}" if show_symbol else number

    if not show_symbol:
        return number

    sign = ""
    if number.startswith("-"):
        sign, number = "-", number[1:]
    # Alphabetic symbols (CHF, kr, Ft) read better detached from the digits
    spacer = " " if currency.symbol[-1].isalpha() else ""
    return f"{sign}{currency.symbol}{spacer}{number}"
