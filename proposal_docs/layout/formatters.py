from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, Optional, Tuple

from .. import config
from .errors import ConfigurationError, ValidationError
from .payload import Number, is_valid_price


@dataclass(frozen=True)
class CurrencyFormat:
    symbol: str
    unit: str


# Only one locale/currency pair is supported.
CURRENCY_FORMATS: Dict[Tuple[str, str], CurrencyFormat] = {
    ("en-IN", "INR"): CurrencyFormat(symbol="₹", unit="INR"),
}

CURRENCY_MAX_FRACTION = 2
PLAIN_MAX_FRACTION = 3


def currency_format(locale: str = config.DEFAULT_LOCALE, currency: str = config.DEFAULT_CURRENCY) -> CurrencyFormat:
    fmt = CURRENCY_FORMATS.get((locale, currency))
    if fmt is None:
        raise ConfigurationError(f"Unsupported locale/currency pair: {locale}/{currency}")
    return fmt


def _group_digits(digits: str) -> str:
    # lakh/crore grouping: last three digits, then pairs, e.g. 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    parts = []
    while len(head) > 2:
        parts.insert(0, head[-2:])
        head = head[:-2]
    if head:
        parts.insert(0, head)
    return ",".join(parts + [tail])


def _format_number(value: Number, max_fraction: int) -> str:
    if not is_valid_price(value):
        raise ValidationError(f"Cannot format {value!r}: expected a finite non-negative number")
    exact = Decimal(str(value))
    quantum = Decimal(1).scaleb(-max_fraction)
    # room for every integer digit plus the kept fraction
    with localcontext() as ctx:
        ctx.prec = max(28, exact.adjusted() + max_fraction + 2)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    whole, _, fraction = format(rounded, "f").partition(".")
    fraction = fraction.rstrip("0")
    grouped = _group_digits(whole)
    return f"{grouped}.{fraction}" if fraction else grouped


def format_currency(
    value: Number,
    locale: str = config.DEFAULT_LOCALE,
    currency: str = config.DEFAULT_CURRENCY,
) -> str:
    """Currency string with symbol, e.g. 100000 -> "₹1,00,000" (whole units unless paise are present)."""
    fmt = currency_format(locale, currency)
    return fmt.symbol + _format_number(value, CURRENCY_MAX_FRACTION)


def format_currency_plain(
    value: Number,
    locale: str = config.DEFAULT_LOCALE,
    currency: str = config.DEFAULT_CURRENCY,
) -> str:
    """Grouped number without the symbol; the unit is printed once in the page header."""
    currency_format(locale, currency)
    return _format_number(value, PLAIN_MAX_FRACTION)


def format_long_date(value: date) -> str:
    # "05 March 2026"
    return value.strftime("%d %B %Y")


def resolve_text(value: Optional[str], default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default
