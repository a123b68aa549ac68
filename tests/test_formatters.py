from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from proposal_docs.layout.errors import ConfigurationError, ValidationError
from proposal_docs.layout.formatters import (
    format_currency,
    format_currency_plain,
    format_long_date,
    resolve_text,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "₹0"),
        (999, "₹999"),
        (10000, "₹10,000"),
        (100000, "₹1,00,000"),
        (12345678, "₹1,23,45,678"),
        (1234.5, "₹1,234.5"),
        (1234.567, "₹1,234.57"),
        (Decimal("2500.00"), "₹2,500"),
    ],
)
def test_format_currency_uses_indian_grouping(value, expected) -> None:
    assert format_currency(value) == expected


def test_format_currency_plain_has_no_symbol() -> None:
    assert format_currency_plain(1500000) == "15,00,000"
    assert format_currency_plain(1234.5678) == "1,234.568"
    assert format_currency_plain(7000) == "7,000"


def test_format_currency_round_trips_magnitude() -> None:
    for value in (0, 5, 73.25, 1000, 45678.9, 98765432.1):
        text = format_currency(value)
        assert format_currency(value) == text
        assert float(text.lstrip("₹").replace(",", "")) == pytest.approx(round(value, 2))


@pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), True, "100"])
def test_format_currency_rejects_invalid_values(value) -> None:
    with pytest.raises(ValidationError):
        format_currency(value)


def test_unsupported_locale_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        format_currency(10, locale="en-US", currency="USD")


def test_format_long_date() -> None:
    assert format_long_date(date(2026, 3, 5)) == "05 March 2026"


def test_resolve_text_defaults_only_when_blank() -> None:
    assert resolve_text(None, "Client Name") == "Client Name"
    assert resolve_text("", "Client Name") == "Client Name"
    assert resolve_text("   ", "Client Name") == "Client Name"
    assert resolve_text(" Acme Ltd ", "Client Name") == "Acme Ltd"


def test_very_large_amounts_keep_every_digit() -> None:
    text = format_currency(1e30)
    assert text.startswith("₹10,00,00,")
    assert text.endswith(",000")
    assert text.lstrip("₹").replace(",", "") == "1" + "0" * 30

    plain = format_currency_plain(Decimal("123456789012345678901234567890.125"))
    assert plain.replace(",", "") == "123456789012345678901234567890.125"
    assert plain.endswith("67,890.125")
