import math

from invoicely.services.currency import (
    SUPPORTED_CURRENCIES,
    format_currency,
    get_currency,
    get_currency_name,
    get_currency_options,
    get_currency_symbol,
    get_supported_currency_codes,
    is_supported_currency,
    parse_currency_amount,
    validate_currency_code,
)


def test_registry_codes_are_unique():
    codes = [currency.code for currency in SUPPORTED_CURRENCIES]
    assert len(codes) == len(set(codes)) == 20


def test_get_currency_is_case_insensitive():
    assert get_currency("eur").code == "EUR"
    assert get_currency("Gbp").symbol == "£"


def test_get_currency_unknown_falls_back_to_usd():
    assert get_currency("XXX").code == "USD"
    assert get_currency("").code == "USD"
    assert get_currency(None).code == "USD"


def test_zero_decimal_currencies():
    assert get_currency("JPY").decimal_places == 0
    assert get_currency("HUF").decimal_places == 0
    assert get_currency("USD").decimal_places == 2


def test_symbol_and_name_helpers():
    assert get_currency_symbol("AUD") == "A$"
    assert get_currency_symbol("nzd") == "NZ$"
    assert get_currency_name("INR") == "Indian Rupee"
    assert get_currency_name("nope") == "US Dollar"


def test_supported_checks():
    assert is_supported_currency("chf")
    assert not is_supported_currency("KWD")
    assert get_supported_currency_codes()[:3] == ["USD", "EUR", "GBP"]


class TestValidateCurrencyCode:

    def test_length_must_be_three(self):
        assert validate_currency_code("US") is False
        assert validate_currency_code("USDX") is False

    def test_lowercase_is_accepted(self):
        assert validate_currency_code("usd") is True

    def test_unknown_and_non_string(self):
        assert validate_currency_code("ABC") is False
        assert validate_currency_code(None) is False
        assert validate_currency_code(840) is False


def test_currency_options_follow_declaration_order():
    options = get_currency_options()
    assert [option["value"] for option in options] == get_supported_currency_codes()
    assert options[0] == {"value": "USD", "label": "USD - US Dollar ($)"}
    assert options[3]["label"] == "CAD - Canadian Dollar (C$)"


class TestFormatCurrency:

    def test_usd_grouping(self):
        assert format_currency(1234567.891, "USD") == "$1,234,567.89"

    def test_jpy_rounds_to_whole_units(self):
        assert format_currency(1234.5, "JPY") == "¥1,235"

    def test_nan_renders_zero_with_symbol(self):
        assert format_currency(math.nan, "EUR") == "€0.00"
        assert format_currency("not a number", "USD") == "$0.00"
        assert format_currency(None, "GBP") == "£0.00"

    def test_regional_dollar_symbols(self):
        assert format_currency(10, "AUD") == "A$10.00"
        assert format_currency(10, "CAD") == "C$10.00"
        assert format_currency(10, "NZD") == "NZ$10.00"

    def test_euro_uses_german_separators(self):
        assert format_currency(1234.5, "EUR") == "€1.234,50"

    def test_indian_grouping(self):
        assert format_currency(1234567, "INR") == "₹12,34,567.00"

    def test_alphabetic_symbol_is_spaced(self):
        assert format_currency(5, "CHF") == "CHF 5.00"

    def test_negative_sign_precedes_symbol(self):
        assert format_currency(-42.5, "USD") == "-$42.50"

    def test_half_up_rounding(self):
        assert format_currency(0.125, "USD") == "$0.13"
        assert format_currency(2.5, "JPY") == "¥3"

    def test_numeric_strings_are_accepted(self):
        assert format_currency("99.9", "USD") == "$99.90"

    def test_without_symbol(self):
        assert format_currency(1000, "USD", show_symbol=False) == "1,000.00"

    def test_unknown_locale_falls_back_to_fixed_decimals(self):
        assert format_currency(1234.5, "USD", locale="xx-XX") == "$1234.50"

    def test_fraction_digit_overrides(self):
        assert format_currency(1.5, "USD", minimum_fraction_digits=0, maximum_fraction_digits=0) == "$2"
        assert format_currency(1.2345, "USD", maximum_fraction_digits=4) == "$1.2345"

    def test_unknown_code_formats_as_usd(self):
        assert format_currency(1, "ZZZ") == "$1.00"


def test_parse_currency_amount():
    assert parse_currency_amount("$1,234.50") == 1234.5
    assert parse_currency_amount("-€12") == -12.0
    assert parse_currency_amount("abc") == 0.0
    assert parse_currency_amount("") == 0.0
