"""Tests for amount parsing and formatting."""

import math

import pytest

from recon_insights.reconciliation.amounts import (
    LocaleConfig,
    ensure_negative,
    format_currency,
    format_percent,
    looks_numeric,
    parse_amount,
    parse_count,
    parse_signed_amount,
    percentage,
    sum_amount,
    sum_count,
)


class TestParseAmount:
    """Tests for tolerant amount parsing."""

    def test_numbers_pass_through(self):
        """Test that plain numbers are returned as floats."""
        assert parse_amount(1250) == 1250.0
        assert parse_amount(99.5) == 99.5

    def test_numeric_strings(self):
        """Test that numeric strings with symbols and separators parse."""
        assert parse_amount("1850000") == 1850000.0
        assert parse_amount("₹1,23,456.50") == 123456.5
        assert parse_amount("$ 2,500") == 2500.0

    def test_sign_is_discarded(self):
        """Test that negative inputs become magnitudes."""
        assert parse_amount(-3000) == 3000.0
        assert parse_amount("-₹450.25") == 450.25

    def test_unparseable_values_yield_zero(self):
        """Test that junk degrades to zero instead of raising."""
        for value in (None, "", "abc", "1.2.3", "--5", [], {}, True, float("nan"), float("inf")):
            assert parse_amount(value) == 0.0

    def test_signed_parse_keeps_sign(self):
        """Test that the signed variant keeps the sign."""
        assert parse_signed_amount("-1,000") == -1000.0
        assert parse_signed_amount(None) == 0.0

    def test_stray_characters_are_dropped(self):
        """Test that letters are stripped rather than interpreted."""
        assert parse_signed_amount("1e5") == 15.0
        assert parse_signed_amount("Rs. 1,500") == pytest.approx(0.15)
        assert parse_signed_amount("INR 2,000") == 2000.0

    def test_parse_count(self):
        """Test count parsing rounds to non-negative integers."""
        assert parse_count("12") == 12
        assert parse_count(7.6) == 8
        assert parse_count(-4) == 4
        assert parse_count("n/a") == 0


class TestAmountHelpers:
    """Tests for sign and summing helpers."""

    def test_ensure_negative(self):
        """Test debit conversion of positive, negative and zero values."""
        assert ensure_negative(3000) == -3000.0
        assert ensure_negative("-3000") == -3000.0
        assert ensure_negative(0) == 0.0
        assert not math.copysign(1, ensure_negative(0)) < 0

    def test_sum_helpers(self):
        """Test summing tolerates strings and None."""
        assert sum_amount("100.5", None) == 100.5
        assert sum_count("10", 5) == 15
        assert isinstance(sum_count(1, 2), int)

    def test_percentage_zero_denominator(self):
        """Test percentage returns 0 when the denominator is 0."""
        assert percentage(5, 0) == 0.0
        assert percentage(5, 100) == 5.0

    def test_looks_numeric(self):
        """Test numeric detection for merge decisions."""
        assert looks_numeric(10)
        assert looks_numeric("1,850,000")
        assert looks_numeric("-6.68")
        assert not looks_numeric("paytm")
        assert not looks_numeric("")
        assert not looks_numeric(True)
        assert not looks_numeric(None)


class TestFormatCurrency:
    """Tests for the stateless currency formatter."""

    def test_indian_grouping(self):
        """Test default rupee formatting with lakh/crore grouping."""
        assert format_currency(1234567.5) == "₹12,34,567.50"
        assert format_currency(999) == "₹999.00"
        assert format_currency(100000) == "₹1,00,000.00"

    def test_western_grouping(self):
        """Test western digit grouping and a different symbol."""
        locale = LocaleConfig(symbol="$", grouping="western")
        assert format_currency(1234567.5, locale) == "$1,234,567.50"

    def test_negative_and_invalid(self):
        """Test sign placement and junk input."""
        assert format_currency(-3000) == "-₹3,000.00"
        assert format_currency("junk") == "₹0.00"

    def test_decimals(self):
        """Test configurable decimal places."""
        assert format_currency(1500.456, LocaleConfig(decimals=0)) == "₹1,500"

    def test_format_percent(self):
        """Test percentage formatting."""
        assert format_percent(90) == "90.00%"
        assert format_percent(None) == "0.00%"


@pytest.mark.parametrize("digits", ["1", "12", "123", "1234", "12345", "123456", "1234567", "12345678"])
def test_indian_grouping_round_trips(digits):
    """Test that removing separators from a grouped amount gives the digits back."""
    formatted = format_currency(int(digits), LocaleConfig(symbol="", decimals=0))
    assert formatted.replace(",", "") == digits
