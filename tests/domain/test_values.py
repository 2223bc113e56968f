"""
Tests for exact-decimal amount helpers.
"""

from decimal import Decimal

import pytest

from payslip_kernel.domain.values import (
    format_amount,
    format_number,
    format_percent,
    parse_amount,
    round_amount,
)
from payslip_kernel.exceptions import InvalidAmountError


class TestParseAmount:
    """Raw YAML / prompt values become exact Decimals."""

    def test_int(self):
        assert parse_amount(3000) == Decimal("3000")

    def test_float_goes_through_str(self):
        """3000.1 is the decimal 3000.1, not its binary approximation."""
        assert parse_amount(3000.1) == Decimal("3000.1")

    def test_string_with_whitespace(self):
        assert parse_amount("  670.42\n") == Decimal("670.42")

    def test_decimal_passthrough(self):
        value = Decimal("1.005")
        assert parse_amount(value) is value

    def test_negative(self):
        assert parse_amount("-12.5") == Decimal("-12.5")

    @pytest.mark.parametrize("value", ["abc", "", "12,50", None, True, "NaN", "Infinity"])
    def test_rejected(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            parse_amount(value, "refund")

        assert exc_info.value.field == "refund"
        assert exc_info.value.value == value
        assert exc_info.value.code == "INVALID_AMOUNT"


class TestRoundAmount:
    """Half-up to two places."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1.005", "1.01"),
            ("1.004", "1.00"),
            ("2.675", "2.68"),
            ("-1.005", "-1.01"),
            ("3", "3.00"),
        ],
    )
    def test_half_up(self, value, expected):
        assert round_amount(Decimal(value)) == Decimal(expected)
        assert str(round_amount(Decimal(value))) == expected

    def test_beyond_default_precision(self):
        value = Decimal("123456789012345678901234567890.125")

        assert round_amount(value) == Decimal("123456789012345678901234567890.13")
        assert round_amount(Decimal("1e30")) == Decimal(10**30)


class TestFormatting:
    """Plain notation, never scientific."""

    def test_amount_keeps_exponent(self):
        assert format_amount(Decimal("5.000")) == "5.000"

    def test_amount_no_scientific_notation(self):
        assert format_amount(Decimal("1E+3")) == "1000"
        assert format_amount(Decimal("0E-8")) == "0.00000000"

    def test_number_strips_trailing_zeros(self):
        assert format_number(Decimal("20.00")) == "20"
        assert format_number(Decimal("7.50")) == "7.5"
        assert format_number(Decimal("0.000")) == "0"

    def test_number_no_scientific_notation(self):
        assert format_number(Decimal("1000")) == "1000"

    def test_percent(self):
        assert format_percent(Decimal("0.045")) == "4.5%"
        assert format_percent(Decimal("0.20")) == "20%"
        assert format_percent(Decimal("0.005")) == "0.5%"
