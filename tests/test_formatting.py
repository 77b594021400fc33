"""Tests for money formatting."""

from decimal import Decimal, InvalidOperation

import pytest

from cartledger.formatting import number_format, to_decimal


class TestNumberFormat:
    def test_defaults(self) -> None:
        assert number_format(1234567.891) == "1,234,567.89"

    def test_custom_separators(self) -> None:
        assert number_format(1234.5, 2, ",", ".") == "1.234,50"

    def test_no_grouping(self) -> None:
        assert number_format(1234.5, 2, ".", "") == "1234.50"

    def test_zero_decimals(self) -> None:
        assert number_format(1234.5, 0) == "1,235"

    def test_rounds_half_away_from_zero(self) -> None:
        assert number_format(0.005) == "0.01"
        assert number_format(-0.005) == "-0.01"
        assert number_format(2.5, 0) == "3"

    def test_negative(self) -> None:
        assert number_format(-1234.5) == "-1,234.50"

    def test_no_negative_zero(self) -> None:
        assert number_format(-0.001) == "0.00"

    def test_decimal_input(self) -> None:
        assert number_format(Decimal("22.000")) == "22.00"

    def test_more_decimals(self) -> None:
        assert number_format(1.5, 3) == "1.500"


class TestToDecimal:
    def test_float_without_noise(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passthrough(self) -> None:
        value = Decimal("1.25")
        assert to_decimal(value) is value

    def test_invalid(self) -> None:
        with pytest.raises(InvalidOperation):
            to_decimal("abc")
