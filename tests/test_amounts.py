"""Tests for amount cleaning."""

from decimal import Decimal

import pytest

from movilidad.ledger import SubmissionValidationError
from movilidad.ledger.amounts import MAX_AMOUNT, clean_amount, money, sum_amounts


class TestCleanAmount:
    """Raw amounts reduce to non-negative two-place Decimals."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("S/ 45,00", "45.00"),
            ("S/. 12.50", "12.50"),
            ("45.005", "45.01"),
            ("10", "10.00"),
            (10, "10.00"),
            (12.5, "12.50"),
            (Decimal("7.499"), "7.50"),
            ("1.234,56", "1234.56"),
            ("1,234.56", "1234.56"),
            ("1,234", "1.23"),
            ("1.234.567", "1234567.00"),
            ("  20 soles", "20.00"),
        ],
    )
    def test_parses_numbers_and_text(self, raw, expected):
        assert clean_amount(raw) == Decimal(expected)

    @pytest.mark.parametrize(
        "raw",
        ["", None, "abc", "-5", -3, Decimal("-0.01"), True, False, float("nan"), "0", 0],
    )
    def test_unusable_input_cleans_to_zero(self, raw):
        assert clean_amount(raw) == Decimal("0.00")

    def test_result_has_two_places(self):
        assert clean_amount("3").as_tuple().exponent == -2

    def test_largest_storable_amount(self):
        assert clean_amount("9999999999.99") == MAX_AMOUNT

    @pytest.mark.parametrize(
        "raw",
        ["1" + "0" * 30, 1e30, Decimal("1E+40"), "10000000000", "9999999999.995"],
    )
    def test_amount_above_column_range_is_rejected(self, raw):
        with pytest.raises(SubmissionValidationError) as exc_info:
            clean_amount(raw)

        assert exc_info.value.field == "items"


class TestMoney:
    def test_rounds_half_up(self):
        assert money(Decimal("0.005")) == Decimal("0.01")
        assert money(Decimal("2.345")) == Decimal("2.35")

    def test_accepts_int_and_str(self):
        assert money(3) == Decimal("3.00")
        assert money("1.1") == Decimal("1.10")

    def test_sum_amounts(self):
        assert sum_amounts([Decimal("10.10"), Decimal("20.20")]) == Decimal("30.30")
        assert sum_amounts([]) == Decimal("0.00")
