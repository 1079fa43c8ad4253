"""Tests for money coercion, rounding and formatting."""

from decimal import Decimal

import pytest

from taxwizard.engine.models import CalculatedResults
from taxwizard.engine.rounding import (
    coerce_money,
    coerce_optional_money,
    format_currency,
    round_results,
    to_cents,
    to_whole_dollars,
)


class TestCoerceMoney:
    """Tests for tolerant money parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("$1,234.50", Decimal("1234.50")),
            ("  42 ", Decimal("42")),
            (100, Decimal("100")),
            (0.1, Decimal("0.1")),
            (Decimal("7.25"), Decimal("7.25")),
            ("-50", Decimal("-50")),
        ],
    )
    def test_parses_numbers(self, raw, expected) -> None:
        """Numbers and numeric strings become Decimal."""
        assert coerce_money(raw) == expected

    @pytest.mark.parametrize(
        "raw", [None, "", "abc", "NaN", "Infinity", Decimal("NaN"), float("inf"), True, [1]]
    )
    def test_malformed_values_become_zero(self, raw) -> None:
        """Anything that is not a finite number is zero."""
        assert coerce_money(raw) == Decimal("0")

    def test_absurd_magnitudes_become_zero(self) -> None:
        """Exponents far beyond any real amount are malformed input."""
        assert coerce_money("1e200") == Decimal("0")
        assert coerce_money(Decimal("-1E+500")) == Decimal("0")

    def test_optional_keeps_none(self) -> None:
        """Absent optional amounts stay absent."""
        assert coerce_optional_money(None) is None
        assert coerce_optional_money("  ") is None
        assert coerce_optional_money("12") == Decimal("12")


class TestRounding:
    """Tests for cent and dollar quantization."""

    def test_to_cents_rounds_half_up(self) -> None:
        """Half a cent rounds away from zero."""
        assert to_cents(Decimal("0.005")) == Decimal("0.01")
        assert to_cents(Decimal("1412.955")) == Decimal("1412.96")
        assert to_cents(Decimal("2.344")) == Decimal("2.34")

    def test_amounts_beyond_default_precision(self) -> None:
        """More than 28 significant digits still quantize instead of raising."""
        assert to_cents(Decimal("1e30")) == Decimal("1e30")
        assert to_cents(Decimal("123456789012345678901234567890.125")) == Decimal(
            "123456789012345678901234567890.13"
        )
        assert to_whole_dollars(Decimal("1e40")) == Decimal("1e40")

    def test_to_whole_dollars_rounds_half_up(self) -> None:
        """Half a dollar rounds up."""
        assert to_whole_dollars(Decimal("382.5")) == Decimal("383")
        assert to_whole_dollars(Decimal("382.49")) == Decimal("382")

    def test_round_results_is_idempotent(self) -> None:
        """Rounding already-rounded results changes nothing."""
        results = CalculatedResults(
            tax_year=2024,
            federal_tax=Decimal("5216.004"),
            amount_owed=Decimal("100.125"),
        )
        once = round_results(results)
        twice = round_results(once)

        assert once.federal_tax == Decimal("5216.00")
        assert once.amount_owed == Decimal("100.13")
        assert once == twice

    def test_round_results_leaves_non_money_fields(self) -> None:
        """Tax year and state payload pass through unchanged."""
        results = CalculatedResults(tax_year=2023, state_income_tax={"tax": 1})
        rounded = round_results(results)

        assert rounded.tax_year == 2023
        assert rounded.state_income_tax == {"tax": 1}


class TestFormatCurrency:
    """Tests for display formatting."""

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("1234.5"), "$1,235"),
            (Decimal("0"), "$0"),
            (Decimal("-50"), "-$50"),
            (Decimal("1000000"), "$1,000,000"),
        ],
    )
    def test_format(self, amount, expected) -> None:
        """Whole dollars with thousands separators."""
        assert format_currency(amount) == expected
