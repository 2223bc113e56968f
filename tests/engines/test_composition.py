"""
Tests for signed feeder-term compositions.
"""

from decimal import Decimal

import pytest

from payslip_engines.composition import FeederTerm, Sign, compose_total
from payslip_kernel.exceptions import InvalidCompositionError


class TestFeederTerm:
    """Parsing ``+name`` / ``-name`` strings."""

    def test_plus(self):
        assert FeederTerm.parse("+gross_income") == FeederTerm("gross_income", Sign.PLUS)

    def test_minus(self):
        assert FeederTerm.parse("-pension_contribution") == FeederTerm(
            "pension_contribution", Sign.MINUS
        )

    def test_unsigned_is_plus(self):
        assert FeederTerm.parse("refund").sign is Sign.PLUS

    def test_whitespace_tolerated(self):
        assert FeederTerm.parse(" - misc ") == FeederTerm("misc", Sign.MINUS)

    def test_str_round_trip(self):
        assert str(FeederTerm("refund", Sign.MINUS)) == "-refund"


class TestComposeTotal:
    """Signed sums against committed values."""

    def setup_method(self):
        self.values = {
            "gross_income": Decimal("3000"),
            "refund": Decimal("50"),
            "income_tax": Decimal("450"),
            "universal_levy": Decimal("60"),
            "social_charge": Decimal("120"),
            "pension_contribution": Decimal("150"),
            "share_contribution": Decimal("75"),
            "misc_deductions_total": Decimal("25"),
        }

    def test_net_income(self):
        """3000 + 50 - 450 - 60 - 120 - 150 - 75 - 25 = 2170."""
        terms = [
            FeederTerm.parse(t)
            for t in (
                "+gross_income",
                "+refund",
                "-income_tax",
                "-universal_levy",
                "-social_charge",
                "-pension_contribution",
                "-share_contribution",
                "-misc_deductions_total",
            )
        ]
        total = compose_total("net_income", terms, self.values)

        assert total.total == Decimal("2170")
        assert total.name == "net_income"
        assert len(total.lines) == 8

    def test_lines_keep_unsigned_amount(self):
        total = compose_total("x", [FeederTerm.parse("-income_tax")], self.values)

        line = total.lines[0]
        assert line.amount == Decimal("450")
        assert line.signed_amount == Decimal("-450")

    def test_empty_composition_is_zero(self):
        assert compose_total("x", [], self.values).total == Decimal("0")

    def test_result_can_go_negative(self):
        total = compose_total(
            "x", [FeederTerm.parse("+refund"), FeederTerm.parse("-gross_income")], self.values
        )

        assert total.total == Decimal("-2950")

    def test_missing_term_raises(self):
        with pytest.raises(InvalidCompositionError) as exc_info:
            compose_total("tax_base", [FeederTerm.parse("+espp_gain")], self.values)

        assert exc_info.value.composition == "tax_base"
        assert exc_info.value.term == "espp_gain"
        assert exc_info.value.code == "INVALID_COMPOSITION"
