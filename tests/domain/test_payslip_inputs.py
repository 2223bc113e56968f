"""
Tests for the car allowance and payslip input snapshot.
"""

from decimal import Decimal

import pytest

from payslip_kernel.domain.payslip import (
    CarAllowance,
    CarAllowanceMode,
    PayslipInputs,
)
from payslip_kernel.exceptions import ConfigurationMissingError, InvalidAmountError


class TestCarAllowanceMode:
    @pytest.mark.parametrize(
        "raw,mode",
        [
            ("cash", CarAllowanceMode.CASH),
            ("CASH ", CarAllowanceMode.CASH),
            ("bik", CarAllowanceMode.BIK),
            ("none", CarAllowanceMode.UNSPECIFIED),
            ("", CarAllowanceMode.UNSPECIFIED),
            (None, CarAllowanceMode.UNSPECIFIED),
        ],
    )
    def test_parse(self, raw, mode):
        assert CarAllowanceMode.parse(raw) is mode


class TestCarAllowanceFromConfig:
    """The ``car_allowance: {type, value}`` block."""

    def test_cash(self):
        allowance = CarAllowance.from_config({"type": "cash", "value": 300})

        assert allowance.mode is CarAllowanceMode.CASH
        assert allowance.value == Decimal("300")

    def test_bik(self):
        allowance = CarAllowance.from_config({"type": "bik", "value": "250.50"})

        assert allowance.mode is CarAllowanceMode.BIK
        assert allowance.value == Decimal("250.50")

    def test_empty_block_is_unspecified(self):
        assert CarAllowance.from_config({}) == CarAllowance()
        assert CarAllowance.from_config(None).mode is CarAllowanceMode.UNSPECIFIED

    def test_unspecified_without_value(self):
        allowance = CarAllowance.from_config({"type": "none"})

        assert allowance.mode is CarAllowanceMode.UNSPECIFIED
        assert allowance.value == Decimal("0")

    def test_cash_without_value_raises(self):
        with pytest.raises(ConfigurationMissingError, match="car_allowance.value"):
            CarAllowance.from_config({"type": "cash"})

    def test_invalid_value_raises(self):
        with pytest.raises(InvalidAmountError):
            CarAllowance.from_config({"type": "bik", "value": "plenty"})


class TestPayslipInputs:
    """Lookups by key."""

    def setup_method(self):
        self.inputs = PayslipInputs(
            regular_salary=Decimal("3000"),
            amounts={"refund": Decimal("50"), "tax_credit": Decimal("275")},
        )

    def test_value_of_salary(self):
        assert self.inputs.value_of("regular_salary") == Decimal("3000")

    def test_value_of_amount(self):
        assert self.inputs.value_of("refund") == Decimal("50")

    def test_value_of_missing(self):
        assert self.inputs.value_of("espp_gain") is None

    def test_require_missing_raises(self):
        with pytest.raises(ConfigurationMissingError) as exc_info:
            self.inputs.require("standard_cutoff_rate", "payslip_config.yml")

        assert exc_info.value.key == "standard_cutoff_rate"
        assert str(exc_info.value) == "Did not find standard_cutoff_rate in payslip_config.yml"

    def test_available_keys(self):
        assert self.inputs.available_keys() == ("regular_salary", "refund", "tax_credit")

    def test_frozen(self):
        with pytest.raises(AttributeError):
            self.inputs.regular_salary = Decimal("1")

    def test_amounts_read_only(self):
        with pytest.raises(TypeError):
            self.inputs.amounts["refund"] = Decimal("0")

        assert self.inputs.value_of("refund") == Decimal("50")

    def test_amounts_copied_from_caller(self):
        source = {"refund": Decimal("50")}
        inputs = PayslipInputs(regular_salary=Decimal("3000"), amounts=source)
        source["refund"] = Decimal("999")

        assert inputs.value_of("refund") == Decimal("50")
