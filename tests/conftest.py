"""
Pytest fixtures for the payslip explainer test suite.

Provides:
- The shipped rules variants (ie_2019, ie_2012)
- Profile and input builders with sensible defaults
- A scripted ``ask`` callable standing in for ``input``
- Clean logging state between tests
"""

from decimal import Decimal

import pytest

from payslip_config import get_rules
from payslip_config.loader import parse_profile
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import CarAllowance, PayslipInputs
from payslip_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture(scope="session")
def rules_2019():
    return get_rules("ie_2019")


@pytest.fixture(scope="session")
def rules_2012():
    return get_rules("ie_2012")


def make_profile_data(**overrides) -> dict:
    """A complete ie_2019 ``payslip_config.yml`` document as parsed YAML."""
    data = {
        "regular_salary": 3000,
        "pension_contribution_percentage": 5,
        "espp": 0,
        "car_allowance": {"type": "none", "value": 0},
        "salary_sacrifice": {},
        "benefit_in_kind": {},
        "misc_deductions": {},
        "standard_cutoff_rate": 2825,
        "tax_credit": 275,
        "point_five_percent_band": 1001,
        "two_percent_band": "670.42",
        "four_point_five_percent_band": 5740,
    }
    data.update(overrides)
    return data


@pytest.fixture
def profile_data():
    return make_profile_data()


@pytest.fixture
def profile(profile_data):
    return parse_profile(profile_data, source="payslip_config.yml", default_variant="ie_2019")


def make_inputs(
    regular_salary="3000",
    *,
    car_allowance=None,
    benefit_in_kind=None,
    salary_sacrifice=None,
    misc_deductions=None,
    **amounts,
) -> PayslipInputs:
    """
    Build ``PayslipInputs`` for the ie_2019 rules.

    Every prompt and setting defaults to zero unless given as a keyword.
    """
    values = {
        "extra_pay": "0",
        "pli_bonus": "0",
        "cap_award": "0",
        "recognition_voucher": "0",
        "recognition_gross": "0",
        "refund": "0",
        "espp_gain": "0",
        "pension_contribution_percentage": "0",
        "espp": "0",
        "standard_cutoff_rate": "2825",
        "tax_credit": "275",
        "point_five_percent_band": "1001",
        "two_percent_band": "670.42",
        "four_point_five_percent_band": "5740",
    }
    values.update(amounts)
    return PayslipInputs(
        regular_salary=Decimal(str(regular_salary)),
        car_allowance=car_allowance or CarAllowance(),
        benefit_in_kind=LineItemSet.from_mapping(benefit_in_kind),
        salary_sacrifice=LineItemSet.from_mapping(salary_sacrifice),
        misc_deductions=LineItemSet.from_mapping(misc_deductions),
        amounts={k: Decimal(str(v)) for k, v in values.items()},
    )


class ScriptedAsk:
    """Replays canned answers in order and records every question asked."""

    def __init__(self, *answers: str):
        self._answers = list(answers)
        self.questions: list[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self._answers:
            raise AssertionError(f"unexpected question: {question!r}")
        return self._answers.pop(0)

    @property
    def exhausted(self) -> bool:
        return not self._answers
