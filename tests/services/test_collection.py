"""
Tests for interactive input collection.
"""

from decimal import Decimal

import pytest

from conftest import ScriptedAsk
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.exceptions import InputError, InvalidAmountError
from payslip_services.collection import (
    build_inputs,
    collect_benefits_in_kind,
    collect_inputs,
)


class TestCollectInputs:
    """ie_2019 prompts in declared order."""

    def test_all_answers(self, profile, rules_2019):
        ask = ScriptedAsk(
            "100",   # overtime
            "",      # PL&I bonus, blank is zero
            "0",     # CAP award
            "yes",   # recognition gate
            "150",   # voucher
            "200",   # gross amount
            "50",    # refund
            "0",     # ESPP gain
            "no",    # no variable BIK
        )
        inputs = collect_inputs(profile, rules_2019, ask)

        assert ask.exhausted
        assert inputs.value_of("extra_pay") == Decimal("100")
        assert inputs.value_of("pli_bonus") == Decimal("0")
        assert inputs.value_of("recognition_voucher") == Decimal("150")
        assert inputs.value_of("recognition_gross") == Decimal("200")
        assert inputs.value_of("refund") == Decimal("50")
        assert inputs.regular_salary == Decimal("3000")
        assert inputs.value_of("tax_credit") == Decimal("275")

    def test_gate_declined_skips_prompts(self, profile, rules_2019):
        ask = ScriptedAsk("0", "0", "0", "no", "0", "0", "no")
        inputs = collect_inputs(profile, rules_2019, ask)

        assert ask.exhausted
        assert inputs.value_of("recognition_voucher") == Decimal("0")
        assert inputs.value_of("recognition_gross") == Decimal("0")
        assert not any("voucher" in q for q in ask.questions)

    def test_gate_question_asked_once(self, profile, rules_2019):
        ask = ScriptedAsk("0", "0", "0", "yes", "1", "2", "0", "0", "no")
        collect_inputs(profile, rules_2019, ask)

        gate_questions = [q for q in ask.questions if "Connected Recognition" in q]
        assert len(gate_questions) == 1
        assert gate_questions[0].endswith("(yes or no) >: ")

    def test_variable_benefit_in_kind(self, profile, rules_2019):
        ask = ScriptedAsk(
            "0", "0", "0", "no", "0", "0",
            "yes", "gym", "20",
            "yes", "phone", "15.50",
            "no",
        )
        inputs = collect_inputs(profile, rules_2019, ask)

        assert inputs.benefit_in_kind.get("gym") == Decimal("20")
        assert inputs.benefit_in_kind.get("phone") == Decimal("15.50")
        assert inputs.benefit_in_kind.total == Decimal("35.50")
        assert "another" in ask.questions[-1]

    def test_non_numeric_answer(self, profile, rules_2019):
        ask = ScriptedAsk("lots")

        with pytest.raises(InvalidAmountError) as exc_info:
            collect_inputs(profile, rules_2019, ask)

        assert exc_info.value.field == "extra_pay"

    def test_ie_2012_prompts(self, profile, rules_2012):
        ask = ScriptedAsk("500", "0", "no")
        inputs = collect_inputs(profile, rules_2012, ask)

        assert ask.exhausted
        assert inputs.value_of("gross_bonus_award") == Decimal("500")


class TestCollectBenefitsInKind:
    def test_declined(self):
        ask = ScriptedAsk("no")
        existing = LineItemSet.from_mapping({"health_insurance": "50"})

        assert collect_benefits_in_kind(ask, existing) is existing

    def test_yes_is_case_insensitive(self):
        ask = ScriptedAsk("YES", "gym", "20", "No")

        assert collect_benefits_in_kind(ask, LineItemSet()).total == Decimal("20")

    def test_blank_name_rejected(self):
        ask = ScriptedAsk("yes", "  ")

        with pytest.raises(InputError):
            collect_benefits_in_kind(ask, LineItemSet())

    def test_invalid_amount_names_item(self):
        ask = ScriptedAsk("yes", "gym", "twenty")

        with pytest.raises(InvalidAmountError) as exc_info:
            collect_benefits_in_kind(ask, LineItemSet())

        assert exc_info.value.field == "benefit_in_kind.gym"


class TestBuildInputs:
    def test_amounts_override_settings(self, profile):
        inputs = build_inputs(profile, {"tax_credit": Decimal("300")})

        assert inputs.value_of("tax_credit") == Decimal("300")
        assert inputs.value_of("standard_cutoff_rate") == Decimal("2825")

    def test_profile_benefits_kept_by_default(self, profile):
        assert build_inputs(profile).benefit_in_kind == profile.benefit_in_kind
