"""
Interactive collection of per-run amounts.

Asks the questions a variant declares (bonuses, awards, refunds, gains),
then lets the user add variable benefits in kind, and returns a finished
``PayslipInputs``. All prompting happens here, before the pipeline runs.

``ask`` is any ``str -> str`` callable; it defaults to ``input`` and tests
pass a scripted answer list instead.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from decimal import Decimal

from payslip_config.schema import PayslipProfile, PayslipRules
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import PayslipInputs
from payslip_kernel.domain.values import ZERO, parse_amount
from payslip_kernel.exceptions import InputError
from payslip_kernel.logging_config import get_logger

logger = get_logger("services.collection")

Ask = Callable[[str], str]

PROMPT_SUFFIX = " >: "
YES = "yes"

BIK_FIRST_QUESTION = "Do you have a variable benefit in kind you want to enter?"
BIK_NEXT_QUESTION = "Do you have another variable benefit in kind you want to enter?"
BIK_NAME_QUESTION = "What is the benefit in kind?"
BIK_AMOUNT_QUESTION = "How much is the benefit in kind?"


def ask_yes_no(ask: Ask, question: str) -> bool:
    return ask(f"{question} (yes or no){PROMPT_SUFFIX}").strip().lower() == YES


def ask_amount(ask: Ask, question: str, field: str) -> Decimal:
    """Ask for an amount; a blank answer is zero.

    Raises:
        InvalidAmountError: the answer is not a decimal.
    """
    answer = ask(f"{question}{PROMPT_SUFFIX}").strip()
    if not answer:
        return ZERO
    return parse_amount(answer, field)


def collect_benefits_in_kind(ask: Ask, benefits: LineItemSet) -> LineItemSet:
    """Loop asking for named variable benefits in kind until the user says no."""
    question = BIK_FIRST_QUESTION
    while ask_yes_no(ask, question):
        name = ask(f"{BIK_NAME_QUESTION}{PROMPT_SUFFIX}").strip()
        if not name:
            raise InputError("A benefit in kind needs a name")
        amount = ask_amount(ask, BIK_AMOUNT_QUESTION, f"benefit_in_kind.{name}")
        benefits = benefits.with_item(name, amount)
        logger.debug("benefit_in_kind_entered", extra={"item": name, "amount": str(amount)})
        question = BIK_NEXT_QUESTION
    return benefits


def build_inputs(
    profile: PayslipProfile,
    amounts: Mapping[str, Decimal] | None = None,
    benefit_in_kind: LineItemSet | None = None,
) -> PayslipInputs:
    """Combine a profile with per-run amounts into ``PayslipInputs``.

    Per-run amounts win over profile settings of the same name.
    """
    merged = dict(profile.settings)
    merged.update(amounts or {})
    return PayslipInputs(
        regular_salary=profile.regular_salary,
        car_allowance=profile.car_allowance,
        benefit_in_kind=benefit_in_kind if benefit_in_kind is not None else profile.benefit_in_kind,
        salary_sacrifice=profile.salary_sacrifice,
        misc_deductions=profile.misc_deductions,
        amounts=merged,
    )


def collect_inputs(
    profile: PayslipProfile,
    rules: PayslipRules,
    ask: Ask = input,
) -> PayslipInputs:
    """
    Ask every prompt ``rules`` declares and return finished inputs.

    Gated prompts are asked only after a "yes" to their gate question;
    otherwise they are zero. The gate question is asked once, when its
    first prompt comes up.

    Raises:
        InvalidAmountError: an answer is not a decimal.
        InputError: a benefit in kind was entered without a name.
    """
    amounts: dict[str, Decimal] = {}
    gate_answers: dict[str, bool] = {}

    for prompt in rules.prompts:
        if prompt.gate is not None:
            if prompt.gate not in gate_answers:
                gate = rules.gate(prompt.gate)
                gate_answers[prompt.gate] = ask_yes_no(ask, gate.question)
            if not gate_answers[prompt.gate]:
                amounts[prompt.key] = ZERO
                continue
        amounts[prompt.key] = ask_amount(ask, prompt.question, prompt.key)

    benefit_in_kind = collect_benefits_in_kind(ask, profile.benefit_in_kind)

    logger.info("payslip_inputs_collected", extra={
        "prompt_count": len(amounts),
        "benefit_in_kind_count": len(benefit_in_kind),
    })
    return build_inputs(profile, amounts, benefit_in_kind)
