"""
payslip_services.report -- Plain-text explanation of a payslip result.

Responsibility:
    Turns a ``PayslipResult`` into an ordered list of ``ReportSection``s
    that walk through each figure the way it was computed: inputs, salary
    sacrifices, car allowance, gross income, benefit in kind, pension,
    the three charges, share purchase, misc deductions and net pay.

Invariants enforced:
    - Reads the result only; nothing is recomputed except display rounding
      of per-band owed amounts.
    - Composition and line-item lines whose amount is zero are omitted.
    - Pension and share-purchase sections appear only when computed.
    - Amounts are rendered in plain (non-scientific) notation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from payslip_config.schema import (
    GROSS_INCOME,
    INCOME_TAX,
    PENSION_CONTRIBUTION,
    SHARE_CONTRIBUTION,
    SOCIAL_CHARGE,
    TAX_BASE,
    UNIVERSAL_LEVY,
    PayslipRules,
)
from payslip_engines.composition import ComposedLine, ComposedTotal, FeederTerm
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import REGULAR_SALARY, CarAllowanceMode, PayslipInputs
from payslip_kernel.domain.values import (
    format_amount,
    format_number,
    format_percent,
    round_amount,
)
from payslip_services.results import PayslipResult

REPORT_WIDTH = 80


@dataclass(frozen=True, slots=True)
class ReportSection:
    """One titled block of the report."""

    title: str
    lines: tuple[str, ...]


def format_section(section: ReportSection) -> str:
    """Render a section under its ``###`` banner."""
    banner = "#" * REPORT_WIDTH
    heading = f"### {section.title} " + "#" * max(0, REPORT_WIDTH - 5 - len(section.title))
    return "\n".join(("", "", banner, heading, *section.lines))


def format_report(sections: Iterable[ReportSection]) -> str:
    return "\n".join(format_section(s) for s in sections)


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------


def _line_items(items: LineItemSet) -> list[str]:
    return [
        f"\t{format_amount(item.amount)}\t({item.label})"
        for item in items
        if not item.amount.is_zero()
    ]


def _describe_items(items: LineItemSet) -> str:
    if not len(items):
        return "none"
    return ", ".join(f"{item.label} {format_amount(item.amount)}" for item in items)


def _composition_lines(
    rules: PayslipRules,
    lines: Sequence[ComposedLine],
    first_prefix: str,
    prefix: str = "\t\t",
) -> list[str]:
    out: list[str] = []
    for line in lines:
        if line.amount.is_zero():
            continue
        lead = first_prefix if not out else prefix
        out.append(
            f"{lead}{line.term.sign.symbol} {format_amount(line.amount)}"
            f"\t\t({rules.label_for(line.term.name)})"
        )
    return out


def _charge_input(result: PayslipResult, base: ComposedTotal) -> ComposedTotal:
    """A charge levied on the tax base is explained by the tax base's own lines."""
    if tuple(line.term for line in base.lines) == (FeederTerm(TAX_BASE),):
        return result.tax_base
    return base


def _input_block(rules: PayslipRules, title: str, base: ComposedTotal) -> list[str]:
    return [
        *_composition_lines(rules, base.lines, f"Input for {title}\t"),
        f"Total Input\t= {format_amount(base.total)}",
        "",
    ]


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _input_values(inputs: PayslipInputs, rules: PayslipRules) -> ReportSection:
    lines = [
        "These are the values used to calculate your payslip",
        f"-{rules.label_for(REGULAR_SALARY)}: {format_amount(inputs.regular_salary)}",
    ]
    for prompt in rules.prompts:
        value = inputs.value_of(prompt.key)
        if value is not None:
            lines.append(f"-{rules.label_for(prompt.key)}: {format_amount(value)}")
    for label, key in (
        (rules.label_for(PENSION_CONTRIBUTION), rules.pension.percent_key),
        (rules.label_for(SHARE_CONTRIBUTION), rules.share_purchase.percent_key),
    ):
        lines.append(f"-{label}: {format_number(inputs.require(key))}%")

    car = inputs.car_allowance
    lines.append(f"-Car Allowance: {car.mode.value} {format_amount(car.value)}")
    lines.append(f"-Salary Sacrifice: {_describe_items(inputs.salary_sacrifice)}")
    lines.append(f"-Benefit in Kind: {_describe_items(inputs.benefit_in_kind)}")
    lines.append(f"-Misc Deductions: {_describe_items(inputs.misc_deductions)}")

    income_tax = rules.label_for(INCOME_TAX)
    lines.append(
        f"-{income_tax} Standard rate cutoff: "
        f"{format_amount(inputs.require(rules.income_tax.cutoff_key))}"
    )
    lines.append(
        f"-{income_tax} Tax credit: {format_amount(inputs.require(rules.income_tax.credit_key))}"
    )
    levy = rules.label_for(UNIVERSAL_LEVY)
    for band in rules.universal_levy.bands:
        if band.width_key is not None:
            lines.append(
                f"-{levy} {format_percent(band.rate)} Band: "
                f"{format_amount(inputs.require(band.width_key))}"
            )
    return ReportSection("Input Values", tuple(lines))


def _salary_sacrifices(result: PayslipResult, inputs: PayslipInputs) -> ReportSection:
    return ReportSection("Salary Sacrifices", (
        *_line_items(inputs.salary_sacrifice),
        "",
        f"TOTAL SALARY SACRIFICE = {format_amount(result.salary_sacrifice_total)}",
    ))


def _car_allowance(result: PayslipResult) -> ReportSection:
    mode = result.car_allowance.mode
    if mode is CarAllowanceMode.CASH:
        lines = ("Your car allowance is paid in cash so is considered in your Gross Income below",)
    elif mode is CarAllowanceMode.BIK:
        lines = (
            "Your Car Allowance is a Benefit in Kind so it has been added to that section below",
        )
    else:
        lines = (
            "You have not specified you are in receipt of Car Allowance.",
            "If you are, change your config to 'cash' or 'bik' as appropriate",
        )
    return ReportSection("Car Allowance", lines)


def _gross_income(result: PayslipResult, rules: PayslipRules) -> ReportSection:
    return ReportSection(rules.label_for(GROSS_INCOME), (
        *_composition_lines(rules, result.gross_income.lines, "Gross Income\t"),
        "",
        f"TOTAL GROSS INCOME = {format_amount(result.gross_income.total)}",
    ))


def _benefit_in_kind(result: PayslipResult) -> ReportSection:
    return ReportSection("Benefit in Kind", (
        *_line_items(result.benefit_in_kind),
        "",
        f"TOTAL BENEFIT IN KIND = {format_amount(result.benefit_in_kind_total)}",
    ))


def _contribution(
    rules: PayslipRules,
    name: str,
    base: ComposedTotal,
    percent: Decimal,
    amount: Decimal,
) -> ReportSection:
    title = rules.label_for(name)
    return ReportSection(title, (
        f"Your {title} is {format_number(percent)}%",
        "",
        *_input_block(rules, title, base),
        f"{format_amount(base.total)} @ {format_number(percent)}% = {format_amount(amount)}",
        "",
        f"TOTAL {title.upper()} = {format_amount(amount)}",
    ))


def _income_tax(result: PayslipResult, rules: PayslipRules) -> ReportSection:
    title = rules.label_for(INCOME_TAX)
    tax = result.income_tax
    return ReportSection(title, (
        *_input_block(rules, title, _charge_input(result, result.income_tax_base)),
        f"{format_amount(tax.lower_amount)} @ {format_percent(tax.lower_rate)}\t"
        f"  {format_amount(round_amount(tax.lower_owed))}\t({format_amount(tax.lower_owed)})",
        f"{format_amount(tax.higher_amount)} @ {format_percent(tax.higher_rate)}\t"
        f"  {format_amount(round_amount(tax.higher_owed))}\t({format_amount(tax.higher_owed)})",
        f"\t\t= {format_amount(round_amount(tax.pre_credit_total))}"
        f"\t({format_amount(tax.pre_credit_total)})",
        f"\t\t- {format_amount(tax.credit)} (Monthly tax credit)",
        "",
        f"TOTAL {title}\t= {format_amount(tax.final_owed)}",
    ))


def _universal_levy(result: PayslipResult, rules: PayslipRules) -> ReportSection:
    title = rules.label_for(UNIVERSAL_LEVY)
    levy = result.universal_levy
    band_lines = [
        f"{format_amount(band.chargeable)} @ {format_percent(band.rate)}\t"
        f"  {format_amount(round_amount(band.owed))}\t({format_amount(band.owed)})"
        for band in levy.bands
    ]
    return ReportSection(title, (
        *_input_block(rules, title, _charge_input(result, result.universal_levy_base)),
        *band_lines,
        "",
        f"TOTAL {title}\t= {format_amount(levy.total_owed)}",
    ))


def _social_charge(result: PayslipResult, rules: PayslipRules) -> ReportSection:
    title = rules.label_for(SOCIAL_CHARGE)
    charge = result.social_charge
    return ReportSection(title, (
        *_input_block(rules, title, _charge_input(result, result.social_charge_base)),
        f"{format_amount(charge.base)} @ {format_percent(charge.rate)} = {format_amount(charge.owed)}",
        "",
        f"TOTAL {title}\t= {format_amount(charge.owed)}",
    ))


def _misc_deductions(result: PayslipResult, inputs: PayslipInputs) -> ReportSection:
    return ReportSection("Misc Deductions", (
        *_line_items(inputs.misc_deductions),
        "",
        f"TOTAL MISC DEDUCTIONS = {format_amount(result.misc_deductions_total)}",
    ))


def _net_pay(result: PayslipResult, rules: PayslipRules) -> ReportSection:
    lines: list[str] = []
    for line in result.net_income.lines:
        if line.amount.is_zero():
            continue
        sign = " " if not lines else line.term.sign.symbol
        lines.append(
            f"\t{sign} {format_amount(line.amount)}\t({rules.label_for(line.term.name)})"
        )
    return ReportSection("Net Pay", (
        *lines,
        f"\t= {format_amount(result.net_pay)}",
        "",
        f"TOTAL NET INCOME = {format_amount(result.net_pay)}",
    ))


def render_report(
    inputs: PayslipInputs,
    result: PayslipResult,
    rules: PayslipRules,
) -> list[ReportSection]:
    """Build the report sections for one pipeline result, in order."""
    sections = [
        _input_values(inputs, rules),
        _salary_sacrifices(result, inputs),
        _car_allowance(result),
        _gross_income(result, rules),
        _benefit_in_kind(result),
    ]
    if result.pension is not None:
        sections.append(_contribution(
            rules, PENSION_CONTRIBUTION, result.pension_base,
            result.pension.percent, result.pension.amount,
        ))
    sections += [
        _income_tax(result, rules),
        _universal_levy(result, rules),
        _social_charge(result, rules),
    ]
    if result.share_purchase is not None:
        sections.append(_contribution(
            rules, SHARE_CONTRIBUTION, result.share_base,
            result.share_purchase.percent, result.share_purchase.amount,
        ))
    sections += [
        _misc_deductions(result, inputs),
        _net_pay(result, rules),
    ]
    return sections
