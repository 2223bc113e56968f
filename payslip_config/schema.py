"""
Payslip configuration schema.

Two human-authored artifacts are parsed into these types by the loader:

  PayslipRules   = jurisdiction variant (rates, band shape, compositions),
                   shipped under ``payslip_config/sets``
  PayslipProfile = one person's settings (salary, percentages, band widths,
                   line items), the ``payslip_config.yml`` file

A new variant is a new rules file, never a code change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from payslip_engines.composition import FeederTerm
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import REGULAR_SALARY, CarAllowance

# ---------------------------------------------------------------------------
# Pipeline value names
# ---------------------------------------------------------------------------

SALARY_SACRIFICE_TOTAL = "salary_sacrifice_total"
CAR_ALLOWANCE_CASH = "car_allowance_cash"
GROSS_INCOME = "gross_income"
BENEFIT_IN_KIND_TOTAL = "benefit_in_kind_total"
PENSION_CONTRIBUTION = "pension_contribution"
TAX_BASE = "tax_base"
INCOME_TAX = "income_tax"
UNIVERSAL_LEVY = "universal_levy"
SOCIAL_CHARGE = "social_charge"
SHARE_CONTRIBUTION = "share_contribution"
MISC_DEDUCTIONS_TOTAL = "misc_deductions_total"
NET_INCOME = "net_income"

# Values committed by each stage, in execution order.
STAGE_OUTPUTS: tuple[str, ...] = (
    SALARY_SACRIFICE_TOTAL,
    CAR_ALLOWANCE_CASH,
    GROSS_INCOME,
    BENEFIT_IN_KIND_TOTAL,
    PENSION_CONTRIBUTION,
    TAX_BASE,
    INCOME_TAX,
    UNIVERSAL_LEVY,
    SOCIAL_CHARGE,
    SHARE_CONTRIBUTION,
    MISC_DEDUCTIONS_TOTAL,
    NET_INCOME,
)

DEFAULT_LABELS: dict[str, str] = {
    REGULAR_SALARY: "Regular salary",
    SALARY_SACRIFICE_TOTAL: "Salary Sacrifices",
    CAR_ALLOWANCE_CASH: "Car Allowance",
    GROSS_INCOME: "Gross Income",
    BENEFIT_IN_KIND_TOTAL: "Benefit In Kind",
    PENSION_CONTRIBUTION: "Pension Contribution",
    TAX_BASE: "Tax Base",
    INCOME_TAX: "PAYE",
    UNIVERSAL_LEVY: "USC",
    SOCIAL_CHARGE: "PRSI",
    SHARE_CONTRIBUTION: "ESPP",
    MISC_DEDUCTIONS_TOTAL: "Misc Deductions",
    NET_INCOME: "Net Income",
}


# ---------------------------------------------------------------------------
# Variant rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PromptGateDef:
    """A yes/no question that guards a group of amount prompts."""

    name: str
    question: str


@dataclass(frozen=True)
class InputPromptDef:
    """A per-run amount collected before the pipeline runs."""

    key: str
    question: str
    label: str = ""
    gate: str | None = None


@dataclass(frozen=True)
class IncomeTaxDef:
    lower_rate: Decimal
    higher_rate: Decimal
    cutoff_key: str = "standard_cutoff_rate"
    credit_key: str = "tax_credit"
    base: tuple[FeederTerm, ...] = (FeederTerm(TAX_BASE),)


@dataclass(frozen=True)
class LevyBandDef:
    """A levy band; ``width_key`` is None only for the unbounded top band."""

    rate: Decimal
    width_key: str | None = None


@dataclass(frozen=True)
class UniversalLevyDef:
    bands: tuple[LevyBandDef, ...]
    base: tuple[FeederTerm, ...] = (FeederTerm(TAX_BASE),)

    @property
    def width_keys(self) -> tuple[str, ...]:
        return tuple(b.width_key for b in self.bands if b.width_key is not None)


@dataclass(frozen=True)
class SocialChargeDef:
    rate: Decimal
    base: tuple[FeederTerm, ...] = (FeederTerm(TAX_BASE),)


@dataclass(frozen=True)
class ContributionDef:
    """Percentage-of-base contribution; ``percent_key`` names the setting."""

    percent_key: str
    base: tuple[FeederTerm, ...]


@dataclass(frozen=True)
class PayslipRules:
    """Declarative rules for one jurisdiction variant."""

    name: str
    income_tax: IncomeTaxDef
    universal_levy: UniversalLevyDef
    social_charge: SocialChargeDef
    pension: ContributionDef
    share_purchase: ContributionDef
    gross_income: tuple[FeederTerm, ...]
    tax_base: tuple[FeederTerm, ...]
    net_income: tuple[FeederTerm, ...]
    description: str = ""
    prompts: tuple[InputPromptDef, ...] = ()
    gates: tuple[PromptGateDef, ...] = ()
    labels: dict[str, str] = field(default_factory=dict)
    checksum: str = ""

    def label_for(self, name: str) -> str:
        if name in self.labels:
            return self.labels[name]
        if name in DEFAULT_LABELS:
            return DEFAULT_LABELS[name]
        for prompt in self.prompts:
            if prompt.key == name and prompt.label:
                return prompt.label
        return name.replace("_", " ").capitalize()

    def gate(self, name: str) -> PromptGateDef | None:
        for gate in self.gates:
            if gate.name == name:
                return gate
        return None

    @property
    def prompt_keys(self) -> tuple[str, ...]:
        return tuple(p.key for p in self.prompts)

    @property
    def setting_keys(self) -> tuple[str, ...]:
        """Profile settings the rules read: cutoff, credit, widths, percents."""
        return (
            self.income_tax.cutoff_key,
            self.income_tax.credit_key,
            *self.universal_levy.width_keys,
            self.pension.percent_key,
            self.share_purchase.percent_key,
        )


# ---------------------------------------------------------------------------
# Personal profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayslipProfile:
    """One person's payslip settings, as read from ``payslip_config.yml``.

    ``unparsed`` keeps scalar keys that are not decimals (a name, a note);
    they only matter if the rules turn out to read one as a setting.
    """

    variant: str
    regular_salary: Decimal
    car_allowance: CarAllowance
    salary_sacrifice: LineItemSet
    benefit_in_kind: LineItemSet
    misc_deductions: LineItemSet
    settings: dict[str, Decimal] = field(default_factory=dict)
    unparsed: dict[str, Any] = field(default_factory=dict)
    source: str = "config file"
    checksum: str = ""
