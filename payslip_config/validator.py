"""
Configuration Validator (``payslip_config.validator``).

Responsibility
--------------
Validates variant rules before any payslip is computed, and checks that a
profile (or a finished ``PayslipInputs``) supplies every setting the rules
read.

Invariants enforced
-------------------
* Stage ordering -- a composition may only read raw inputs and values
  committed by stages that run before it.
* Band shape -- every levy band but the last names a width setting; the
  last band is unbounded. Configured widths are not negative.
* Rates lie in [0, 1].
* Completeness -- every cutoff, credit, band width and percentage the rules
  reference is present before the pipeline starts.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``) -> the rules MUST
  NOT be used; ``raise_for_errors`` raises the first one.
* Missing settings -> ``ConfigurationMissingError``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from payslip_config.schema import (
    BENEFIT_IN_KIND_TOTAL,
    CAR_ALLOWANCE_CASH,
    GROSS_INCOME,
    INCOME_TAX,
    MISC_DEDUCTIONS_TOTAL,
    NET_INCOME,
    PENSION_CONTRIBUTION,
    SALARY_SACRIFICE_TOTAL,
    SHARE_CONTRIBUTION,
    SOCIAL_CHARGE,
    STAGE_OUTPUTS,
    TAX_BASE,
    UNIVERSAL_LEVY,
    PayslipProfile,
    PayslipRules,
)
from payslip_engines.composition import FeederTerm
from payslip_kernel.domain.payslip import REGULAR_SALARY, PayslipInputs
from payslip_kernel.domain.values import parse_amount
from payslip_kernel.exceptions import (
    ConfigurationError,
    ConfigurationMissingError,
    InvalidBandScheduleError,
    InvalidCompositionError,
)

ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass
class ConfigValidationResult:
    """
    Result of rules validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block use but should be reviewed.
    """

    errors: list[ConfigurationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, error: ConfigurationError) -> None:
        self.errors.append(error)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def raise_for_errors(self) -> None:
        if self.errors:
            raise self.errors[0]


def _outputs_before(stage: str) -> tuple[str, ...]:
    return STAGE_OUTPUTS[: STAGE_OUTPUTS.index(stage)]


def available_terms(rules: PayslipRules, stage: str) -> frozenset[str]:
    """Names a composition evaluated for ``stage`` may read."""
    return frozenset((REGULAR_SALARY, *rules.prompt_keys, *_outputs_before(stage)))


def _check_terms(
    result: ConfigValidationResult,
    composition: str,
    terms: Sequence[FeederTerm],
    available: Iterable[str],
) -> None:
    available = frozenset(available)
    if not terms:
        result.add_warning(f"composition {composition!r} has no terms")
    for term in terms:
        if term.name not in available:
            result.add_error(InvalidCompositionError(composition, term.name, sorted(available)))


def _check_rate(result: ConfigValidationResult, name: str, rate: Decimal) -> None:
    if rate < ZERO or rate > ONE:
        result.add_error(InvalidBandScheduleError(f"{name} rate {rate} outside [0, 1]"))


def validate_rules(rules: PayslipRules) -> ConfigValidationResult:
    """
    Validate variant rules.

    Postconditions:
        - Returns a ``ConfigValidationResult``; never raises.
    """
    result = ConfigValidationResult()

    # Composition ordering
    _check_terms(result, GROSS_INCOME, rules.gross_income, available_terms(rules, GROSS_INCOME))
    _check_terms(
        result, "pension_base", rules.pension.base, available_terms(rules, PENSION_CONTRIBUTION)
    )
    _check_terms(result, TAX_BASE, rules.tax_base, available_terms(rules, TAX_BASE))
    _check_terms(result, "income_tax_base", rules.income_tax.base, available_terms(rules, INCOME_TAX))
    _check_terms(
        result, "universal_levy_base", rules.universal_levy.base, available_terms(rules, UNIVERSAL_LEVY)
    )
    _check_terms(
        result, "social_charge_base", rules.social_charge.base, available_terms(rules, SOCIAL_CHARGE)
    )
    _check_terms(
        result, "share_base", rules.share_purchase.base, available_terms(rules, SHARE_CONTRIBUTION)
    )
    _check_terms(result, NET_INCOME, rules.net_income, available_terms(rules, NET_INCOME))

    # Rates
    _check_rate(result, "income_tax lower", rules.income_tax.lower_rate)
    _check_rate(result, "income_tax higher", rules.income_tax.higher_rate)
    _check_rate(result, "social_charge", rules.social_charge.rate)
    for i, band in enumerate(rules.universal_levy.bands):
        _check_rate(result, f"universal_levy band {i}", band.rate)

    # Band shape
    bands = rules.universal_levy.bands
    if not bands:
        result.add_error(InvalidBandScheduleError("universal_levy has no bands"))
    else:
        for i, band in enumerate(bands[:-1]):
            if band.width_key is None:
                result.add_error(
                    InvalidBandScheduleError(f"universal_levy band {i} needs a width_key")
                )
        if bands[-1].width_key is not None:
            result.add_error(
                InvalidBandScheduleError("the last universal_levy band must be unbounded")
            )

    # Prompt gates
    for prompt in rules.prompts:
        if prompt.gate is not None and rules.gate(prompt.gate) is None:
            result.add_error(ConfigurationMissingError(f"gates.{prompt.gate}", rules.name))

    if len(set(rules.prompt_keys)) != len(rules.prompt_keys):
        result.add_warning("duplicate prompt keys; the last answer wins")

    for name in (SALARY_SACRIFICE_TOTAL, CAR_ALLOWANCE_CASH, BENEFIT_IN_KIND_TOTAL, MISC_DEDUCTIONS_TOTAL):
        if name in rules.prompt_keys:
            result.add_warning(f"prompt key {name!r} shadows a pipeline value")

    return result


def _check_band_widths(amounts: Mapping[str, Decimal], rules: PayslipRules) -> None:
    for key in rules.universal_levy.width_keys:
        if amounts[key] < ZERO:
            raise InvalidBandScheduleError(f"negative band width {key}={amounts[key]}")


def validate_profile(profile: PayslipProfile, rules: PayslipRules) -> None:
    """
    Ensure the profile supplies every setting the rules read.

    Raises:
        ConfigurationMissingError: naming the first absent setting.
        InvalidAmountError: a setting the rules read is not a decimal.
        InvalidBandScheduleError: a levy band width is negative.
    """
    for key in rules.setting_keys:
        if key in profile.unparsed:
            parse_amount(profile.unparsed[key], key)
        if key not in profile.settings:
            raise ConfigurationMissingError(key, profile.source)
    _check_band_widths(profile.settings, rules)


def validate_inputs(inputs: PayslipInputs, rules: PayslipRules) -> None:
    """
    Ensure a finished ``PayslipInputs`` holds every key the rules read.

    Called by the pipeline before stage 1 so a run never starts with
    incomplete configuration.

    Raises:
        ConfigurationMissingError: naming the first absent key.
        InvalidBandScheduleError: a levy band width is negative.
    """
    for key in (*rules.setting_keys, *rules.prompt_keys):
        inputs.require(key)
    _check_band_widths(inputs.amounts, rules)
