"""
payslip_services.pipeline -- The payslip aggregation pipeline.

Responsibility:
    Threads the output of each calculation into the base of the next, in
    a fixed order, for one set of ``PayslipInputs`` under one variant's
    ``PayslipRules``:

        1. salary sacrifice total       7. income tax (marginal)
        2. car allowance resolution     8. universal levy (banded)
        3. gross income                 9. social charge (flat)
        4. benefit-in-kind total       10. share contribution
        5. pension contribution        11. misc deductions total
        6. tax base                    12. net income

Architecture position:
    Services -- orchestration over engines + config. Owns no I/O; prompting
    and the version check finish before ``run`` is called.

Invariants enforced:
    - Completeness: ``validate_inputs`` runs before stage 1, so a missing
      setting raises ``ConfigurationMissingError`` before any calculation.
    - Ordering: every stage reads only raw inputs and values committed by
      earlier stages.
    - Idempotence: identical inputs and rules give equal results.
    - Contributions with a percentage of zero or less are skipped and
      commit exactly zero.

Failure modes:
    - ``ConfigurationMissingError`` -- a referenced key has no value.
    - ``InvalidBandScheduleError`` -- a configured band width is negative.
"""

from __future__ import annotations

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
    TAX_BASE,
    UNIVERSAL_LEVY,
    ContributionDef,
    PayslipRules,
)
from payslip_config.validator import validate_inputs
from payslip_engines.banded import BandSchedule, RateBand, calculate_banded_charge
from payslip_engines.composition import ComposedTotal, compose_total
from payslip_engines.contributions import (
    ContributionResult,
    calculate_flat_charge,
    calculate_percentage_contribution,
)
from payslip_engines.marginal import calculate_marginal_tax
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import (
    CAR_ALLOWANCE_BIK_KEY,
    REGULAR_SALARY,
    CarAllowance,
    CarAllowanceMode,
    PayslipInputs,
)
from payslip_kernel.domain.values import ZERO
from payslip_kernel.logging_config import LogContext, get_logger
from payslip_services.results import CarAllowanceResolution, PayslipResult

logger = get_logger("services.pipeline")


def resolve_car_allowance(
    car_allowance: CarAllowance,
    benefit_in_kind: LineItemSet,
) -> CarAllowanceResolution:
    """
    Route the car allowance into gross income (cash) or the BIK set (bik).

    An unspecified allowance contributes zero to both.
    """
    if car_allowance.mode is CarAllowanceMode.CASH:
        return CarAllowanceResolution(car_allowance.mode, car_allowance.value, benefit_in_kind)
    if car_allowance.mode is CarAllowanceMode.BIK:
        return CarAllowanceResolution(
            car_allowance.mode,
            ZERO,
            benefit_in_kind.with_item(CAR_ALLOWANCE_BIK_KEY, car_allowance.value),
        )
    return CarAllowanceResolution(car_allowance.mode, ZERO, benefit_in_kind)


def build_band_schedule(rules: PayslipRules, inputs: PayslipInputs) -> BandSchedule:
    """Universal levy schedule: variant rates with the person's band widths."""
    return BandSchedule(
        tuple(
            RateBand(
                width=inputs.require(band.width_key) if band.width_key is not None else None,
                rate=band.rate,
            )
            for band in rules.universal_levy.bands
        )
    )


class PayslipPipeline:
    """Runs the twelve payslip stages for one variant.

    Contract:
        ``run`` takes a fully populated ``PayslipInputs`` and returns a
        ``PayslipResult``. It never prompts and never touches the network.

    Usage:
        pipeline = PayslipPipeline(get_rules("ie_2019"))
        result = pipeline.run(inputs)
        print(result.net_pay)
    """

    def __init__(self, rules: PayslipRules) -> None:
        self._rules = rules

    @property
    def rules(self) -> PayslipRules:
        return self._rules

    def run(self, inputs: PayslipInputs) -> PayslipResult:
        rules = self._rules
        validate_inputs(inputs, rules)

        with LogContext.bind(variant=rules.name):
            logger.info("payslip_pipeline_started", extra={
                "regular_salary": str(inputs.regular_salary),
                "prompt_count": len(rules.prompts),
            })

            values: dict[str, Decimal] = dict(inputs.amounts)
            values[REGULAR_SALARY] = inputs.regular_salary

            # 1. Salary sacrifice
            salary_sacrifice_total = inputs.salary_sacrifice.total
            self._commit(values, SALARY_SACRIFICE_TOTAL, salary_sacrifice_total)

            # 2. Car allowance
            car_allowance = resolve_car_allowance(inputs.car_allowance, inputs.benefit_in_kind)
            self._commit(values, CAR_ALLOWANCE_CASH, car_allowance.cash_amount)

            # 3. Gross income
            gross_income = compose_total(GROSS_INCOME, rules.gross_income, values)
            self._commit(values, GROSS_INCOME, gross_income.total)

            # 4. Benefit in kind
            benefit_in_kind_total = car_allowance.benefit_in_kind.total
            self._commit(values, BENEFIT_IN_KIND_TOTAL, benefit_in_kind_total)

            # 5. Pension
            pension_base = compose_total("pension_base", rules.pension.base, values)
            pension = self._contribution(rules.pension, pension_base, inputs)
            self._commit(values, PENSION_CONTRIBUTION, pension.amount if pension else ZERO)

            # 6. Tax base
            tax_base = compose_total(TAX_BASE, rules.tax_base, values)
            self._commit(values, TAX_BASE, tax_base.total)

            # 7. Income tax
            income_tax_base = compose_total("income_tax_base", rules.income_tax.base, values)
            income_tax = calculate_marginal_tax(
                taxable_amount=income_tax_base.total,
                cutoff=inputs.require(rules.income_tax.cutoff_key),
                credit=inputs.require(rules.income_tax.credit_key),
                lower_rate=rules.income_tax.lower_rate,
                higher_rate=rules.income_tax.higher_rate,
            )
            self._commit(values, INCOME_TAX, income_tax.final_owed)

            # 8. Universal levy
            universal_levy_base = compose_total(
                "universal_levy_base", rules.universal_levy.base, values
            )
            universal_levy = calculate_banded_charge(
                taxable_amount=universal_levy_base.total,
                schedule=build_band_schedule(rules, inputs),
            )
            self._commit(values, UNIVERSAL_LEVY, universal_levy.total_owed)

            # 9. Social charge
            social_charge_base = compose_total(
                "social_charge_base", rules.social_charge.base, values
            )
            social_charge = calculate_flat_charge(
                base=social_charge_base.total, rate=rules.social_charge.rate
            )
            self._commit(values, SOCIAL_CHARGE, social_charge.owed)

            # 10. Share purchase
            share_base = compose_total("share_base", rules.share_purchase.base, values)
            share_purchase = self._contribution(rules.share_purchase, share_base, inputs)
            self._commit(
                values, SHARE_CONTRIBUTION, share_purchase.amount if share_purchase else ZERO
            )

            # 11. Misc deductions
            misc_deductions_total = inputs.misc_deductions.total
            self._commit(values, MISC_DEDUCTIONS_TOTAL, misc_deductions_total)

            # 12. Net income
            net_income = compose_total(NET_INCOME, rules.net_income, values)
            self._commit(values, NET_INCOME, net_income.total)

            logger.info("payslip_pipeline_completed", extra={
                "gross_income": str(gross_income.total),
                "tax_base": str(tax_base.total),
                "net_income": str(net_income.total),
            })

        return PayslipResult(
            variant=rules.name,
            salary_sacrifice_total=salary_sacrifice_total,
            car_allowance=car_allowance,
            gross_income=gross_income,
            benefit_in_kind_total=benefit_in_kind_total,
            pension_base=pension_base,
            pension=pension,
            tax_base=tax_base,
            income_tax_base=income_tax_base,
            income_tax=income_tax,
            universal_levy_base=universal_levy_base,
            universal_levy=universal_levy,
            social_charge_base=social_charge_base,
            social_charge=social_charge,
            share_base=share_base,
            share_purchase=share_purchase,
            misc_deductions_total=misc_deductions_total,
            net_income=net_income,
            values=values,
        )

    @staticmethod
    def _contribution(
        definition: ContributionDef,
        base: ComposedTotal,
        inputs: PayslipInputs,
    ) -> ContributionResult | None:
        percent = inputs.require(definition.percent_key)
        if percent <= ZERO:
            logger.debug("contribution_skipped", extra={
                "percent_key": definition.percent_key,
                "percent": str(percent),
            })
            return None
        return calculate_percentage_contribution(base=base.total, percent=percent)

    @staticmethod
    def _commit(values: dict[str, Decimal], name: str, amount: Decimal) -> None:
        values[name] = amount
        logger.debug("payslip_stage_committed", extra={"stage": name, "amount": str(amount)})


def run_payslip(inputs: PayslipInputs, rules: PayslipRules) -> PayslipResult:
    """Convenience wrapper: ``PayslipPipeline(rules).run(inputs)``."""
    return PayslipPipeline(rules).run(inputs)
