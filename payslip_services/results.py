"""
Pipeline result types.

``PayslipResult`` keeps every composed subtotal as a named field, together
with the composition lines and per-band breakdowns that produced it, so a
report can explain each figure without recomputing anything.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from payslip_engines.banded import BandedChargeResult
from payslip_engines.composition import ComposedTotal
from payslip_engines.contributions import ContributionResult, FlatChargeResult
from payslip_engines.marginal import MarginalTaxResult
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import CarAllowanceMode
from payslip_kernel.domain.values import ZERO


@dataclass(frozen=True, slots=True)
class CarAllowanceResolution:
    """Where the car allowance ended up after stage 2."""

    mode: CarAllowanceMode
    cash_amount: Decimal
    benefit_in_kind: LineItemSet

    @property
    def is_cash(self) -> bool:
        return self.mode is CarAllowanceMode.CASH

    @property
    def is_benefit_in_kind(self) -> bool:
        return self.mode is CarAllowanceMode.BIK


@dataclass(frozen=True)
class PayslipResult:
    """
    Immutable result of one pipeline run.

    ``pension`` and ``share_purchase`` are None when the configured
    percentage is zero or less; the committed contribution is then exactly
    zero. ``values`` holds every raw input and stage output by name, as the
    compositions saw them.
    """

    variant: str
    salary_sacrifice_total: Decimal
    car_allowance: CarAllowanceResolution
    gross_income: ComposedTotal
    benefit_in_kind_total: Decimal
    pension_base: ComposedTotal
    pension: ContributionResult | None
    tax_base: ComposedTotal
    income_tax_base: ComposedTotal
    income_tax: MarginalTaxResult
    universal_levy_base: ComposedTotal
    universal_levy: BandedChargeResult
    social_charge_base: ComposedTotal
    social_charge: FlatChargeResult
    share_base: ComposedTotal
    share_purchase: ContributionResult | None
    misc_deductions_total: Decimal
    net_income: ComposedTotal
    values: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def benefit_in_kind(self) -> LineItemSet:
        """The benefit-in-kind set including any car allowance entry."""
        return self.car_allowance.benefit_in_kind

    @property
    def pension_contribution(self) -> Decimal:
        return self.pension.amount if self.pension is not None else ZERO

    @property
    def share_contribution(self) -> Decimal:
        return self.share_purchase.amount if self.share_purchase is not None else ZERO

    @property
    def net_pay(self) -> Decimal:
        return self.net_income.total

    def value(self, name: str) -> Decimal:
        """Committed value for ``name`` (raises KeyError when unknown)."""
        return self.values[name]
