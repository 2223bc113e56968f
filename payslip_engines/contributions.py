"""
Flat charges and percentage contributions.

Two single-rate calculators: the flat social charge (``base * rate``) and
the percentage-of-base contribution used for pension and share purchase
(``(base / 100) * percent``). Both round once, half-up to 2dp.

Whether a contribution applies at all (percent > 0) is the pipeline's
decision; these functions only compute.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payslip_engines.tracer import traced_engine
from payslip_kernel.domain.values import HUNDRED, exact_arithmetic, round_amount


@dataclass(frozen=True, slots=True)
class FlatChargeResult:
    base: Decimal
    rate: Decimal  # As decimal (e.g., 0.04 for 4%)
    owed: Decimal


@dataclass(frozen=True, slots=True)
class ContributionResult:
    base: Decimal
    percent: Decimal  # As percentage (e.g., 5 for 5%)
    amount: Decimal


@traced_engine("flat_charge", "1.0", fingerprint_fields=("base", "rate"), result_field="owed")
def calculate_flat_charge(*, base: Decimal, rate: Decimal) -> FlatChargeResult:
    """Multiply then round: ``round2(base * rate)``."""
    with exact_arithmetic(base, rate):
        owed = round_amount(base * rate)
    return FlatChargeResult(base=base, rate=rate, owed=owed)


@traced_engine(
    "percentage_contribution", "1.0",
    fingerprint_fields=("base", "percent"),
    result_field="amount",
)
def calculate_percentage_contribution(*, base: Decimal, percent: Decimal) -> ContributionResult:
    """``round2((base / 100) * percent)``."""
    with exact_arithmetic(base, percent, HUNDRED):
        amount = round_amount((base / HUNDRED) * percent)
    return ContributionResult(base=base, percent=percent, amount=amount)
