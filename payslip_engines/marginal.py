"""
Marginal Tax Engine - two-rate income tax with a flat credit.

A bounded lower-rate band up to ``cutoff`` and an unbounded higher-rate
band above it. The credit is subtracted after summing both owed amounts
and the result is rounded once.

The result is NOT floored at zero: when the credit exceeds the liability
the negative ``final_owed`` is a net refund and is reported as such.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payslip_engines.tracer import traced_engine
from payslip_kernel.domain.values import ZERO, exact_arithmetic, round_amount
from payslip_kernel.logging_config import get_logger

logger = get_logger("engines.marginal")


@dataclass(frozen=True, slots=True)
class MarginalTaxResult:
    """Full breakdown of a marginal tax calculation."""

    taxable_amount: Decimal
    cutoff: Decimal
    credit: Decimal
    lower_rate: Decimal
    higher_rate: Decimal
    lower_amount: Decimal
    higher_amount: Decimal
    lower_owed: Decimal
    higher_owed: Decimal
    pre_credit_total: Decimal
    final_owed: Decimal

    @property
    def is_refund(self) -> bool:
        return self.final_owed < ZERO


@traced_engine(
    "marginal_tax",
    "1.0",
    fingerprint_fields=("taxable_amount", "cutoff", "credit", "lower_rate", "higher_rate"),
    result_field="final_owed",
)
def calculate_marginal_tax(
    *,
    taxable_amount: Decimal,
    cutoff: Decimal,
    credit: Decimal,
    lower_rate: Decimal,
    higher_rate: Decimal,
) -> MarginalTaxResult:
    """
    Charge ``taxable_amount`` at ``lower_rate`` up to ``cutoff`` and at
    ``higher_rate`` above it, then subtract ``credit``.

    Postconditions:
        - lower_amount + higher_amount == taxable_amount for taxable >= 0.
        - final_owed == round2(pre_credit_total - credit), possibly negative.
    """
    with exact_arithmetic(taxable_amount, cutoff, credit, lower_rate, higher_rate):
        lower_amount = min(taxable_amount, cutoff)
        higher_amount = max(ZERO, taxable_amount - cutoff)

        lower_owed = lower_amount * lower_rate
        higher_owed = higher_amount * higher_rate
        pre_credit_total = lower_owed + higher_owed
        final_owed = round_amount(pre_credit_total - credit)

    if final_owed < ZERO:
        logger.info("marginal_tax_refund", extra={
            "taxable_amount": str(taxable_amount),
            "credit": str(credit),
            "final_owed": str(final_owed),
        })

    return MarginalTaxResult(
        taxable_amount=taxable_amount,
        cutoff=cutoff,
        credit=credit,
        lower_rate=lower_rate,
        higher_rate=higher_rate,
        lower_amount=lower_amount,
        higher_amount=higher_amount,
        lower_owed=lower_owed,
        higher_owed=higher_owed,
        pre_credit_total=pre_credit_total,
        final_owed=final_owed,
    )
