"""
Pure domain layer.

Immutable value objects with NO dependencies on configuration files,
prompts, the network, or the clock.
"""

from payslip_kernel.domain.line_items import LineItem, LineItemSet
from payslip_kernel.domain.payslip import (
    CAR_ALLOWANCE_BIK_KEY,
    CarAllowance,
    CarAllowanceMode,
    PayslipInputs,
)
from payslip_kernel.domain.values import (
    CENT,
    ZERO,
    format_amount,
    format_percent,
    parse_amount,
    round_amount,
)

__all__ = [
    "CAR_ALLOWANCE_BIK_KEY",
    "CENT",
    "CarAllowance",
    "CarAllowanceMode",
    "LineItem",
    "LineItemSet",
    "PayslipInputs",
    "ZERO",
    "format_amount",
    "format_percent",
    "parse_amount",
    "round_amount",
]
