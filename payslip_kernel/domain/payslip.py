"""
Payslip inputs -- the immutable snapshot a pipeline run computes from.

Responsibility:
    Holds every raw value collected for one run: the regular salary, the
    per-run amounts (bonuses, awards, refund, gains, vouchers), the
    configured settings (percentages, band widths, cutoff, tax credit), the
    three line-item sets and the car allowance.

Invariants enforced:
    - Immutable once collected; augmenting the benefit-in-kind set produces
      a new LineItemSet, never a mutation of this snapshot.
    - Lookups of a key the configuration requires raise
      ConfigurationMissingError instead of defaulting to zero.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.values import ZERO, parse_amount
from payslip_kernel.exceptions import ConfigurationMissingError

# Key under which a benefit-in-kind car allowance joins the BIK set.
CAR_ALLOWANCE_BIK_KEY = "car_allowance"

REGULAR_SALARY = "regular_salary"


class CarAllowanceMode(str, Enum):
    """How the car allowance is paid."""

    CASH = "cash"  # Paid with salary, part of gross income
    BIK = "bik"  # Benefit in kind, part of the BIK total
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: Any) -> CarAllowanceMode:
        text = str(value).strip().lower() if value is not None else ""
        if text == cls.CASH.value:
            return cls.CASH
        if text == cls.BIK.value:
            return cls.BIK
        return cls.UNSPECIFIED


@dataclass(frozen=True, slots=True)
class CarAllowance:
    """Car allowance mode and monthly value."""

    mode: CarAllowanceMode = CarAllowanceMode.UNSPECIFIED
    value: Decimal = ZERO

    @classmethod
    def from_config(cls, data: Mapping[str, Any] | None) -> CarAllowance:
        """
        Parse the ``car_allowance: {type, value}`` config block.

        Raises:
            ConfigurationMissingError: cash or bik without a value.
            InvalidAmountError: value is not a decimal.
        """
        if not data:
            return cls()
        mode = CarAllowanceMode.parse(data.get("type"))
        raw_value = data.get("value")
        if raw_value is None:
            if mode is CarAllowanceMode.UNSPECIFIED:
                return cls(mode=mode)
            raise ConfigurationMissingError("car_allowance.value")
        return cls(mode=mode, value=parse_amount(raw_value, "car_allowance.value"))


@dataclass(frozen=True)
class PayslipInputs:
    """Raw values for one payslip run."""

    regular_salary: Decimal
    car_allowance: CarAllowance = field(default_factory=CarAllowance)
    benefit_in_kind: LineItemSet = field(default_factory=LineItemSet)
    salary_sacrifice: LineItemSet = field(default_factory=LineItemSet)
    misc_deductions: LineItemSet = field(default_factory=LineItemSet)
    amounts: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only copy
        object.__setattr__(self, "amounts", MappingProxyType(dict(self.amounts)))

    def value_of(self, key: str) -> Decimal | None:
        """Return the raw value for ``key`` or None when it was not supplied."""
        if key == REGULAR_SALARY:
            return self.regular_salary
        return self.amounts.get(key)

    def require(self, key: str, source: str = "payslip inputs") -> Decimal:
        value = self.value_of(key)
        if value is None:
            raise ConfigurationMissingError(key, source)
        return value

    def available_keys(self) -> tuple[str, ...]:
        return (REGULAR_SALARY, *self.amounts.keys())
