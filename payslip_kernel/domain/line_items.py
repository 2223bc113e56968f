"""
Line items -- named amounts that compose a reported total.

A LineItemSet backs the benefit-in-kind, salary-sacrifice and
misc-deduction sections of a payslip. Order is preserved for reporting
only; it never affects the total.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from payslip_kernel.domain.values import ZERO, parse_amount


@dataclass(frozen=True, slots=True)
class LineItem:
    """A named amount contributing to a composed total."""

    name: str
    amount: Decimal

    @property
    def label(self) -> str:
        """Human label: ``health_insurance`` -> ``Health insurance``."""
        return self.name.replace("_", " ").capitalize()


@dataclass(frozen=True, slots=True)
class LineItemSet:
    """
    Immutable, insertion-ordered collection of line items.

    Guarantees:
        - ``total`` is the exact sum of every item amount.
        - ``with_item`` returns a new set; an existing name is replaced in
          place, a new name is appended.
    """

    items: tuple[LineItem, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None, field: str = "items") -> LineItemSet:
        """Build a set from a ``{name: amount}`` mapping (e.g. parsed YAML)."""
        if not data:
            return cls()
        return cls(
            tuple(
                LineItem(str(name), parse_amount(value, f"{field}.{name}"))
                for name, value in data.items()
            )
        )

    @property
    def total(self) -> Decimal:
        return sum((item.amount for item in self.items), ZERO)

    def with_item(self, name: str, amount: Decimal) -> LineItemSet:
        if name in self:
            return LineItemSet(
                tuple(
                    LineItem(name, amount) if item.name == name else item
                    for item in self.items
                )
            )
        return LineItemSet(self.items + (LineItem(name, amount),))

    def get(self, name: str, default: Decimal | None = None) -> Decimal | None:
        for item in self.items:
            if item.name == name:
                return item.amount
        return default

    def as_dict(self) -> dict[str, Decimal]:
        return {item.name: item.amount for item in self.items}

    def __contains__(self, name: object) -> bool:
        return any(item.name == name for item in self.items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
