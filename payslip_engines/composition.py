"""
Composition Engine - signed sums of named feeder terms.

Gross income, the tax base, the contribution bases and net income are all
compositions: an ordered list of ``+term`` / ``-term`` entries resolved
against the values committed so far. Which terms feed which total is
variant data; this module only evaluates it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import IntEnum

from payslip_kernel.domain.values import ZERO, exact_arithmetic
from payslip_kernel.exceptions import InvalidCompositionError


class Sign(IntEnum):
    PLUS = 1
    MINUS = -1

    @property
    def symbol(self) -> str:
        return "+" if self is Sign.PLUS else "-"


@dataclass(frozen=True, slots=True)
class FeederTerm:
    """One named, signed input to a composed total."""

    name: str
    sign: Sign = Sign.PLUS

    @classmethod
    def parse(cls, text: str) -> FeederTerm:
        """Parse ``"+gross_income"`` / ``"-pension_contribution"`` / ``"refund"``."""
        raw = str(text).strip()
        if raw.startswith("-"):
            return cls(raw[1:].strip(), Sign.MINUS)
        if raw.startswith("+"):
            return cls(raw[1:].strip(), Sign.PLUS)
        return cls(raw, Sign.PLUS)

    def __str__(self) -> str:
        return f"{self.sign.symbol}{self.name}"


@dataclass(frozen=True, slots=True)
class ComposedLine:
    term: FeederTerm
    amount: Decimal

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.term.sign is Sign.PLUS else -self.amount


@dataclass(frozen=True, slots=True)
class ComposedTotal:
    """An exact, unrounded composed total with the lines that produced it."""

    name: str
    lines: tuple[ComposedLine, ...]
    total: Decimal


def compose_total(
    name: str,
    terms: Sequence[FeederTerm],
    values: Mapping[str, Decimal],
) -> ComposedTotal:
    """
    Evaluate ``terms`` against ``values``.

    Raises:
        InvalidCompositionError: a term has no committed value.
    """
    lines: list[ComposedLine] = []
    for term in terms:
        if term.name not in values:
            raise InvalidCompositionError(name, term.name, sorted(values))
        lines.append(ComposedLine(term, values[term.name]))

    total = ZERO
    with exact_arithmetic(*(line.amount for line in lines)):
        for line in lines:
            total += line.signed_amount
    return ComposedTotal(name=name, lines=tuple(lines), total=total)
