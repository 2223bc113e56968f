"""
Values -- exact-decimal helpers for payslip amounts.

Responsibility:
    Parsing raw values into ``Decimal``, rounding reported totals, and
    rendering amounts and rates in plain notation. Every amount in the
    system is a ``Decimal``; floats never take part in arithmetic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Parsing goes through ``str()`` so a YAML float such as ``3000.1`` becomes
      ``Decimal("3000.1")``, never its binary approximation.
    - Rounding is half-up to two places and only happens where a caller
      reports a final total.

Failure modes:
    - InvalidAmountError when a value is not a finite decimal.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation, localcontext
from typing import Any

from payslip_kernel.exceptions import InvalidAmountError

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Convert a raw value into an exact ``Decimal``.

    Preconditions:
        - ``value`` is a Decimal, int, float, or numeric string.

    Postconditions:
        - Returns a finite Decimal equal to the decimal text of ``value``.

    Raises:
        InvalidAmountError: for booleans, None, non-numeric text, NaN or
        infinities.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(field, value)
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmountError(field, value) from e
    if not amount.is_finite():
        raise InvalidAmountError(field, value)
    return amount


def round_amount(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up (``X.005`` -> ``X.01``).

    Works for any finite magnitude; precision is widened to fit the result.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _digit_span(value: Decimal) -> int:
    """Digits from the most significant place down to the last fractional one."""
    return max(value.adjusted(), 0) - min(value.as_tuple().exponent, 0) + 1


@contextmanager
def exact_arithmetic(*operands: Decimal) -> Iterator[Context]:
    """
    Decimal context wide enough that sums and pairwise products of
    ``operands`` are exact.

    The default 28-digit context would round (or refuse to quantize)
    amounts from about 10**26 upwards.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, sum(_digit_span(v) for v in operands) + 4)
        yield ctx


def format_amount(value: Decimal) -> str:
    """Render an amount in plain notation, keeping its exponent."""
    return format(value, "f")


def format_number(value: Decimal) -> str:
    """Render a value without trailing zeros (``20.00`` -> ``20``)."""
    if value == ZERO:
        return "0"
    return format(value.normalize(), "f")


def format_percent(rate: Decimal) -> str:
    """Render a fractional rate as a percentage (``0.045`` -> ``4.5%``)."""
    return f"{format_number(rate * HUNDRED)}%"
