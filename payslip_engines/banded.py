"""
Banded Charge Engine - marginal charge over an ordered band schedule.

Pure functions with no I/O. Each band is a fixed-width slice of the
taxable amount charged at one marginal rate; the last band is unbounded.

Usage:
    from decimal import Decimal
    from payslip_engines.banded import BandSchedule, RateBand, calculate_banded_charge

    schedule = BandSchedule.of(
        RateBand(width=Decimal("1000"), rate=Decimal("0.02")),
        RateBand(width=None, rate=Decimal("0.04")),
    )
    result = calculate_banded_charge(taxable_amount=Decimal("1500"), schedule=schedule)
    print(result.total_owed)  # Decimal("40.00")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payslip_engines.tracer import traced_engine
from payslip_kernel.domain.values import ZERO, exact_arithmetic, round_amount
from payslip_kernel.exceptions import InvalidBandScheduleError
from payslip_kernel.logging_config import get_logger

logger = get_logger("engines.banded")

ONE = Decimal("1")


@dataclass(frozen=True, slots=True)
class RateBand:
    """
    One band of a schedule.

    ``width`` is None for the unbounded top band.
    """

    width: Decimal | None
    rate: Decimal  # As decimal (e.g., 0.045 for 4.5%)

    def __post_init__(self) -> None:
        if self.rate < ZERO or self.rate > ONE:
            raise InvalidBandScheduleError(f"rate {self.rate} outside [0, 1]")
        if self.width is not None and self.width < ZERO:
            raise InvalidBandScheduleError(f"negative band width {self.width}")

    @property
    def is_unbounded(self) -> bool:
        return self.width is None


@dataclass(frozen=True, slots=True)
class BandSchedule:
    """
    Ordered rate bands, consumed strictly in sequence.

    Guarantees:
        - At least one band.
        - All but the last band have a finite width; the last is unbounded.
    """

    bands: tuple[RateBand, ...]

    def __post_init__(self) -> None:
        if not self.bands:
            raise InvalidBandScheduleError("schedule has no bands")
        for band in self.bands[:-1]:
            if band.is_unbounded:
                raise InvalidBandScheduleError("only the last band may be unbounded")
        if not self.bands[-1].is_unbounded:
            raise InvalidBandScheduleError("the last band must be unbounded")

    @classmethod
    def of(cls, *bands: RateBand) -> BandSchedule:
        return cls(tuple(bands))

    @property
    def finite_capacity(self) -> Decimal:
        """Sum of the widths of every bounded band."""
        return sum((band.width for band in self.bands[:-1]), ZERO)

    def __len__(self) -> int:
        return len(self.bands)


@dataclass(frozen=True, slots=True)
class BandCharge:
    """Chargeable slice and unrounded amount owed for one band."""

    chargeable: Decimal
    rate: Decimal
    owed: Decimal


@dataclass(frozen=True, slots=True)
class BandedChargeResult:
    """Per-band breakdown and rounded total of a banded charge."""

    taxable_amount: Decimal
    bands: tuple[BandCharge, ...]
    total_owed: Decimal

    @property
    def total_chargeable(self) -> Decimal:
        chargeable = [band.chargeable for band in self.bands]
        with exact_arithmetic(*chargeable):
            return sum(chargeable, ZERO)

    @property
    def unrounded_owed(self) -> Decimal:
        owed = [band.owed for band in self.bands]
        with exact_arithmetic(*owed):
            return sum(owed, ZERO)


@traced_engine(
    "banded_charge", "1.0",
    fingerprint_fields=("taxable_amount", "schedule"),
    result_field="total_owed",
)
def calculate_banded_charge(
    *,
    taxable_amount: Decimal,
    schedule: BandSchedule,
) -> BandedChargeResult:
    """
    Charge ``taxable_amount`` across ``schedule``.

    The consumed threshold advances by each bounded band's nominal width,
    whether or not the taxable amount filled it. Owed amounts stay exact;
    only the total is rounded (half-up, 2dp).

    Postconditions:
        - taxable_amount <= 0 gives zero chargeable and zero owed in every band.
        - sum(chargeable) == min(taxable_amount, finite capacity) otherwise,
          plus whatever spills into the unbounded band.
    """
    bounded = schedule.bands[:-1]
    top = schedule.bands[-1]
    already_consumed = ZERO
    charges: list[BandCharge] = []

    with exact_arithmetic(
        taxable_amount,
        *(band.width for band in bounded),
        *(band.rate for band in schedule.bands),
    ):
        for band in bounded:
            if taxable_amount > already_consumed:
                chargeable = max(ZERO, min(band.width, taxable_amount - already_consumed))
            else:
                chargeable = ZERO
            already_consumed += band.width
            charges.append(BandCharge(chargeable, band.rate, chargeable * band.rate))

        chargeable = max(ZERO, taxable_amount - already_consumed)
        charges.append(BandCharge(chargeable, top.rate, chargeable * top.rate))

        total_owed = round_amount(sum((c.owed for c in charges), ZERO))

    logger.debug("banded_charge_calculated", extra={
        "taxable_amount": str(taxable_amount),
        "band_count": len(charges),
        "total_owed": str(total_owed),
    })

    return BandedChargeResult(
        taxable_amount=taxable_amount,
        bands=tuple(charges),
        total_owed=total_owed,
    )
