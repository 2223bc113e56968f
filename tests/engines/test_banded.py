"""
Tests for the banded charge engine.

Covers:
- Two-band and four-band schedules
- Taxable amounts at, below and beyond the finite capacity
- Zero and negative taxable amounts
- Zero-width bands
- Nominal-width threshold advance
- Schedule validation
"""

from decimal import Decimal

import pytest

from payslip_engines.banded import (
    BandSchedule,
    RateBand,
    calculate_banded_charge,
)
from payslip_kernel.exceptions import InvalidBandScheduleError


def _two_band() -> BandSchedule:
    return BandSchedule.of(
        RateBand(width=Decimal("1000"), rate=Decimal("0.02")),
        RateBand(width=None, rate=Decimal("0.04")),
    )


def _usc_2019() -> BandSchedule:
    return BandSchedule.of(
        RateBand(width=Decimal("1001"), rate=Decimal("0.005")),
        RateBand(width=Decimal("670.42"), rate=Decimal("0.02")),
        RateBand(width=Decimal("5740"), rate=Decimal("0.045")),
        RateBand(width=None, rate=Decimal("0.08")),
    )


class TestTwoBandSchedule:
    """A bounded 2% band followed by an unbounded 4% band."""

    def setup_method(self):
        self.schedule = _two_band()

    def test_spills_into_top_band(self):
        """1500 charges 1000 at 2% and 500 at 4%."""
        result = calculate_banded_charge(taxable_amount=Decimal("1500"), schedule=self.schedule)

        assert [b.chargeable for b in result.bands] == [Decimal("1000"), Decimal("500")]
        assert [b.owed for b in result.bands] == [Decimal("20.00"), Decimal("20.00")]
        assert result.total_owed == Decimal("40.00")

    def test_within_first_band(self):
        result = calculate_banded_charge(taxable_amount=Decimal("400"), schedule=self.schedule)

        assert [b.chargeable for b in result.bands] == [Decimal("400"), Decimal("0")]
        assert result.total_owed == Decimal("8.00")

    def test_exactly_at_boundary(self):
        result = calculate_banded_charge(taxable_amount=Decimal("1000"), schedule=self.schedule)

        assert [b.chargeable for b in result.bands] == [Decimal("1000"), Decimal("0")]
        assert result.total_owed == Decimal("20.00")

    def test_rates_carried_per_band(self):
        result = calculate_banded_charge(taxable_amount=Decimal("1500"), schedule=self.schedule)

        assert [b.rate for b in result.bands] == [Decimal("0.02"), Decimal("0.04")]

    def test_taxable_amount_recorded(self):
        result = calculate_banded_charge(taxable_amount=Decimal("1500"), schedule=self.schedule)

        assert result.taxable_amount == Decimal("1500")
        assert result.total_chargeable == Decimal("1500")


class TestNonPositiveTaxable:
    """Zero and negative taxable amounts charge nothing in any band."""

    def setup_method(self):
        self.schedule = _usc_2019()

    @pytest.mark.parametrize("taxable", ["0", "-1", "-2500.75"])
    def test_all_bands_zero(self, taxable):
        result = calculate_banded_charge(taxable_amount=Decimal(taxable), schedule=self.schedule)

        assert len(result.bands) == 4
        for band in result.bands:
            assert band.chargeable == Decimal("0")
            assert band.owed == Decimal("0")
        assert result.total_owed == Decimal("0.00")


class TestFourBandSchedule:
    """The ie_2019 universal levy shape."""

    def setup_method(self):
        self.schedule = _usc_2019()

    def test_reaches_top_band(self):
        """10000 fills all three bounded bands and puts the rest at 8%."""
        result = calculate_banded_charge(taxable_amount=Decimal("10000"), schedule=self.schedule)

        assert [b.chargeable for b in result.bands] == [
            Decimal("1001"),
            Decimal("670.42"),
            Decimal("5740"),
            Decimal("2588.58"),
        ]
        # 5.005 + 13.4084 + 258.300 + 207.0864
        assert result.unrounded_owed == Decimal("483.7998")
        assert result.total_owed == Decimal("483.80")

    def test_owed_per_band_is_not_rounded(self):
        result = calculate_banded_charge(taxable_amount=Decimal("1001"), schedule=self.schedule)

        assert result.bands[0].owed == Decimal("5.005")
        assert result.total_owed == Decimal("5.01")

    def test_finite_capacity(self):
        assert self.schedule.finite_capacity == Decimal("7411.42")
        assert len(self.schedule) == 4


class TestZeroWidthBands:
    """Zero-width bands are legal and simply charge nothing."""

    def test_zero_width_band_skipped(self):
        schedule = BandSchedule.of(
            RateBand(width=Decimal("0"), rate=Decimal("0.005")),
            RateBand(width=Decimal("500"), rate=Decimal("0.02")),
            RateBand(width=None, rate=Decimal("0.08")),
        )
        result = calculate_banded_charge(taxable_amount=Decimal("800"), schedule=schedule)

        assert [b.chargeable for b in result.bands] == [
            Decimal("0"),
            Decimal("500"),
            Decimal("300"),
        ]
        assert result.total_owed == Decimal("34.00")

    def test_all_bounded_bands_zero_width(self):
        schedule = BandSchedule.of(
            RateBand(width=Decimal("0"), rate=Decimal("0.02")),
            RateBand(width=None, rate=Decimal("0.04")),
        )
        result = calculate_banded_charge(taxable_amount=Decimal("100"), schedule=schedule)

        assert result.bands[-1].chargeable == Decimal("100")
        assert result.total_owed == Decimal("4.00")


class TestNominalWidthAdvance:
    """The consumed threshold advances by each band's full width."""

    def test_later_bands_read_zero_when_amount_is_small(self):
        schedule = _usc_2019()
        result = calculate_banded_charge(taxable_amount=Decimal("300"), schedule=schedule)

        assert [b.chargeable for b in result.bands] == [
            Decimal("300"),
            Decimal("0"),
            Decimal("0"),
            Decimal("0"),
        ]

    def test_partial_middle_band(self):
        schedule = _usc_2019()
        result = calculate_banded_charge(taxable_amount=Decimal("1200"), schedule=schedule)

        assert [b.chargeable for b in result.bands] == [
            Decimal("1001"),
            Decimal("199"),
            Decimal("0"),
            Decimal("0"),
        ]


class TestScheduleValidation:
    """A schedule must end in exactly one unbounded band."""

    def test_empty_schedule_rejected(self):
        with pytest.raises(InvalidBandScheduleError, match="no bands"):
            BandSchedule(())

    def test_bounded_last_band_rejected(self):
        with pytest.raises(InvalidBandScheduleError, match="must be unbounded"):
            BandSchedule.of(RateBand(width=Decimal("100"), rate=Decimal("0.02")))

    def test_unbounded_middle_band_rejected(self):
        with pytest.raises(InvalidBandScheduleError, match="only the last"):
            BandSchedule.of(
                RateBand(width=None, rate=Decimal("0.02")),
                RateBand(width=None, rate=Decimal("0.04")),
            )

    def test_negative_width_rejected(self):
        with pytest.raises(InvalidBandScheduleError, match="negative"):
            RateBand(width=Decimal("-1"), rate=Decimal("0.02"))

    @pytest.mark.parametrize("rate", ["-0.01", "1.01"])
    def test_rate_outside_unit_interval_rejected(self, rate):
        with pytest.raises(InvalidBandScheduleError) as exc_info:
            RateBand(width=None, rate=Decimal(rate))
        assert exc_info.value.code == "INVALID_BAND_SCHEDULE"

    def test_single_unbounded_band_is_flat(self):
        schedule = BandSchedule.of(RateBand(width=None, rate=Decimal("0.04")))
        result = calculate_banded_charge(taxable_amount=Decimal("2500"), schedule=schedule)

        assert result.total_owed == Decimal("100.00")


class TestVeryLargeAmounts:
    """Finite amounts beyond the default 28-digit context still charge exactly."""

    def test_taxable_of_ten_to_the_thirty(self):
        schedule = BandSchedule.of(
            RateBand(width=Decimal("1000"), rate=Decimal("0.02")),
            RateBand(width=None, rate=Decimal("0.04")),
        )
        result = calculate_banded_charge(taxable_amount=Decimal("1e30"), schedule=schedule)

        assert result.bands[0].owed == Decimal("20.00")
        assert result.total_chargeable == Decimal("1e30")
        assert result.total_owed == Decimal(4 * 10**28 - 20)
        assert result.total_owed.as_tuple().exponent == -2

    def test_fractional_width_keeps_cents(self):
        schedule = BandSchedule.of(
            RateBand(width=Decimal("670.42"), rate=Decimal("0.005")),
            RateBand(width=None, rate=Decimal("0.08")),
        )
        taxable = Decimal("1" + "0" * 27 + ".01")  # 10**27 + 0.01
        result = calculate_banded_charge(taxable_amount=taxable, schedule=schedule)

        # 3.35210 + (10**27 - 670.41) * 0.08
        assert result.total_chargeable == taxable
        assert result.unrounded_owed == Decimal("7" + "9" * 23 + "49.7193")
        assert result.total_owed == Decimal("7" + "9" * 23 + "49.72")
