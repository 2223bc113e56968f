"""
Module: payslip_engines
Responsibility:
    Package entrypoint that re-exports the pure payslip calculators.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payslip_kernel (and sibling engine modules).
    MUST NOT import payslip_config or payslip_services.

Invariants enforced:
    - Decimal-only arithmetic; floats never enter a calculation.
    - Determinism: identical inputs always produce identical outputs.
    - Totality: no calculator raises on well-typed inputs; negative bases,
      zero percentages and zero-width bands degrade to zero.

Audit relevance:
    Every calculator invocation is traced via ``@traced_engine`` (see
    ``payslip_engines.tracer``), emitting PAYSLIP_ENGINE_TRACE records.
"""

from payslip_engines.banded import (
    BandCharge,
    BandedChargeResult,
    BandSchedule,
    RateBand,
    calculate_banded_charge,
)
from payslip_engines.composition import (
    ComposedLine,
    ComposedTotal,
    FeederTerm,
    Sign,
    compose_total,
)
from payslip_engines.contributions import (
    ContributionResult,
    FlatChargeResult,
    calculate_flat_charge,
    calculate_percentage_contribution,
)
from payslip_engines.marginal import MarginalTaxResult, calculate_marginal_tax
from payslip_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "BandCharge",
    "BandSchedule",
    "BandedChargeResult",
    "ComposedLine",
    "ComposedTotal",
    "ContributionResult",
    "FeederTerm",
    "FlatChargeResult",
    "MarginalTaxResult",
    "RateBand",
    "Sign",
    "calculate_banded_charge",
    "calculate_flat_charge",
    "calculate_marginal_tax",
    "calculate_percentage_contribution",
    "compose_total",
    "compute_input_fingerprint",
    "traced_engine",
]
