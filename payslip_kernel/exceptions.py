"""
Typed Exception Hierarchy for the payslip kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from PayslipError:

    PayslipError (base)
    |
    +-- ConfigurationError
    |   +-- ConfigurationMissingError
    |   +-- InvalidCompositionError
    |   +-- InvalidBandScheduleError
    |   +-- UnknownVariantError
    |
    +-- InputError
    |   +-- InvalidAmountError
    |
    +-- VersionCheckError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_MISSING       | Required width, rate or percent absent
                | INVALID_COMPOSITION         | Feeder term unknown at its stage
                | INVALID_BAND_SCHEDULE       | Bounded last band / unbounded inner band
                | UNKNOWN_VARIANT             | No rules file for the requested variant
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_AMOUNT              | Value not parseable as an exact decimal
----------------|-----------------------------|-----------------------------------------
Version check   | VERSION_CHECK_FAILED        | Version file unreachable or unreadable
----------------|-----------------------------|-----------------------------------------

===============================================================================
HANDLING PATTERNS
===============================================================================

Configuration and input errors are detected once, at the boundary, before
the pipeline runs. They are not transient: never retry them.

    try:
        result = PayslipPipeline(rules).run(inputs)
    except ConfigurationMissingError as e:
        abort(f"Did not find {e.key} in {e.source}")

The calculation engines themselves never raise on well-typed inputs.
"""

from __future__ import annotations

from typing import Any


class PayslipError(Exception):
    """
    Base exception for all payslip errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYSLIP_ERROR"


# Configuration exceptions


class ConfigurationError(PayslipError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigurationMissingError(ConfigurationError):
    """A required band width, rate, or percent is absent."""

    code: str = "CONFIGURATION_MISSING"

    def __init__(self, key: str, source: str = "config file"):
        self.key = key
        self.source = source
        super().__init__(f"Did not find {key} in {source}")


class InvalidCompositionError(ConfigurationError):
    """
    A composition references a term that is not available at its stage.

    Pipeline stages run in a fixed order; a composition may only read raw
    inputs and the outputs of stages committed before it.
    """

    code: str = "INVALID_COMPOSITION"

    def __init__(self, composition: str, term: str, available: list[str] | None = None):
        self.composition = composition
        self.term = term
        self.available = available or []
        super().__init__(
            f"Composition {composition!r} references unknown term {term!r}"
        )


class InvalidBandScheduleError(ConfigurationError):
    """A band schedule does not have the bounded-then-unbounded shape."""

    code: str = "INVALID_BAND_SCHEDULE"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid band schedule: {reason}")


class UnknownVariantError(ConfigurationError):
    """No rules are defined for the requested jurisdiction variant."""

    code: str = "UNKNOWN_VARIANT"

    def __init__(self, variant: str, available: list[str]):
        self.variant = variant
        self.available = available
        super().__init__(
            f"Unknown payslip variant {variant!r} "
            f"(available: {', '.join(available) or 'none'})"
        )


# Input exceptions


class InputError(PayslipError):
    """Base exception for raw input errors."""

    code: str = "INPUT_ERROR"


class InvalidAmountError(InputError):
    """A supplied amount is not parseable as an exact decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Invalid amount for {field}: {value!r}")


# Version check


class VersionCheckError(PayslipError):
    """The published version file could not be fetched or parsed."""

    code: str = "VERSION_CHECK_FAILED"

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Couldn't check for latest version at {url}: {reason}")
