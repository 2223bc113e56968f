"""
payslip_config -- single public entrypoint for payslip configuration.

Responsibility:
    Provides the ways to obtain configuration at runtime:
    ``get_rules()`` for a jurisdiction variant shipped under ``sets/`` and
    ``load_profile()`` for a person's ``payslip_config.yml``. Services and
    the CLI never read YAML files directly.

Architecture position:
    Configuration -- YAML-driven rules, validated before use.
    This package sits above ``payslip_kernel`` / ``payslip_engines`` and
    below ``payslip_services``.

Invariants enforced:
    - Rules returned by ``get_rules()`` have passed ``validate_rules``.
    - Deterministic parsing: the same YAML always yields the same rules
      checksum.

Failure modes:
    - ``UnknownVariantError`` -- no rules file for the requested variant.
    - ``ConfigurationError`` -- missing file or failed validation.
    - ``ConfigurationMissingError`` -- a required key is absent.

Audit relevance:
    Every successful ``get_rules()`` call emits a ``PAYSLIP_CONFIG_TRACE``
    log entry with the variant name and checksum, tying each computed
    payslip back to the exact rules that produced it.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from payslip_config.loader import load_profile_file, load_rules
from payslip_config.schema import PayslipProfile, PayslipRules
from payslip_config.validator import (
    ConfigValidationResult,
    validate_inputs,
    validate_profile,
    validate_rules,
)
from payslip_kernel.exceptions import UnknownVariantError
from payslip_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default rules sets directory
SETS_DIR = Path(__file__).parent / "sets"

DEFAULT_VARIANT = "ie_2019"

__all__ = [
    "DEFAULT_VARIANT",
    "SETS_DIR",
    "ConfigValidationResult",
    "PayslipProfile",
    "PayslipRules",
    "available_variants",
    "get_rules",
    "load_profile",
    "validate_inputs",
    "validate_profile",
    "validate_rules",
]


def available_variants(sets_dir: Path | None = None) -> list[str]:
    """Names of the variants with a rules file in ``sets_dir``."""
    sets_dir = sets_dir or SETS_DIR
    if not sets_dir.is_dir():
        return []
    return sorted(p.stem for p in sets_dir.glob("*.yaml"))


def get_rules(variant: str = DEFAULT_VARIANT, sets_dir: Path | None = None) -> PayslipRules:
    """Load and validate the rules for ``variant``.

    Guarantees:
        - The returned rules have passed ``validate_rules``.
        - A ``PAYSLIP_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Args:
        variant: Variant name, the stem of a file under ``sets/``.
        sets_dir: Override path to the rules directory.

    Raises:
        UnknownVariantError: no rules file named ``<variant>.yaml``.
        ConfigurationError: the rules failed validation.
    """
    sets_dir = sets_dir or SETS_DIR
    path = sets_dir / f"{variant}.yaml"
    if not path.is_file():
        raise UnknownVariantError(variant, available_variants(sets_dir))

    rules = load_rules(path)

    validation = validate_rules(rules)
    for warning in validation.warnings:
        _logger.warning("config_warning", extra={"variant": rules.name, "warning": warning})
    validation.raise_for_errors()

    _logger.info(
        "PAYSLIP_CONFIG_TRACE",
        extra={
            "trace_type": "PAYSLIP_CONFIG_TRACE",
            "rules_name": rules.name,
            "rules_path": str(path),
            "checksum": rules.checksum,
            "prompt_count": len(rules.prompts),
            "levy_band_count": len(rules.universal_levy.bands),
        },
    )
    return rules


def load_profile(path: Path, variant_override: str | None = None) -> PayslipProfile:
    """Load a personal ``payslip_config.yml``.

    ``variant_override`` (e.g. from the command line) wins over the
    file's ``variant`` key; a file without one gets ``DEFAULT_VARIANT``.

    Raises:
        ConfigurationError: the file does not exist.
        ConfigurationMissingError: a required key is absent.
    """
    profile = load_profile_file(Path(path), default_variant=DEFAULT_VARIANT)
    if variant_override is not None and variant_override != profile.variant:
        profile = replace(profile, variant=variant_override)
    _logger.info(
        "profile_loaded",
        extra={"config_path": profile.source, "variant": profile.variant},
    )
    return profile
