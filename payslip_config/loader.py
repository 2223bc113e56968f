"""
Configuration Loader (``payslip_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into the typed ``payslip_config.schema``
dataclasses: variant rules (``PayslipRules``) and personal profiles
(``PayslipProfile``). The public entry points for callers are
``payslip_config.get_rules()`` and ``payslip_config.load_profile()``.

Invariants enforced
-------------------
* Required keys are never silently defaulted: an absent key raises
  ``ConfigurationMissingError`` naming the key and the file.
* Amounts and rates are parsed through ``parse_amount`` so YAML numbers
  become exact Decimals (``InvalidAmountError`` otherwise). Profile keys
  that are not decimals are set aside in ``PayslipProfile.unparsed``.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` naming the file.
* Missing required keys  -> ``ConfigurationMissingError``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from payslip_config.schema import (
    ContributionDef,
    IncomeTaxDef,
    InputPromptDef,
    LevyBandDef,
    PayslipProfile,
    PayslipRules,
    PromptGateDef,
    SocialChargeDef,
    UniversalLevyDef,
)
from payslip_engines.composition import FeederTerm
from payslip_kernel.domain.line_items import LineItemSet
from payslip_kernel.domain.payslip import REGULAR_SALARY, CarAllowance
from payslip_kernel.domain.values import parse_amount
from payslip_kernel.exceptions import (
    ConfigurationError,
    ConfigurationMissingError,
    InvalidAmountError,
)
from payslip_kernel.logging_config import get_logger

_logger = get_logger("config.loader")

# Profile keys holding structured values rather than scalar settings.
_PROFILE_STRUCTURED_KEYS = (
    "variant",
    REGULAR_SALARY,
    "car_allowance",
    "salary_sacrifice",
    "benefit_in_kind",
    "misc_deductions",
)
_PROFILE_LINE_ITEM_KEYS = ("salary_sacrifice", "benefit_in_kind", "misc_deductions")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigurationError: if the file does not exist, is not valid YAML
            or is not a mapping.
    """
    if not path.is_file():
        raise ConfigurationError(f"Couldn't find {path}. Does this file exist?")
    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Compute SHA-256 checksum of canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _require(data: Mapping[str, Any], key: str, source: str) -> Any:
    if key not in data or data[key] is None:
        raise ConfigurationMissingError(key, source)
    return data[key]


def parse_terms(values: Any) -> tuple[FeederTerm, ...]:
    """Parse a list of ``"+name"`` / ``"-name"`` strings (or one string)."""
    if isinstance(values, str):
        values = [values]
    return tuple(FeederTerm.parse(v) for v in values)


# ---------------------------------------------------------------------------
# Variant rules
# ---------------------------------------------------------------------------


def parse_income_tax(data: Mapping[str, Any], source: str) -> IncomeTaxDef:
    kwargs: dict[str, Any] = {}
    if "cutoff_key" in data:
        kwargs["cutoff_key"] = str(data["cutoff_key"])
    if "credit_key" in data:
        kwargs["credit_key"] = str(data["credit_key"])
    if "base" in data:
        kwargs["base"] = parse_terms(data["base"])
    return IncomeTaxDef(
        lower_rate=parse_amount(_require(data, "lower_rate", source), "income_tax.lower_rate"),
        higher_rate=parse_amount(_require(data, "higher_rate", source), "income_tax.higher_rate"),
        **kwargs,
    )


def parse_universal_levy(data: Mapping[str, Any], source: str) -> UniversalLevyDef:
    bands = tuple(
        LevyBandDef(
            rate=parse_amount(_require(band, "rate", source), f"universal_levy.bands[{i}].rate"),
            width_key=band.get("width_key"),
        )
        for i, band in enumerate(_require(data, "bands", source))
    )
    if "base" in data:
        return UniversalLevyDef(bands=bands, base=parse_terms(data["base"]))
    return UniversalLevyDef(bands=bands)


def parse_social_charge(data: Mapping[str, Any], source: str) -> SocialChargeDef:
    rate = parse_amount(_require(data, "rate", source), "social_charge.rate")
    if "base" in data:
        return SocialChargeDef(rate=rate, base=parse_terms(data["base"]))
    return SocialChargeDef(rate=rate)


def parse_contribution(data: Mapping[str, Any], source: str) -> ContributionDef:
    return ContributionDef(
        percent_key=str(_require(data, "percent_key", source)),
        base=parse_terms(_require(data, "base", source)),
    )


def parse_prompts(data: list[Mapping[str, Any]], source: str) -> tuple[InputPromptDef, ...]:
    return tuple(
        InputPromptDef(
            key=str(_require(p, "key", source)),
            question=str(_require(p, "question", source)),
            label=str(p.get("label", "")),
            gate=p.get("gate"),
        )
        for p in data
    )


def parse_rules(data: dict[str, Any], source: str = "rules file") -> PayslipRules:
    """
    Parse a ``PayslipRules`` from a dict.

    Preconditions:
        - ``data`` contains ``name``, ``income_tax``, ``universal_levy``,
          ``social_charge``, ``pension``, ``share_purchase`` and
          ``compositions`` with ``gross_income``, ``tax_base`` and
          ``net_income``.
    Raises:
        ConfigurationMissingError: if required keys are missing.
        InvalidAmountError: if a rate is not a decimal.
    """
    compositions = _require(data, "compositions", source)
    gates = data.get("gates") or {}
    return PayslipRules(
        name=str(_require(data, "name", source)),
        description=str(data.get("description", "")),
        income_tax=parse_income_tax(_require(data, "income_tax", source), source),
        universal_levy=parse_universal_levy(_require(data, "universal_levy", source), source),
        social_charge=parse_social_charge(_require(data, "social_charge", source), source),
        pension=parse_contribution(_require(data, "pension", source), source),
        share_purchase=parse_contribution(_require(data, "share_purchase", source), source),
        gross_income=parse_terms(_require(compositions, "gross_income", source)),
        tax_base=parse_terms(_require(compositions, "tax_base", source)),
        net_income=parse_terms(_require(compositions, "net_income", source)),
        prompts=parse_prompts(data.get("prompts") or [], source),
        gates=tuple(PromptGateDef(name=str(k), question=str(v)) for k, v in gates.items()),
        labels={str(k): str(v) for k, v in (data.get("labels") or {}).items()},
        checksum=compute_checksum(data),
    )


def load_rules(path: Path) -> PayslipRules:
    """Load and parse a variant rules file."""
    return parse_rules(load_yaml_file(path), source=str(path))


# ---------------------------------------------------------------------------
# Personal profile
# ---------------------------------------------------------------------------


def parse_profile(
    data: dict[str, Any],
    source: str = "config file",
    default_variant: str | None = None,
) -> PayslipProfile:
    """
    Parse a ``PayslipProfile`` from a dict.

    Every key other than the structured ones is a scalar setting
    (percentages, band widths, cutoff, tax credit). Values that are not
    decimals, such as ``name: Jane``, go to ``unparsed`` with a warning;
    ``validate_profile`` rejects them if the rules read that key.
    Which settings are required depends on the variant; see
    ``payslip_config.validator.validate_profile``.

    Raises:
        ConfigurationMissingError: salary, car allowance or a line-item
            section is absent.
        InvalidAmountError: the salary or a line item is not a decimal.
    """
    variant = data.get("variant") or default_variant
    if variant is None:
        raise ConfigurationMissingError("variant", source)

    for key in _PROFILE_LINE_ITEM_KEYS + ("car_allowance",):
        if key not in data:
            raise ConfigurationMissingError(key, source)

    settings: dict[str, Decimal] = {}
    unparsed: dict[str, Any] = {}
    for key, value in data.items():
        if key in _PROFILE_STRUCTURED_KEYS or value is None:
            continue
        try:
            settings[str(key)] = parse_amount(value, str(key))
        except InvalidAmountError:
            unparsed[str(key)] = value
            _logger.warning("profile_key_ignored", extra={"key": str(key), "source": source})

    return PayslipProfile(
        variant=str(variant),
        regular_salary=parse_amount(_require(data, REGULAR_SALARY, source), REGULAR_SALARY),
        car_allowance=CarAllowance.from_config(data.get("car_allowance")),
        salary_sacrifice=LineItemSet.from_mapping(data.get("salary_sacrifice"), "salary_sacrifice"),
        benefit_in_kind=LineItemSet.from_mapping(data.get("benefit_in_kind"), "benefit_in_kind"),
        misc_deductions=LineItemSet.from_mapping(data.get("misc_deductions"), "misc_deductions"),
        settings=settings,
        unparsed=unparsed,
        source=source,
        checksum=compute_checksum(data),
    )


def load_profile_file(path: Path, default_variant: str | None = None) -> PayslipProfile:
    """Load and parse a personal ``payslip_config.yml``."""
    return parse_profile(load_yaml_file(path), source=str(path), default_variant=default_variant)
