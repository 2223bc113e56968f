"""
payslip_engines.tracer -- One PAYSLIP_ENGINE_TRACE record per calculator call.

Every calculator in this package is a pure keyword-only function. Wrapping
it with ``@traced_engine`` logs which calculator ran, a fingerprint of the
inputs that decide its answer, the headline figure it produced and how
long it took. Replaying a run from the log is a matter of matching
fingerprints.

Fingerprints:
    Built from the named keyword arguments only. Decimals keep their exact
    text (``3000`` and ``3000.00`` fingerprint differently, as they print
    differently in the report). Frozen dataclasses such as ``BandSchedule``
    are expanded field by field, so two equal schedules always agree.

Usage:
    @traced_engine(
        "flat_charge", "1.0",
        fingerprint_fields=("base", "rate"),
        result_field="owed",
    )
    def calculate_flat_charge(*, base, rate):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from payslip_kernel.logging_config import get_logger

logger = get_logger("engines.tracer")

TRACE_TYPE = "PAYSLIP_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonical(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        body = ",".join(
            f"{f.name}={_canonical(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({body})"
    if isinstance(value, Mapping):
        return "{" + ",".join(
            f"{k}:{_canonical(v)}" for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))
        ) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """SHA-256 prefix over ``name=value`` pairs; an absent field counts as null."""
    text = "|".join(f"{name}={_canonical(kwargs.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
    result_field: str | None = None,
) -> Callable:
    """
    Decorate a calculator so each call logs a trace record.

    Args:
        engine_name: Calculator identifier, e.g. ``"banded_charge"``.
        engine_version: Bumped whenever the arithmetic changes.
        fingerprint_fields: Keyword arguments that determine the answer.
        result_field: Attribute of the result logged as ``result``
            (e.g. ``"total_owed"``).
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs)
                if fingerprint_fields else ""
            )
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 3)

            extra: dict[str, Any] = {
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": elapsed_ms,
            }
            if result_field is not None:
                extra["result"] = str(getattr(result, result_field))
            logger.info(TRACE_TYPE, extra=extra)
            return result

        return wrapper

    return decorator
