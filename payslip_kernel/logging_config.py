"""
Structured JSON logging for the payslip explainer.

Every record is one JSON object per line with ``ts``, ``level``, ``logger``
and ``message``, followed by the run context (``run_id``, ``variant``,
``config_path``) and any ``extra`` fields. Amounts are logged as exact
decimal strings.

All loggers live under the ``payslip_kernel`` namespace; ``get_logger``
hands out children of it and ``configure_logging`` attaches the single
handler. The CLI writes to ``logs/explain_payslip.log`` via
``configure_file_logging``; tests attach a stream handler.
"""

__all__ = [
    "FlushingFileHandler",
    "LogContext",
    "StructuredFormatter",
    "configure_file_logging",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any
from uuid import UUID

ROOT_LOGGER_NAME = "payslip_kernel"

# ---------------------------------------------------------------------------
# Run context
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("run_id", "variant", "config_path")

_EMPTY: MappingProxyType = MappingProxyType({})
_context: ContextVar[MappingProxyType] = ContextVar("payslip_log_context", default=_EMPTY)


class LogContext:
    """
    Run-scoped fields stamped onto every record.

    Only ``run_id``, ``variant`` and ``config_path`` are carried; anything
    else passed to ``bind`` is dropped.
    """

    @staticmethod
    def _merged(fields: dict[str, str | None]) -> MappingProxyType:
        current = dict(_context.get())
        for name, value in fields.items():
            if name in _CONTEXT_FIELDS and value is not None:
                current[name] = value
        return MappingProxyType(current)

    @classmethod
    def set(
        cls,
        *,
        run_id: str | None = None,
        variant: str | None = None,
        config_path: str | None = None,
    ) -> None:
        """Update the given fields; None leaves a field unchanged."""
        _context.set(cls._merged(
            {"run_id": run_id, "variant": variant, "config_path": config_path}
        ))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {name: _context.get()[name] for name in _CONTEXT_FIELDS if name in _context.get()}

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    def bind(cls, **fields: str | None) -> "_BoundContext":
        """``with LogContext.bind(variant="ie_2019"):`` restores on exit."""
        return _BoundContext(cls._merged(fields))


class _BoundContext:
    def __init__(self, context: MappingProxyType):
        self._context = context
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(self._context)
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _context.reset(self._token)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return format(obj, "f")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (UUID, Path)):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # PayslipError subclasses keep their details as attributes
        for name, value in vars(exc).items():
            if not name.startswith("_"):
                fields[f"exc_{name}"] = value
        return fields


# ---------------------------------------------------------------------------
# Handlers and setup
# ---------------------------------------------------------------------------


class FlushingFileHandler(logging.FileHandler):
    """Appends and flushes each record so the log can be tailed mid-run."""

    def __init__(self, path: Path):
        super().__init__(str(path), mode="a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.flush()


def get_logger(name: str) -> logging.Logger:
    """``get_logger("services.pipeline")`` -> ``payslip_kernel.services.pipeline``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the payslip_kernel tree. Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(target)


def configure_file_logging(log_dir: Path, file_name: str, level: int = logging.DEBUG) -> Path:
    """Log to ``log_dir/file_name``, creating the directory. Returns the path."""
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / file_name
    handler = FlushingFileHandler(path)
    handler.setLevel(level)
    configure_logging(level=level, handler=handler)
    return path


def reset_logging() -> None:
    """Detach and close handlers so the next configure_logging call applies. Tests only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)
    root.propagate = True
