"""
Structured JSON logging for the estimation packages.

Responsibility:
    Every engine, the policy loader and the estimation service log through
    ``get_logger(name)``; records leave the process as one JSON object per
    line so an estimate can be reconstructed from its log trail
    (``metrics_calculated``, ``team_size_estimated``, ``FPA_ENGINE_TRACE``
    and so on).

Architecture position:
    Kernel -- imported by every layer.  No outward dependencies.

Invariants enforced:
    - Every line carries ``ts``, ``level``, ``logger`` and ``message``.
    - Estimate-scoped fields bound through ``LogContext`` appear on every
      record emitted while they are bound, including records from engines
      that know nothing about the estimate.
    - ``configure_logging`` installs at most one handler per process until
      ``reset_logging`` is called.

Failure modes:
    - Values the encoder cannot serialise are logged through ``str()``;
      formatting never raises.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

__all__ = [
    "CONTEXT_FIELDS",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

ROOT_LOGGER_NAME = "fpa_kernel"

# Estimate-scoped fields propagated through LogContext
CONTEXT_FIELDS = (
    "correlation_id",
    "estimate_id",
    "estimate_version",
    "policy_name",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"fpa_log_{name}", default=None) for name in CONTEXT_FIELDS
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _context_vars[name]
    except KeyError:
        raise ValueError(
            f"Unknown log context field '{name}'; expected one of {', '.join(CONTEXT_FIELDS)}"
        ) from None


class LogContext:
    """
    Estimate-scoped log fields held in context variables.

    Safe across threads and asyncio tasks: each carries its own copy.
    """

    @staticmethod
    def set(**fields: Any) -> None:
        """Set the given fields; None values are left untouched."""
        for name, value in fields.items():
            if value is not None:
                _context_var(name).set(str(value))

    @staticmethod
    def get_all() -> dict[str, str]:
        """Every field that currently has a value."""
        return {
            name: var.get()
            for name, var in _context_vars.items()
            if var.get() is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """
        Bind fields for the duration of a ``with`` block.

        Previous values are restored on exit, even when the block raises.
        """
        tokens = [
            (_context_var(name), _context_var(name).set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, datetime)):
        return str(value) if isinstance(value, UUID) else value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k.value if isinstance(k, Enum) else k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(v) for v in value]
    return value


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Structured attributes of kernel exceptions (kind, field, problems, ...)
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, bound context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for name, value in vars(record).items():
            if name not in _RECORD_ATTRIBUTES and name not in payload:
                payload[name] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(_to_jsonable(payload), default=str)


def get_logger(name: str) -> logging.Logger:
    """Logger ``fpa_kernel.<name>``, e.g. ``get_logger("engines.effort")``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a StructuredFormatter handler to the ``fpa_kernel`` logger.

    Idempotent: later calls are ignored until ``reset_logging``.  ``level``
    accepts a logging constant or its name ("DEBUG").
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                level = logging.INFO

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.propagate = False

        target = handler or logging.StreamHandler(stream or sys.stderr)
        target.setFormatter(StructuredFormatter())
        root.addHandler(target)


def reset_logging() -> None:
    """Remove handlers and restore defaults. Tests only."""
    global _configured
    with _lock:
        _configured = False
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for existing in list(root.handlers):
            root.removeHandler(existing)
        root.setLevel(logging.WARNING)
        root.propagate = True
