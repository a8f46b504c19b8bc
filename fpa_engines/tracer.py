"""
fpa_engines.tracer -- FPA_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps an engine entry point (classify, calculate
    metrics, estimate team size, assess risk, analyze trend) and emits one
    INFO record per successful call carrying the engine name and version,
    a fingerprint of the chosen inputs, and the elapsed time.  Two calls
    with the same fingerprint and version must have produced the same
    result, which lets an estimate be audited from its log trail alone.

Architecture position:
    Engines -- support module.  Emits log records only; engines stay pure.

Invariants enforced:
    - ``canonical_form`` is stable across processes: mappings are sorted
      by key, dataclasses are rendered field by field in declaration order,
      enums by value and floats by ``repr``.
    - The fingerprint is the first 16 hex characters of the SHA-256 of the
      canonical input string.
    - Arguments are never mutated and exceptions are never swallowed; a
      call that raises produces no trace record.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from fpa_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "FPA_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def canonical_form(value: Any) -> str:
    """Deterministic text rendering of an engine input."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        body = ",".join(
            f"{f.name}:{canonical_form(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({body})"
    if isinstance(value, Mapping):
        body = ",".join(
            f"{canonical_form(k)}:{canonical_form(v)}"
            for k, v in sorted(value.items(), key=lambda item: canonical_form(item[0]))
        )
        return "{" + body + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(canonical_form(v) for v in value) + "]"
    return str(value)


def input_fingerprint(fields: tuple[str, ...], arguments: Mapping[str, Any]) -> str:
    """
    Fingerprint of the named arguments; an unbound name counts as None.

    The field names are part of the hashed text, so the same values under
    different names give different fingerprints.
    """
    text = "|".join(f"{name}={canonical_form(arguments.get(name))}" for name in fields)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine entry point so each successful call is traced.

    Args:
        engine_name: Engine identifier, e.g. "effort".
        engine_version: Bumped whenever the engine's formulas change.
        fingerprint_fields: Parameter names hashed into the fingerprint.
            ``self`` is never needed; engine state comes from its policy.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.monotonic() - started) * 1000, 2)

            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": elapsed_ms,
                "function": func.__qualname__,
            })
            return result

        wrapper.engine_name = engine_name
        wrapper.engine_version = engine_version
        return wrapper

    return decorator
