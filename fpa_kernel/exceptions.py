"""
Typed Exception Hierarchy for the FPA Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Estimation inputs arrive from a CRUD layer that has to decide, per error,
whether to surface it to a user or substitute a default.  That decision
must be made on the exception TYPE and its structured attributes, never by
parsing a message string.

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        metrics = estimator.calculate_metrics(components, config, gsc)
    except InvalidGSCError as e:
        api_response(code=e.code, problems=e.problems)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FpaKernelError (base)
    |
    +-- EstimationError
    |   +-- InvalidInputError
    |   +-- InvalidGSCError
    |   +-- InvalidConfigError
    |   +-- InsufficientDataError
    |   +-- InvalidEstimateError
    |
    +-- PolicyConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                | When Raised
----------------|---------------------|-----------------------------------------
Estimation      | INVALID_INPUT       | Negative count, DET < 1, TR < 1 (data)
                | INVALID_GSC         | GSC length != 14 or value outside [0,5]
                | INVALID_CONFIG      | Non-positive team/rate/PF/daily hours
                | INSUFFICIENT_DATA   | Trend analysis with < 2 data points
                | INVALID_ESTIMATE    | Component validation failed in build_estimate
----------------|---------------------|-----------------------------------------
Configuration   | POLICY_CONFIG_ERROR | Policy YAML failed validation

None of these errors is retryable: the same input reproduces the same error.
"""

from __future__ import annotations

from typing import Any


class FpaKernelError(Exception):
    """
    Base exception for all FPA kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FPA_KERNEL_ERROR"


# Estimation exceptions


class EstimationError(FpaKernelError):
    """Base exception for local validation failures in the engines."""

    code: str = "ESTIMATION_ERROR"


class InvalidInputError(EstimationError):
    """A component count is malformed (not an integer, or below its minimum)."""

    code: str = "INVALID_INPUT"

    def __init__(self, kind: str, field: str, value: Any, minimum: int):
        self.kind = kind
        self.field = field
        self.value = value
        self.minimum = minimum
        super().__init__(
            f"Invalid {field} for {kind}: {value!r} (must be a whole number >= {minimum})"
        )


class InvalidGSCError(EstimationError):
    """
    General System Characteristics vector is malformed.

    An empty vector is NOT an error -- it means "no adjustment requested".
    """

    code: str = "INVALID_GSC"

    def __init__(self, values: tuple[int, ...], problems: list[str]):
        self.values = values
        self.problems = problems
        super().__init__(
            f"Invalid GSC vector ({len(values)} values): " + "; ".join(problems)
        )


class InvalidConfigError(EstimationError):
    """Estimate configuration or team-sizing parameters are out of range."""

    code: str = "INVALID_CONFIG"

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid estimate configuration: " + "; ".join(problems))


class InsufficientDataError(EstimationError):
    """Not enough data points for a trend or comparison."""

    code: str = "INSUFFICIENT_DATA"

    def __init__(self, required: int, actual: int, operation: str = "trend analysis"):
        self.required = required
        self.actual = actual
        self.operation = operation
        super().__init__(
            f"At least {required} data points are required for {operation}, "
            f"got {actual}"
        )


class InvalidEstimateError(EstimationError):
    """One or more components of an estimate failed validation."""

    code: str = "INVALID_ESTIMATE"

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(
            "Invalid estimate components:\n" + "\n".join(f"  - {p}" for p in problems)
        )


# Configuration exceptions


class PolicyConfigError(FpaKernelError):
    """Estimation policy configuration failed validation."""

    code: str = "POLICY_CONFIG_ERROR"

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = errors
        super().__init__(
            f"Policy configuration '{source}' failed validation:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
