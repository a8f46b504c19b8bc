"""
Pytest fixtures for the FPA estimation test suite.

Provides:
- Structured logging setup and LogContext isolation
- captured_logs: fpa_kernel log records as parsed JSON dicts
- Sample components and configurations used across layers
"""

import json
import logging
from io import StringIO

import pytest

from fpa_kernel.domain.values import (
    ComponentKind,
    ComponentMeasurement,
    EstimateConfiguration,
)
from fpa_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture fpa_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            estimator.calculate_metrics(...)
            logs = captured_logs()
            assert any(r["message"] == "metrics_calculated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fpa_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Sample inputs
# =============================================================================


@pytest.fixture
def reference_components() -> list[ComponentMeasurement]:
    """ALI(tr=2, det=20) + EI(ftr=2, det=12): 10 + 4 = 14 unadjusted FP."""
    return [
        ComponentMeasurement.data_function(ComponentKind.DATA_INTERNAL, 2, 20, name="Customer"),
        ComponentMeasurement.transaction(ComponentKind.INPUT, 2, 12, name="Create customer"),
    ]


@pytest.fixture
def reference_configuration() -> EstimateConfiguration:
    return EstimateConfiguration(
        team_size=5,
        hourly_rate=150.0,
        average_daily_working_hours=8.0,
        productivity_factor=10.0,
    )
