"""
Pure domain layer.

This module contains the immutable value objects consumed and produced by
the estimation engines, with NO dependencies on:
- Persistence
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from fpa_kernel.domain.values import (
    ComplexityTier,
    ComponentKind,
    ComponentMeasurement,
    EstimateConfiguration,
    GSCVector,
    GSC_FACTOR_COUNT,
    GSC_MAX_VALUE,
    QuerySide,
    RiskLevel,
    TrendDirection,
)

__all__ = [
    "ComplexityTier",
    "ComponentKind",
    "ComponentMeasurement",
    "EstimateConfiguration",
    "GSCVector",
    "GSC_FACTOR_COUNT",
    "GSC_MAX_VALUE",
    "QuerySide",
    "RiskLevel",
    "TrendDirection",
]
