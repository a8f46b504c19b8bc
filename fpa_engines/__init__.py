"""
Module: fpa_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    estimation engine sub-modules.  This is the canonical import surface
    for higher layers (fpa_config, fpa_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel (and sibling engine modules).
    MUST NOT import fpa_config or fpa_services.

Invariants enforced:
    - Determinism: identical inputs always produce identical outputs.
    - Full-precision floats; engines never round for display.
    - No state is held between calls.

Failure modes:
    - EstimationError subclasses propagated from individual engines on
      invalid input (see fpa_kernel.exceptions).

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``fpa_engines.tracer``), emitting FPA_ENGINE_TRACE log records
    that include engine name, version, input fingerprint, and duration.

Usage:
    from fpa_engines.classification import ComplexityClassifier
    from fpa_engines.aggregation import FunctionPointAggregator
    from fpa_engines.effort import EffortEstimator
    from fpa_engines.team_size import TeamSizeEstimator
    from fpa_engines.risk import RiskAssessor
    from fpa_engines.trend import TrendAnalyzer
    from fpa_engines.report import EstimationReportAssembler
"""

from fpa_kernel.logging_config import get_logger

logger = get_logger("engines")

from fpa_engines.aggregation import (
    GSC_FACTORS,
    FunctionPointAggregator,
    GSCFactor,
    gsc_problems,
)
from fpa_engines.classification import (
    FUNCTION_POINT_WEIGHTS,
    ClassifiedComponent,
    ComplexityClassifier,
    ComponentValidationResult,
    validate_component,
    weight_for,
)
from fpa_engines.effort import (
    EffortEstimator,
    EstimationMetrics,
    require_valid_configuration,
    validate_configuration,
)
from fpa_engines.report import (
    ComparisonReport,
    DetailedReport,
    EstimationReportAssembler,
    ProductivityMetrics,
    ProductivityRating,
    SummaryReport,
)
from fpa_engines.risk import (
    FactorAssessment,
    QualityPolicy,
    QualityValidation,
    RiskAssessment,
    RiskAssessor,
    RiskPolicy,
)
from fpa_engines.team_size import (
    TeamSizeEstimator,
    TeamSizeRecommendation,
    TeamSizingPolicy,
)
from fpa_engines.tracer import traced_engine
from fpa_engines.trend import (
    EstimateSnapshot,
    RegressionFit,
    TrendAnalyzer,
    TrendMetric,
    TrendPolicy,
    TrendResult,
    consecutive_changes,
)

__all__ = [
    # Classification
    "ClassifiedComponent",
    "ComplexityClassifier",
    "ComponentValidationResult",
    "FUNCTION_POINT_WEIGHTS",
    "validate_component",
    "weight_for",
    # Aggregation
    "FunctionPointAggregator",
    "GSCFactor",
    "GSC_FACTORS",
    "gsc_problems",
    # Effort
    "EffortEstimator",
    "EstimationMetrics",
    "require_valid_configuration",
    "validate_configuration",
    # Team size
    "TeamSizeEstimator",
    "TeamSizeRecommendation",
    "TeamSizingPolicy",
    # Risk
    "FactorAssessment",
    "QualityPolicy",
    "QualityValidation",
    "RiskAssessment",
    "RiskAssessor",
    "RiskPolicy",
    # Trend
    "EstimateSnapshot",
    "RegressionFit",
    "TrendAnalyzer",
    "TrendMetric",
    "TrendPolicy",
    "TrendResult",
    "consecutive_changes",
    # Reports
    "ComparisonReport",
    "DetailedReport",
    "EstimationReportAssembler",
    "ProductivityMetrics",
    "ProductivityRating",
    "SummaryReport",
    # Tracing
    "traced_engine",
]
