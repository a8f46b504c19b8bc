"""
fpa_services.estimation_service -- End-to-end estimate orchestration.

Responsibility:
    Validate an estimate's inputs upfront (``build_estimate``), then run
    the engines in order: classification, aggregation and effort, team
    sizing, risk, and report assembly.  Also compares historical estimate
    versions.

Architecture position:
    Services -- orchestration over engines + kernel + config.
    Holds no state beyond the engines built from its policy.

Invariants enforced:
    - Inputs are validated once, before the first calculation; an
      EstimateInputs value is always computable.
    - Every engine receives its section of the same EstimationPolicy.
    - The LogContext carries ``estimate_id`` for every record emitted
      during a calculation when an id is supplied.

Failure modes:
    - InvalidConfigError / InvalidGSCError from ``build_estimate`` for an
      out-of-range configuration or GSC vector.
    - InvalidEstimateError from ``build_estimate`` when any component
      fails validation; it carries every problem found.
    - InsufficientDataError from ``compare`` with fewer than 2 snapshots.

Usage:
    from fpa_services.estimation_service import EstimationService, build_estimate

    service = EstimationService()
    inputs = build_estimate(components, service.configuration(team_size=5, hourly_rate=150))
    outcome = service.calculate(inputs, estimate_id="EST-001")
    print(outcome.metrics.total_cost, outcome.risk.overall_risk)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fpa_config.schema import EstimationPolicy
from fpa_engines.aggregation import FunctionPointAggregator
from fpa_engines.classification import (
    ClassifiedComponent,
    ComplexityClassifier,
    validate_component,
)
from fpa_engines.effort import EffortEstimator, EstimationMetrics, require_valid_configuration
from fpa_engines.report import (
    ComparisonReport,
    DetailedReport,
    EstimationReportAssembler,
    SummaryReport,
)
from fpa_engines.risk import RiskAssessment, RiskAssessor
from fpa_engines.team_size import TeamSizeEstimator, TeamSizeRecommendation
from fpa_engines.trend import EstimateSnapshot, TrendAnalyzer
from fpa_kernel.domain.values import ComponentMeasurement, EstimateConfiguration, GSCVector
from fpa_kernel.exceptions import InvalidEstimateError
from fpa_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.estimation")


@dataclass(frozen=True)
class EstimateInputs:
    """Validated, immutable inputs for one estimate."""

    components: tuple[ComponentMeasurement, ...]
    configuration: EstimateConfiguration
    gsc: GSCVector
    name: str = "Estimate"
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class EstimateOutcome:
    """Everything derived for one estimate."""

    inputs: EstimateInputs
    classified_components: tuple[ClassifiedComponent, ...]
    metrics: EstimationMetrics
    team_size: TeamSizeRecommendation | None
    risk: RiskAssessment
    summary: SummaryReport
    detailed: DetailedReport


def _describe(index: int, measurement: ComponentMeasurement) -> str:
    label = measurement.name or f"component {index}"
    kind = getattr(measurement.kind, "value", measurement.kind)
    return f"{label} ({kind})"


def build_estimate(
    components: Iterable[ComponentMeasurement],
    configuration: EstimateConfiguration,
    gsc: GSCVector | Sequence[int] | None = None,
    name: str = "Estimate",
) -> EstimateInputs:
    """
    Validate every input and return an immutable EstimateInputs.

    The configuration and GSC vector are checked first, then each
    component; component warnings are kept on the result.

    Raises:
        InvalidConfigError: Configuration out of range.
        InvalidGSCError: GSC vector malformed.
        InvalidEstimateError: One or more components are invalid.
    """
    if gsc is None:
        gsc = GSCVector.empty()
    elif not isinstance(gsc, GSCVector):
        gsc = GSCVector(tuple(gsc))

    require_valid_configuration(configuration, gsc)

    components = tuple(components)
    classifier = ComplexityClassifier()
    problems: list[str] = []
    warnings: list[str] = []
    for index, measurement in enumerate(components, start=1):
        result = validate_component(measurement, classifier)
        where = _describe(index, measurement)
        problems.extend(f"{where}: {error}" for error in result.errors)
        warnings.extend(f"{where}: {warning}" for warning in result.warnings)

    if problems:
        logger.warning("estimate_rejected", extra={
            "estimate_name": name,
            "component_count": len(components),
            "problems": problems,
        })
        raise InvalidEstimateError(problems)

    return EstimateInputs(
        components=components,
        configuration=configuration,
        gsc=gsc,
        name=name,
        warnings=tuple(warnings),
    )


class EstimationService:
    """
    Runs the estimation engines under one policy.

    Contract:
        Receives an EstimationPolicy via constructor injection (the
        in-code default policy when omitted).
    Guarantees:
        - ``calculate`` is deterministic for given inputs and policy.
        - Team sizing is skipped (None) when there are no function points
          to staff.
    Non-goals:
        - Persistence of inputs or outcomes.
        - Rendering of reports.
    """

    def __init__(self, policy: EstimationPolicy | None = None) -> None:
        self._policy = policy or EstimationPolicy()
        self._classifier = ComplexityClassifier()
        self._effort = EffortEstimator(
            self._classifier, FunctionPointAggregator(self._classifier),
        )
        self._team_size = TeamSizeEstimator(self._policy.team_sizing)
        self._risk = RiskAssessor(self._policy.risk, self._policy.quality)
        self._trend = TrendAnalyzer(self._policy.trend)
        self._reports = EstimationReportAssembler(self._team_size, self._trend)

    @property
    def policy(self) -> EstimationPolicy:
        return self._policy

    def configuration(
        self,
        team_size: int | None,
        hourly_rate: float | None,
        average_daily_working_hours: float | None = None,
        productivity_factor: float | None = None,
    ) -> EstimateConfiguration:
        """An EstimateConfiguration with the policy's defaults filled in."""
        defaults = self._policy.defaults
        return EstimateConfiguration(
            team_size=team_size,
            hourly_rate=hourly_rate,
            average_daily_working_hours=(
                defaults.average_daily_working_hours
                if average_daily_working_hours is None
                else average_daily_working_hours
            ),
            productivity_factor=(
                defaults.productivity_factor
                if productivity_factor is None
                else productivity_factor
            ),
        )

    def calculate(
        self,
        inputs: EstimateInputs,
        estimate_id: str | None = None,
    ) -> EstimateOutcome:
        """Run every engine over validated inputs."""
        with LogContext.bind(estimate_id=estimate_id, policy_name=self._policy.name):
            t0 = time.monotonic()
            logger.info("estimate_calculation_started", extra={
                "estimate_name": inputs.name,
                "component_count": len(inputs.components),
                "policy_checksum": self._policy.checksum,
            })

            classified = self._classifier.classify_all(inputs.components)
            metrics = self._effort.calculate_metrics(
                classified, inputs.configuration, inputs.gsc,
            )

            team_size = None
            if metrics.pfa > 0:
                team_size = self._team_size.estimate(metrics.pfa, metrics.productivity_factor)

            risk = self._risk.assess(metrics, classified)
            summary = self._reports.summary(metrics, team_size, name=inputs.name)
            detailed = self._reports.detailed(
                metrics, classified, inputs.gsc, team_size, risk, name=inputs.name,
            )

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info("estimate_calculated", extra={
                "estimate_name": inputs.name,
                "pfa": metrics.pfa,
                "effort_hours": metrics.effort_hours,
                "total_cost": metrics.total_cost,
                "overall_risk": risk.overall_risk.value,
                "quality_score": risk.quality.quality_score,
                "duration_ms": duration_ms,
            })

        return EstimateOutcome(
            inputs=inputs,
            classified_components=classified,
            metrics=metrics,
            team_size=team_size,
            risk=risk,
            summary=summary,
            detailed=detailed,
        )

    def compare(
        self,
        snapshots: Sequence[EstimateSnapshot],
        name: str = "Estimate",
    ) -> ComparisonReport:
        """Comparison report across estimate versions."""
        return self._reports.comparison(snapshots, name=name)

    def snapshot(self, outcome: EstimateOutcome, version: int, label: str | None = None) -> EstimateSnapshot:
        """Wrap an outcome's metrics as a version for later comparison."""
        return EstimateSnapshot(version=version, metrics=outcome.metrics, label=label)
