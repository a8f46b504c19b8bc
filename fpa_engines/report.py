"""
fpa_engines.report -- Structured report assembly.

Responsibility:
    Combine the outputs of classification, aggregation, effort, team
    sizing, risk and trend engines into summary, detailed and comparison
    result structures.  Also derives the component, complexity, phase and
    cost breakdowns and productivity metrics those reports carry.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel and sibling engine modules.

Invariants enforced:
    - Breakdown percentages are share of total points (0.0 when the total
      is 0, never a division error).
    - Comparison changes are consecutive (pairwise); the comparison's
      trend is first-to-last.  The two are never conflated.
    - No rendering and no rounding; every value is full precision.

Failure modes:
    - InsufficientDataError from ``comparison`` with fewer than 2
      snapshots.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from fpa_kernel.domain.values import ComplexityTier, ComponentKind, GSCVector
from fpa_kernel.exceptions import InsufficientDataError
from fpa_kernel.logging_config import get_logger
from fpa_engines.aggregation import GSC_FACTORS, GSCFactor
from fpa_engines.classification import ClassifiedComponent
from fpa_engines.effort import WORKING_DAYS_PER_MONTH, EstimationMetrics
from fpa_engines.risk import RiskAssessment
from fpa_engines.team_size import TeamSizeEstimator, TeamSizeRecommendation
from fpa_engines.trend import (
    EstimateSnapshot,
    TrendAnalyzer,
    TrendMetric,
    TrendResult,
    consecutive_changes,
)

logger = get_logger("engines.report")

# (phase, share of effort in percent)
PHASE_SHARES: tuple[tuple[str, float], ...] = (
    ("analysis", 15),
    ("design", 20),
    ("development", 40),
    ("testing", 20),
    ("deployment", 5),
)

DEVELOPMENT_COST_SHARE = 0.70
MANAGEMENT_COST_SHARE = 0.15
INFRASTRUCTURE_COST_SHARE = 0.10
CONTINGENCY_COST_SHARE = 0.05

BENCHMARK_HOURS_PER_FUNCTION_POINT = 15
REFERENCE_TEAM_SIZE = 5
HIGH_PRODUCTIVITY_LIMIT = 12
AVERAGE_PRODUCTIVITY_LIMIT = 18


class ProductivityRating(str, Enum):
    HIGH = "HIGH"
    AVERAGE = "AVERAGE"
    LOW = "LOW"


@dataclass(frozen=True)
class BreakdownLine:
    count: int
    points: int
    percentage: float


@dataclass(frozen=True)
class ComponentBreakdown:
    by_kind: dict[ComponentKind, BreakdownLine]
    total: BreakdownLine


@dataclass(frozen=True)
class ComplexityBreakdown:
    by_tier: dict[ComplexityTier, BreakdownLine]
    total: BreakdownLine


@dataclass(frozen=True)
class PhaseAllocation:
    phase: str
    percentage: float
    hours: float


@dataclass(frozen=True)
class CostBreakdown:
    development: float
    management: float
    infrastructure: float
    contingency: float

    @property
    def total(self) -> float:
        return self.development + self.management + self.infrastructure + self.contingency


@dataclass(frozen=True)
class ProductivityMetrics:
    hours_per_function_point: float
    function_points_per_day: float
    function_points_per_person_month: float
    team_efficiency: float
    rating: ProductivityRating
    benchmark_hours_per_function_point: float
    performance_index: float


@dataclass(frozen=True)
class GSCDetail:
    factor: GSCFactor
    rating: int


@dataclass(frozen=True)
class SummaryReport:
    title: str
    unadjusted_function_points: int
    adjusted_function_points: float
    effort_hours: float
    total_cost: float
    recommended_team_size: int | None
    recommended_duration_months: float | None
    gsc_total: int


@dataclass(frozen=True)
class DetailedReport:
    title: str
    metrics: EstimationMetrics
    component_breakdown: ComponentBreakdown
    complexity_breakdown: ComplexityBreakdown
    gsc_details: tuple[GSCDetail, ...]
    phase_breakdown: tuple[PhaseAllocation, ...]
    cost_breakdown: CostBreakdown
    productivity: ProductivityMetrics
    team_size: TeamSizeRecommendation | None
    risk: RiskAssessment | None = None


@dataclass(frozen=True)
class ComparisonEntry:
    version: int
    label: str | None
    function_points: float
    effort_hours: float


@dataclass(frozen=True)
class ComparisonReport:
    title: str
    entries: tuple[ComparisonEntry, ...]
    function_point_changes: tuple[float, ...]
    effort_changes: tuple[float, ...]
    trend: TrendResult


def _share(points: float, total: float) -> float:
    if total == 0:
        return 0.0
    return points / total * 100


def rate_productivity(productivity_factor: float) -> ProductivityRating:
    if productivity_factor <= HIGH_PRODUCTIVITY_LIMIT:
        return ProductivityRating.HIGH
    if productivity_factor <= AVERAGE_PRODUCTIVITY_LIMIT:
        return ProductivityRating.AVERAGE
    return ProductivityRating.LOW


class EstimationReportAssembler:
    """
    Assembles report structures from engine outputs.

    Contract:
        Pure; holds only the collaborating engines.
    Guarantees:
        - Every kind and tier appears in its breakdown, with zero lines
          for absent groups.
    Non-goals:
        - Rendering (HTML, PDF, CSV, JSON) and display rounding.
    """

    def __init__(
        self,
        team_size_estimator: TeamSizeEstimator | None = None,
        trend_analyzer: TrendAnalyzer | None = None,
    ) -> None:
        self._team_size = team_size_estimator or TeamSizeEstimator()
        self._trend = trend_analyzer or TrendAnalyzer()

    @staticmethod
    def component_breakdown(components: Sequence[ClassifiedComponent]) -> ComponentBreakdown:
        total_points = sum(c.function_points for c in components)
        by_kind = {}
        for kind in ComponentKind:
            group = [c for c in components if c.kind == kind]
            points = sum(c.function_points for c in group)
            by_kind[kind] = BreakdownLine(len(group), points, _share(points, total_points))
        total = BreakdownLine(len(components), total_points, 100.0 if total_points else 0.0)
        return ComponentBreakdown(by_kind=by_kind, total=total)

    @staticmethod
    def complexity_breakdown(components: Sequence[ClassifiedComponent]) -> ComplexityBreakdown:
        total_points = sum(c.function_points for c in components)
        by_tier = {}
        for tier in ComplexityTier:
            group = [c for c in components if c.complexity_tier == tier]
            points = sum(c.function_points for c in group)
            by_tier[tier] = BreakdownLine(len(group), points, _share(points, total_points))
        total = BreakdownLine(len(components), total_points, 100.0 if total_points else 0.0)
        return ComplexityBreakdown(by_tier=by_tier, total=total)

    @staticmethod
    def phase_breakdown(effort_hours: float) -> tuple[PhaseAllocation, ...]:
        return tuple(
            PhaseAllocation(phase, share, effort_hours * share / 100)
            for phase, share in PHASE_SHARES
        )

    @staticmethod
    def cost_breakdown(total_cost: float) -> CostBreakdown:
        return CostBreakdown(
            development=total_cost * DEVELOPMENT_COST_SHARE,
            management=total_cost * MANAGEMENT_COST_SHARE,
            infrastructure=total_cost * INFRASTRUCTURE_COST_SHARE,
            contingency=total_cost * CONTINGENCY_COST_SHARE,
        )

    @staticmethod
    def productivity_metrics(metrics: EstimationMetrics) -> ProductivityMetrics:
        pf = metrics.productivity_factor
        daily_fp = metrics.average_daily_working_hours / pf
        return ProductivityMetrics(
            hours_per_function_point=pf,
            function_points_per_day=daily_fp,
            function_points_per_person_month=daily_fp * WORKING_DAYS_PER_MONTH,
            # Diminishing returns above the reference team size
            team_efficiency=min(1.0, 1.0 / math.sqrt(metrics.team_size / REFERENCE_TEAM_SIZE)),
            rating=rate_productivity(pf),
            benchmark_hours_per_function_point=BENCHMARK_HOURS_PER_FUNCTION_POINT,
            performance_index=BENCHMARK_HOURS_PER_FUNCTION_POINT / pf * 100,
        )

    def _team_size_for(self, metrics: EstimationMetrics) -> TeamSizeRecommendation | None:
        # Nothing to staff when there are no function points
        if metrics.pfa <= 0:
            return None
        return self._team_size.estimate(metrics.pfa, metrics.productivity_factor)

    def summary(
        self,
        metrics: EstimationMetrics,
        team_size: TeamSizeRecommendation | None = None,
        name: str = "Estimate",
    ) -> SummaryReport:
        """
        Headline numbers for one estimate.

        When no team-size recommendation is supplied one is computed from
        the metrics with the estimator's policy.
        """
        if team_size is None:
            team_size = self._team_size_for(metrics)
        return SummaryReport(
            title=f"Function Point Analysis Summary: {name}",
            unadjusted_function_points=metrics.pfna,
            adjusted_function_points=metrics.pfa,
            effort_hours=metrics.effort_hours,
            total_cost=metrics.total_cost,
            recommended_team_size=team_size.recommended if team_size else None,
            recommended_duration_months=(
                team_size.recommended_duration_months if team_size else None
            ),
            gsc_total=metrics.ni,
        )

    def detailed(
        self,
        metrics: EstimationMetrics,
        components: Sequence[ClassifiedComponent],
        gsc: GSCVector | None = None,
        team_size: TeamSizeRecommendation | None = None,
        risk: RiskAssessment | None = None,
        name: str = "Estimate",
    ) -> DetailedReport:
        """Full breakdown of one estimate; unrated GSC factors show as 0."""
        if team_size is None:
            team_size = self._team_size_for(metrics)
        ratings = gsc.values if gsc is not None else ()
        gsc_details = tuple(
            GSCDetail(factor, ratings[index] if index < len(ratings) else 0)
            for index, factor in enumerate(GSC_FACTORS)
        )
        report = DetailedReport(
            title=f"Detailed Function Point Analysis Report: {name}",
            metrics=metrics,
            component_breakdown=self.component_breakdown(components),
            complexity_breakdown=self.complexity_breakdown(components),
            gsc_details=gsc_details,
            phase_breakdown=self.phase_breakdown(metrics.effort_hours),
            cost_breakdown=self.cost_breakdown(metrics.total_cost),
            productivity=self.productivity_metrics(metrics),
            team_size=team_size,
            risk=risk,
        )
        logger.debug("detailed_report_assembled", extra={
            "component_count": len(components),
            "pfa": metrics.pfa,
        })
        return report

    def comparison(
        self,
        snapshots: Sequence[EstimateSnapshot],
        name: str = "Estimate",
    ) -> ComparisonReport:
        """
        Compare estimate versions, ordered by version number.

        Raises:
            InsufficientDataError: With fewer than 2 snapshots.
        """
        if len(snapshots) < 2:
            logger.warning("comparison_insufficient_data", extra={
                "actual": len(snapshots),
            })
            raise InsufficientDataError(2, len(snapshots), "comparison")

        ordered = sorted(snapshots, key=lambda s: s.version)
        entries = tuple(
            ComparisonEntry(
                version=s.version,
                label=s.label,
                function_points=s.metrics.pfa,
                effort_hours=s.metrics.effort_hours,
            )
            for s in ordered
        )
        trend = self._trend.analyze(ordered, TrendMetric.ADJUSTED_FP)

        logger.info("comparison_assembled", extra={
            "versions": [e.version for e in entries],
            "trend": trend.trend.value,
        })
        return ComparisonReport(
            title=f"Estimate Comparison Report: {name}",
            entries=entries,
            function_point_changes=consecutive_changes([e.function_points for e in entries]),
            effort_changes=consecutive_changes([e.effort_hours for e in entries]),
            trend=trend,
        )
