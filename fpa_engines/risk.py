"""
fpa_engines.risk -- Rule-based risk scoring, quality score and advice.

Responsibility:
    Score an estimate's delivery risk from its team size, duration,
    productivity factor and cost; bucket each factor (including the share
    of high-complexity points) into a qualitative assessment with a fixed
    reason; compute a 0-100 data-quality score; and emit advisory
    recommendations.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel and sibling engine modules.

Invariants enforced:
    - Score >= high_score -> HIGH, >= medium_score -> MEDIUM, else LOW.
    - Quality score starts at 100 and is floored at 0.
    - Recommendations appear in check order: large team, long duration,
      low productivity, missing GSC, high cost.

Failure modes:
    - None.  Missing configuration values degrade the quality score
      instead of raising.

Audit relevance:
    Every threshold lives in RiskPolicy / QualityPolicy, so a policy set
    loaded by fpa_config fully determines the outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fpa_kernel.domain.values import ComplexityTier, EstimateConfiguration, RiskLevel
from fpa_kernel.logging_config import get_logger
from fpa_engines.classification import ClassifiedComponent
from fpa_engines.effort import EstimationMetrics
from fpa_engines.tracer import traced_engine

logger = get_logger("engines.risk")

TEAM_SIZE_REASONS = {
    RiskLevel.LOW: "Small team, good communication and coordination",
    RiskLevel.MEDIUM: "Medium-sized team, manageable with proper organization",
    RiskLevel.HIGH: "Large team, increased communication overhead and coordination complexity",
}

DURATION_REASONS = {
    RiskLevel.LOW: "Short project duration, low risk of scope changes",
    RiskLevel.MEDIUM: "Medium duration, moderate risk of requirement changes",
    RiskLevel.HIGH: "Long project duration, high risk of scope creep and technology changes",
}

COMPLEXITY_REASONS = {
    RiskLevel.LOW: "Most components have low to medium complexity",
    RiskLevel.MEDIUM: "Significant portion of high-complexity components",
    RiskLevel.HIGH: "High percentage of complex components, increased development risk",
}

PRODUCTIVITY_REASONS = {
    RiskLevel.LOW: "High productivity factor indicates efficient development",
    RiskLevel.MEDIUM: "Average productivity factor for the industry",
    RiskLevel.HIGH: "Low productivity factor may indicate technical or organizational challenges",
}

RECOMMEND_SPLIT_TEAM = (
    "Consider splitting into smaller sub-teams or using agile methodologies "
    "to manage large team size"
)
RECOMMEND_PHASES = (
    "Break project into phases or iterations to reduce risk and improve adaptability"
)
RECOMMEND_PROCESS_REVIEW = (
    "Review development processes and consider training or tooling improvements "
    "to increase productivity"
)
RECOMMEND_GSC = (
    "Consider completing General System Characteristics assessment for more "
    "accurate adjustment factor"
)
RECOMMEND_COST_MONITORING = "Implement regular cost monitoring and milestone-based reviews"

QUALITY_TEAM_SIZE_ERROR = "Team size is required and must be greater than 0"
QUALITY_HOURLY_RATE_ERROR = "Hourly rate is required and must be greater than 0"
QUALITY_SHORT_DURATION = "Project duration is very short, verify if estimates are realistic"
QUALITY_FAST_PRODUCTIVITY = "Very high productivity factor, ensure this is achievable"
QUALITY_SLOW_PRODUCTIVITY = (
    "Very low productivity factor, consider if this reflects actual conditions"
)
QUALITY_NO_COMPONENTS = "No components defined, estimate may be incomplete"


@dataclass(frozen=True)
class RiskPolicy:
    """Thresholds for risk scoring, factor buckets and recommendations."""

    # Score contributions: > high adds 2, else > medium adds 1
    team_size_high: int = 10
    team_size_medium: int = 5
    duration_months_high: float = 12
    duration_months_medium: float = 6
    productivity_high: float = 20
    productivity_medium: float = 15
    cost_high: float = 500_000
    cost_medium: float = 100_000

    high_risk_score: int = 4
    medium_risk_score: int = 2

    # Factor buckets: <= low is LOW, <= medium is MEDIUM, else HIGH
    team_size_factor: tuple[float, float] = (3, 8)
    duration_factor: tuple[float, float] = (3, 12)
    complexity_factor: tuple[float, float] = (20, 40)
    productivity_factor: tuple[float, float] = (12, 18)

    # Recommendation triggers (strictly greater than)
    large_team: int = 8
    long_duration_months: float = 12
    low_productivity: float = 18
    high_cost: float = 200_000


@dataclass(frozen=True)
class QualityPolicy:
    """Penalties applied to the 100-point quality score."""

    initial_score: int = 100
    missing_team_size_penalty: int = 20
    missing_hourly_rate_penalty: int = 20
    short_duration_days: float = 1
    short_duration_penalty: int = 10
    min_productivity_factor: float = 5
    max_productivity_factor: float = 25
    productivity_penalty: int = 5
    no_components_penalty: int = 15


@dataclass(frozen=True)
class FactorAssessment:
    """Qualitative bucket for one risk factor."""

    risk: RiskLevel
    reason: str
    value: float


@dataclass(frozen=True)
class QualityValidation:
    """Data-quality score with the problems that reduced it."""

    quality_score: int
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


@dataclass(frozen=True)
class RiskAssessment:
    """Overall risk, per-factor buckets, advice and quality score."""

    overall_risk: RiskLevel
    risk_score: int
    team_size: FactorAssessment
    duration: FactorAssessment
    complexity: FactorAssessment
    productivity: FactorAssessment
    recommendations: tuple[str, ...]
    quality: QualityValidation

    @property
    def factors(self) -> dict[str, FactorAssessment]:
        return {
            "team_size": self.team_size,
            "duration": self.duration,
            "complexity": self.complexity,
            "productivity": self.productivity,
        }


def _bucket(value: float, bounds: Sequence[float]) -> RiskLevel:
    low, medium = bounds
    if value <= low:
        return RiskLevel.LOW
    if value <= medium:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _graded(value: float, high: float, medium: float) -> int:
    if value > high:
        return 2
    if value > medium:
        return 1
    return 0


def high_complexity_share(components: Iterable[ClassifiedComponent]) -> float:
    """Percentage of function points contributed by HIGH-tier components."""
    total = 0
    high = 0
    for component in components:
        total += component.function_points
        if component.complexity_tier == ComplexityTier.HIGH:
            high += component.function_points
    if total == 0:
        return 0.0
    return high / total * 100


class RiskAssessor:
    """
    Deterministic risk assessor over a RiskPolicy and QualityPolicy.

    Contract:
        Same metrics, components and policies always give the same
        RiskAssessment.
    Guarantees:
        - Never raises for missing configuration values.
    Non-goals:
        - No learning or historical calibration.
    """

    def __init__(
        self,
        policy: RiskPolicy | None = None,
        quality_policy: QualityPolicy | None = None,
    ) -> None:
        self._policy = policy or RiskPolicy()
        self._quality = quality_policy or QualityPolicy()

    def score(
        self,
        team_size: int,
        duration_months: float,
        productivity_factor: float,
        total_cost: float,
    ) -> int:
        """Accumulated risk score (0 to 8)."""
        p = self._policy
        return (
            _graded(team_size, p.team_size_high, p.team_size_medium)
            + _graded(duration_months, p.duration_months_high, p.duration_months_medium)
            + _graded(productivity_factor, p.productivity_high, p.productivity_medium)
            + _graded(total_cost, p.cost_high, p.cost_medium)
        )

    def overall_risk(self, score: int) -> RiskLevel:
        if score >= self._policy.high_risk_score:
            return RiskLevel.HIGH
        if score >= self._policy.medium_risk_score:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def assess_factors(
        self,
        team_size: int,
        duration_months: float,
        complexity_share: float,
        productivity_factor: float,
    ) -> dict[str, FactorAssessment]:
        p = self._policy
        team_risk = _bucket(team_size, p.team_size_factor)
        duration_risk = _bucket(duration_months, p.duration_factor)
        complexity_risk = _bucket(complexity_share, p.complexity_factor)
        productivity_risk = _bucket(productivity_factor, p.productivity_factor)
        return {
            "team_size": FactorAssessment(team_risk, TEAM_SIZE_REASONS[team_risk], team_size),
            "duration": FactorAssessment(
                duration_risk, DURATION_REASONS[duration_risk], duration_months,
            ),
            "complexity": FactorAssessment(
                complexity_risk, COMPLEXITY_REASONS[complexity_risk], complexity_share,
            ),
            "productivity": FactorAssessment(
                productivity_risk, PRODUCTIVITY_REASONS[productivity_risk], productivity_factor,
            ),
        }

    def recommendations(
        self,
        team_size: int,
        duration_months: float,
        productivity_factor: float,
        total_cost: float,
        has_gsc: bool,
    ) -> tuple[str, ...]:
        p = self._policy
        advice = []
        if team_size > p.large_team:
            advice.append(RECOMMEND_SPLIT_TEAM)
        if duration_months > p.long_duration_months:
            advice.append(RECOMMEND_PHASES)
        if productivity_factor > p.low_productivity:
            advice.append(RECOMMEND_PROCESS_REVIEW)
        if not has_gsc:
            advice.append(RECOMMEND_GSC)
        if total_cost > p.high_cost:
            advice.append(RECOMMEND_COST_MONITORING)
        return tuple(advice)

    def validate_quality(
        self,
        configuration: EstimateConfiguration,
        component_count: int,
        duration_days: float | None = None,
    ) -> QualityValidation:
        """
        Quality score for an estimate's inputs.

        ``duration_days`` is None when metrics could not be computed; the
        short-duration check is then skipped.
        """
        q = self._quality
        score = q.initial_score
        errors: list[str] = []
        warnings: list[str] = []

        if configuration.team_size is None or configuration.team_size <= 0:
            errors.append(QUALITY_TEAM_SIZE_ERROR)
            score -= q.missing_team_size_penalty
        if configuration.hourly_rate is None or configuration.hourly_rate <= 0:
            errors.append(QUALITY_HOURLY_RATE_ERROR)
            score -= q.missing_hourly_rate_penalty
        if duration_days is not None and duration_days < q.short_duration_days:
            warnings.append(QUALITY_SHORT_DURATION)
            score -= q.short_duration_penalty

        pf = configuration.productivity_factor
        if pf is not None and pf < q.min_productivity_factor:
            warnings.append(QUALITY_FAST_PRODUCTIVITY)
            score -= q.productivity_penalty
        if pf is not None and pf > q.max_productivity_factor:
            warnings.append(QUALITY_SLOW_PRODUCTIVITY)
            score -= q.productivity_penalty

        if component_count == 0:
            warnings.append(QUALITY_NO_COMPONENTS)
            score -= q.no_components_penalty

        return QualityValidation(
            quality_score=max(0, score),
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    @traced_engine("risk", "1.0", fingerprint_fields=("metrics",))
    def assess(
        self,
        metrics: EstimationMetrics,
        components: Sequence[ClassifiedComponent],
    ) -> RiskAssessment:
        """
        Full risk assessment of a computed estimate.

        ``components`` must be the classified components the metrics were
        computed from; the complexity share and the no-components quality
        check are both derived from them.
        """
        score = self.score(
            metrics.team_size,
            metrics.duration_months,
            metrics.productivity_factor,
            metrics.total_cost,
        )
        overall = self.overall_risk(score)
        share = high_complexity_share(components)
        factors = self.assess_factors(
            metrics.team_size,
            metrics.duration_months,
            share,
            metrics.productivity_factor,
        )
        advice = self.recommendations(
            metrics.team_size,
            metrics.duration_months,
            metrics.productivity_factor,
            metrics.total_cost,
            metrics.has_gsc,
        )
        configuration = EstimateConfiguration(
            team_size=metrics.team_size,
            hourly_rate=metrics.hourly_rate,
            average_daily_working_hours=metrics.average_daily_working_hours,
            productivity_factor=metrics.productivity_factor,
        )
        quality = self.validate_quality(
            configuration, len(components), metrics.duration_days,
        )

        logger.info("risk_assessed", extra={
            "risk_score": score,
            "overall_risk": overall.value,
            "high_complexity_share": share,
            "quality_score": quality.quality_score,
            "recommendation_count": len(advice),
        })

        return RiskAssessment(
            overall_risk=overall,
            risk_score=score,
            team_size=factors["team_size"],
            duration=factors["duration"],
            complexity=factors["complexity"],
            productivity=factors["productivity"],
            recommendations=advice,
            quality=quality,
        )
