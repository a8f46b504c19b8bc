"""
fpa_engines.effort -- Effort, duration and cost derivation.

Responsibility:
    Convert adjusted function points into effort hours, calendar duration
    (days, weeks, months) and monetary cost for a team/productivity
    configuration, and compose classification + aggregation + effort into
    a single immutable EstimationMetrics.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel and sibling engine modules.

Invariants enforced:
    - Fixed working-day conventions: 5 days per week, 21 per month.
    - Cost/FP guard: cost_per_function_point is 0.0 (never NaN/inf) when
      PFA is 0.
    - Full-precision floats; rounding for display is the caller's job.

Failure modes:
    - InvalidConfigError from ``duration_days`` when team size or daily
      hours are not positive, and from ``calculate_metrics`` when any of
      team size, hourly rate, productivity factor or daily hours is
      missing or not positive.
    - InvalidGSCError / InvalidInputError propagated from aggregation and
      classification.

Usage:
    from fpa_engines.effort import EffortEstimator
    from fpa_kernel.domain.values import EstimateConfiguration

    estimator = EffortEstimator()
    metrics = estimator.calculate_metrics(
        components,
        EstimateConfiguration(team_size=5, hourly_rate=150.0),
    )
    print(metrics.total_cost)
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fpa_kernel.domain.values import (
    GSC_FACTOR_COUNT,
    ComponentMeasurement,
    EstimateConfiguration,
    GSCVector,
)
from fpa_kernel.exceptions import InvalidConfigError, InvalidGSCError
from fpa_kernel.logging_config import get_logger
from fpa_engines.aggregation import FunctionPointAggregator, gsc_problems
from fpa_engines.classification import ClassifiedComponent, ComplexityClassifier
from fpa_engines.tracer import traced_engine

logger = get_logger("engines.effort")

WORKING_DAYS_PER_WEEK = 5
WORKING_DAYS_PER_MONTH = 21

# Accepted ranges for an estimate configuration
TEAM_SIZE_RANGE = (1, 100)
DAILY_HOURS_RANGE = (1, 24)
PRODUCTIVITY_FACTOR_RANGE = (1, 100)
MIN_HOURLY_RATE = 0.01


@dataclass(frozen=True)
class EstimationMetrics:
    """
    Fully derived metrics for one estimate.

    All fields are immutable. Every recalculation produces a fresh instance.
    """

    pfna: int
    ni: int
    fa: float
    pfa: float
    effort_hours: float
    duration_days: float
    duration_weeks: float
    duration_months: float
    total_cost: float
    cost_per_function_point: float
    cost_per_person: float
    hours_per_person: float

    # Configuration echo
    team_size: int
    hourly_rate: float
    average_daily_working_hours: float
    productivity_factor: float
    has_gsc: bool = False

    @property
    def adjusted_function_points(self) -> float:
        return self.pfa

    @property
    def unadjusted_function_points(self) -> int:
        return self.pfna


def validate_configuration(
    configuration: EstimateConfiguration,
    gsc: GSCVector | None = None,
) -> list[str]:
    """
    Every range violation in a configuration and optional GSC vector.

    Returns an empty list when the inputs are usable.
    """
    errors: list[str] = []

    hours = configuration.average_daily_working_hours
    if hours is None or not DAILY_HOURS_RANGE[0] <= hours <= DAILY_HOURS_RANGE[1]:
        errors.append(
            f"Average daily working hours must be between "
            f"{DAILY_HOURS_RANGE[0]} and {DAILY_HOURS_RANGE[1]}"
        )

    team = configuration.team_size
    if team is None or not TEAM_SIZE_RANGE[0] <= team <= TEAM_SIZE_RANGE[1]:
        errors.append(
            f"Team size must be between {TEAM_SIZE_RANGE[0]} and {TEAM_SIZE_RANGE[1]}"
        )

    rate = configuration.hourly_rate
    if rate is None or rate < MIN_HOURLY_RATE:
        errors.append("Hourly rate must be positive")

    pf = configuration.productivity_factor
    if pf is None or not PRODUCTIVITY_FACTOR_RANGE[0] <= pf <= PRODUCTIVITY_FACTOR_RANGE[1]:
        errors.append(
            f"Productivity factor must be between {PRODUCTIVITY_FACTOR_RANGE[0]} "
            f"and {PRODUCTIVITY_FACTOR_RANGE[1]} hours per function point"
        )

    if gsc is not None:
        errors.extend(gsc_problems(gsc))

    return errors


def require_valid_configuration(
    configuration: EstimateConfiguration,
    gsc: GSCVector | None = None,
) -> None:
    """
    Raise if ``validate_configuration`` reports anything.

    Raises:
        InvalidGSCError: If only the GSC vector is at fault.
        InvalidConfigError: Otherwise, carrying every problem found.
    """
    config_errors = validate_configuration(configuration)
    gsc_errors = gsc_problems(gsc) if gsc is not None else []

    if config_errors:
        logger.warning("configuration_invalid", extra={
            "problems": config_errors + gsc_errors,
        })
        raise InvalidConfigError(config_errors + gsc_errors)
    if gsc_errors:
        logger.warning("gsc_vector_invalid", extra={"problems": gsc_errors})
        raise InvalidGSCError(gsc.values, gsc_errors)


class EffortEstimator:
    """
    Pure estimator from adjusted function points to effort, duration and cost.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - effort = PFA x productivity factor.
        - duration_days = effort / (team size x daily hours).
        - total_cost = effort x hourly rate.
    Non-goals:
        - Does not round; values are full precision.
        - Does not enforce the configuration's upper bounds (see
          ``validate_configuration``); only positivity is required to
          compute.
    """

    def __init__(
        self,
        classifier: ComplexityClassifier | None = None,
        aggregator: FunctionPointAggregator | None = None,
    ) -> None:
        self._classifier = classifier or ComplexityClassifier()
        self._aggregator = aggregator or FunctionPointAggregator(self._classifier)

    @staticmethod
    def effort_hours(pfa: float, productivity_factor: float) -> float:
        return pfa * productivity_factor

    @staticmethod
    def duration_days(effort_hours: float, team_size: int, daily_hours: float) -> float:
        """
        Calendar working days for the team to deliver the effort.

        Raises:
            InvalidConfigError: If team size or daily hours are not positive.
        """
        problems = []
        if team_size is None or team_size <= 0:
            problems.append("Team size must be greater than 0")
        if daily_hours is None or daily_hours <= 0:
            problems.append("Average daily working hours must be greater than 0")
        if problems:
            logger.error("duration_rejected", extra={
                "team_size": team_size,
                "daily_hours": daily_hours,
            })
            raise InvalidConfigError(problems)
        return effort_hours / (team_size * daily_hours)

    @staticmethod
    def duration_weeks(duration_days: float) -> float:
        return duration_days / WORKING_DAYS_PER_WEEK

    @staticmethod
    def duration_months(duration_days: float) -> float:
        return duration_days / WORKING_DAYS_PER_MONTH

    @staticmethod
    def total_cost(effort_hours: float, hourly_rate: float) -> float:
        return effort_hours * hourly_rate

    @staticmethod
    def cost_per_function_point(total_cost: float, pfa: float) -> float:
        """Total cost / PFA, or 0.0 when PFA is 0."""
        if pfa == 0:
            return 0.0
        return total_cost / pfa

    @staticmethod
    def cost_per_person(total_cost: float, team_size: int) -> float:
        return total_cost / team_size

    @staticmethod
    def hours_per_person(effort_hours: float, team_size: int) -> float:
        return effort_hours / team_size

    @staticmethod
    def _require_positive(configuration: EstimateConfiguration) -> None:
        problems = []
        if configuration.team_size is None or configuration.team_size <= 0:
            problems.append("Team size must be greater than 0")
        if configuration.hourly_rate is None or configuration.hourly_rate <= 0:
            problems.append("Hourly rate must be greater than 0")
        if configuration.productivity_factor is None or configuration.productivity_factor <= 0:
            problems.append("Productivity factor must be greater than 0")
        if (
            configuration.average_daily_working_hours is None
            or configuration.average_daily_working_hours <= 0
        ):
            problems.append("Average daily working hours must be greater than 0")
        if problems:
            logger.error("metrics_configuration_rejected", extra={
                "team_size": configuration.team_size,
                "hourly_rate": configuration.hourly_rate,
                "productivity_factor": configuration.productivity_factor,
                "daily_hours": configuration.average_daily_working_hours,
                "problems": problems,
            })
            raise InvalidConfigError(problems)

    @traced_engine("effort", "1.0", fingerprint_fields=("components", "configuration", "gsc"))
    def calculate_metrics(
        self,
        components: Iterable[ClassifiedComponent | ComponentMeasurement],
        configuration: EstimateConfiguration,
        gsc: GSCVector | Sequence[int] | None = None,
    ) -> EstimationMetrics:
        """
        Derive the complete EstimationMetrics for one estimate.

        Preconditions:
            Team size, hourly rate, productivity factor and daily hours
            are all positive.
        Postconditions:
            pfa == pfna * fa; effort == pfa * productivity factor;
            total_cost == effort * hourly rate.

        Raises:
            InvalidConfigError: If the configuration cannot be computed with.
            InvalidGSCError: If the GSC vector is non-empty and malformed.
            InvalidInputError: If a raw measurement has invalid counts.
        """
        t0 = time.monotonic()
        components = tuple(components)
        if gsc is not None and not isinstance(gsc, GSCVector):
            gsc = GSCVector(tuple(gsc))

        logger.info("metrics_calculation_started", extra={
            "component_count": len(components),
            "team_size": configuration.team_size,
            "productivity_factor": configuration.productivity_factor,
            "has_gsc": gsc is not None and not gsc.is_empty,
        })

        self._require_positive(configuration)

        pfna = self._aggregator.unadjusted(components)
        has_gsc = gsc is not None and not gsc.is_empty
        ni = self._aggregator.degree_of_influence(gsc) if has_gsc else 0
        fa = self._aggregator.adjustment_factor(gsc)
        pfa = self._aggregator.adjusted(pfna, fa)

        team_size = configuration.team_size
        effort = self.effort_hours(pfa, configuration.productivity_factor)
        days = self.duration_days(effort, team_size, configuration.average_daily_working_hours)
        cost = self.total_cost(effort, configuration.hourly_rate)

        metrics = EstimationMetrics(
            pfna=pfna,
            ni=ni,
            fa=fa,
            pfa=pfa,
            effort_hours=effort,
            duration_days=days,
            duration_weeks=self.duration_weeks(days),
            duration_months=self.duration_months(days),
            total_cost=cost,
            cost_per_function_point=self.cost_per_function_point(cost, pfa),
            cost_per_person=self.cost_per_person(cost, team_size),
            hours_per_person=self.hours_per_person(effort, team_size),
            team_size=team_size,
            hourly_rate=configuration.hourly_rate,
            average_daily_working_hours=configuration.average_daily_working_hours,
            productivity_factor=configuration.productivity_factor,
            has_gsc=has_gsc,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("metrics_calculated", extra={
            "pfna": pfna,
            "ni": ni,
            "fa": fa,
            "pfa": pfa,
            "effort_hours": effort,
            "duration_days": days,
            "total_cost": cost,
            "duration_ms": duration_ms,
        })
        return metrics


__all__ = [
    "EffortEstimator",
    "EstimationMetrics",
    "GSC_FACTOR_COUNT",
    "WORKING_DAYS_PER_MONTH",
    "WORKING_DAYS_PER_WEEK",
    "require_valid_configuration",
    "validate_configuration",
]
