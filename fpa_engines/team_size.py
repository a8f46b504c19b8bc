"""
fpa_engines.team_size -- Team-size and delivery-duration planning.

Responsibility:
    Recommend a team size (with a min/max band) for delivering an
    adjusted function-point count, and the delivery duration that goes
    with each size.  Supports the fixed-duration and fixed-team planning
    scenarios and an optional uncertainty buffer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel and sibling engine modules.

Invariants enforced:
    - Inverse relation: the largest team pairs with the shortest duration
      (``min_duration_months`` comes from ``max``), the smallest team with
      the longest.
    - All sizes are integral and at least 1.
    - Every reported duration is derived from a team size, so
      ``min_duration_months <= recommended_duration_months <=
      max_duration_months`` holds in every scenario.
    - Planning uses productive hours per person per day (default 6), not
      the raw working day used for cost and duration elsewhere.

Failure modes:
    - InvalidConfigError when pfa, productivity factor or productive hours
      are not positive, when a fixed duration or team size is not
      positive, or when the buffer is negative.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from fpa_kernel.exceptions import InvalidConfigError
from fpa_kernel.logging_config import get_logger
from fpa_engines.effort import WORKING_DAYS_PER_MONTH
from fpa_engines.tracer import traced_engine

logger = get_logger("engines.team_size")

# (upper bound of adjusted FP, (min team, max team)); last band is open.
IDEAL_TEAM_BANDS: tuple[tuple[float, tuple[int, int]], ...] = (
    (100, (1, 3)),
    (300, (2, 5)),
    (750, (4, 8)),
    (1500, (6, 12)),
    (math.inf, (10, 20)),
)


@dataclass(frozen=True)
class TeamSizingPolicy:
    """Planning constants for team sizing."""

    target_duration_months: float = 3.0
    size_bound: float = 0.4
    working_days_per_month: int = WORKING_DAYS_PER_MONTH
    hours_per_day_per_person: float = 6.0
    buffer_percentage: float = 0.0


@dataclass(frozen=True)
class TeamSizeRecommendation:
    """Result of a team-size estimate."""

    recommended: int
    min: int
    max: int
    recommended_duration_months: float
    min_duration_months: float
    max_duration_months: float
    base_effort_hours: float
    buffer_hours: float
    total_effort_hours: float
    total_effort_days: float
    total_effort_months: float
    working_days_per_month: int


class TeamSizeEstimator:
    """
    Team-size planner over a TeamSizingPolicy.

    Contract:
        No I/O, fully deterministic for a given policy.
    Guarantees:
        - ``recommended`` = ceil(effort / (hours x days/month x target)),
          floored at 1.
        - ``min``/``max`` = recommended scaled by -/+ ``size_bound``,
          floored/ceiled and each at least 1.
    Non-goals:
        - Does not model ramp-up or communication overhead; the risk
          assessor flags large teams.
    """

    def __init__(self, policy: TeamSizingPolicy | None = None) -> None:
        self._policy = policy or TeamSizingPolicy()

    @property
    def policy(self) -> TeamSizingPolicy:
        return self._policy

    def _monthly_hours(self, hours_per_day: float) -> float:
        return hours_per_day * self._policy.working_days_per_month

    def _productive_hours(self, hours_per_day_per_person: float | None) -> float:
        if hours_per_day_per_person is None:
            return self._policy.hours_per_day_per_person
        if hours_per_day_per_person <= 0:
            raise InvalidConfigError(["Hours per day per person must be greater than 0"])
        return hours_per_day_per_person

    def duration_for_team_size(
        self,
        total_effort_hours: float,
        team_size: int,
        hours_per_day_per_person: float | None = None,
    ) -> float:
        """Months a team of ``team_size`` needs to deliver the effort."""
        hours = self._productive_hours(hours_per_day_per_person)
        if team_size <= 0:
            raise InvalidConfigError(["Team size must be greater than 0"])
        return total_effort_hours / (self._monthly_hours(hours) * team_size)

    def team_size_for_duration(
        self,
        total_effort_hours: float,
        duration_months: float,
        hours_per_day_per_person: float | None = None,
    ) -> int:
        """Smallest whole team that delivers the effort within the duration."""
        hours = self._productive_hours(hours_per_day_per_person)
        if duration_months <= 0:
            raise InvalidConfigError(["Project duration must be greater than 0"])
        raw = total_effort_hours / (self._monthly_hours(hours) * duration_months)
        return max(1, math.ceil(raw))

    @staticmethod
    def ideal_team_range(function_points: float) -> tuple[int, int]:
        """Industry team-size band (min, max) for a project of this size."""
        for upper, band in IDEAL_TEAM_BANDS:
            if function_points < upper:
                return band
        return IDEAL_TEAM_BANDS[-1][1]

    def _check_inputs(
        self,
        pfa: float,
        productivity_factor: float,
        hours_per_day: float,
        duration_months: float | None,
        team_size: int | None,
        buffer_percentage: float,
    ) -> None:
        problems = []
        if pfa is None or pfa <= 0:
            problems.append("Adjusted function points must be greater than 0")
        if productivity_factor is None or productivity_factor <= 0:
            problems.append("Productivity factor must be greater than 0")
        if hours_per_day is None or hours_per_day <= 0:
            problems.append("Hours per day per person must be greater than 0")
        if duration_months is not None and duration_months <= 0:
            problems.append("Project duration must be greater than 0")
        if team_size is not None and team_size <= 0:
            problems.append("Team size must be greater than 0")
        if buffer_percentage < 0:
            problems.append("Buffer percentage cannot be negative")
        if problems:
            logger.error("team_size_rejected", extra={
                "pfa": pfa,
                "productivity_factor": productivity_factor,
                "hours_per_day_per_person": hours_per_day,
                "problems": problems,
            })
            raise InvalidConfigError(problems)

    @traced_engine(
        "team_size", "1.0",
        fingerprint_fields=("pfa", "productivity_factor", "hours_per_day_per_person"),
    )
    def estimate(
        self,
        pfa: float,
        productivity_factor: float,
        hours_per_day_per_person: float | None = None,
        duration_months: float | None = None,
        team_size: int | None = None,
        buffer_percentage: float | None = None,
    ) -> TeamSizeRecommendation:
        """
        Recommend a team size and the matching durations.

        Args:
            pfa: Adjusted function points.
            productivity_factor: Hours per function point.
            hours_per_day_per_person: Productive hours; policy default 6.
            duration_months: Fixed delivery duration.  The recommendation
                becomes the smallest team that meets it, and the reported
                duration is what that team needs, which is never longer.
            team_size: Fixed team.  The recommendation keeps this team and
                reports the duration it needs.  Ignored when a duration is
                also fixed.
            buffer_percentage: Uncertainty buffer added to the base effort.

        Raises:
            InvalidConfigError: On any non-positive input.
        """
        policy = self._policy
        hours = (
            policy.hours_per_day_per_person
            if hours_per_day_per_person is None
            else hours_per_day_per_person
        )
        buffer = policy.buffer_percentage if buffer_percentage is None else buffer_percentage
        self._check_inputs(pfa, productivity_factor, hours, duration_months, team_size, buffer)

        base_effort = pfa * productivity_factor
        buffer_hours = base_effort * buffer / 100
        total_effort = base_effort + buffer_hours
        total_days = total_effort / hours
        total_months = total_days / policy.working_days_per_month

        if duration_months is not None:
            scenario = "fixed_duration"
            recommended = self.team_size_for_duration(total_effort, duration_months, hours)
        elif team_size is not None:
            scenario = "fixed_team"
            recommended = team_size
        else:
            scenario = "target_duration"
            recommended = self.team_size_for_duration(
                total_effort, policy.target_duration_months, hours,
            )

        smallest = max(1, math.floor(recommended * (1 - policy.size_bound)))
        largest = max(1, math.ceil(recommended * (1 + policy.size_bound)))

        result = TeamSizeRecommendation(
            recommended=recommended,
            min=smallest,
            max=largest,
            recommended_duration_months=self.duration_for_team_size(
                total_effort, recommended, hours,
            ),
            min_duration_months=self.duration_for_team_size(total_effort, largest, hours),
            max_duration_months=self.duration_for_team_size(total_effort, smallest, hours),
            base_effort_hours=base_effort,
            buffer_hours=buffer_hours,
            total_effort_hours=total_effort,
            total_effort_days=total_days,
            total_effort_months=total_months,
            working_days_per_month=policy.working_days_per_month,
        )

        logger.info("team_size_estimated", extra={
            "scenario": scenario,
            "recommended": recommended,
            "min": smallest,
            "max": largest,
            "total_effort_hours": total_effort,
        })
        return result
