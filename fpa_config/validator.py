"""
Policy validator (``fpa_config.validator``).

Responsibility
--------------
Validates a parsed ``EstimationPolicy`` before it is handed to the
engines, so that a bad threshold is caught at load time rather than
producing quietly wrong estimates.

Invariants enforced
-------------------
* Every "medium" threshold lies below its "high" counterpart.
* Factor bands are ascending pairs.
* Durations, hours and working days are positive; penalties are not
  negative.
* Estimate defaults fall inside the configuration ranges the effort
  engine accepts.

Failure modes
-------------
* Errors (``PolicyValidationResult.errors``)  -> the policy MUST NOT be
  used.
* Warnings  -> the policy is usable but unusual.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fpa_config.schema import EstimationPolicy
from fpa_engines.effort import DAILY_HOURS_RANGE, PRODUCTIVITY_FACTOR_RANGE


@dataclass
class PolicyValidationResult:
    """
    Result of policy validation.

    ``is_valid`` is True only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_policy(policy: EstimationPolicy) -> PolicyValidationResult:
    """Validate every section of a policy set."""
    result = PolicyValidationResult()

    _validate_defaults(policy, result)
    _validate_team_sizing(policy, result)
    _validate_risk(policy, result)
    _validate_quality(policy, result)
    _validate_trend(policy, result)

    return result


def _validate_defaults(policy: EstimationPolicy, result: PolicyValidationResult) -> None:
    d = policy.defaults
    low, high = DAILY_HOURS_RANGE
    if not low <= d.average_daily_working_hours <= high:
        result.add_error(
            f"defaults.average_daily_working_hours must be between {low} and {high}"
        )
    low, high = PRODUCTIVITY_FACTOR_RANGE
    if not low <= d.productivity_factor <= high:
        result.add_error(f"defaults.productivity_factor must be between {low} and {high}")


def _validate_team_sizing(policy: EstimationPolicy, result: PolicyValidationResult) -> None:
    t = policy.team_sizing
    if t.target_duration_months <= 0:
        result.add_error("team_sizing.target_duration_months must be greater than 0")
    if not 0 <= t.size_bound < 1:
        result.add_error("team_sizing.size_bound must be in [0, 1)")
    if t.working_days_per_month <= 0:
        result.add_error("team_sizing.working_days_per_month must be greater than 0")
    if not 0 < t.hours_per_day_per_person <= 24:
        result.add_error("team_sizing.hours_per_day_per_person must be in (0, 24]")
    if t.buffer_percentage < 0:
        result.add_error("team_sizing.buffer_percentage cannot be negative")
    elif t.buffer_percentage > 100:
        result.add_warning(
            f"team_sizing.buffer_percentage of {t.buffer_percentage} more than doubles effort"
        )


def _validate_risk(policy: EstimationPolicy, result: PolicyValidationResult) -> None:
    r = policy.risk
    pairs = (
        ("team_size", r.team_size_medium, r.team_size_high),
        ("duration_months", r.duration_months_medium, r.duration_months_high),
        ("productivity", r.productivity_medium, r.productivity_high),
        ("cost", r.cost_medium, r.cost_high),
        ("risk_score", r.medium_risk_score, r.high_risk_score),
    )
    for name, medium, high in pairs:
        if medium < 0 or high < 0:
            result.add_error(f"risk.{name} thresholds cannot be negative")
        elif medium > high:
            result.add_error(f"risk.{name}_medium ({medium}) exceeds {name}_high ({high})")

    bands = (
        ("team_size_factor", r.team_size_factor),
        ("duration_factor", r.duration_factor),
        ("complexity_factor", r.complexity_factor),
        ("productivity_factor", r.productivity_factor),
    )
    for name, band in bands:
        if len(band) != 2:
            result.add_error(f"risk.{name} must have exactly 2 bounds")
        elif band[0] > band[1]:
            result.add_error(f"risk.{name} bounds must be ascending")

    if r.complexity_factor and max(r.complexity_factor) > 100:
        result.add_warning("risk.complexity_factor exceeds 100 percent")


def _validate_quality(policy: EstimationPolicy, result: PolicyValidationResult) -> None:
    q = policy.quality
    if q.initial_score <= 0:
        result.add_error("quality.initial_score must be greater than 0")
    penalties = (
        ("missing_team_size_penalty", q.missing_team_size_penalty),
        ("missing_hourly_rate_penalty", q.missing_hourly_rate_penalty),
        ("short_duration_penalty", q.short_duration_penalty),
        ("productivity_penalty", q.productivity_penalty),
        ("no_components_penalty", q.no_components_penalty),
    )
    for name, penalty in penalties:
        if penalty < 0:
            result.add_error(f"quality.{name} cannot be negative")
    if q.min_productivity_factor >= q.max_productivity_factor:
        result.add_error(
            "quality.min_productivity_factor must be below max_productivity_factor"
        )


def _validate_trend(policy: EstimationPolicy, result: PolicyValidationResult) -> None:
    t = policy.trend
    if t.stability_threshold_percent < 0:
        result.add_error("trend.stability_threshold_percent cannot be negative")
    if t.anomaly_z_score <= 0:
        result.add_error("trend.anomaly_z_score must be greater than 0")
