"""
Tests for the Team Size Estimator.

Covers:
- Target-duration, fixed-duration and fixed-team scenarios
- Min/max team bounds and their durations
- Uncertainty buffer
- Ideal team bands
- Rejection of non-positive inputs
"""

import pytest

from fpa_engines.team_size import (
    TeamSizeEstimator,
    TeamSizeRecommendation,
    TeamSizingPolicy,
)
from fpa_kernel.exceptions import InvalidConfigError

# 6 h/day x 21 days
MONTHLY_HOURS = 126


class TestTargetDuration:
    """Default scenario: staff to hit the policy's target duration."""

    def setup_method(self):
        self.estimator = TeamSizeEstimator()

    def test_recommendation(self):
        result = self.estimator.estimate(pfa=100, productivity_factor=10)

        assert isinstance(result, TeamSizeRecommendation)
        assert result.base_effort_hours == pytest.approx(1000.0)
        assert result.buffer_hours == 0
        assert result.total_effort_hours == pytest.approx(1000.0)
        # 1000 / (126 x 3) = 2.65 -> 3
        assert result.recommended == 3
        assert result.min == 1
        assert result.max == 5
        assert result.recommended_duration_months == pytest.approx(1000 / (MONTHLY_HOURS * 3))
        assert result.working_days_per_month == 21

    def test_duration_range_follows_team_range(self):
        result = self.estimator.estimate(pfa=100, productivity_factor=10)
        assert result.min_duration_months == pytest.approx(1000 / (MONTHLY_HOURS * 5))
        assert result.max_duration_months == pytest.approx(1000 / MONTHLY_HOURS)
        assert result.min_duration_months < result.recommended_duration_months < result.max_duration_months

    def test_effort_in_days_and_months(self):
        result = self.estimator.estimate(pfa=63, productivity_factor=2)
        assert result.total_effort_days == pytest.approx(21.0)
        assert result.total_effort_months == pytest.approx(1.0)

    def test_tiny_project_has_team_of_one(self):
        result = self.estimator.estimate(pfa=1, productivity_factor=1)
        assert result.recommended == 1
        assert result.min == 1
        assert result.max == 2

    def test_custom_hours_per_day(self):
        result = self.estimator.estimate(pfa=100, productivity_factor=10, hours_per_day_per_person=8)
        # 1000 / (8 x 21 x 3) = 1.98 -> 2
        assert result.recommended == 2
        assert result.total_effort_days == pytest.approx(125.0)


class TestScenarios:

    def setup_method(self):
        self.estimator = TeamSizeEstimator()

    def test_fixed_duration(self):
        result = self.estimator.estimate(pfa=100, productivity_factor=10, duration_months=2)
        # 1000 / (126 x 2) = 3.97 -> 4
        assert result.recommended == 4
        # the four-person team finishes just inside the requested two months
        assert result.recommended_duration_months == pytest.approx(1000 / (MONTHLY_HOURS * 4))
        assert result.recommended_duration_months <= 2
        assert result.min == 2
        assert result.max == 6

    def test_generous_duration_stays_within_range(self):
        result = self.estimator.estimate(pfa=100, productivity_factor=10, duration_months=36)
        assert (result.recommended, result.min, result.max) == (1, 1, 2)
        assert result.recommended_duration_months == pytest.approx(1000 / MONTHLY_HOURS)
        assert result.recommended_duration_months <= result.max_duration_months
        assert result.min_duration_months <= result.recommended_duration_months

    def test_fixed_team(self):
        result = self.estimator.estimate(pfa=100, productivity_factor=10, team_size=10)
        assert result.recommended == 10
        assert result.recommended_duration_months == pytest.approx(1000 / (MONTHLY_HOURS * 10))

    def test_duration_wins_over_team(self):
        result = self.estimator.estimate(
            pfa=100, productivity_factor=10, duration_months=2, team_size=10,
        )
        assert result.recommended == 4
        assert result.recommended_duration_months == pytest.approx(1000 / (MONTHLY_HOURS * 4))

    def test_scenario_logged(self, captured_logs):
        self.estimator.estimate(pfa=100, productivity_factor=10, team_size=7)
        records = [r for r in captured_logs() if r["message"] == "team_size_estimated"]
        assert records[-1]["scenario"] == "fixed_team"
        assert records[-1]["recommended"] == 7


class TestBuffer:

    def test_buffer_added_to_effort(self):
        result = TeamSizeEstimator().estimate(pfa=100, productivity_factor=10, buffer_percentage=20)
        assert result.base_effort_hours == pytest.approx(1000.0)
        assert result.buffer_hours == pytest.approx(200.0)
        assert result.total_effort_hours == pytest.approx(1200.0)
        assert result.total_effort_days == pytest.approx(200.0)

    def test_policy_buffer_default(self):
        estimator = TeamSizeEstimator(TeamSizingPolicy(buffer_percentage=10))
        result = estimator.estimate(pfa=100, productivity_factor=10)
        assert result.buffer_hours == pytest.approx(100.0)

    def test_explicit_zero_overrides_policy(self):
        estimator = TeamSizeEstimator(TeamSizingPolicy(buffer_percentage=10))
        result = estimator.estimate(pfa=100, productivity_factor=10, buffer_percentage=0)
        assert result.buffer_hours == 0


class TestDurationTeamRelation:

    def setup_method(self):
        self.estimator = TeamSizeEstimator()

    def test_duration_for_team_size(self):
        assert self.estimator.duration_for_team_size(1260, 5) == pytest.approx(2.0)

    def test_team_size_for_duration(self):
        assert self.estimator.team_size_for_duration(1260, 2) == 5
        assert self.estimator.team_size_for_duration(1261, 2) == 6
        assert self.estimator.team_size_for_duration(1, 12) == 1

    def test_team_delivers_within_duration(self):
        for effort in (150.0, 1000.0, 9999.0):
            for months in (1.0, 2.5, 6.0):
                team = self.estimator.team_size_for_duration(effort, months)
                assert self.estimator.duration_for_team_size(effort, team) <= months + 1e-9

    def test_non_positive_inputs(self):
        with pytest.raises(InvalidConfigError):
            self.estimator.duration_for_team_size(100, 0)
        with pytest.raises(InvalidConfigError):
            self.estimator.team_size_for_duration(100, 0)

    @pytest.mark.parametrize("hours", [0, -6])
    def test_non_positive_hours_rejected(self, hours):
        with pytest.raises(InvalidConfigError, match="Hours per day per person must be greater than 0"):
            self.estimator.duration_for_team_size(1000, 5, hours_per_day_per_person=hours)
        with pytest.raises(InvalidConfigError, match="Hours per day per person must be greater than 0"):
            self.estimator.team_size_for_duration(1000, 2, hours_per_day_per_person=hours)

    def test_explicit_hours_used(self):
        # 1260 / (8 x 21 x 5)
        assert self.estimator.duration_for_team_size(
            1260, 5, hours_per_day_per_person=8,
        ) == pytest.approx(1.5)


class TestIdealTeamRange:

    @pytest.mark.parametrize("function_points,band", [
        (0, (1, 3)),
        (99, (1, 3)),
        (100, (2, 5)),
        (299, (2, 5)),
        (300, (4, 8)),
        (750, (6, 12)),
        (1499, (6, 12)),
        (1500, (10, 20)),
        (100000, (10, 20)),
    ])
    def test_bands(self, function_points, band):
        assert TeamSizeEstimator.ideal_team_range(function_points) == band


class TestRejectedInputs:

    def setup_method(self):
        self.estimator = TeamSizeEstimator()

    def test_zero_function_points(self):
        with pytest.raises(InvalidConfigError, match="Adjusted function points must be greater than 0"):
            self.estimator.estimate(pfa=0, productivity_factor=10)

    @pytest.mark.parametrize("hours", [0, -1.5])
    def test_non_positive_hours(self, hours):
        with pytest.raises(InvalidConfigError, match="Hours per day per person must be greater than 0"):
            self.estimator.estimate(pfa=100, productivity_factor=10, hours_per_day_per_person=hours)

    def test_negative_buffer(self):
        with pytest.raises(InvalidConfigError, match="Buffer percentage cannot be negative"):
            self.estimator.estimate(pfa=10, productivity_factor=10, buffer_percentage=-5)

    def test_all_problems_collected(self, captured_logs):
        with pytest.raises(InvalidConfigError) as exc:
            self.estimator.estimate(
                pfa=-1, productivity_factor=0, hours_per_day_per_person=0,
                duration_months=0, team_size=0,
            )
        assert len(exc.value.problems) == 5
        assert any(r["message"] == "team_size_rejected" for r in captured_logs())
