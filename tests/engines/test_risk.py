"""
Tests for the Risk Assessor.

Covers:
- Risk score accumulation and overall level
- Per-factor buckets with reasons
- High-complexity share
- Recommendations and their order
- Quality score penalties
- Policy overrides
"""

import pytest

from fpa_engines.classification import ComplexityClassifier
from fpa_engines.effort import EstimationMetrics
from fpa_engines.risk import (
    COMPLEXITY_REASONS,
    QUALITY_FAST_PRODUCTIVITY,
    QUALITY_HOURLY_RATE_ERROR,
    QUALITY_NO_COMPONENTS,
    QUALITY_SHORT_DURATION,
    QUALITY_SLOW_PRODUCTIVITY,
    QUALITY_TEAM_SIZE_ERROR,
    RECOMMEND_COST_MONITORING,
    RECOMMEND_GSC,
    RECOMMEND_PHASES,
    RECOMMEND_PROCESS_REVIEW,
    RECOMMEND_SPLIT_TEAM,
    TEAM_SIZE_REASONS,
    QualityPolicy,
    RiskAssessor,
    RiskPolicy,
    high_complexity_share,
)
from fpa_kernel.domain.values import (
    ComponentKind,
    ComponentMeasurement,
    EstimateConfiguration,
    RiskLevel,
)


def _metrics(
    team_size=5,
    duration_months=2.0,
    productivity_factor=10.0,
    total_cost=50_000.0,
    has_gsc=True,
    duration_days=None,
) -> EstimationMetrics:
    days = duration_months * 21 if duration_days is None else duration_days
    return EstimationMetrics(
        pfna=100,
        ni=35,
        fa=1.0,
        pfa=100.0,
        effort_hours=1000.0,
        duration_days=days,
        duration_weeks=days / 5,
        duration_months=duration_months,
        total_cost=total_cost,
        cost_per_function_point=total_cost / 100,
        cost_per_person=total_cost / team_size,
        hours_per_person=1000.0 / team_size,
        team_size=team_size,
        hourly_rate=50.0,
        average_daily_working_hours=8.0,
        productivity_factor=productivity_factor,
        has_gsc=has_gsc,
    )


def _components():
    """Two LOW-tier components: 7 + 3 points, no high-complexity share."""
    return ComplexityClassifier().classify_all([
        ComponentMeasurement.data_function(ComponentKind.DATA_INTERNAL, 1, 10),
        ComponentMeasurement.transaction(ComponentKind.INPUT, 1, 4),
    ])


class TestRiskScore:

    def setup_method(self):
        self.assessor = RiskAssessor()

    def test_high_risk_scenario(self):
        """Team 12, 14 months, PF 22, cost 600k: every factor at +2."""
        assessment = self.assessor.assess(_metrics(
            team_size=12, duration_months=14, productivity_factor=22, total_cost=600_000,
        ), _components())
        assert assessment.risk_score == 8
        assert assessment.overall_risk == RiskLevel.HIGH

    def test_low_risk_scenario(self):
        assessment = self.assessor.assess(_metrics(), _components())
        assert assessment.risk_score == 0
        assert assessment.overall_risk == RiskLevel.LOW

    def test_thresholds_are_strict(self):
        assert self.assessor.score(10, 12, 20, 500_000) == 4
        assert self.assessor.score(5, 6, 15, 100_000) == 0
        assert self.assessor.score(6, 0, 0, 0) == 1
        assert self.assessor.score(11, 0, 0, 0) == 2

    @pytest.mark.parametrize("score,level", [
        (0, RiskLevel.LOW),
        (1, RiskLevel.LOW),
        (2, RiskLevel.MEDIUM),
        (3, RiskLevel.MEDIUM),
        (4, RiskLevel.HIGH),
        (8, RiskLevel.HIGH),
    ])
    def test_overall_level(self, score, level):
        assert self.assessor.overall_risk(score) == level


class TestFactors:

    def setup_method(self):
        self.assessor = RiskAssessor()

    def test_team_size_buckets(self):
        for team, level in ((3, RiskLevel.LOW), (8, RiskLevel.MEDIUM), (9, RiskLevel.HIGH)):
            factor = self.assessor.assess_factors(team, 1, 0, 10)["team_size"]
            assert factor.risk == level
            assert factor.reason == TEAM_SIZE_REASONS[level]
            assert factor.value == team

    def test_duration_and_productivity_buckets(self):
        factors = self.assessor.assess_factors(1, 12.5, 0, 12)
        assert factors["duration"].risk == RiskLevel.HIGH
        assert factors["productivity"].risk == RiskLevel.LOW
        factors = self.assessor.assess_factors(1, 3.5, 0, 18)
        assert factors["duration"].risk == RiskLevel.MEDIUM
        assert factors["productivity"].risk == RiskLevel.MEDIUM

    def test_complexity_bucket(self):
        factors = self.assessor.assess_factors(1, 1, 41, 10)
        assert factors["complexity"].risk == RiskLevel.HIGH
        assert factors["complexity"].reason == COMPLEXITY_REASONS[RiskLevel.HIGH]

    def test_factors_property(self):
        assessment = self.assessor.assess(_metrics(), _components())
        assert set(assessment.factors) == {"team_size", "duration", "complexity", "productivity"}
        assert assessment.factors["duration"] is assessment.duration


class TestHighComplexityShare:

    def test_share_of_points(self):
        classifier = ComplexityClassifier()
        components = classifier.classify_all([
            ComponentMeasurement.data_function(ComponentKind.DATA_INTERNAL, 6, 51),  # HIGH 15
            ComponentMeasurement.transaction(ComponentKind.INPUT, 1, 1),  # LOW 3
            ComponentMeasurement.transaction(ComponentKind.OUTPUT, 4, 20),  # HIGH 7
        ])
        assert high_complexity_share(components) == pytest.approx(22 / 25 * 100)

    def test_no_components(self):
        assert high_complexity_share([]) == 0.0

    def test_share_feeds_assessment(self):
        classifier = ComplexityClassifier()
        components = classifier.classify_all([
            ComponentMeasurement.data_function(ComponentKind.DATA_INTERNAL, 6, 51),
        ])
        assessment = RiskAssessor().assess(_metrics(), components)
        assert assessment.complexity.value == pytest.approx(100.0)
        assert assessment.complexity.risk == RiskLevel.HIGH


class TestRecommendations:

    def setup_method(self):
        self.assessor = RiskAssessor()

    def test_all_triggered_in_order(self):
        advice = self.assessor.recommendations(9, 13, 19, 200_001, has_gsc=False)
        assert advice == (
            RECOMMEND_SPLIT_TEAM,
            RECOMMEND_PHASES,
            RECOMMEND_PROCESS_REVIEW,
            RECOMMEND_GSC,
            RECOMMEND_COST_MONITORING,
        )

    def test_none_at_thresholds(self):
        assert self.assessor.recommendations(8, 12, 18, 200_000, has_gsc=True) == ()

    def test_missing_gsc_recommended(self):
        assessment = self.assessor.assess(_metrics(has_gsc=False), _components())
        assert assessment.recommendations == (RECOMMEND_GSC,)


class TestQuality:

    def setup_method(self):
        self.assessor = RiskAssessor()

    def test_perfect_score(self):
        config = EstimateConfiguration(team_size=5, hourly_rate=100.0)
        quality = self.assessor.validate_quality(config, component_count=3, duration_days=10)
        assert quality.quality_score == 100
        assert quality.is_valid
        assert quality.warnings == ()

    def test_missing_configuration(self):
        config = EstimateConfiguration(team_size=None, hourly_rate=None)
        quality = self.assessor.validate_quality(config, component_count=3)
        assert quality.quality_score == 60
        assert quality.errors == (QUALITY_TEAM_SIZE_ERROR, QUALITY_HOURLY_RATE_ERROR)
        assert not quality.is_valid

    def test_short_duration_and_fast_productivity(self):
        config = EstimateConfiguration(team_size=5, hourly_rate=100.0, productivity_factor=4)
        quality = self.assessor.validate_quality(config, component_count=1, duration_days=0.5)
        assert quality.quality_score == 85
        assert quality.warnings == (QUALITY_SHORT_DURATION, QUALITY_FAST_PRODUCTIVITY)

    def test_slow_productivity(self):
        config = EstimateConfiguration(team_size=5, hourly_rate=100.0, productivity_factor=26)
        quality = self.assessor.validate_quality(config, component_count=1)
        assert quality.warnings == (QUALITY_SLOW_PRODUCTIVITY,)
        assert quality.quality_score == 95

    def test_no_components(self):
        config = EstimateConfiguration(team_size=5, hourly_rate=100.0)
        quality = self.assessor.validate_quality(config, component_count=0)
        assert quality.warnings == (QUALITY_NO_COMPONENTS,)
        assert quality.quality_score == 85

    def test_score_floored_at_zero(self):
        harsh = QualityPolicy(missing_team_size_penalty=80, missing_hourly_rate_penalty=80)
        config = EstimateConfiguration(team_size=0, hourly_rate=0)
        quality = RiskAssessor(quality_policy=harsh).validate_quality(config, component_count=0)
        assert quality.quality_score == 0

    def test_assessment_with_components_keeps_full_score(self, captured_logs):
        assessment = self.assessor.assess(_metrics(), _components())
        assert assessment.quality.quality_score == 100
        assert QUALITY_NO_COMPONENTS not in assessment.quality.warnings
        record = [r for r in captured_logs() if r["message"] == "risk_assessed"][-1]
        assert record["quality_score"] == 100
        assert record["high_complexity_share"] == 0.0

    def test_assessment_with_explicit_empty_components(self):
        assessment = self.assessor.assess(_metrics(), [])
        assert assessment.quality.quality_score == 85
        assert QUALITY_NO_COMPONENTS in assessment.quality.warnings

    def test_components_are_required(self):
        with pytest.raises(TypeError):
            self.assessor.assess(_metrics())


class TestPolicyOverride:

    def test_stricter_team_threshold(self):
        assessor = RiskAssessor(RiskPolicy(team_size_high=4, team_size_medium=2))
        assert assessor.score(5, 0, 0, 0) == 2

    def test_assessment_is_logged(self, captured_logs):
        RiskAssessor().assess(_metrics(team_size=12), _components())
        records = [r for r in captured_logs() if r["message"] == "risk_assessed"]
        assert records[-1]["risk_score"] == 2
        assert records[-1]["overall_risk"] == "medium"
