"""
Tests for the Trend Analyzer.

Covers:
- Direction buckets and the stability threshold
- Zero baseline
- Insufficient data
- Least-squares fit and forecast
- Anomaly detection
"""

import pytest

from fpa_engines.effort import EffortEstimator
from fpa_engines.trend import (
    EstimateSnapshot,
    TrendAnalyzer,
    TrendMetric,
    TrendPolicy,
    consecutive_changes,
    percentage_change,
)
from fpa_kernel.domain.values import (
    ComponentKind,
    ComponentMeasurement,
    EstimateConfiguration,
    TrendDirection,
)
from fpa_kernel.exceptions import InsufficientDataError


class TestAnalyze:

    def setup_method(self):
        self.analyzer = TrendAnalyzer()

    def test_small_drop_is_stable(self):
        result = self.analyzer.analyze([100, 105, 98])
        assert result.percentage_change == pytest.approx(-2.0)
        assert result.trend == TrendDirection.STABLE
        assert result.average_value == pytest.approx(101.0)
        assert result.min_value == 98
        assert result.max_value == 105
        assert result.values == (100, 105, 98)

    def test_increasing(self):
        result = self.analyzer.analyze([100, 150])
        assert result.percentage_change == pytest.approx(50.0)
        assert result.trend == TrendDirection.INCREASING

    def test_decreasing(self):
        result = self.analyzer.analyze([200, 150, 120])
        assert result.percentage_change == pytest.approx(-40.0)
        assert result.trend == TrendDirection.DECREASING

    def test_threshold_boundary(self):
        assert self.analyzer.analyze([100, 105]).trend == TrendDirection.INCREASING
        assert self.analyzer.analyze([100, 104.9]).trend == TrendDirection.STABLE

    def test_custom_threshold(self):
        analyzer = TrendAnalyzer(TrendPolicy(stability_threshold_percent=1.0))
        assert analyzer.analyze([100, 98]).trend == TrendDirection.DECREASING

    def test_zero_baseline(self):
        result = self.analyzer.analyze([0, 40])
        assert result.percentage_change == 0.0
        assert result.trend == TrendDirection.INCREASING
        assert self.analyzer.analyze([0, 0]).trend == TrendDirection.STABLE

    def test_forecast_and_confidence_on_result(self):
        result = self.analyzer.analyze([1, 2, 3])
        assert result.forecasted_value == pytest.approx(4.0)
        assert result.confidence_level == pytest.approx(100.0)

    def test_noisy_series_has_low_confidence(self):
        result = self.analyzer.analyze([100, 105, 98])
        # fitted line 102 - x; residuals -2, 4, -2
        assert result.forecasted_value == pytest.approx(99.0)
        assert result.confidence_level == pytest.approx((1 - 24 / 26) * 100)

    def test_forecast_periods_and_floor(self):
        assert self.analyzer.analyze([1, 2, 3], forecast_periods=3).forecasted_value == pytest.approx(6.0)
        assert self.analyzer.analyze([10, 5, 0]).forecasted_value == 0.0

    def test_flat_series(self):
        result = self.analyzer.analyze([50, 50, 50])
        assert result.forecasted_value == pytest.approx(50.0)
        assert result.confidence_level == 0.0

    def test_order_is_respected(self):
        assert self.analyzer.analyze([150, 100]).trend == TrendDirection.DECREASING

    @pytest.mark.parametrize("values", [[], [100]])
    def test_insufficient_data(self, values):
        with pytest.raises(InsufficientDataError, match="At least 2 data points") as exc:
            self.analyzer.analyze(values)
        assert exc.value.code == "INSUFFICIENT_DATA"


class TestMetricSelection:
    """Entries may be snapshots or metrics; the metric picks the field."""

    def setup_method(self):
        estimator = EffortEstimator()
        config = EstimateConfiguration(team_size=2, hourly_rate=100.0)
        small = [ComponentMeasurement.transaction(ComponentKind.INPUT, 1, 1)]
        large = small + [ComponentMeasurement.transaction(ComponentKind.OUTPUT, 1, 1)]
        self.first = estimator.calculate_metrics(small, config)
        self.second = estimator.calculate_metrics(large, config)

    def test_snapshots(self):
        snapshots = [EstimateSnapshot(1, self.first), EstimateSnapshot(2, self.second, "v2")]
        result = TrendAnalyzer().analyze(snapshots, TrendMetric.UNADJUSTED_FP)
        assert result.metric == TrendMetric.UNADJUSTED_FP
        assert result.values == (3, 7)
        assert result.percentage_change == pytest.approx(400 / 3)

    def test_metrics_effort(self):
        result = TrendAnalyzer().analyze([self.first, self.second], TrendMetric.EFFORT)
        assert result.values == pytest.approx((30.0, 70.0))

    def test_adjustment_factor(self):
        result = TrendAnalyzer().analyze([self.first, self.second], TrendMetric.ADJUSTMENT_FACTOR)
        assert result.trend == TrendDirection.STABLE


class TestChanges:

    def test_percentage_change(self):
        assert percentage_change(50, 75) == pytest.approx(50.0)
        assert percentage_change(0, 75) == 0.0

    def test_consecutive_changes(self):
        assert consecutive_changes([100, 110, 99]) == pytest.approx((10.0, -10.0))
        assert consecutive_changes([100]) == ()


class TestRegression:

    def setup_method(self):
        self.analyzer = TrendAnalyzer()

    def test_perfect_line(self):
        fit = self.analyzer.linear_regression([1, 2, 3])
        assert fit.slope == pytest.approx(1.0)
        assert fit.intercept == pytest.approx(1.0)
        assert fit.r_squared == pytest.approx(1.0)
        assert fit.predict(3) == pytest.approx(4.0)

    def test_flat_line(self):
        fit = self.analyzer.linear_regression([5, 5, 5])
        assert fit.slope == 0
        assert fit.intercept == pytest.approx(5.0)
        assert fit.r_squared == 0.0

    def test_imperfect_fit(self):
        fit = self.analyzer.linear_regression([1, 3, 2])
        assert fit.slope == pytest.approx(0.5)
        assert 0 < fit.r_squared < 1

    def test_forecast(self):
        assert self.analyzer.forecast([1, 2, 3], 2) == pytest.approx((4.0, 5.0))

    def test_forecast_floored_at_zero(self):
        assert self.analyzer.forecast([10, 5, 0], 2) == (0.0, 0.0)

    def test_regression_needs_two_points(self):
        with pytest.raises(InsufficientDataError, match="linear regression"):
            self.analyzer.linear_regression([7])


class TestAnomalies:

    def setup_method(self):
        self.analyzer = TrendAnalyzer()

    def test_single_outlier(self):
        # z = 2.236 for the last point
        assert self.analyzer.detect_anomalies([10, 10, 10, 10, 10, 50]) == (5,)

    def test_too_few_points(self):
        assert self.analyzer.detect_anomalies([1, 100, 1]) == ()

    def test_constant_series(self):
        assert self.analyzer.detect_anomalies([4, 4, 4, 4, 4]) == ()

    def test_custom_threshold(self):
        assert self.analyzer.detect_anomalies([10, 10, 10, 10, 10, 50], threshold=3.0) == ()
        assert self.analyzer.detect_anomalies([10, 10, 10, 20], threshold=1.5) == (3,)
