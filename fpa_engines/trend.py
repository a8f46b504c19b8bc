"""
fpa_engines.trend -- Trend analysis across estimate versions.

Responsibility:
    Given an ordered sequence of estimate metrics (oldest first), report
    the first-to-last percentage change of a selected metric and whether
    it is increasing, decreasing or stable.  Also provides consecutive
    (pairwise) changes, a least-squares line over version index, a
    forecast along that line, and z-score anomaly detection.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel and sibling engine modules.

Invariants enforced:
    - Overall trend is first-to-last, never last-two; consecutive changes
      are a separate computation.
    - |percentage_change| < stability threshold  ->  STABLE.
    - Forecast values, including ``TrendResult.forecasted_value``, are
      floored at 0.

Failure modes:
    - InsufficientDataError for fewer than 2 entries in ``analyze``,
      ``linear_regression`` and ``forecast``.
    - ``detect_anomalies`` never raises; fewer than 4 points or zero
      variance gives no anomalies.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from fpa_kernel.domain.values import TrendDirection
from fpa_kernel.exceptions import InsufficientDataError
from fpa_kernel.logging_config import get_logger
from fpa_engines.effort import EstimationMetrics
from fpa_engines.tracer import traced_engine

logger = get_logger("engines.trend")

MIN_TREND_POINTS = 2
MIN_ANOMALY_POINTS = 4


class TrendMetric(str, Enum):
    """Metric tracked across versions; value is the EstimationMetrics field."""

    UNADJUSTED_FP = "pfna"
    ADJUSTED_FP = "pfa"
    EFFORT = "effort_hours"
    ADJUSTMENT_FACTOR = "fa"

    def read(self, metrics: EstimationMetrics) -> float:
        return getattr(metrics, self.value)


@dataclass(frozen=True)
class TrendPolicy:
    stability_threshold_percent: float = 5.0
    anomaly_z_score: float = 2.0


@dataclass(frozen=True)
class EstimateSnapshot:
    """One historical estimate version.  Identity stays with the caller."""

    version: int
    metrics: EstimationMetrics
    label: str | None = None


@dataclass(frozen=True)
class TrendResult:
    metric: TrendMetric | None
    trend: TrendDirection
    percentage_change: float
    values: tuple[float, ...]
    average_value: float
    min_value: float
    max_value: float
    forecasted_value: float
    confidence_level: float


@dataclass(frozen=True)
class RegressionFit:
    """Least-squares line over version index (0, 1, 2, ...)."""

    slope: float
    intercept: float
    r_squared: float

    def predict(self, index: float) -> float:
        return self.slope * index + self.intercept


def percentage_change(first: float, last: float) -> float:
    """(last - first) / first x 100; 0.0 against a zero baseline."""
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def consecutive_changes(values: Sequence[float]) -> tuple[float, ...]:
    """Pairwise percentage change between each value and the one before."""
    return tuple(
        percentage_change(previous, current)
        for previous, current in zip(values, values[1:])
    )


def _metric_values(
    entries: Sequence[EstimateSnapshot | EstimationMetrics | float],
    metric: TrendMetric,
) -> tuple[float, ...]:
    values = []
    for entry in entries:
        if isinstance(entry, EstimateSnapshot):
            entry = entry.metrics
        if isinstance(entry, EstimationMetrics):
            values.append(metric.read(entry))
        else:
            values.append(entry)
    return tuple(values)


def _require_points(values: Sequence[float], operation: str) -> None:
    if len(values) < MIN_TREND_POINTS:
        logger.warning("trend_insufficient_data", extra={
            "operation": operation,
            "required": MIN_TREND_POINTS,
            "actual": len(values),
        })
        raise InsufficientDataError(MIN_TREND_POINTS, len(values), operation)


class TrendAnalyzer:
    """
    Trend analyzer over a TrendPolicy.

    Contract:
        Entries are ordered oldest first; the analyzer never sorts.
    Guarantees:
        - Deterministic; entries may be EstimateSnapshot, EstimationMetrics
          or plain numbers.
    Non-goals:
        - No date-based spacing; versions are treated as equally spaced.
    """

    def __init__(self, policy: TrendPolicy | None = None) -> None:
        self._policy = policy or TrendPolicy()

    def direction(self, change: float, first: float = 1.0, last: float = 1.0) -> TrendDirection:
        """
        Bucket a percentage change.

        Against a zero baseline the percentage is reported as 0.0, so the
        direction falls back to the sign of (last - first).
        """
        if first == 0:
            if last > 0:
                return TrendDirection.INCREASING
            if last < 0:
                return TrendDirection.DECREASING
            return TrendDirection.STABLE
        if abs(change) < self._policy.stability_threshold_percent:
            return TrendDirection.STABLE
        return TrendDirection.INCREASING if change > 0 else TrendDirection.DECREASING

    @traced_engine("trend", "1.0", fingerprint_fields=("metric", "forecast_periods"))
    def analyze(
        self,
        entries: Sequence[EstimateSnapshot | EstimationMetrics | float],
        metric: TrendMetric = TrendMetric.ADJUSTED_FP,
        forecast_periods: int = 1,
    ) -> TrendResult:
        """
        Overall first-to-last trend of ``metric``.

        The result also carries the fitted value ``forecast_periods``
        versions past the last one (floored at 0) and a confidence level
        of r-squared x 100.

        Raises:
            InsufficientDataError: If fewer than 2 entries are given.
        """
        values = _metric_values(entries, metric)
        _require_points(values, "trend analysis")

        first, last = values[0], values[-1]
        change = percentage_change(first, last)
        trend = self.direction(change, first, last)
        fit = self.linear_regression(values)
        forecasted = max(0.0, fit.predict(len(values) - 1 + forecast_periods))

        result = TrendResult(
            metric=metric,
            trend=trend,
            percentage_change=change,
            values=values,
            average_value=sum(values) / len(values),
            min_value=min(values),
            max_value=max(values),
            forecasted_value=forecasted,
            confidence_level=fit.r_squared * 100,
        )
        logger.info("trend_analyzed", extra={
            "metric": metric.value,
            "points": len(values),
            "percentage_change": change,
            "trend": trend.value,
            "forecasted_value": forecasted,
        })
        return result

    def linear_regression(self, values: Sequence[float]) -> RegressionFit:
        """
        Least-squares fit of values against their index.

        Raises:
            InsufficientDataError: If fewer than 2 values are given.
        """
        _require_points(values, "linear regression")
        n = len(values)
        x_mean = (n - 1) / 2
        y_mean = sum(values) / n

        numerator = 0.0
        denominator = 0.0
        for x, y in enumerate(values):
            numerator += (x - x_mean) * (y - y_mean)
            denominator += (x - x_mean) ** 2
        slope = numerator / denominator if denominator != 0 else 0.0
        intercept = y_mean - slope * x_mean

        total_ss = 0.0
        residual_ss = 0.0
        for x, y in enumerate(values):
            total_ss += (y - y_mean) ** 2
            residual_ss += (y - (slope * x + intercept)) ** 2
        r_squared = 1 - residual_ss / total_ss if total_ss != 0 else 0.0

        return RegressionFit(slope=slope, intercept=intercept, r_squared=r_squared)

    def forecast(self, values: Sequence[float], periods: int) -> tuple[float, ...]:
        """Next ``periods`` values on the fitted line, floored at 0."""
        fit = self.linear_regression(values)
        last_index = len(values) - 1
        return tuple(
            max(0.0, fit.predict(last_index + step))
            for step in range(1, periods + 1)
        )

    def detect_anomalies(
        self,
        values: Sequence[float],
        threshold: float | None = None,
    ) -> tuple[int, ...]:
        """Indices whose population z-score exceeds ``threshold``."""
        if len(values) < MIN_ANOMALY_POINTS:
            return ()
        limit = self._policy.anomaly_z_score if threshold is None else threshold
        mean = sum(values) / len(values)
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        std_dev = math.sqrt(variance)
        if std_dev == 0:
            return ()
        anomalies = tuple(
            index for index, value in enumerate(values)
            if abs(value - mean) / std_dev > limit
        )
        if anomalies:
            logger.info("trend_anomalies_detected", extra={
                "indices": list(anomalies),
                "threshold": limit,
            })
        return anomalies
