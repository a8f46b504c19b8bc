"""
fpa_engines.aggregation -- Function-point aggregation and adjustment.

Responsibility:
    Sum component function points into the unadjusted count (PFNA),
    compute the degree of influence (NI) from the 14 General System
    Characteristics, derive the adjustment factor (FA) and the adjusted
    count (PFA = PFNA x FA).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel and sibling engine modules.

Invariants enforced:
    - Additivity: PFNA of a list equals the sum of PFNA over any partition.
    - Empty GSC policy: an empty vector yields FA == 1.0 exactly.  This is
      NOT the formula at NI == 0 (which gives 0.65).
    - VAF formula: FA = 0.65 + 0.01 x NI for a full 14-value vector.

Failure modes:
    - InvalidGSCError if a non-empty vector does not have 14 values or
      any value lies outside [0, 5].
    - InvalidInputError propagated from classification when raw
      measurements are aggregated.

Usage:
    from fpa_engines.aggregation import FunctionPointAggregator
    from fpa_kernel.domain.values import GSCVector

    aggregator = FunctionPointAggregator()
    pfna = aggregator.unadjusted(classified_components)
    fa = aggregator.adjustment_factor(GSCVector.uniform(5))  # 1.35
    pfa = aggregator.adjusted(pfna, fa)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fpa_kernel.domain.values import (
    GSC_FACTOR_COUNT,
    GSC_MAX_VALUE,
    ComponentMeasurement,
    GSCVector,
    is_whole_number,
)
from fpa_kernel.exceptions import InvalidGSCError
from fpa_kernel.logging_config import get_logger
from fpa_engines.classification import ClassifiedComponent, ComplexityClassifier
from fpa_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")

BASE_ADJUSTMENT = 0.65
ADJUSTMENT_PER_INFLUENCE = 0.01
NO_ADJUSTMENT_FACTOR = 1.0


@dataclass(frozen=True)
class GSCFactor:
    """One of the 14 General System Characteristics."""

    id: int
    name: str
    description: str


GSC_FACTORS: tuple[GSCFactor, ...] = (
    GSCFactor(1, "Data Communications",
              "The degree to which the application communicates directly with the processor."),
    GSCFactor(2, "Distributed Data Processing",
              "The degree to which the application transfers data among physical components of the application."),
    GSCFactor(3, "Performance", "The performance considerations of the user."),
    GSCFactor(4, "Heavily Used Configuration",
              "The degree to which computer resource restrictions influence the development of the application."),
    GSCFactor(5, "Transaction Rate", "The rate of business transactions."),
    GSCFactor(6, "Online Data Entry", "The percentage of information that is entered online."),
    GSCFactor(7, "End-User Efficiency", "The degree of consideration for human factors and ease of use."),
    GSCFactor(8, "Online Update", "The degree to which internal logical files are updated online."),
    GSCFactor(9, "Complex Processing",
              "The degree to which processing logic influences the development of the application."),
    GSCFactor(10, "Reusability",
              "The degree to which the application has been specifically designed, developed, and supported for reuse."),
    GSCFactor(11, "Installation Ease", "The degree of difficulty in conversion and installation."),
    GSCFactor(12, "Operational Ease", "The degree to which the application addresses operational aspects."),
    GSCFactor(13, "Multiple Sites",
              "The degree to which the application has been specifically designed, developed, "
              "and supported for multiple installations."),
    GSCFactor(14, "Facilitate Change",
              "The degree to which the application has been specifically designed, developed, "
              "and supported to facilitate change."),
)


def gsc_problems(gsc: GSCVector) -> list[str]:
    """Every reason a GSC vector is invalid; empty list when it is usable."""
    if gsc.is_empty:
        return []
    if len(gsc) != GSC_FACTOR_COUNT:
        return [
            f"General System Characteristics must have exactly "
            f"{GSC_FACTOR_COUNT} values, got {len(gsc)}"
        ]
    problems = []
    for index, value in enumerate(gsc.values, start=1):
        if not is_whole_number(value):
            problems.append(f"GSC value {index} must be a whole number, got {value!r}")
        elif not 0 <= value <= GSC_MAX_VALUE:
            problems.append(f"GSC value {index} must be between 0 and {GSC_MAX_VALUE}")
    return problems


def _as_vector(gsc: GSCVector | Sequence[int] | None) -> GSCVector:
    if gsc is None:
        return GSCVector.empty()
    if isinstance(gsc, GSCVector):
        return gsc
    return GSCVector(tuple(gsc))


class FunctionPointAggregator:
    """
    Pure aggregator from classified components to adjusted function points.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - ``unadjusted([])`` is 0, not an error.
        - ``adjustment_factor`` of an empty or absent vector is 1.0.
    Non-goals:
        - Does not decide whether GSC should have been supplied; the risk
          assessor recommends completing it when it is missing.
    """

    def __init__(self, classifier: ComplexityClassifier | None = None) -> None:
        self._classifier = classifier or ComplexityClassifier()

    def unadjusted(
        self,
        components: Iterable[ClassifiedComponent | ComponentMeasurement],
    ) -> int:
        """
        PFNA: sum of component function points.

        Raw measurements are classified on the fly; classified components
        contribute their derived points.
        """
        pfna = 0
        count = 0
        for component in components:
            if isinstance(component, ComponentMeasurement):
                component = self._classifier.classify_measurement(component)
            pfna += component.function_points
            count += 1

        logger.debug("unadjusted_points_summed", extra={
            "component_count": count,
            "pfna": pfna,
        })
        return pfna

    def degree_of_influence(self, gsc: GSCVector | Sequence[int] | None) -> int:
        """
        NI: sum of the 14 GSC ratings (0 for an empty vector).

        Raises:
            InvalidGSCError: If the vector is non-empty and malformed.
        """
        vector = _as_vector(gsc)
        problems = gsc_problems(vector)
        if problems:
            logger.error("gsc_vector_invalid", extra={
                "gsc_length": len(vector),
                "problems": problems,
            })
            raise InvalidGSCError(vector.values, problems)
        return sum(vector.values)

    @staticmethod
    def adjustment_factor_from_ni(ni: int) -> float:
        """FA = 0.65 + 0.01 x NI."""
        return BASE_ADJUSTMENT + ADJUSTMENT_PER_INFLUENCE * ni

    @traced_engine("aggregation", "1.0", fingerprint_fields=("gsc",))
    def adjustment_factor(self, gsc: GSCVector | Sequence[int] | None) -> float:
        """
        FA for a GSC vector.

        An empty or absent vector means "no adjustment requested" and
        returns exactly 1.0, bypassing the formula.
        """
        vector = _as_vector(gsc)
        if vector.is_empty:
            logger.debug("adjustment_skipped_no_gsc", extra={
                "fa": NO_ADJUSTMENT_FACTOR,
            })
            return NO_ADJUSTMENT_FACTOR

        ni = self.degree_of_influence(vector)
        fa = self.adjustment_factor_from_ni(ni)
        logger.debug("adjustment_factor_calculated", extra={
            "ni": ni,
            "fa": fa,
        })
        return fa

    @staticmethod
    def adjusted(pfna: float, fa: float) -> float:
        """PFA = PFNA x FA."""
        return pfna * fa
