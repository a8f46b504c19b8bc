"""
fpa_engines.classification -- Component complexity classification.

Responsibility:
    Map the two structural counts of a component (record types or file
    types referenced, times data element types) to a complexity tier via
    fixed 3x3 rule matrices, and look up the function-point weight for
    that tier.  Also provides the ordered component validation checks
    (type, DET, TR/FTR, plausibility, consistency) that report every
    problem without raising.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fpa_kernel.

Invariants enforced:
    - Determinism: (kind, count1, count2) always yields the same
      (tier, function_points); there is no state.
    - Function points are only ever derived from classification; a
      ClassifiedComponent cannot be built from a free-standing points value.
    - Dual-calculation queries take the higher of the two side tiers.

Failure modes:
    - InvalidInputError from ``classify`` when data elements < 1, record
      types < 1 for data kinds, or any count is negative or missing.
    - ``validate_component`` never raises for bad counts; it reports them.

Usage:
    from fpa_engines.classification import ComplexityClassifier
    from fpa_kernel.domain.values import ComponentKind

    classifier = ComplexityClassifier()
    tier, points = classifier.classify(ComponentKind.DATA_INTERNAL, 2, 20)
    # (ComplexityTier.AVERAGE, 10)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fpa_kernel.domain.values import (
    ComplexityTier,
    ComponentKind,
    ComponentMeasurement,
    QuerySide,
    is_whole_number,
)
from fpa_kernel.exceptions import InvalidInputError
from fpa_kernel.logging_config import get_logger
from fpa_engines.tracer import traced_engine

logger = get_logger("engines.classification")

_L = ComplexityTier.LOW
_A = ComplexityTier.AVERAGE
_H = ComplexityTier.HIGH

# Rows: bucketed first count.  Columns: bucketed data elements.
STANDARD_MATRIX: tuple[tuple[ComplexityTier, ...], ...] = (
    (_L, _L, _A),
    (_L, _A, _H),
    (_A, _H, _H),
)


@dataclass(frozen=True)
class ComplexityRule:
    """
    Bucket thresholds plus the rule matrix for one family of components.

    ``row_bounds`` and ``column_bounds`` hold the inclusive upper limit of
    bucket 0 and bucket 1; anything above the second limit is bucket 2.
    """

    row_bounds: tuple[int, int]
    column_bounds: tuple[int, int]
    matrix: tuple[tuple[ComplexityTier, ...], ...] = STANDARD_MATRIX

    def row_bucket(self, value: int) -> int:
        return _bucket(value, self.row_bounds)

    def column_bucket(self, value: int) -> int:
        return _bucket(value, self.column_bounds)

    def tier(self, first_count: int, data_elements: int) -> ComplexityTier:
        return self.matrix[self.row_bucket(first_count)][self.column_bucket(data_elements)]


def _bucket(value: int, bounds: tuple[int, int]) -> int:
    if value <= bounds[0]:
        return 0
    if value <= bounds[1]:
        return 1
    return 2


# Data functions: TR {1, 2-5, >5} x DET {<20, 20-50, >50}
DATA_RULE = ComplexityRule(row_bounds=(1, 5), column_bounds=(19, 50))
# External inputs: FTR {<2, 2, >2} x DET {<5, 5-15, >15}
INPUT_RULE = ComplexityRule(row_bounds=(1, 2), column_bounds=(4, 15))
# External outputs and queries: FTR {<2, 2-3, >3} x DET {<6, 6-19, >19}
OUTPUT_QUERY_RULE = ComplexityRule(row_bounds=(1, 3), column_bounds=(5, 19))

COMPLEXITY_RULES: dict[ComponentKind, ComplexityRule] = {
    ComponentKind.DATA_INTERNAL: DATA_RULE,
    ComponentKind.DATA_EXTERNAL: DATA_RULE,
    ComponentKind.INPUT: INPUT_RULE,
    ComponentKind.OUTPUT: OUTPUT_QUERY_RULE,
    ComponentKind.QUERY: OUTPUT_QUERY_RULE,
}

FUNCTION_POINT_WEIGHTS: dict[ComponentKind, dict[ComplexityTier, int]] = {
    ComponentKind.DATA_INTERNAL: {_L: 7, _A: 10, _H: 15},
    ComponentKind.DATA_EXTERNAL: {_L: 5, _A: 7, _H: 10},
    ComponentKind.INPUT: {_L: 3, _A: 4, _H: 6},
    ComponentKind.OUTPUT: {_L: 4, _A: 5, _H: 7},
    ComponentKind.QUERY: {_L: 3, _A: 4, _H: 6},
}

# Plausibility limits; exceeding them is a warning, not an error.
DATA_DET_WARNING_LIMIT = 200
TRANSACTION_DET_WARNING_LIMIT = 100
RECORD_TYPES_WARNING_LIMIT = 20
FILE_TYPES_WARNING_LIMIT = 10


@dataclass(frozen=True)
class ClassifiedComponent:
    """
    A measurement together with its derived classification.

    Contract:
        Only produced by ``ComplexityClassifier.classify_measurement``.
    Guarantees:
        - ``function_points`` equals the weight table entry for
          (measurement.kind, complexity_tier).
    """

    measurement: ComponentMeasurement
    complexity_tier: ComplexityTier
    function_points: int
    used_dual_calculation: bool = False

    @property
    def kind(self) -> ComponentKind:
        return self.measurement.kind


def weight_for(kind: ComponentKind, tier: ComplexityTier) -> int:
    """Function-point weight for a kind at a complexity tier."""
    return FUNCTION_POINT_WEIGHTS[kind][tier]


def _first_count_field(kind: ComponentKind) -> str:
    return "record_types" if kind.is_data else "file_types_referenced"


class ComplexityClassifier:
    """
    Pure classifier for FPA components.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - ``classify`` returns the matrix tier and weight for any valid
          (kind, count1, count2).
        - ``classify_query`` returns the tier with the higher ordinal of the
          two sides; equal tiers give identical points either way.
    Non-goals:
        - Does not decide whether a query should be counted dually; that
          is the shape of the measurement it is given.
    """

    @staticmethod
    def _require_counts(kind: ComponentKind, first_count: int | None, data_elements: int | None) -> None:
        first_field = _first_count_field(kind)
        first_minimum = 1 if kind.is_data else 0
        if not is_whole_number(first_count) or first_count < first_minimum:
            logger.error("classification_rejected", extra={
                "kind": kind.value,
                "field": first_field,
                "value": first_count,
            })
            raise InvalidInputError(kind.value, first_field, first_count, first_minimum)
        if not is_whole_number(data_elements) or data_elements < 1:
            logger.error("classification_rejected", extra={
                "kind": kind.value,
                "field": "data_elements",
                "value": data_elements,
            })
            raise InvalidInputError(kind.value, "data_elements", data_elements, 1)

    @traced_engine("classification", "1.0", fingerprint_fields=("kind", "first_count", "data_elements"))
    def classify(
        self,
        kind: ComponentKind,
        first_count: int,
        data_elements: int,
    ) -> tuple[ComplexityTier, int]:
        """
        Classify one component from its two structural counts.

        Args:
            kind: Component kind.
            first_count: Record types (data kinds) or file types
                referenced (transactional kinds).
            data_elements: Data element types.

        Returns:
            (complexity tier, function points)

        Raises:
            InvalidInputError: If a count is missing, negative, or below
                its minimum.
        """
        self._require_counts(kind, first_count, data_elements)

        rule = COMPLEXITY_RULES[kind]
        tier = rule.tier(first_count, data_elements)
        points = weight_for(kind, tier)

        logger.debug("component_classified", extra={
            "kind": kind.value,
            "first_count": first_count,
            "data_elements": data_elements,
            "row_bucket": rule.row_bucket(first_count),
            "column_bucket": rule.column_bucket(data_elements),
            "complexity_tier": tier.value,
            "function_points": points,
        })
        return tier, points

    @traced_engine("classification", "1.0", fingerprint_fields=("input_side", "output_side"))
    def classify_query(
        self,
        input_side: QuerySide,
        output_side: QuerySide,
    ) -> tuple[ComplexityTier, int]:
        """
        Dual calculation for an external query.

        Each side is classified independently with the EO/EQ matrix; the
        query takes the higher tier and the EQ weight for that tier.
        """
        input_tier, _ = self.classify(
            ComponentKind.QUERY, input_side.file_types_referenced, input_side.data_elements,
        )
        output_tier, _ = self.classify(
            ComponentKind.QUERY, output_side.file_types_referenced, output_side.data_elements,
        )
        tier = input_tier if input_tier.ordinal >= output_tier.ordinal else output_tier
        points = weight_for(ComponentKind.QUERY, tier)

        logger.debug("query_dual_classified", extra={
            "input_tier": input_tier.value,
            "output_tier": output_tier.value,
            "complexity_tier": tier.value,
            "function_points": points,
        })
        return tier, points

    def classify_measurement(self, measurement: ComponentMeasurement) -> ClassifiedComponent:
        """Classify a measurement, using the dual calculation for two-sided queries."""
        if measurement.has_dual_sides:
            tier, points = self.classify_query(measurement.input_side, measurement.output_side)
            return ClassifiedComponent(measurement, tier, points, used_dual_calculation=True)

        tier, points = self.classify(
            measurement.kind, measurement.first_count, measurement.data_elements,
        )
        return ClassifiedComponent(measurement, tier, points)

    def classify_all(self, measurements) -> tuple[ClassifiedComponent, ...]:
        """Classify every measurement; fails on the first invalid one."""
        return tuple(self.classify_measurement(m) for m in measurements)


# ---------------------------------------------------------------------------
# Component validation (ordered predicate checks)
# ---------------------------------------------------------------------------


@dataclass
class ComponentValidationResult:
    """
    Result of validating one component measurement.

    Contract:
        ``is_valid`` is True only when ``errors`` is empty.  When valid,
        ``complexity_tier`` and ``function_points`` hold the classification.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    complexity_tier: ComplexityTier | None = None
    function_points: int | None = None

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def _count_pairs(measurement: ComponentMeasurement) -> list[tuple[str, int | None, int | None]]:
    """(label, first count, data elements) for every side that gets classified."""
    if measurement.has_dual_sides:
        return [
            ("input side", measurement.input_side.file_types_referenced,
             measurement.input_side.data_elements),
            ("output side", measurement.output_side.file_types_referenced,
             measurement.output_side.data_elements),
        ]
    return [("", measurement.first_count, measurement.data_elements)]


def _check_kind(measurement: ComponentMeasurement, result: ComponentValidationResult) -> None:
    if not isinstance(measurement.kind, ComponentKind):
        valid = ", ".join(k.value for k in ComponentKind)
        result.add_error(
            f"Invalid component type: {measurement.kind!r}. Must be one of: {valid}"
        )


def _check_data_elements(measurement: ComponentMeasurement, result: ComponentValidationResult) -> None:
    for label, _, det in _count_pairs(measurement):
        where = f" ({label})" if label else ""
        if det is None:
            result.add_error(f"DET (Data Element Types) is required{where}")
        elif not is_whole_number(det):
            result.add_error(f"DET must be a whole number{where}")
        elif det < 1:
            result.add_error(f"DET must be at least 1{where}")


def _check_first_count(measurement: ComponentMeasurement, result: ComponentValidationResult) -> None:
    kind = measurement.kind
    for label, first, _ in _count_pairs(measurement):
        where = f" ({label})" if label else ""
        if kind.is_data:
            if first is None:
                result.add_error(f"TR (Record Element Types) is required for {kind.value}")
            elif not is_whole_number(first):
                result.add_error("TR must be a whole number")
            elif first < 1:
                result.add_error("TR must be at least 1")
        else:
            if first is None:
                result.add_error(f"FTR (File Types Referenced) is required for {kind.value}{where}")
            elif not is_whole_number(first):
                result.add_error(f"FTR must be a whole number{where}")
            elif first < 0:
                result.add_error(f"FTR cannot be negative{where}")


def _check_plausibility(measurement: ComponentMeasurement, result: ComponentValidationResult) -> None:
    kind = measurement.kind
    det_limit = DATA_DET_WARNING_LIMIT if kind.is_data else TRANSACTION_DET_WARNING_LIMIT
    for _, first, det in _count_pairs(measurement):
        if det > det_limit:
            result.add_warning(
                f"DET value ({det}) seems unusually high for {kind.value}. "
                f"Typical range is 1-{det_limit}."
            )
        if kind.is_data and first > RECORD_TYPES_WARNING_LIMIT:
            result.add_warning(
                f"TR value ({first}) seems unusually high. "
                f"Typical range is 1-{RECORD_TYPES_WARNING_LIMIT}."
            )
        if kind.is_transactional and first > FILE_TYPES_WARNING_LIMIT:
            result.add_warning(
                f"FTR value ({first}) seems unusually high. "
                f"Typical range is 0-{FILE_TYPES_WARNING_LIMIT}."
            )


# Each check runs only if every earlier check left no errors.
COMPONENT_CHECKS = (
    _check_kind,
    _check_data_elements,
    _check_first_count,
    _check_plausibility,
)


def validate_component(
    measurement: ComponentMeasurement,
    classifier: ComplexityClassifier | None = None,
) -> ComponentValidationResult:
    """
    Validate a measurement and classify it when the counts allow.

    Preconditions:
        None -- any measurement is accepted.
    Postconditions:
        - Returns every error of the first failing check group, or the
          warnings plus the classification when all checks pass.
        - A consistency error is reported if the classified points ever
          disagree with the weight table.
    """
    result = ComponentValidationResult()

    for check in COMPONENT_CHECKS:
        check(measurement, result)
        if not result.is_valid:
            logger.warning("component_validation_failed", extra={
                "kind": getattr(measurement.kind, "value", measurement.kind),
                "component_name": measurement.name,
                "check": check.__name__.lstrip("_"),
                "errors": list(result.errors),
            })
            return result

    classified = (classifier or ComplexityClassifier()).classify_measurement(measurement)
    expected = weight_for(measurement.kind, classified.complexity_tier)
    if classified.function_points != expected:
        result.add_error(
            f"Inconsistency: {measurement.kind.value} with "
            f"{classified.complexity_tier.value} complexity should have "
            f"{expected} function points, but got {classified.function_points}"
        )
        return result

    result.complexity_tier = classified.complexity_tier
    result.function_points = classified.function_points
    return result
