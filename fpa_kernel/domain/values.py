"""
Values -- Immutable domain value objects for Function Point estimation.

Responsibility:
    Provides the input types for every estimation computation:
    ComponentKind, ComplexityTier, ComponentMeasurement (with the optional
    QuerySide pair for dual-calculation queries), GSCVector and
    EstimateConfiguration, plus the qualitative enums shared by the risk
    and trend engines.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine module. No outward dependencies.

Invariants enforced:
    - Derived values (complexity tier, function points) are never part of
      a measurement; they are always recomputed by the classifier.
    - GSCVector always stores a tuple; an empty tuple means "no adjustment
      requested" and is a valid state.

Failure modes:
    - Construction is deliberately permissive about count ranges so that
      the component validator can report every problem at once.  Range
      checks raise at the point of computation (InvalidInputError,
      InvalidGSCError, InvalidConfigError), not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

GSC_FACTOR_COUNT = 14
GSC_MAX_VALUE = 5


def is_whole_number(value: object) -> bool:
    """True for int counts and ratings; bool and float (even 2.0) are not."""
    return isinstance(value, int) and not isinstance(value, bool)


class ComponentKind(str, Enum):
    """Structural unit counted by Function Point Analysis."""

    DATA_INTERNAL = "ALI"  # Internal logical file
    DATA_EXTERNAL = "AIE"  # External interface file
    INPUT = "EI"
    OUTPUT = "EO"
    QUERY = "EQ"

    @property
    def is_data(self) -> bool:
        return self in (ComponentKind.DATA_INTERNAL, ComponentKind.DATA_EXTERNAL)

    @property
    def is_transactional(self) -> bool:
        return not self.is_data


class ComplexityTier(str, Enum):
    """Complexity classification of a component."""

    LOW = "low"
    AVERAGE = "average"
    HIGH = "high"

    @property
    def ordinal(self) -> int:
        """1 for LOW, 2 for AVERAGE, 3 for HIGH."""
        return _TIER_ORDINALS[self]


_TIER_ORDINALS = {
    ComplexityTier.LOW: 1,
    ComplexityTier.AVERAGE: 2,
    ComplexityTier.HIGH: 3,
}


class RiskLevel(str, Enum):
    """Qualitative risk bucket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TrendDirection(str, Enum):
    """Direction of a metric across estimate versions."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class QuerySide:
    """One side (input parameters or output data) of a dual-calculation query."""

    file_types_referenced: int
    data_elements: int


@dataclass(frozen=True)
class ComponentMeasurement:
    """
    Raw structural counts for one component.

    Contract:
        Frozen dataclass holding only what was measured.  Data kinds use
        ``record_types``; transactional kinds use ``file_types_referenced``.
        A QUERY may additionally carry ``input_side`` and ``output_side``
        for the dual calculation.
    Guarantees:
        - Never carries a complexity tier or function-point value.
    Non-goals:
        - Does not validate count ranges (see
          ``fpa_engines.classification.validate_component``).
    """

    kind: ComponentKind
    data_elements: int | None
    record_types: int | None = None
    file_types_referenced: int | None = None
    input_side: QuerySide | None = None
    output_side: QuerySide | None = None
    name: str | None = None

    @classmethod
    def data_function(
        cls,
        kind: ComponentKind,
        record_types: int,
        data_elements: int,
        name: str | None = None,
    ) -> ComponentMeasurement:
        """Measurement of an ALI or AIE."""
        if not kind.is_data:
            raise ValueError(f"{kind.value} is not a data function")
        return cls(
            kind=kind,
            record_types=record_types,
            data_elements=data_elements,
            name=name,
        )

    @classmethod
    def transaction(
        cls,
        kind: ComponentKind,
        file_types_referenced: int,
        data_elements: int,
        name: str | None = None,
    ) -> ComponentMeasurement:
        """Measurement of an EI, EO or single-sided EQ."""
        if not kind.is_transactional:
            raise ValueError(f"{kind.value} is not a transactional function")
        return cls(
            kind=kind,
            file_types_referenced=file_types_referenced,
            data_elements=data_elements,
            name=name,
        )

    @classmethod
    def dual_query(
        cls,
        input_side: QuerySide,
        output_side: QuerySide,
        name: str | None = None,
    ) -> ComponentMeasurement:
        """Measurement of an EQ counted separately on its input and output sides."""
        return cls(
            kind=ComponentKind.QUERY,
            data_elements=None,
            input_side=input_side,
            output_side=output_side,
            name=name,
        )

    @property
    def has_dual_sides(self) -> bool:
        """True for a QUERY carrying both an input and an output side."""
        return (
            self.kind == ComponentKind.QUERY
            and self.input_side is not None
            and self.output_side is not None
        )

    @property
    def first_count(self) -> int | None:
        """Record types for data kinds, file types referenced otherwise."""
        if self.kind.is_data:
            return self.record_types
        return self.file_types_referenced


@dataclass(frozen=True)
class GSCVector:
    """
    General System Characteristics ratings.

    Either empty (no adjustment requested) or 14 integers in [0, 5].
    Range checks happen in ``FunctionPointAggregator.degree_of_influence``.
    """

    values: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))

    @classmethod
    def empty(cls) -> GSCVector:
        return cls(())

    @classmethod
    def uniform(cls, value: int) -> GSCVector:
        """All 14 characteristics rated ``value``."""
        return cls((value,) * GSC_FACTOR_COUNT)

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class EstimateConfiguration:
    """
    Team and productivity parameters for an estimate.

    ``team_size`` and ``hourly_rate`` may be None when the caller has not
    captured them yet; the quality score penalises that state and the
    effort estimator rejects it.
    """

    team_size: int | None
    hourly_rate: float | None
    average_daily_working_hours: float = 8.0
    productivity_factor: float = 10.0
