"""Domain models for production orders, changeover configuration and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

DEFAULT_PARALLEL_GROUP = "default"

# (attribute, from_value, to_value) -> minutes
MatrixKey = Tuple[str, str, str]
MatrixData = Dict[MatrixKey, float]


@dataclass(slots=True, frozen=True)
class Order:
    """A production order with its attribute values as imported."""

    order_id: str
    original_index: int
    values: Mapping[str, str]

    def value_of(self, column: str) -> str:
        value = self.values.get(column)
        return "" if value is None else str(value)


@dataclass(slots=True, frozen=True)
class AttributeConfig:
    """Changeover settings for one attribute column."""

    column: str
    changeover_time: float
    parallel_group: str = DEFAULT_PARALLEL_GROUP


@dataclass(slots=True)
class MatrixEntry:
    """One stored from/to changeover time for an attribute."""

    attribute: str
    from_value: str
    to_value: str
    minutes: float
    source: str = "manual"
    notes: Optional[str] = None

    @property
    def key(self) -> MatrixKey:
        return (self.attribute, self.from_value, self.to_value)


@dataclass(slots=True, frozen=True)
class OptimizationOptions:
    """Explicit per-call configuration for the optimization engine."""

    use_matrix_lookup: bool = False
    matrix_data: Optional[Mapping[MatrixKey, float]] = None
    max_passes: Optional[int] = None
    default_parallel_group: str = DEFAULT_PARALLEL_GROUP


@dataclass(slots=True)
class OptimizedOrder:
    order_id: str
    original_index: int
    values: Mapping[str, str]
    sequence_number: int
    work_time: float
    downtime: float
    changeover_reasons: List[str] = field(default_factory=list)


@dataclass(slots=True)
class AttributeStat:
    column: str
    changeover_count: int
    total_time: float
    parallel_group: str


@dataclass(slots=True)
class OptimizationResult:
    sequence: List[OptimizedOrder]
    total_before: float
    total_after: float
    savings: float
    savings_percent: float
    total_downtime_before: float
    total_downtime_after: float
    downtime_savings: float
    downtime_savings_percent: float
    attribute_stats: List[AttributeStat]
