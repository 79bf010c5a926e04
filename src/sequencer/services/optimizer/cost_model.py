"""Changeover cost between consecutive orders.

Two figures come out of every transition:

* ``work_time`` adds up every differing attribute, the labour spent if all
  changeovers are done one after another.
* ``downtime`` collapses attributes that share a parallel group to the
  slowest one in that group (separate crews work concurrently) and adds the
  groups up, the time the line actually stands still.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ...models.domain import AttributeConfig, MatrixKey, Order
from .validation import clamp_minutes


@dataclass(slots=True)
class ChangeoverMetrics:
    work_time: float
    downtime: float
    reasons: List[str]
    costs: Dict[str, float] = field(default_factory=dict)


class CostModel:
    """Computes changeover metrics for an attribute configuration.

    Results are memoized per ordered pair of attribute value signatures.
    Order ids play no part, so orders sharing an id are still costed on
    their own values.
    """

    def __init__(
        self,
        attributes: Sequence[AttributeConfig],
        matrix_data: Optional[Mapping[MatrixKey, float]] = None,
    ) -> None:
        self.attributes = tuple(attributes)
        self.matrix_data = matrix_data or {}
        self._cache: Dict[Tuple[Tuple[str, ...], Tuple[str, ...]], ChangeoverMetrics] = {}

    def attribute_cost(self, attribute: AttributeConfig, from_value: str, to_value: str) -> float:
        exact = self.matrix_data.get((attribute.column, from_value, to_value))
        if exact is not None:
            return clamp_minutes(exact)
        return clamp_minutes(attribute.changeover_time)

    def _signature(self, order: Order) -> Tuple[str, ...]:
        return tuple(order.value_of(attribute.column) for attribute in self.attributes)

    def transition(self, previous: Order, current: Order) -> ChangeoverMetrics:
        key = (self._signature(previous), self._signature(current))
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        work_time = 0.0
        reasons: list[str] = []
        costs: dict[str, float] = {}
        group_times: dict[str, float] = {}

        for attribute in self.attributes:
            from_value = previous.value_of(attribute.column)
            to_value = current.value_of(attribute.column)
            if from_value == to_value:
                continue
            cost = self.attribute_cost(attribute, from_value, to_value)
            work_time += cost
            reasons.append(attribute.column)
            costs[attribute.column] = cost
            group_times[attribute.parallel_group] = max(group_times.get(attribute.parallel_group, 0.0), cost)

        metrics = ChangeoverMetrics(
            work_time=work_time,
            downtime=sum(group_times.values()),
            reasons=reasons,
            costs=costs,
        )
        self._cache[key] = metrics
        return metrics

    def sequence_totals(self, sequence: Sequence[Order]) -> Tuple[float, float]:
        """Return summed ``(work_time, downtime)`` over adjacent transitions."""

        total_work = 0.0
        total_downtime = 0.0
        for index in range(1, len(sequence)):
            metrics = self.transition(sequence[index - 1], sequence[index])
            total_work += metrics.work_time
            total_downtime += metrics.downtime
        return total_work, total_downtime
