"""Adjacent-swap hill climbing over an order sequence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ...models.domain import AttributeConfig, DEFAULT_PARALLEL_GROUP, Order
from .cost_model import CostModel

logger = logging.getLogger(__name__)

OBJECTIVE_DOWNTIME = "downtime"
OBJECTIVE_WORK_TIME = "work_time"

# float noise from summed minutes is not an improvement
_TOLERANCE = 1e-9


@dataclass(slots=True)
class RefinementOutcome:
    sequence: List[Order]
    objective: str
    passes: int
    swaps: int


def select_objective(
    attributes: Sequence[AttributeConfig],
    default_parallel_group: str = DEFAULT_PARALLEL_GROUP,
) -> str:
    """Downtime when parallel groups are configured, otherwise work time."""

    if any(attribute.parallel_group != default_parallel_group for attribute in attributes):
        return OBJECTIVE_DOWNTIME
    return OBJECTIVE_WORK_TIME


def resolve_pass_limit(order_count: int, max_passes: Optional[int]) -> int:
    """One pass per order, capped by ``max_passes`` when given."""

    if max_passes is None:
        return order_count
    return max(0, min(order_count, max_passes))


def _swap_delta(cost_model: CostModel, sequence: Sequence[Order], index: int) -> Tuple[float, float]:
    """Change in ``(work_time, downtime)`` if positions ``index`` and ``index + 1`` swap places.

    Only the transitions touching the pair are recomputed. The one between
    the pair is included because matrix times may be directional.
    """

    left = sequence[index]
    right = sequence[index + 1]
    before: list[tuple[Order, Order]] = [(left, right)]
    after: list[tuple[Order, Order]] = [(right, left)]
    if index > 0:
        previous = sequence[index - 1]
        before.append((previous, left))
        after.append((previous, right))
    if index + 2 < len(sequence):
        following = sequence[index + 2]
        before.append((right, following))
        after.append((left, following))

    work_delta = 0.0
    downtime_delta = 0.0
    for a, b in after:
        metrics = cost_model.transition(a, b)
        work_delta += metrics.work_time
        downtime_delta += metrics.downtime
    for a, b in before:
        metrics = cost_model.transition(a, b)
        work_delta -= metrics.work_time
        downtime_delta -= metrics.downtime
    return work_delta, downtime_delta


def refine_sequence(
    sequence: Sequence[Order],
    cost_model: CostModel,
    *,
    objective: str = OBJECTIVE_DOWNTIME,
    max_passes: Optional[int] = None,
) -> RefinementOutcome:
    """Swap neighbours while doing so strictly lowers the objective.

    First improvement: a swap is applied as soon as it is found and the scan
    carries on. A swap is rejected if it would raise the other metric, so
    neither total can get worse. Equal cost never swaps, which keeps the
    result deterministic and guarantees termination.
    """

    current = list(sequence)
    if objective not in (OBJECTIVE_DOWNTIME, OBJECTIVE_WORK_TIME):
        raise ValueError(f"Unknown refinement objective '{objective}'")
    if len(current) < 2:
        return RefinementOutcome(sequence=current, objective=objective, passes=0, swaps=0)

    pass_limit = resolve_pass_limit(len(current), max_passes)
    passes = 0
    total_swaps = 0

    for _ in range(pass_limit):
        passes += 1
        swaps = 0
        for index in range(len(current) - 1):
            work_delta, downtime_delta = _swap_delta(cost_model, current, index)
            if objective == OBJECTIVE_DOWNTIME:
                gain, side_effect = downtime_delta, work_delta
            else:
                gain, side_effect = work_delta, downtime_delta
            if gain < -_TOLERANCE and side_effect <= _TOLERANCE:
                current[index], current[index + 1] = current[index + 1], current[index]
                swaps += 1
        total_swaps += swaps
        if swaps == 0:
            break

    logger.debug(f"Refinement on {objective}: {passes} passes, {total_swaps} swaps over {len(current)} orders")
    return RefinementOutcome(sequence=current, objective=objective, passes=passes, swaps=total_swaps)
