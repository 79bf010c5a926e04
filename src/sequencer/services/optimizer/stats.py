"""Before/after totals and per-attribute breakdown for an optimized sequence."""

from __future__ import annotations

from typing import Dict, Sequence

from ...models.domain import (
    AttributeConfig,
    AttributeStat,
    OptimizationResult,
    OptimizedOrder,
    Order,
)
from .cost_model import CostModel


def savings_percentage(before: float, after: float) -> float:
    if before <= 0:
        return 0.0
    return ((before - after) / before) * 100


def build_optimized_orders(sequence: Sequence[Order], cost_model: CostModel) -> list[OptimizedOrder]:
    optimized: list[OptimizedOrder] = []
    for index, order in enumerate(sequence):
        if index == 0:
            work_time, downtime, reasons = 0.0, 0.0, []
        else:
            metrics = cost_model.transition(sequence[index - 1], order)
            work_time, downtime, reasons = metrics.work_time, metrics.downtime, list(metrics.reasons)
        optimized.append(
            OptimizedOrder(
                order_id=order.order_id,
                original_index=order.original_index,
                values=order.values,
                sequence_number=index + 1,
                work_time=work_time,
                downtime=downtime,
                changeover_reasons=reasons,
            )
        )
    return optimized


def compute_attribute_stats(
    sequence: Sequence[Order],
    cost_model: CostModel,
    attributes: Sequence[AttributeConfig],
) -> list[AttributeStat]:
    counts: Dict[str, int] = {attribute.column: 0 for attribute in attributes}
    times: Dict[str, float] = {attribute.column: 0.0 for attribute in attributes}

    for index in range(1, len(sequence)):
        metrics = cost_model.transition(sequence[index - 1], sequence[index])
        for column, cost in metrics.costs.items():
            counts[column] += 1
            times[column] += cost

    return [
        AttributeStat(
            column=attribute.column,
            changeover_count=counts[attribute.column],
            total_time=times[attribute.column],
            parallel_group=attribute.parallel_group,
        )
        for attribute in attributes
    ]


def aggregate_result(
    original: Sequence[Order],
    final: Sequence[Order],
    cost_model: CostModel,
    attributes: Sequence[AttributeConfig],
) -> OptimizationResult:
    """Assemble the result for ``final`` measured against ``original``."""

    total_before, total_downtime_before = cost_model.sequence_totals(original)
    sequence = build_optimized_orders(final, cost_model)
    total_after = sum(order.work_time for order in sequence)
    total_downtime_after = sum(order.downtime for order in sequence)

    return OptimizationResult(
        sequence=sequence,
        total_before=total_before,
        total_after=total_after,
        savings=total_before - total_after,
        savings_percent=savings_percentage(total_before, total_after),
        total_downtime_before=total_downtime_before,
        total_downtime_after=total_downtime_after,
        downtime_savings=total_downtime_before - total_downtime_after,
        downtime_savings_percent=savings_percentage(total_downtime_before, total_downtime_after),
        attribute_stats=compute_attribute_stats(final, cost_model, attributes),
    )
