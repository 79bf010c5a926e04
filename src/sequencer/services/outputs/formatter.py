"""Conversions between optimization results and their serialized forms."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from ...models.domain import OptimizationResult
from ...schemas.optimization import (
    AttributeStatModel,
    OptimizationResponse,
    OptimizedOrderModel,
)


def optimization_result_to_response(result: OptimizationResult, metadata: Optional[dict] = None) -> OptimizationResponse:
    return OptimizationResponse(
        sequence=[
            OptimizedOrderModel(
                id=order.order_id,
                original_index=order.original_index,
                sequence_number=order.sequence_number,
                values=dict(order.values),
                work_time=order.work_time,
                downtime=order.downtime,
                changeover_reasons=list(order.changeover_reasons),
            )
            for order in result.sequence
        ],
        total_before=result.total_before,
        total_after=result.total_after,
        savings=result.savings,
        savings_percent=result.savings_percent,
        total_downtime_before=result.total_downtime_before,
        total_downtime_after=result.total_downtime_after,
        downtime_savings=result.downtime_savings,
        downtime_savings_percent=result.downtime_savings_percent,
        attribute_stats=[AttributeStatModel(**asdict(stat)) for stat in result.attribute_stats],
        metadata=metadata or {},
    )


def optimization_response_to_json(response: OptimizationResponse) -> dict:
    return response.model_dump()


def run_history_record(response: OptimizationResponse, *, requested_by: Optional[str], run_label: Optional[str]) -> dict:
    """Summary row kept for the optimization history."""

    return {
        "run_type": "optimization",
        "created_at": datetime.now(timezone.utc).isoformat(),
        "requested_by": requested_by,
        "run_label": run_label,
        "order_count": len(response.sequence),
        "attribute_count": len(response.attribute_stats),
        "total_before": response.total_before,
        "total_after": response.total_after,
        "savings_percent": response.savings_percent,
        "total_downtime_before": response.total_downtime_before,
        "total_downtime_after": response.total_downtime_after,
        "downtime_savings_percent": response.downtime_savings_percent,
    }
