"""Optimization orchestration service."""

from __future__ import annotations

import logging
from typing import Optional

from ...config import settings
from ...models.domain import (
    AttributeConfig,
    MatrixData,
    MatrixEntry,
    OptimizationOptions,
    Order,
)
from ...persistence.filesystem import FileStorage
from ...schemas.optimization import OptimizationRequest, OptimizationResponse
from ..matrix.prefetch import (
    collect_values_by_attribute,
    matrix_data_from_entries,
    prefetch_matrix_data,
)
from ..outputs.formatter import (
    optimization_response_to_json,
    optimization_result_to_response,
    run_history_record,
)
from .engine import optimize


def _to_orders(payload: OptimizationRequest) -> list[Order]:
    return [
        Order(
            order_id=order.id,
            original_index=index,
            values={column: "" if value is None else str(value) for column, value in order.values.items()},
        )
        for index, order in enumerate(payload.orders)
    ]


def _to_attributes(payload: OptimizationRequest) -> list[AttributeConfig]:
    return [
        AttributeConfig(
            column=attribute.column,
            changeover_time=attribute.changeover_time,
            parallel_group=attribute.parallel_group or settings.default_parallel_group,
        )
        for attribute in payload.attributes
    ]


def _resolve_matrix_data(
    payload: OptimizationRequest,
    orders: list[Order],
    attributes: list[AttributeConfig],
) -> Optional[MatrixData]:
    if payload.matrix_entries is not None:
        return matrix_data_from_entries(
            MatrixEntry(
                attribute=entry.attribute,
                from_value=entry.from_value,
                to_value=entry.to_value,
                minutes=entry.minutes,
                source=entry.source,
                notes=entry.notes,
            )
            for entry in payload.matrix_entries
        )
    if settings.matrix_file is None:
        logging.warning("Matrix lookup requested but no matrix file is configured; using flat changeover times")
        return None

    try:
        return prefetch_matrix_data(
            [attribute.column for attribute in attributes],
            collect_values_by_attribute(orders, attributes),
        )
    except (FileNotFoundError, ValueError) as exc:
        logging.error(f"Failed to load changeover matrix: {exc}")
        raise ValueError(f"Changeover matrix could not be loaded: {exc}") from exc


def build_options(payload: OptimizationRequest, matrix_data: Optional[MatrixData]) -> OptimizationOptions:
    max_passes = payload.max_passes if payload.max_passes is not None else settings.max_refinement_passes
    use_matrix_lookup = payload.use_matrix_lookup if payload.use_matrix_lookup is not None else settings.use_matrix_lookup
    return OptimizationOptions(
        use_matrix_lookup=use_matrix_lookup and matrix_data is not None,
        matrix_data=matrix_data,
        max_passes=max_passes,
        default_parallel_group=settings.default_parallel_group,
    )


def run_optimization(payload: OptimizationRequest) -> OptimizationResponse:
    orders = _to_orders(payload)
    attributes = _to_attributes(payload)

    use_matrix_lookup = payload.use_matrix_lookup if payload.use_matrix_lookup is not None else settings.use_matrix_lookup
    matrix_data = _resolve_matrix_data(payload, orders, attributes) if use_matrix_lookup else None
    options = build_options(payload, matrix_data)

    logging.info(
        f"Optimizing {len(orders)} orders over {len(attributes)} attributes "
        f"(matrix lookup: {'on' if options.use_matrix_lookup else 'off'}, {len(matrix_data or {})} entries)"
    )
    result = optimize(orders, attributes, options)

    metadata = {
        "order_count": len(orders),
        "attribute_count": len(attributes),
        "matrix_lookup": options.use_matrix_lookup,
        "matrix_entries": len(matrix_data or {}),
        "max_passes": options.max_passes,
    }
    response = optimization_result_to_response(result, metadata)

    if payload.persist:
        try:
            storage = FileStorage()
            run_dir = storage.make_run_directory(prefix="optimization")
            storage.write_json(run_dir / "summary.json", optimization_response_to_json(response))
            storage.write_json(
                run_dir / "history.json",
                run_history_record(response, requested_by=payload.requested_by, run_label=payload.run_label),
            )
            response.metadata["output_dir"] = str(run_dir)
        except OSError as exc:
            logging.warning(f"Failed to persist optimization run: {exc}")

    return response
