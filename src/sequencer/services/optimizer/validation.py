"""Boundary checks applied to orders and attribute settings before optimization."""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Sequence

from ...models.domain import AttributeConfig, Order

logger = logging.getLogger(__name__)


def clamp_minutes(value: object) -> float:
    """Return ``value`` as a finite, non-negative number of minutes."""

    try:
        minutes = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(minutes) or minutes < 0:
        return 0.0
    return minutes


def sanitize_attributes(
    attributes: Sequence[AttributeConfig],
    default_parallel_group: str,
) -> list[AttributeConfig]:
    sanitized: list[AttributeConfig] = []
    for attribute in attributes:
        minutes = clamp_minutes(attribute.changeover_time)
        if minutes != attribute.changeover_time:
            logger.warning(
                f"Changeover time {attribute.changeover_time!r} for '{attribute.column}' is invalid; using 0"
            )
        group = (attribute.parallel_group or "").strip() or default_parallel_group
        sanitized.append(AttributeConfig(column=attribute.column, changeover_time=minutes, parallel_group=group))
    return sanitized


def normalize_orders(orders: Sequence[Order], attributes: Sequence[AttributeConfig]) -> list[Order]:
    """Give every order a value for each configured column.

    Missing or ``None`` values become the empty string. Columns that were
    absent are reported once, aggregated over all orders.
    """

    columns = [attribute.column for attribute in attributes]
    missing: Counter[str] = Counter()
    normalized: list[Order] = []

    for order in orders:
        values = {key: "" if value is None else str(value) for key, value in order.values.items()}
        for column in columns:
            raw = order.values.get(column)
            if raw is None:
                missing[column] += 1
                values[column] = ""
            else:
                values[column] = str(raw)
        normalized.append(Order(order_id=order.order_id, original_index=order.original_index, values=values))

    if missing:
        details = ", ".join(f"{column} ({count})" for column, count in missing.items())
        logger.warning(f"Orders missing configured columns, treated as empty: {details}")
    return normalized
