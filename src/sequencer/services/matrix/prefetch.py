"""Resolve the matrix lookup table for a batch of orders before optimizing."""

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional, Sequence, Set

from ...data.matrix_repository import load_matrix_entries
from ...models.domain import AttributeConfig, MatrixData, MatrixEntry, Order


def collect_values_by_attribute(
    orders: Sequence[Order],
    attributes: Sequence[AttributeConfig],
) -> Dict[str, Set[str]]:
    """Distinct values observed per configured attribute."""

    values: Dict[str, Set[str]] = {attribute.column: set() for attribute in attributes}
    for order in orders:
        for column, seen in values.items():
            seen.add(order.value_of(column))
    return values


def matrix_data_from_entries(entries: Iterable[MatrixEntry]) -> MatrixData:
    """Key entries by ``(attribute, from_value, to_value)``; later duplicates win."""

    data: MatrixData = {}
    for entry in entries:
        if not math.isfinite(entry.minutes):
            continue
        data[entry.key] = entry.minutes
    return data


def select_matrix_entries(
    entries: Iterable[MatrixEntry],
    attribute_names: Sequence[str],
    values_by_attribute: Mapping[str, Iterable[str]],
) -> list[MatrixEntry]:
    wanted = set(attribute_names)
    observed = {name: set(values) for name, values in values_by_attribute.items()}
    selected: list[MatrixEntry] = []
    for entry in entries:
        if entry.attribute not in wanted:
            continue
        values = observed.get(entry.attribute)
        if values and entry.from_value in values and entry.to_value in values:
            selected.append(entry)
    return selected


def prefetch_matrix_data(
    attribute_names: Sequence[str],
    values_by_attribute: Mapping[str, Iterable[str]],
    entries: Optional[Iterable[MatrixEntry]] = None,
) -> MatrixData:
    """Matrix lookup restricted to the attributes and values a run will meet.

    Falls back to the configured matrix file when ``entries`` is not given.
    """

    source = load_matrix_entries() if entries is None else entries
    return matrix_data_from_entries(select_matrix_entries(source, attribute_names, values_by_attribute))
