"""Changeover matrix lookup helpers."""

from .prefetch import (
    collect_values_by_attribute,
    matrix_data_from_entries,
    prefetch_matrix_data,
    select_matrix_entries,
)

__all__ = [
    "collect_values_by_attribute",
    "matrix_data_from_entries",
    "prefetch_matrix_data",
    "select_matrix_entries",
]
