"""Initial sequence construction by hierarchical grouping."""

from __future__ import annotations

from typing import Dict, List, Sequence

from ...models.domain import AttributeConfig, Order


def rank_attributes(attributes: Sequence[AttributeConfig]) -> list[AttributeConfig]:
    """Most expensive attribute first; equal times keep configuration order."""

    return sorted(attributes, key=lambda attribute: -attribute.changeover_time)


def _partition(orders: Sequence[Order], column: str) -> List[List[Order]]:
    buckets: Dict[str, List[Order]] = {}
    for order in orders:
        buckets.setdefault(order.value_of(column), []).append(order)
    # dicts keep insertion order, i.e. first appearance of each value
    return list(buckets.values())


def _group(orders: Sequence[Order], ranked: Sequence[AttributeConfig], depth: int) -> List[Order]:
    if depth >= len(ranked) or len(orders) <= 1:
        return list(orders)

    sequence: list[Order] = []
    for bucket in _partition(orders, ranked[depth].column):
        sequence.extend(_group(bucket, ranked, depth + 1))
    return sequence


def build_initial_sequence(orders: Sequence[Order], attributes: Sequence[AttributeConfig]) -> list[Order]:
    """Cluster orders that share values for the costliest attributes.

    The list is split by the value of the most expensive attribute, each
    part is split by the next one, and so on. Parts are concatenated in the
    order their value first appears, so orders that need no regrouping stay
    where the planner put them.
    """

    if len(orders) <= 1 or not attributes:
        return list(orders)
    return _group(orders, rank_attributes(attributes), 0)
