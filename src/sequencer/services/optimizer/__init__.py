"""Changeover sequence optimization engine."""

from .cost_model import ChangeoverMetrics, CostModel
from .engine import optimize
from .grouping import build_initial_sequence, rank_attributes
from .local_search import RefinementOutcome, refine_sequence, select_objective
from .stats import aggregate_result

__all__ = [
    "optimize",
    "CostModel",
    "ChangeoverMetrics",
    "build_initial_sequence",
    "rank_attributes",
    "refine_sequence",
    "select_objective",
    "RefinementOutcome",
    "aggregate_result",
]
