"""Per-panel transformation planning.

A plan is computed once per panel before any converter runs and decides
whether the panel converts as-is, converts from a precomputed consolidated
query, or is rejected with an explanation.
"""
from .composite import CompositeTransformationPlanner, plan
from .context import TransformationContext
from .pie_consolidation import Consolidation, PieMultiQueryConsolidationPlanner
from .plan import Proceed, Reject, TransformationPlan

__all__ = [
    "CompositeTransformationPlanner",
    "Consolidation",
    "PieMultiQueryConsolidationPlanner",
    "Proceed",
    "Reject",
    "TransformationContext",
    "TransformationPlan",
    "plan",
]
