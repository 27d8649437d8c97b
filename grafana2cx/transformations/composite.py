"""Planner registry keyed by Grafana panel type."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from grafana2cx.queries.targets import TargetView

from .context import TransformationContext
from .pie_consolidation import PieMultiQueryConsolidationPlanner
from .plan import Proceed, Reject, TransformationPlan

logger = logging.getLogger(__name__)


class Planner(Protocol):
    panel_types: tuple[str, ...]

    def plan(self, context: TransformationContext) -> TransformationPlan: ...


class CompositeTransformationPlanner:
    """Dispatches to the planner registered for a panel type; Proceed otherwise."""

    def __init__(self, planners: Iterable[Planner] | None = None):
        self._registry: dict[str, Planner] = {}
        for planner in planners if planners is not None else (PieMultiQueryConsolidationPlanner(),):
            self.register(planner)

    def register(self, planner: Planner) -> None:
        for ptype in planner.panel_types:
            self._registry[ptype.lower()] = planner

    def plan(self, context: TransformationContext) -> TransformationPlan:
        planner = self._registry.get(context.panel_type.lower())
        if planner is None:
            return Proceed()
        result = planner.plan(context)
        if isinstance(result, Reject):
            logger.debug("planner.reject title=%s type=%s", context.panel_title, context.panel_type)
        return result

    def plan_panel(self, panel: dict[str, Any]) -> TransformationPlan:
        return self.plan(TransformationContext.from_panel(panel))


_DEFAULT = CompositeTransformationPlanner()


def plan(panel_type: str, visible_targets: list[TargetView]) -> TransformationPlan:
    """Plan from a type tag and the already-filtered visible targets."""
    context = TransformationContext(
        panel={"type": panel_type},
        panel_type=panel_type or "",
        panel_title="",
        targets=list(visible_targets),
    )
    return _DEFAULT.plan(context)


__all__ = ["CompositeTransformationPlanner", "Planner", "plan"]
