"""Panel converter base class."""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.queries.targets import TargetView, visible_targets
from grafana2cx.transformations.plan import TransformationPlan

from .helpers import clean_html, id_object, panel_description, panel_title
from .models import Widget


class PanelConverter:
    """Converts one Grafana panel into one Coralogix widget.

    ``discovered_metrics`` is an explicit accumulator: converters add metric
    names they see so variable conversion can pick a label-values source.
    Subclasses return None when the panel has no renderable target.
    """

    variant: str = ""

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        raise NotImplementedError

    @staticmethod
    def targets(panel: dict[str, Any]) -> list[TargetView]:
        return visible_targets(panel)

    def widget(self, panel: dict[str, Any], body: dict[str, Any]) -> Widget:
        return {
            "id": id_object(),
            "title": panel_title(panel),
            "description": clean_html(panel_description(panel)),
            "definition": {self.variant: body},
        }


__all__ = ["PanelConverter"]
