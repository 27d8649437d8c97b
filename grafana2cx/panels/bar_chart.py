"""Bar chart family; queries are built exactly like single-target pie charts."""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.transformations.plan import TransformationPlan

from .base import PanelConverter
from .helpers import map_unit_for_gauge, panel_unit
from .models import Widget
from .pie_chart import grouped_query


class BarChartPanelConverter(PanelConverter):
    variant = "barChart"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        targets = self.targets(panel)
        if not targets:
            return None
        return self.widget(panel, {
            "query": grouped_query(targets[0], discovered_metrics),
            "maxBarsPerChart": 10,
            "colorScheme": "classic",
            "unit": map_unit_for_gauge(panel_unit(panel)),
            "dataModeType": "DATA_MODE_TYPE_HIGH_UNSPECIFIED",
            "scaleType": "SCALE_TYPE_LINEAR",
            "sortBy": "SORT_BY_TYPE_VALUE",
            "stackDefinition": {"maxSlicesPerBar": 5},
        })


__all__ = ["BarChartPanelConverter"]
