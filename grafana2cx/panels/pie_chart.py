"""Pie chart family.

A single aggregation target is converted directly. When the transformation
plan carries a consolidated payload (boolean-split Elasticsearch targets
merged into one group-by) that payload is used verbatim instead.
"""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.queries import logql, promql
from grafana2cx.queries.fields import group_by_field
from grafana2cx.queries.lucene import build_aggregation, group_bys, lucene_query_object, normalized_query
from grafana2cx.queries.targets import Dialect, TargetView
from grafana2cx.transformations.plan import Proceed, TransformationPlan

from .base import PanelConverter
from .helpers import map_unit_for_gauge, panel_options, panel_unit
from .line_chart import logql_aggregation
from .models import Widget

MAX_SLICES_PER_CHART = 24
MAX_SLICES_PER_STACK = 8


def grouped_logs_query(target: TargetView) -> dict[str, Any]:
    """Logs query with ``groupNamesFields``, shared by pie and bar charts."""
    if target.dialect is Dialect.LOGS:
        lucene = normalized_query(logql.to_lucene(target.expr))
        aggregation = logql_aggregation(target.expr)
        names = [group_by_field(f) for f in logql.extract_group_by_fields(target.expr)]
    else:
        lucene = normalized_query(target.query)
        aggregation = build_aggregation(target.first_metric)
        names = group_bys(target.bucket_aggs)

    logs: dict[str, Any] = {"aggregation": aggregation, "filters": [], "groupNamesFields": names}
    lucene_obj = lucene_query_object(lucene)
    if lucene_obj:
        logs["luceneQuery"] = lucene_obj
    return {"logs": logs}


def grouped_metrics_query(target: TargetView, discovered: MutableSet[str]) -> dict[str, Any]:
    return {
        "metrics": {
            "promqlQuery": {"value": promql.clean_query(target.expr, discovered)},
            "aggregation": "AGGREGATION_LAST",
            "editorMode": "METRICS_QUERY_EDITOR_MODE_TEXT",
            "filters": [],
            "groupNames": [],
        }
    }


def grouped_query(target: TargetView, discovered: MutableSet[str]) -> dict[str, Any]:
    if target.dialect is Dialect.METRICS:
        return grouped_metrics_query(target, discovered)
    return grouped_logs_query(target)


class PieChartPanelConverter(PanelConverter):
    variant = "pieChart"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        targets = self.targets(panel)
        if not targets:
            return None

        if isinstance(plan, Proceed) and plan.payload is not None:
            query = plan.payload
        else:
            query = grouped_query(targets[0], discovered_metrics)

        legend = panel_options(panel).get("legend")
        show = legend.get("showLegend") if isinstance(legend, dict) else None
        return self.widget(panel, {
            "query": query,
            "maxSlicesPerChart": MAX_SLICES_PER_CHART,
            "minSlicePercentage": 0,
            "showLegend": show if isinstance(show, bool) else True,
            "colorScheme": "classic",
            "unit": map_unit_for_gauge(panel_unit(panel)),
            "dataModeType": "DATA_MODE_TYPE_HIGH_UNSPECIFIED",
            "stackDefinition": {"maxSlicesPerStack": MAX_SLICES_PER_STACK},
            "labelDefinition": default_label_definition(),
        })


def default_label_definition() -> dict[str, Any]:
    return {
        "labelSource": "LABEL_SOURCE_INNER",
        "isVisible": True,
        "showName": True,
        "showValue": True,
        "showPercentage": True,
    }


__all__ = [
    "PieChartPanelConverter",
    "default_label_definition",
    "grouped_query",
    "grouped_logs_query",
    "grouped_metrics_query",
]
