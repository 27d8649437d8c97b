"""Line chart family: timeseries/graph panels and the forced-fallback target.

Unlike the single-target converters every visible target becomes its own
series, classified independently by its resolved dialect.
"""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.queries import logql, promql
from grafana2cx.queries.fields import group_by_field
from grafana2cx.queries.lucene import build_aggregation, group_bys, lucene_query_object, normalized_query
from grafana2cx.queries.targets import Dialect, TargetView
from grafana2cx.transformations.plan import TransformationPlan

from .base import PanelConverter
from .helpers import custom_unit, map_unit, new_uuid, panel_options, panel_unit
from .models import Widget

COLOR_SCHEMES: tuple[str, ...] = ("classic", "cold", "severity", "classic")
NEGATIVE_MATCHERS = frozenset({"error", "errors", "failed", "failure"})

LEGEND_COLUMNS: dict[str, str] = {
    "mean": "LEGEND_COLUMN_AVG",
    "avg": "LEGEND_COLUMN_AVG",
    "min": "LEGEND_COLUMN_MIN",
    "max": "LEGEND_COLUMN_MAX",
    "sum": "LEGEND_COLUMN_SUM",
    "last": "LEGEND_COLUMN_LAST",
    "first": "LEGEND_COLUMN_FIRST",
}

BYTE_FUNCTIONS = frozenset({"bytes_rate", "bytes_over_time"})


def color_scheme(index: int, panel: dict[str, Any]) -> str:
    cfg = panel.get("fieldConfig")
    overrides = cfg.get("overrides") if isinstance(cfg, dict) else None
    for override in overrides if isinstance(overrides, list) else []:
        matcher = override.get("matcher") if isinstance(override, dict) else None
        options = matcher.get("options") if isinstance(matcher, dict) else None
        if isinstance(options, str) and options.lower() in NEGATIVE_MATCHERS:
            return "negative"
    return COLOR_SCHEMES[index % len(COLOR_SCHEMES)]


def legend_columns(legend: dict[str, Any]) -> list[str]:
    calcs = legend.get("calcs")
    if not isinstance(calcs, list):
        return []
    return [LEGEND_COLUMNS[c.lower()] for c in calcs if isinstance(c, str) and c.lower() in LEGEND_COLUMNS]


def logql_aggregation(expr: str) -> dict[str, Any]:
    """bytes_rate/bytes_over_time sum ``__size__``; every other function counts."""
    if logql.inner_function(expr) in BYTE_FUNCTIONS:
        return {"sum": {"field": "__size__"}}
    return {"count": {}}


def logs_series_query(lucene: str, aggregation: dict[str, Any], descriptors: list[dict[str, object]]) -> dict[str, Any]:
    logs: dict[str, Any] = {
        "groupBy": [],
        "aggregations": [aggregation],
        "filters": [],
        "groupBys": descriptors,
    }
    lucene_obj = lucene_query_object(lucene)
    if lucene_obj:
        logs["luceneQuery"] = lucene_obj
    return {"logs": logs}


def _structured_series_name(panel: dict[str, Any], target: TargetView) -> str:
    if target.alias.strip():
        return target.alias
    title = panel.get("title")
    if isinstance(title, str) and title:
        return title
    return target.ref_id


def _legend_or_ref(target: TargetView) -> str:
    return target.legend_format if target.legend_format is not None else target.ref_id


class LineChartPanelConverter(PanelConverter):
    variant = "lineChart"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        unit = panel_unit(panel)
        definitions: list[dict[str, Any]] = []
        for target in self.targets(panel):
            built = self._series(panel, target, discovered_metrics)
            if built is None:
                continue
            query, name = built
            definitions.append(self._definition(query, len(definitions), unit, name, panel))

        if not definitions:
            return None

        legend = panel_options(panel).get("legend")
        legend = legend if isinstance(legend, dict) else {}
        show = legend.get("showLegend")
        return self.widget(panel, {
            "legend": {
                "isVisible": show if isinstance(show, bool) else True,
                "columns": legend_columns(legend),
                "groupByQuery": True,
                "placement": "LEGEND_PLACEMENT_SIDE" if legend.get("placement") == "right" else "LEGEND_PLACEMENT_AUTO",
            },
            "tooltip": {"showLabels": True, "type": "TOOLTIP_TYPE_ALL"},
            "queryDefinitions": definitions,
            "stackedLine": "STACKED_LINE_UNSPECIFIED",
            "connectNulls": False,
        })

    def _series(
        self, panel: dict[str, Any], target: TargetView, discovered: MutableSet[str]
    ) -> tuple[dict[str, Any], str] | None:
        if target.dialect is Dialect.STRUCTURED:
            query = logs_series_query(
                normalized_query(target.query),
                build_aggregation(target.first_metric),
                group_bys(target.bucket_aggs),
            )
            return query, _structured_series_name(panel, target)

        if not target.expr.strip():
            return None

        if target.dialect is Dialect.LOGS:
            query = logs_series_query(
                normalized_query(logql.to_lucene(target.expr)),
                logql_aggregation(target.expr),
                [group_by_field(f) for f in logql.extract_group_by_fields(target.expr)],
            )
            return query, promql.generate_series_name(_legend_or_ref(target), target.expr, target.ref_id)

        expr = promql.clean_query(target.expr, discovered)
        query = {
            "metrics": {
                "promqlQuery": {"value": expr},
                "filters": [],
                "editorMode": "METRICS_QUERY_EDITOR_MODE_TEXT",
                "seriesLimitType": "METRICS_SERIES_LIMIT_TYPE_BY_SERIES_COUNT",
            }
        }
        return query, promql.generate_series_name(_legend_or_ref(target), expr, target.ref_id)

    @staticmethod
    def _definition(query: dict[str, Any], index: int, unit: str, name: str, panel: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": new_uuid(),
            "query": query,
            "seriesCountLimit": "20",
            "unit": map_unit(unit),
            "scaleType": "SCALE_TYPE_LINEAR",
            "name": name,
            "isVisible": True,
            "colorScheme": color_scheme(index, panel),
            "resolution": {"bucketsPresented": 96},
            "dataModeType": "DATA_MODE_TYPE_HIGH_UNSPECIFIED",
            "customUnit": custom_unit(unit),
            "hashColors": False,
        }


__all__ = ["LineChartPanelConverter", "color_scheme", "legend_columns", "logql_aggregation"]
