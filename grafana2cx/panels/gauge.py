"""Gauge family: stat, singlestat, gauge and bargauge panels."""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.queries import logql, promql
from grafana2cx.queries.lucene import build_aggregation, lucene_query_object, normalized_query
from grafana2cx.queries.targets import Dialect, TargetView
from grafana2cx.transformations.plan import TransformationPlan

from .base import PanelConverter
from .helpers import as_number, custom_unit, field_defaults, map_unit_for_gauge, panel_unit
from .models import Widget

INFO_COLOR = "var(--c-severity-log-info)"
THRESHOLD_COLORS: dict[str, str] = {
    "green": "var(--c-severity-log-verbose)",
    "yellow": "var(--c-severity-log-warning)",
    "orange": "var(--c-severity-log-warning)",
    "red": "var(--c-severity-log-error)",
    "blue": INFO_COLOR,
}

# (keywords, max) checked in order against the cleaned expression.
MAX_HEURISTICS: tuple[tuple[tuple[str, ...], float], ...] = (
    (("duration", "_p95", "_p99"), 10),
    (("rate", "reqs"), 10000),
    (("vus",), 1000),
    (("total",), 1000000),
)
DEFAULT_MAX = 100


def determine_max(configured: float | None, query: str) -> float:
    if configured is not None:
        return configured
    lower = query.lower()
    for keywords, value in MAX_HEURISTICS:
        if any(k in lower for k in keywords):
            return value
    return DEFAULT_MAX


def convert_thresholds(thresholds: Any) -> list[dict[str, Any]]:
    steps = thresholds.get("steps") if isinstance(thresholds, dict) else None
    result: list[dict[str, Any]] = []
    for step in steps if isinstance(steps, list) else []:
        if not isinstance(step, dict):
            continue
        color = step.get("color") if isinstance(step.get("color"), str) else "green"
        value = as_number(step.get("value"))
        result.append({
            "from": value if value is not None else 0,
            "color": THRESHOLD_COLORS.get(color.lower(), INFO_COLOR),
        })
    if not result:
        result.append({"from": 0, "color": INFO_COLOR})
    return result


def _logs_query(lucene: str, aggregation: dict[str, Any] | None) -> dict[str, Any]:
    logs: dict[str, Any] = {"logsAggregation": aggregation or {"count": {}}, "filters": []}
    lucene_obj = lucene_query_object(lucene)
    if lucene_obj:
        logs["luceneQuery"] = lucene_obj
    return {"logs": logs}


class GaugePanelConverter(PanelConverter):
    variant = "gauge"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        targets = self.targets(panel)
        if not targets:
            return None
        target: TargetView = targets[0]

        defaults = field_defaults(panel)
        unit = panel_unit(panel)
        configured_max = as_number(defaults.get("max"))

        if target.dialect is Dialect.STRUCTURED:
            query = _logs_query(normalized_query(target.query), build_aggregation(target.first_metric))
            maximum = configured_max if configured_max is not None else DEFAULT_MAX
        elif target.dialect is Dialect.LOGS:
            query = _logs_query(normalized_query(logql.to_lucene(target.expr)), None)
            maximum = configured_max if configured_max is not None else DEFAULT_MAX
        else:
            expr = promql.clean_query(target.expr, discovered_metrics)
            maximum = determine_max(configured_max, expr)
            query = {
                "metrics": {
                    "promqlQuery": {"value": expr},
                    "aggregation": "AGGREGATION_LAST",
                    "filters": [],
                    "editorMode": "METRICS_QUERY_EDITOR_MODE_TEXT",
                    "promqlQueryType": "PROM_QL_QUERY_TYPE_RANGE",
                }
            }

        minimum = as_number(defaults.get("min"))
        return self.widget(panel, {
            "query": query,
            "min": minimum if minimum is not None else 0,
            "max": maximum,
            "showInnerArc": False,
            "showOuterArc": False,
            "unit": map_unit_for_gauge(unit),
            "thresholds": convert_thresholds(defaults.get("thresholds")),
            "dataModeType": "DATA_MODE_TYPE_HIGH_UNSPECIFIED",
            "thresholdBy": "THRESHOLD_BY_VALUE",
            "customUnit": custom_unit(unit),
            "thresholdType": "THRESHOLD_TYPE_RELATIVE",
            "legend": {
                "isVisible": True,
                "columns": [],
                "groupByQuery": False,
                "placement": "LEGEND_PLACEMENT_AUTO",
            },
            "legendBy": "LEGEND_BY_GROUPS",
            "displaySeriesName": True,
        })


__all__ = ["GaugePanelConverter", "determine_max", "convert_thresholds"]
