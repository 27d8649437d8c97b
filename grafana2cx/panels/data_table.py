"""DataTable family: ``table`` panels and raw ``logs`` listings.

Elasticsearch raw_data targets become a plain Lucene query; terms buckets
become a grouping with one aggregation per metric. PromQL targets map to a
metrics query with one synthetic ``value`` column. The Coralogix API rejects
an empty ``columns`` array, so every path emits at least one column.
"""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.queries import logql, promql
from grafana2cx.queries.fields import strip_index_suffix
from grafana2cx.queries.lucene import (
    build_aggregation,
    group_bys,
    lucene_query_object,
    normalized_query,
    page_size,
    terms_fields,
)
from grafana2cx.queries.targets import Dialect, TargetView
from grafana2cx.transformations.plan import TransformationPlan

from .base import PanelConverter
from .helpers import new_uuid, panel_options
from .models import Widget

DEFAULT_COLUMN = "coralogix.text"
METRICS_COLUMN = "value"
DEFAULT_PAGE_SIZE = 20

LOG_COLUMNS: tuple[str, ...] = (
    "coralogix.timestamp",
    "coralogix.metadata.severity",
    "coralogix.text",
    "coralogix.metadata.applicationName",
    "coralogix.metadata.subsystemName",
)
LOG_PAGE_SIZE = 100


def _columns(fields: list[str], default: str) -> list[dict[str, str]]:
    cols = [{"field": f} for f in fields]
    return cols or [{"field": default}]


def _logs_filter(lucene: str) -> dict[str, Any]:
    query: dict[str, Any] = {"filters": []}
    lucene_obj = lucene_query_object(lucene)
    if lucene_obj:
        query["luceneQuery"] = lucene_obj
    return query


def _grouping(target: TargetView) -> dict[str, Any]:
    aggregations: list[dict[str, Any]] = []
    for metric in target.metrics:
        agg = build_aggregation(metric, strict=True)
        if agg is None:
            continue
        metric_id = metric.get("id")
        metric_type = metric.get("type")
        aggregations.append({
            "id": metric_id if isinstance(metric_id, str) and metric_id else new_uuid(),
            "name": metric_type if isinstance(metric_type, str) and metric_type else "count",
            "isVisible": True,
            "aggregation": agg,
        })
    return {"groupBy": [], "groupBys": group_bys(target.bucket_aggs), "aggregations": aggregations}


class DataTablePanelConverter(PanelConverter):
    variant = "dataTable"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        targets = self.targets(panel)
        if not targets:
            return None
        target = targets[0]
        if target.dialect is Dialect.STRUCTURED:
            return self._from_structured(panel, target)
        if target.dialect is Dialect.LOGS:
            return self._table(
                panel,
                {"logs": _logs_filter(normalized_query(logql.to_lucene(target.expr)))},
                _columns([], DEFAULT_COLUMN),
                DEFAULT_PAGE_SIZE,
            )
        return self._from_metrics(panel, target, discovered_metrics)

    def _from_structured(self, panel: dict[str, Any], target: TargetView) -> Widget:
        logs = _logs_filter(normalized_query(target.query))
        fields = terms_fields(target.bucket_aggs)
        if fields:
            logs["grouping"] = _grouping(target)
        return self._table(
            panel,
            {"logs": logs},
            _columns([strip_index_suffix(f) for f in fields], DEFAULT_COLUMN),
            page_size(target.metrics, default=DEFAULT_PAGE_SIZE),
        )

    def _from_metrics(self, panel: dict[str, Any], target: TargetView, discovered: MutableSet[str]) -> Widget:
        metrics = {
            "promqlQuery": {"value": promql.clean_query(target.expr, discovered)},
            "editorMode": "METRICS_QUERY_EDITOR_MODE_TEXT",
            "filters": [],
        }
        return self._table(panel, {"metrics": metrics}, _columns([], METRICS_COLUMN), DEFAULT_PAGE_SIZE)

    def _table(self, panel: dict[str, Any], query: dict[str, Any], columns: list[dict[str, str]], per_page: int) -> Widget:
        return self.widget(panel, {
            "query": query,
            "resultsPerPage": per_page,
            "rowStyle": "ROW_STYLE_ONE_LINE",
            "dataModeType": "DATA_MODE_TYPE_HIGH_UNSPECIFIED",
            "columns": columns,
        })


class LogsPanelConverter(PanelConverter):
    """Grafana ``logs`` panel -> dataTable of raw log lines.

    Elasticsearch queries are already Lucene; LogQL is translated.
    """

    variant = "dataTable"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        targets = self.targets(panel)
        if not targets:
            return None
        target = targets[0]
        if target.dialect is Dialect.STRUCTURED:
            lucene = target.query
        else:
            lucene = logql.to_lucene(target.expr) if target.expr.strip() else ""

        sort_order = panel_options(panel).get("sortOrder")
        ascending = isinstance(sort_order, str) and sort_order.lower() == "ascending"
        return self.widget(panel, {
            "query": {"logs": _logs_filter(normalized_query(lucene))},
            "resultsPerPage": LOG_PAGE_SIZE,
            "rowStyle": "ROW_STYLE_ONE_LINE",
            "columns": [{"field": f} for f in LOG_COLUMNS],
            "orderBy": {
                "field": "coralogix.timestamp",
                "orderDirection": "ORDER_DIRECTION_ASC" if ascending else "ORDER_DIRECTION_DESC",
            },
            "dataModeType": "DATA_MODE_TYPE_HIGH_UNSPECIFIED",
        })


__all__ = ["DataTablePanelConverter", "LogsPanelConverter", "DEFAULT_COLUMN", "LOG_COLUMNS"]
