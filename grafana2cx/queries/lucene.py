"""Elasticsearch/OpenSearch (Lucene + bucket/metric tree) translation.

The Lucene text itself is carried over after placeholder normalization. The
bucket/metric aggregation tree maps to Coralogix logs aggregations and
group-bys; a date_histogram bucket is the implicit time axis and never
becomes a group-by dimension.
"""
from __future__ import annotations

from typing import Any

from .fields import group_by_field, strip_index_suffix
from .placeholders import normalize_placeholders

WILDCARD = "*"

# Grafana metric type -> Coralogix aggregation key (fielded aggregations only).
FIELD_AGGREGATIONS: dict[str, str] = {
    "sum": "sum",
    "avg": "average",
    "min": "min",
    "max": "max",
}

DATAPRIME_FUNCTIONS: dict[str, str] = {
    "sum": "sum",
    "avg": "avg",
    "min": "min",
    "max": "max",
}


def normalized_query(query: str | None) -> str:
    return normalize_placeholders(query or "")


def lucene_query_object(query: str | None) -> dict[str, str] | None:
    """``{"value": ...}`` for a non-trivial filter, None for blank or ``*``."""
    if not query or not query.strip() or query.strip() == WILDCARD:
        return None
    return {"value": query}


def _metric_type(metric: dict[str, Any] | None) -> str | None:
    if not metric:
        return None
    mtype = metric.get("type")
    return mtype.lower() if isinstance(mtype, str) else None


def _metric_field(metric: dict[str, Any] | None) -> str:
    field = (metric or {}).get("field")
    return strip_index_suffix(field if isinstance(field, str) else "")


def build_aggregation(metric: dict[str, Any] | None, *, strict: bool = False) -> dict[str, Any] | None:
    """Map one Grafana metric to a Coralogix logs aggregation.

    Unknown metric types degrade to ``count`` unless ``strict`` is set, in
    which case they yield None (tables drop such columns instead of guessing).
    """
    mtype = _metric_type(metric)
    if mtype in FIELD_AGGREGATIONS:
        return {FIELD_AGGREGATIONS[mtype]: {"field": _metric_field(metric)}}
    if mtype in (None, "count", "raw_data", "logs", "raw_document") or not strict:
        return {"count": {}}
    return None


def dataprime_aggregation(metric: dict[str, Any] | None) -> str:
    mtype = _metric_type(metric)
    if mtype in DATAPRIME_FUNCTIONS:
        return f"{DATAPRIME_FUNCTIONS[mtype]}({_metric_field(metric)})"
    return "count()"


def terms_fields(bucket_aggs: list[dict[str, Any]]) -> list[str]:
    fields: list[str] = []
    for bucket in bucket_aggs:
        btype = bucket.get("type")
        if not isinstance(btype, str) or btype.lower() != "terms":
            continue
        field = bucket.get("field")
        if isinstance(field, str) and field.strip():
            fields.append(field)
    return fields


def group_bys(bucket_aggs: list[dict[str, Any]]) -> list[dict[str, object]]:
    return [group_by_field(f) for f in terms_fields(bucket_aggs)]


def page_size(metrics: list[dict[str, Any]], default: int = 20, cap: int = 100) -> int:
    for metric in metrics:
        settings = metric.get("settings")
        if not isinstance(settings, dict):
            continue
        try:
            parsed = int(str(settings.get("size")))
        except (TypeError, ValueError):
            continue
        if parsed > 0:
            return min(parsed, cap)
    return default


__all__ = [
    "build_aggregation",
    "dataprime_aggregation",
    "terms_fields",
    "group_bys",
    "lucene_query_object",
    "normalized_query",
    "page_size",
]
