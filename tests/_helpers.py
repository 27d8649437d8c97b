"""Shared builders for converter tests (ids are never compared)."""
from __future__ import annotations

import json
from typing import Any


def es_target(query: str = "", *, ref_id: str = "A", metric: dict[str, Any] | None = None,
              terms: list[str] | None = None, hide: bool = False) -> dict[str, Any]:
    bucket_aggs: list[dict[str, Any]] = [{"type": "terms", "field": f, "id": str(i)} for i, f in enumerate(terms or [])]
    bucket_aggs.append({"type": "date_histogram", "field": "@timestamp", "id": "99"})
    return {
        "refId": ref_id,
        "datasource": {"type": "elasticsearch", "uid": "es"},
        "query": query,
        "bucketAggs": bucket_aggs,
        "metrics": [metric or {"type": "count", "id": "1"}],
        "hide": hide,
    }


def prom_target(expr: str, *, ref_id: str = "A", legend: str | None = None, hide: bool = False) -> dict[str, Any]:
    target: dict[str, Any] = {"refId": ref_id, "datasource": {"type": "prometheus"}, "expr": expr, "hide": hide}
    if legend is not None:
        target["legendFormat"] = legend
    return target


def loki_target(expr: str, *, ref_id: str = "A") -> dict[str, Any]:
    return {"refId": ref_id, "datasource": {"type": "loki"}, "expr": expr}


def panel(ptype: str, targets: list[dict[str, Any]] | None = None, title: str = "P", **extra: Any) -> dict[str, Any]:
    p: dict[str, Any] = {"id": 1, "type": ptype, "title": title, "targets": targets or []}
    p.update(extra)
    return p


def build_dashboard(*panels: dict[str, Any], **extra: Any) -> str:
    doc: dict[str, Any] = {"title": "Test Dashboard", "panels": list(panels)}
    doc.update(extra)
    return json.dumps(doc)


def extract_widgets(dashboard: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        w
        for s in dashboard["layout"]["sections"]
        for r in s["rows"]
        for w in r["widgets"]
    ]


def definition(widget: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    (key, body), = widget["definition"].items()
    return key, body
