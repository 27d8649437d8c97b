"""Tagged view over Grafana panel targets.

A target's dialect is inferred from its shape (datasource tag when present,
otherwise field presence and a brace heuristic). It is resolved once here and
every converter dispatches on ``TargetView.dialect``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

STRUCTURED_DATASOURCES = {"elasticsearch", "opensearch"}

# A PromQL selector always has a metric name right before "{"; LogQL never does.
PROMQL_METRIC_SELECTOR_RE = re.compile(r"\b[a-zA-Z_:][a-zA-Z0-9_:]*\{")


class Dialect(str, Enum):
    METRICS = "metrics"        # PromQL expression in ``expr``
    LOGS = "logs"              # LogQL expression in ``expr``
    STRUCTURED = "structured"  # Lucene ``query`` + bucketAggs/metrics trees


def _list_of_dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def datasource_type(target: dict[str, Any]) -> str:
    ds = target.get("datasource")
    if isinstance(ds, dict):
        return _str(ds.get("type")).lower()
    return ""


def is_structured_target(target: dict[str, Any]) -> bool:
    if datasource_type(target) in STRUCTURED_DATASOURCES:
        return True
    return target.get("bucketAggs") is not None and target.get("expr") is None


def looks_like_logql(expr: str) -> bool:
    return "{" in expr and not PROMQL_METRIC_SELECTOR_RE.search(expr)


def resolve_dialect(target: dict[str, Any]) -> Dialect:
    if is_structured_target(target):
        return Dialect.STRUCTURED
    ds_type = datasource_type(target)
    if ds_type == "loki":
        return Dialect.LOGS
    if ds_type == "prometheus":
        return Dialect.METRICS
    return Dialect.LOGS if looks_like_logql(_str(target.get("expr"))) else Dialect.METRICS


@dataclass(frozen=True)
class TargetView:
    raw: dict[str, Any]
    dialect: Dialect
    ref_id: str = "A"
    hidden: bool = False
    expr: str = ""
    query: str = ""
    legend_format: str | None = None
    alias: str = ""
    bucket_aggs: list[dict[str, Any]] = field(default_factory=list)
    metrics: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_raw(cls, target: dict[str, Any]) -> TargetView:
        legend = target.get("legendFormat")
        return cls(
            raw=target,
            dialect=resolve_dialect(target),
            ref_id=_str(target.get("refId")) or "A",
            hidden=target.get("hide") is True,
            expr=_str(target.get("expr")),
            query=_str(target.get("query")),
            legend_format=legend if isinstance(legend, str) else None,
            alias=_str(target.get("alias")),
            bucket_aggs=_list_of_dicts(target.get("bucketAggs")),
            metrics=_list_of_dicts(target.get("metrics")),
        )

    @property
    def first_metric(self) -> dict[str, Any] | None:
        return self.metrics[0] if self.metrics else None


def panel_targets(panel: dict[str, Any]) -> list[TargetView]:
    return [TargetView.from_raw(t) for t in _list_of_dicts(panel.get("targets"))]


def visible_targets(panel: dict[str, Any]) -> list[TargetView]:
    return [t for t in panel_targets(panel) if not t.hidden]


__all__ = [
    "Dialect",
    "TargetView",
    "datasource_type",
    "is_structured_target",
    "looks_like_logql",
    "resolve_dialect",
    "panel_targets",
    "visible_targets",
]
