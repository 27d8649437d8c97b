"""Pie chart multi-query consolidation.

Grafana pie charts often split one Elasticsearch query into several targets
that differ only by a boolean predicate (``payload.isEmail:true`` vs
``payload.isEmail:false``), one slice per target. Coralogix pie charts take a
single query, so such targets are merged into one group-by over the predicate
field. Any other multi-target shape is rejected rather than guessed at.

Known limitation: the predicate must be the whole query or its trailing
``AND`` clause. Leading negation and parenthesized groups are not recognized.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from grafana2cx.queries.fields import group_by_field
from grafana2cx.queries.lucene import build_aggregation, dataprime_aggregation, lucene_query_object
from grafana2cx.queries.placeholders import normalize_placeholders
from grafana2cx.queries.targets import Dialect, TargetView

from .context import TransformationContext
from .plan import Proceed, Reject, TransformationPlan

logger = logging.getLogger(__name__)

PIE_PANEL_TYPE = "piechart"

DATASOURCE_MIX_REASON = (
    "Pie chart has multiple targets with unsupported datasource mix. "
    "Only Elasticsearch/OpenSearch boolean-split targets can be consolidated "
    "to a single DataPrime group-by query."
)
NOT_CONSOLIDATABLE_REASON = (
    "Pie chart has multiple Elasticsearch/OpenSearch targets that cannot be consolidated. "
    "Targets must differ only by a single boolean predicate (e.g. field:true vs field:false)."
)

# Whole query is one predicate: payload.isEmail:true
SIMPLE_PREDICATE_RE = re.compile(r"^([\w.]+):(true|false)\s*$", re.IGNORECASE)
# Trailing predicate after a base filter: foo AND payload.isEmail:true
TRAILING_PREDICATE_RE = re.compile(r"\s+(AND\s+)?([\w.]+):(true|false)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Consolidation:
    field: str
    base_filter: str  # "" when the targets share no filter beyond the predicate
    payload: dict[str, Any]


def parse_boolean_predicate(query: str) -> tuple[str, str, str] | None:
    """Split ``query`` into (base, field, value) or None when no predicate ends it."""
    simple = SIMPLE_PREDICATE_RE.match(query)
    if simple:
        return "", simple.group(1), simple.group(2)
    trailing = TRAILING_PREDICATE_RE.search(query)
    if trailing:
        return query[:trailing.start()].strip(), trailing.group(2), trailing.group(3)
    return None


def _normalize_base(base: str) -> str:
    b = base.strip()
    return "*" if not b or b == "*" else b


def escape_dataprime_literal(lucene: str) -> str:
    return lucene.replace("\\", "\\\\").replace("'", "\\'")


def build_consolidated_payload(base_filter: str, field: str, first: TargetView) -> dict[str, Any]:
    agg_expr = dataprime_aggregation(first.first_metric)
    if base_filter:
        dataprime = (
            f"source logs | lucene '{escape_dataprime_literal(base_filter)}' "
            f"| groupby {field} agg {agg_expr}"
        )
        lucene = f"{base_filter} AND {field}:*"
    else:
        dataprime = f"source logs | groupby {field} agg {agg_expr}"
        lucene = f"{field}:*"

    logs_query: dict[str, Any] = {
        "aggregation": build_aggregation(first.first_metric),
        "filters": [],
        "groupNamesFields": [group_by_field(field)],
    }
    lucene_obj = lucene_query_object(normalize_placeholders(lucene))
    if lucene_obj:
        logs_query["luceneQuery"] = lucene_obj
    return {"logs": logs_query, "dataPrime": {"value": dataprime}}


def extract_consolidation(targets: list[TargetView]) -> Consolidation | None:
    if len(targets) < 2:
        return None
    predicates: list[tuple[str, str, str]] = []
    for target in targets:
        query = normalize_placeholders(target.query).strip() or "*"
        parsed = parse_boolean_predicate(query)
        if parsed is None:
            return None
        predicates.append(parsed)

    first_base, first_field, _ = predicates[0]
    if any(f != first_field for _, f, _ in predicates):
        return None
    if any(_normalize_base(b) != _normalize_base(first_base) for b, _, _ in predicates):
        return None
    if {v.lower() for _, _, v in predicates} != {"true", "false"}:
        return None

    base = "" if _normalize_base(first_base) == "*" else first_base.strip()
    return Consolidation(
        field=first_field,
        base_filter=base,
        payload=build_consolidated_payload(base, first_field, targets[0]),
    )


class PieMultiQueryConsolidationPlanner:
    panel_types = (PIE_PANEL_TYPE,)

    def plan(self, context: TransformationContext) -> TransformationPlan:
        if context.panel_type.lower() != PIE_PANEL_TYPE:
            return Proceed()
        visible = context.visible_targets
        if len(visible) < 2:
            return Proceed()
        if any(t.dialect is not Dialect.STRUCTURED for t in visible):
            return Reject(DATASOURCE_MIX_REASON)
        consolidation = extract_consolidation(visible)
        if consolidation is None:
            return Reject(NOT_CONSOLIDATABLE_REASON)
        logger.debug(
            "planner.pie.consolidated title=%s field=%s targets=%d",
            context.panel_title, consolidation.field, len(visible),
        )
        return Proceed(consolidation.payload)


__all__ = [
    "Consolidation",
    "PieMultiQueryConsolidationPlanner",
    "parse_boolean_predicate",
    "extract_consolidation",
    "escape_dataprime_literal",
]
