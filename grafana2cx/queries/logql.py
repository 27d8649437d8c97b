"""LogQL (Loki) to Lucene translation.

Supported constructs:
  Label selectors : {k="v"}  {k!="v"}  {k=~"regex"}  {k!~"regex"}
  Line filters    : |= "text"  != "text"  |~ "regex"  !~ "regex"
  Metric queries  : sum(rate({...}[5m])) by (label)
                    -> inner selector kept, range and wrappers dropped,
                       by-clause exposed through extract_group_by_fields()

Anything else in the pipeline (parsers, label formatting, unwrap) is ignored.
The translation is regex based and intentionally partial.
"""
from __future__ import annotations

import re

WILDCARD = "*"

# Common Loki label names -> Coralogix Lucene field names.
LABEL_FIELD_MAP: dict[str, str] = {
    "namespace": "kubernetes.namespace_name",
    "pod": "kubernetes.pod_name",
    "container": "kubernetes.container_name",
    "node": "kubernetes.node_name",
    "app": "kubernetes.labels.app",
    "component": "kubernetes.labels.component",
    "instance": "kubernetes.labels.instance",
}

# Not anchored: the selector may sit inside metric function calls.
LABEL_BLOCK_RE = re.compile(r"\{([^}]*)\}")
LABEL_PAIR_RE = re.compile(r'(\w+)\s*(=~|!~|!=|=)\s*"([^"]*?)"')
LINE_FILTER_RE = re.compile(r'(\|=|!=|\|~|!~)\s*"([^"]*?)"')
METRIC_FUNCTION_RE = re.compile(
    r"\b(sum|count|avg|min|max|rate|count_over_time|bytes_rate|bytes_over_time|"
    r"absent_over_time|topk|bottomk|sort|sort_desc)\s*\(",
    re.IGNORECASE,
)
INNER_FUNCTION_RE = re.compile(
    r"\b(bytes_rate|bytes_over_time|absent_over_time|count_over_time|rate|avg_over_time|"
    r"min_over_time|max_over_time|first_over_time|last_over_time|quantile_over_time)\s*\(",
    re.IGNORECASE,
)
GROUP_BY_RE = re.compile(r"\b(by|without)\s*\(([^)]+)\)", re.IGNORECASE)

_LUCENE_SPECIAL = set('+-&|!(){}[]^"~*?:\\/')


def map_label(label: str) -> str:
    return LABEL_FIELD_MAP.get(label.lower(), label)


def escape_lucene(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def escape_regex(value: str) -> str:
    return value.replace("/", "\\/")


def quote_lucene(value: str) -> str:
    if not any(c.isspace() or c in _LUCENE_SPECIAL for c in value):
        return value
    return f'"{escape_lucene(value)}"'


def extract_log_part(expr: str) -> str:
    """Strip metric wrappers, keeping the selector and its filter pipeline.

    sum(count_over_time({namespace="test"}[5m])) by (ns) -> {namespace="test"}
    rate({job="nginx"} |= "error" [1m])                  -> {job="nginx"} |= "error"
    {app="api"} |= "fail"                                -> unchanged
    """
    if not METRIC_FUNCTION_RE.search(expr):
        return expr
    start = expr.find("{")
    if start < 0:
        return expr
    end = expr.find("}", start)
    if end < 0:
        return expr
    selector = expr[start:end + 1]
    rest = expr[end + 1:]
    stops = [i for i in (rest.find("["), rest.find(")")) if i >= 0]
    pipeline = rest[:min(stops)] if stops else rest
    return selector + pipeline


def _label_clause(field: str, op: str, value: str) -> str:
    if op == "!=":
        return f"NOT {field}:{quote_lucene(value)}"
    if op == "=~":
        return f"{field}:/{escape_regex(value)}/"
    if op == "!~":
        return f"NOT {field}:/{escape_regex(value)}/"
    return f"{field}:{quote_lucene(value)}"


def _line_clause(op: str, text: str) -> str:
    if op == "!=":
        return f'NOT "{escape_lucene(text)}"'
    if op == "|~":
        return f"/{escape_regex(text)}/"
    if op == "!~":
        return f"NOT /{escape_regex(text)}/"
    return f'"{escape_lucene(text)}"'


def to_lucene(expr: str | None) -> str:
    """Convert a LogQL expression to a Lucene query string (``*`` when empty)."""
    if not expr or not expr.strip():
        return WILDCARD

    log_part = extract_log_part(expr)
    parts: list[str] = []

    block = LABEL_BLOCK_RE.search(log_part)
    if block:
        for label, op, value in LABEL_PAIR_RE.findall(block.group(1)):
            parts.append(_label_clause(map_label(label), op, value))
        suffix = log_part[block.end():]
    else:
        suffix = log_part

    for op, text in LINE_FILTER_RE.findall(suffix):
        parts.append(_line_clause(op, text))

    return " AND ".join(parts) if parts else WILDCARD


def extract_group_by_fields(expr: str | None) -> list[str]:
    """Coralogix field names from a ``by (...)``/``without (...)`` clause.

    sum(rate({app="nginx"}[5m])) by (namespace, pod)
        -> ["kubernetes.namespace_name", "kubernetes.pod_name"]
    """
    if not expr or not expr.strip():
        return []
    m = GROUP_BY_RE.search(expr)
    if not m:
        return []
    return [map_label(f.strip()) for f in m.group(2).split(",") if f.strip()]


def inner_function(expr: str | None) -> str | None:
    m = INNER_FUNCTION_RE.search(expr or "")
    return m.group(1).lower() if m else None


__all__ = [
    "WILDCARD",
    "LABEL_FIELD_MAP",
    "to_lucene",
    "extract_group_by_fields",
    "extract_log_part",
    "inner_function",
    "quote_lucene",
]
