"""Metric-expression (PromQL) passthrough and normalization.

Expressions are carried over verbatim except for:
- literal substitution of Grafana built-in interval/range variables that the
  Coralogix PromQL parser cannot resolve,
- rewriting common fixed range windows to the dashboard ``${interval}`` variable,
- placeholder normalization (``$x`` -> ``${x}``) and unquoting of regex
  matchers that compare against a variable (``=~"$x"`` -> ``=~${x}``).

The first ``metric{`` identifier is recorded in the caller-supplied
``discovered`` set so variable conversion can pick a label-values source.
"""
from __future__ import annotations

import re
from collections.abc import MutableSet

from .placeholders import normalize_placeholders

EMPTY_QUERY = "up"

# Order matters: longer names first so prefixes are not substituted early.
BUILTIN_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("$__rate_interval", "5m"),
    ("$__auto_interval_interval", "5m"),
    ("$__auto_interval", "5m"),
    ("$__range", "5m"),
    ("$__from", "now-1h"),
    ("$__to", "now"),
    ("$interval", "5m"),
    ("$quantile_stat", "p95"),
    ("${quantile_stat}", "p95"),
)

METRIC_NAME_RE = re.compile(r"([a-zA-Z_:][a-zA-Z0-9_:]*)\{")
_FIXED_RANGE_RE = re.compile(r"\[5m\]|\[1m\]|\[15m\]")
_TESTID_RE = re.compile(r'testid=~"\$(?:testid|\{testid\})"')
_QUOTED_MATCHER_RE = re.compile(r'(=~|!~)"\$(?:\{([a-zA-Z_][a-zA-Z0-9_]*)\}|([a-zA-Z_][a-zA-Z0-9_]*))"')

# k6 load-test metric names -> friendly series names. Checked in order.
KNOWN_SERIES_NAMES: tuple[tuple[str, str], ...] = (
    ("k6_vus", "VUs"),
    ("k6_vus_max", "Max VUs"),
    ("k6_http_reqs_total", "HTTP Requests"),
    ("k6_http_req_duration", "HTTP Duration"),
    ("k6_http_req_duration_p95", "HTTP Duration P95"),
    ("k6_http_req_duration_p99", "HTTP Duration P99"),
    ("k6_http_req_duration_avg", "HTTP Duration Avg"),
    ("k6_http_req_duration_min", "HTTP Duration Min"),
    ("k6_http_req_duration_max", "HTTP Duration Max"),
    ("k6_http_req_failed", "HTTP Failed"),
    ("k6_data_sent", "Data Sent"),
    ("k6_data_received", "Data Received"),
    ("k6_iteration_duration", "Iteration Duration"),
    ("k6_iterations", "Iterations"),
)

_GENERIC_LEGENDS = {"__auto", "{{}}"}


def discover_metric_name(query: str) -> str | None:
    """Return the first ``metric{`` identifier in ``query`` if any."""
    m = METRIC_NAME_RE.search(query or "")
    return m.group(1) if m else None


def _unquote_matcher(match: re.Match[str]) -> str:
    name = match.group(2) or match.group(3)
    return f"{match.group(1)}${{{name}}}"


def clean_query(query: str | None, discovered: MutableSet[str]) -> str:
    if not query or not query.strip():
        return EMPTY_QUERY

    metric = discover_metric_name(query)
    # first spelling wins; names are compared case-insensitively
    if metric and metric.lower() not in {m.lower() for m in discovered}:
        discovered.add(metric)

    for builtin, literal in BUILTIN_SUBSTITUTIONS:
        query = query.replace(builtin, literal)

    query = _TESTID_RE.sub("testid=~${testid}", query)
    query = _FIXED_RANGE_RE.sub("[${interval}]", query)
    query = normalize_placeholders(query)
    query = _QUOTED_MATCHER_RE.sub(_unquote_matcher, query)
    return query


def _is_rate(query_lower: str) -> bool:
    return "irate(" in query_lower or "rate(" in query_lower


def derive_series_name(query: str, ref_id: str) -> str:
    """Best-effort series name from the expression text."""
    lower = (query or "").lower()
    for fragment, friendly in KNOWN_SERIES_NAMES:
        if fragment not in lower:
            continue
        if _is_rate(lower):
            return f"{friendly}/s"
        if 'expected_response="false"' in lower:
            return f"{friendly} (Errors)"
        if 'expected_response="true"' in lower:
            return f"{friendly} (Success)"
        return friendly

    m = re.search(r"(\w+)\{", query or "")
    if m:
        title = " ".join(part[0].upper() + part[1:] for part in m.group(1).split("_") if part)
        return f"{title}/s" if _is_rate(lower) else title

    return f"Series {ref_id}"


def generate_series_name(legend_format: str | None, query: str, ref_id: str) -> str:
    legend = legend_format or ""
    if legend.strip() and legend not in _GENERIC_LEGENDS and not legend.startswith("{{"):
        name = re.sub(r"\$quantile_stat|\$testid", "", legend, flags=re.IGNORECASE)
        name = name.strip("_").strip()
        if name:
            return name
    return derive_series_name(query, ref_id)


__all__ = [
    "EMPTY_QUERY",
    "clean_query",
    "discover_metric_name",
    "derive_series_name",
    "generate_series_name",
]
