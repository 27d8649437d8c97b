"""Template variable placeholder normalization.

Grafana accepts both ``$name`` and ``${name}``; Coralogix only resolves the
braced form. Built-in Grafana variables are left alone here: metric
expressions substitute literal values for them separately (see promql.clean_query).
"""
from __future__ import annotations

import re

BUILTIN_VARIABLES: frozenset[str] = frozenset({
    "__rate_interval",
    "__auto_interval_interval",
    "__auto_interval",
    "__range",
    "__from",
    "__to",
    "interval",
    "quantile_stat",
})

_BARE_PLACEHOLDER = re.compile(r"\$([a-zA-Z_][a-zA-Z0-9_]*)")


def _brace(match: re.Match[str]) -> str:
    name = match.group(1)
    if name in BUILTIN_VARIABLES:
        return match.group(0)
    return "${" + name + "}"


def normalize_placeholders(query: str | None) -> str:
    """Rewrite bare ``$identifier`` references to ``${identifier}``.

    Already braced references never match (a ``{`` follows the dollar sign),
    which keeps the rewrite idempotent.
    """
    if not query or not query.strip():
        return query or ""
    return _BARE_PLACEHOLDER.sub(_brace, query)


__all__ = ["BUILTIN_VARIABLES", "normalize_placeholders"]
