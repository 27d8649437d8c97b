"""Common helpers shared by the panel converters (ids, titles, units, HTML).

Unit tables are fixed lookups with a ``UNIT_UNSPECIFIED`` fallback; the
HTML sanitizer is regex stripping plus entity decoding. Neither is meant to
be complete.
"""
from __future__ import annotations

import html
import re
import uuid
from typing import Any

DEFAULT_UNIT = "UNIT_UNSPECIFIED"

# Grafana unit id (lower-cased) -> Coralogix unit enum.
UNIT_MAPPING: dict[str, str] = {
    "none": "UNIT_UNSPECIFIED",
    "short": "UNIT_UNSPECIFIED",
    "bytes": "UNIT_BYTES",
    "decbytes": "UNIT_BYTES",
    "bits": "UNIT_BITS",
    "bps": "UNIT_UNSPECIFIED",
    "binbps": "UNIT_UNSPECIFIED",
    "bytes/sec": "UNIT_UNSPECIFIED",
    "percent": "UNIT_PERCENT",
    "percentunit": "UNIT_PERCENT",
    "s": "UNIT_SECONDS",
    "ms": "UNIT_MILLISECONDS",
    "us": "UNIT_MICROSECONDS",
    "µs": "UNIT_MICROSECONDS",
    "ns": "UNIT_NANOSECONDS",
    "reqps": "UNIT_UNSPECIFIED",
    "rps": "UNIT_UNSPECIFIED",
    "ops": "UNIT_UNSPECIFIED",
}

# Units Coralogix has no enum for are shown through customUnit instead.
CUSTOM_UNITS: dict[str, str] = {
    "reqps": "req/s",
    "rps": "req/s",
    "ops": "ops/s",
    "vus": "VUs",
    "bps": "bytes/s",
    "binbps": "bytes/s",
    "bytes/sec": "bytes/s",
}

# Gauges reject UNIT_UNSPECIFIED for throughput units.
GAUGE_UNIT_OVERRIDES: dict[str, str] = {
    "bps": "UNIT_BYTES",
    "binbps": "UNIT_BYTES",
    "bytes/sec": "UNIT_BYTES",
    "reqps": "UNIT_UNSPECIFIED",
    "rps": "UNIT_UNSPECIFIED",
    "ops": "UNIT_UNSPECIFIED",
}

DEFAULT_RELATIVE_TIME_FRAME = "3600s"
TIME_FRAMES: dict[str, str] = {
    "now-1h": "3600s",
    "now-3h": "10800s",
    "now-6h": "21600s",
    "now-12h": "43200s",
    "now-24h": "86400s",
    "now-1d": "86400s",
    "now-7d": "604800s",
    "now-30d": "2592000s",
}

_ANCHOR_RE = re.compile(r"<a\s+[^>]*href=[\"']([^\"']*)[\"'][^>]*>(.*?)</a>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")


def new_uuid() -> str:
    return str(uuid.uuid4())


def id_object() -> dict[str, str]:
    return {"value": new_uuid()}


def panel_title(panel: dict[str, Any]) -> str:
    title = panel.get("title")
    if isinstance(title, str) and title.strip():
        return title
    return f"Panel #{panel.get('id', 0)}"


def panel_description(panel: dict[str, Any]) -> str:
    desc = panel.get("description")
    return desc if isinstance(desc, str) else ""


def panel_options(panel: dict[str, Any]) -> dict[str, Any]:
    opts = panel.get("options")
    return opts if isinstance(opts, dict) else {}


def field_defaults(panel: dict[str, Any]) -> dict[str, Any]:
    cfg = panel.get("fieldConfig")
    defaults = cfg.get("defaults") if isinstance(cfg, dict) else None
    return defaults if isinstance(defaults, dict) else {}


def panel_unit(panel: dict[str, Any]) -> str:
    unit = field_defaults(panel).get("unit")
    return unit if isinstance(unit, str) else "none"


def map_unit(unit: str | None) -> str:
    return UNIT_MAPPING.get((unit or "none").lower(), DEFAULT_UNIT)


def map_unit_for_gauge(unit: str | None) -> str:
    key = (unit or "none").lower()
    if key in GAUGE_UNIT_OVERRIDES:
        return GAUGE_UNIT_OVERRIDES[key]
    mapped = map_unit(unit)
    return "UNIT_BYTES" if mapped == DEFAULT_UNIT else mapped


def custom_unit(unit: str | None) -> str:
    return CUSTOM_UNITS.get((unit or "").lower(), "")


def clean_html(text: str | None) -> str:
    """Anchors become markdown links, other tags are dropped, entities decoded."""
    if not text:
        return ""
    result = _ANCHOR_RE.sub(lambda m: f"[{m.group(2)}]({m.group(1)})", text)
    result = _TAG_RE.sub("", result)
    return html.unescape(result).strip()


def map_time_frame(time_range: Any) -> str:
    start = time_range.get("from") if isinstance(time_range, dict) else None
    if not isinstance(start, str):
        return DEFAULT_RELATIVE_TIME_FRAME
    return TIME_FRAMES.get(start, DEFAULT_RELATIVE_TIME_FRAME)


def as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


__all__ = [
    "DEFAULT_UNIT",
    "new_uuid",
    "id_object",
    "panel_title",
    "panel_description",
    "panel_options",
    "field_defaults",
    "panel_unit",
    "map_unit",
    "map_unit_for_gauge",
    "custom_unit",
    "clean_html",
    "map_time_frame",
    "as_number",
]
