"""Prometheus counters describing conversion runs.

Counters are module singletons registered once on the default registry;
record_* helpers are the only write path used by the converter.
"""
from __future__ import annotations

from .factory import make_counter

PANELS_CONVERTED = make_counter(
    "grafana2cx_panels_converted",
    "Panels processed by the dashboard converter, by outcome and Grafana panel type",
    ["outcome", "panel_type"],
)

CONVERSIONS = make_counter(
    "grafana2cx_conversions",
    "Dashboard conversion runs",
)


def record_panel_outcome(outcome: str, panel_type: str) -> None:
    PANELS_CONVERTED.labels(outcome=outcome, panel_type=panel_type or "unknown").inc()


def record_conversion() -> None:
    CONVERSIONS.inc()


__all__ = ["PANELS_CONVERTED", "CONVERSIONS", "record_panel_outcome", "record_conversion"]
