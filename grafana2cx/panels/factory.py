"""Panel converter registry keyed by Grafana panel type.

Types listed in FALLBACK_TYPES have no dedicated Coralogix widget and are
rendered by the line chart converter with a ``fallback`` outcome.
"""
from __future__ import annotations

from .bar_chart import BarChartPanelConverter
from .base import PanelConverter
from .data_table import DataTablePanelConverter, LogsPanelConverter
from .gauge import GaugePanelConverter
from .line_chart import LineChartPanelConverter
from .markdown import MarkdownPanelConverter
from .pie_chart import PieChartPanelConverter

FALLBACK_TYPES: frozenset[str] = frozenset({"timeseries", "graph"})


def build_registry() -> dict[str, PanelConverter]:
    gauge = GaugePanelConverter()
    return {
        "stat": gauge,
        "singlestat": gauge,
        "gauge": gauge,
        "bargauge": gauge,
        "text": MarkdownPanelConverter(),
        "table": DataTablePanelConverter(),
        "logs": LogsPanelConverter(),
        "piechart": PieChartPanelConverter(),
        "barchart": BarChartPanelConverter(),
    }


def fallback_converter() -> PanelConverter:
    return LineChartPanelConverter()


__all__ = ["FALLBACK_TYPES", "build_registry", "fallback_converter"]
