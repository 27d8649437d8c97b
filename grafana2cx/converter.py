"""Dashboard assembler: Grafana dashboard JSON -> Coralogix dashboard document.

One synchronous pass per call:

  1. unwrap the optional ``{"dashboard": ...}`` API envelope,
  2. group the flat panel list into sections (``row`` panels start a section,
     collapsed rows carry their children inline),
  3. per panel: plan, convert (or substitute an error widget on Reject),
     record exactly one diagnostic,
  4. convert template variables from the metric names discovered in step 3,
  5. map the dashboard time range.

Diagnostics are cleared at the start of each run; nothing else survives
between runs. Per-panel problems never raise.
"""
from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any

from grafana2cx.config.options import DEFAULT_OPTIONS, ConversionOptions
from grafana2cx.metrics import record_conversion, record_panel_outcome
from grafana2cx.panels.factory import FALLBACK_TYPES, build_registry, fallback_converter
from grafana2cx.panels.helpers import id_object, map_time_frame, panel_title
from grafana2cx.panels.markdown import calculate_height, create_error_widget
from grafana2cx.panels.models import Outcome, PanelConversionDiagnostic, Row, Section, Widget
from grafana2cx.transformations import CompositeTransformationPlanner, Reject
from grafana2cx.utils.exceptions import DashboardParseError
from grafana2cx.variables import VariableConverter

DEFAULT_DASHBOARD_NAME = "Imported Grafana Dashboard"

SECTION_COLORS: tuple[str, ...] = (
    "SECTION_PREDEFINED_COLOR_UNSPECIFIED",
    "SECTION_PREDEFINED_COLOR_BLUE",
    "SECTION_PREDEFINED_COLOR_GREEN",
    "SECTION_PREDEFINED_COLOR_PURPLE",
    "SECTION_PREDEFINED_COLOR_PINK",
    "SECTION_PREDEFINED_COLOR_CYAN",
    "SECTION_PREDEFINED_COLOR_MAGENTA",
    "SECTION_PREDEFINED_COLOR_ORANGE",
)

REASON_FALLBACK = "Converted with lineChart fallback."
REASON_NO_WIDGET = "Panel converter produced no widget (empty/hidden/invalid targets)."
REASON_UNSUPPORTED = "Unsupported Grafana panel type."
REASON_FORCED_FALLBACK = "Forced fallback for unsupported panel type."

_module_logger = logging.getLogger(__name__)


def _panel_type(panel: dict[str, Any]) -> str:
    ptype = panel.get("type")
    return ptype if isinstance(ptype, str) else ""


def _dict_items(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def group_panels(panels: list[dict[str, Any]]) -> list[tuple[str | None, list[dict[str, Any]]]]:
    """Split a flat Grafana panel list into (row title, panels) sections.

    Only collapsed rows carry their children in a nested ``panels`` array;
    nested rows inside them are ignored.
    """
    sections: list[tuple[str | None, list[dict[str, Any]]]] = []
    title: str | None = None
    current: list[dict[str, Any]] = []
    for panel in panels:
        if _panel_type(panel) != "row":
            current.append(panel)
            continue
        if current or title is not None:
            sections.append((title, current))
            current = []
        row_title = panel.get("title")
        title = row_title if isinstance(row_title, str) else None
        if panel.get("collapsed") is True:
            current.extend(p for p in _dict_items(panel.get("panels")) if _panel_type(p).lower() != "row")
    if current or title is not None:
        sections.append((title, current))
    return sections


def section_options(title: str | None, color_index: int) -> dict[str, Any]:
    if not title or not title.strip():
        return {"internal": {}}
    return {
        "custom": {
            "name": title,
            "collapsed": False,
            "color": {"predefined": SECTION_COLORS[color_index % len(SECTION_COLORS)]},
        }
    }


def new_dashboard_id() -> str:
    return uuid.uuid4().hex[:21]


class GrafanaToCxConverter:
    """Converts Grafana dashboard JSON into a Coralogix custom dashboard."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or _module_logger
        self.planner = CompositeTransformationPlanner()
        self._registry = build_registry()
        self._fallback = fallback_converter()
        self._diagnostics: list[PanelConversionDiagnostic] = []

    @property
    def diagnostics(self) -> list[PanelConversionDiagnostic]:
        return list(self._diagnostics)

    def convert(self, grafana_json: str | Mapping[str, Any], options: ConversionOptions | None = None) -> str:
        return json.dumps(self.convert_to_dict(grafana_json, options), indent=2, ensure_ascii=False)

    def convert_to_dict(
        self, grafana_json: str | Mapping[str, Any], options: ConversionOptions | None = None
    ) -> dict[str, Any]:
        opts = options or DEFAULT_OPTIONS
        self._diagnostics = []
        source = self._parse(grafana_json)
        envelope = source.get("dashboard")
        grafana: dict[str, Any] = envelope if isinstance(envelope, dict) else source

        discovered: set[str] = set()
        dashboard = self._initialize_dashboard(grafana, opts)
        dashboard["layout"]["sections"] = self._convert_panels(grafana, discovered, opts)

        templating = grafana.get("templating")
        variables = templating.get("list") if isinstance(templating, dict) else None
        dashboard["variablesV2"] = VariableConverter(self.logger).convert_variables(
            _dict_items(variables), discovered
        )
        dashboard["relativeTimeFrame"] = map_time_frame(grafana.get("time"))

        record_conversion()
        self.logger.info(
            "dashboard.convert.done name=%s sections=%d panels=%d non_converted=%d",
            dashboard["name"],
            len(dashboard["layout"]["sections"]),
            len(self._diagnostics),
            sum(1 for d in self._diagnostics if d.outcome != "converted"),
        )
        return dashboard

    @staticmethod
    def _parse(grafana_json: str | Mapping[str, Any]) -> dict[str, Any]:
        if isinstance(grafana_json, Mapping):
            return dict(grafana_json)
        try:
            parsed = json.loads(grafana_json)
        except (TypeError, ValueError) as e:
            raise DashboardParseError(f"Grafana dashboard is not valid JSON: {e}") from e
        return parsed if isinstance(parsed, dict) else {}

    @staticmethod
    def _initialize_dashboard(grafana: dict[str, Any], options: ConversionOptions) -> dict[str, Any]:
        title = grafana.get("title")
        description = grafana.get("description")
        return {
            "id": new_dashboard_id(),
            "name": options.dashboard_name or (title if isinstance(title, str) else None) or DEFAULT_DASHBOARD_NAME,
            "description": description if isinstance(description, str) else "",
            "layout": {"sections": []},
            "variables": [],
            "variablesV2": [],
            "filters": [],
            "relativeTimeFrame": "3600s",
            "annotations": [],
            "off": {},
            "actions": [],
        }

    def _convert_panels(
        self, grafana: dict[str, Any], discovered: set[str], options: ConversionOptions
    ) -> list[Section]:
        panels = _dict_items(grafana.get("panels"))
        self.logger.info("dashboard.convert.start panels=%d", len(panels))
        sections = group_panels(panels)
        if not sections and panels:
            sections = [(None, [p for p in panels if _panel_type(p) != "row"])]

        result: list[Section] = []
        for title, section_panels in (s for s in sections if s[1]):
            result.append(self._create_section(section_panels, title, len(result), discovered, options))
        return result

    def _create_section(
        self,
        panels: list[dict[str, Any]],
        title: str | None,
        color_index: int,
        discovered: set[str],
        options: ConversionOptions,
    ) -> Section:
        rows: list[Row] = []
        pending: list[Widget] = []

        def flush() -> None:
            if pending:
                rows.append(self._row(list(pending), options.default_row_height))
                pending.clear()

        for panel in panels:
            ptype = _panel_type(panel)
            if ptype == "row":
                continue
            if ptype == "text":
                flush()
                widget = self._convert_panel(panel, discovered, options)
                if widget is not None:
                    rows.append(self._row([widget], calculate_height(panel)))
                continue
            if len(pending) >= options.max_widgets_per_row:
                flush()
            widget = self._convert_panel(panel, discovered, options)
            if widget is not None:
                pending.append(widget)
        flush()

        return {"id": id_object(), "rows": rows, "options": section_options(title, color_index)}

    @staticmethod
    def _row(widgets: list[Widget], height: int) -> Row:
        return {"id": id_object(), "appearance": {"height": height}, "widgets": widgets}

    def _convert_panel(
        self, panel: dict[str, Any], discovered: set[str], options: ConversionOptions
    ) -> Widget | None:
        ptype = _panel_type(panel)
        title = panel_title(panel)
        plan = self.planner.plan_panel(panel)

        if isinstance(plan, Reject):
            self._record(title, ptype, "error", plan.reason)
            return create_error_widget(title, ptype, plan.reason)

        converter = self._registry.get(ptype)
        if converter is None and ptype in FALLBACK_TYPES:
            converter = self._fallback
        if converter is not None:
            widget = converter.convert(panel, discovered, plan)
            if widget is None:
                self._record(title, ptype, "skipped", REASON_NO_WIDGET)
            elif ptype in FALLBACK_TYPES:
                self._record(title, ptype, "fallback", REASON_FALLBACK)
            else:
                self._record(title, ptype, "converted")
            return widget

        if options.skip_unsupported_panels:
            self._record(title, ptype, "skipped", REASON_UNSUPPORTED)
            return None

        widget = self._fallback.convert(panel, discovered, plan)
        if widget is None:
            self._record(title, ptype, "skipped", REASON_NO_WIDGET)
        else:
            self._record(title, ptype, "fallback", REASON_FORCED_FALLBACK)
        return widget

    def _record(self, title: str, panel_type: str, outcome: Outcome, reason: str = "") -> None:
        self._diagnostics.append(PanelConversionDiagnostic(title, panel_type, outcome, reason))
        record_panel_outcome(outcome, panel_type)
        if outcome == "error":
            self.logger.warning("panel.convert.error title=%s type=%s reason=%s", title, panel_type, reason)
        elif outcome != "converted":
            self.logger.info("panel.convert.%s title=%s type=%s reason=%s", outcome, title, panel_type, reason)


__all__ = [
    "GrafanaToCxConverter",
    "PanelConversionDiagnostic",
    "group_panels",
    "section_options",
    "SECTION_COLORS",
]
