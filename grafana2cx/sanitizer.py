"""Pre-upload payload sanitization.

The Coralogix dashboards API is stricter than the converter output:

- ``stackedGroupName``/``stackedGroupNameField`` are rejected anywhere,
- ``pieChart.query.dataPrime`` is rejected, so the DataPrime text moves into
  a markdown widget inserted right after the pie chart,
- a dataTable needs at least one column,
- a pieChart needs a ``labelDefinition``.

sanitize_dashboard() never mutates its argument and is idempotent.
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from grafana2cx.panels.data_table import DEFAULT_COLUMN
from grafana2cx.panels.markdown import markdown_widget
from grafana2cx.panels.pie_chart import default_label_definition

logger = logging.getLogger(__name__)

REMOVED_PROPERTIES = frozenset({"stackedGroupName", "stackedGroupNameField"})
DATAPRIME_DESCRIPTION = "Preserved from converter output: API does not accept pieChart.query.dataPrime directly."


def _walk_dicts(node: Any, visit: Callable[[dict[str, Any]], None]) -> None:
    if isinstance(node, dict):
        visit(node)
        for value in list(node.values()):
            _walk_dicts(value, visit)
    elif isinstance(node, list):
        for item in node:
            _walk_dicts(item, visit)


def _remove_properties(obj: dict[str, Any]) -> None:
    for key in [k for k in obj if k in REMOVED_PROPERTIES]:
        del obj[key]


def _ensure_columns(obj: dict[str, Any]) -> None:
    table = obj.get("dataTable")
    if isinstance(table, dict):
        columns = table.get("columns")
        if not isinstance(columns, list) or not columns:
            table["columns"] = [{"field": DEFAULT_COLUMN}]


def _ensure_label_definition(obj: dict[str, Any]) -> None:
    pie = obj.get("pieChart")
    if isinstance(pie, dict) and pie.get("labelDefinition") is None:
        pie["labelDefinition"] = default_label_definition()


def pop_dataprime(widget: dict[str, Any]) -> str | None:
    """Remove ``pieChart.query.dataPrime`` and return its text, if any."""
    definition = widget.get("definition")
    pie = definition.get("pieChart") if isinstance(definition, dict) else None
    query = pie.get("query") if isinstance(pie, dict) else None
    dataprime = query.get("dataPrime") if isinstance(query, dict) else None
    value = dataprime.get("value") if isinstance(dataprime, dict) else None
    if not isinstance(value, str) or not value.strip():
        return None
    del query["dataPrime"]
    return value


def _relocate_dataprime(obj: dict[str, Any]) -> None:
    widgets = obj.get("widgets")
    if not isinstance(widgets, list):
        return
    i = 0
    while i < len(widgets):
        widget = widgets[i]
        text = pop_dataprime(widget) if isinstance(widget, dict) else None
        if text is not None:
            title = widget.get("title") or "Widget"
            widgets.insert(i + 1, markdown_widget(
                f"## DataPrime Query (Preserved)\n\n```dataprime\n{text}\n```",
                title=f"{title} (DataPrime Query)",
                description=DATAPRIME_DESCRIPTION,
            ))
            logger.debug("sanitizer.dataprime.relocated title=%s", title)
            i += 1
        i += 1


def sanitize_dashboard(dashboard: dict[str, Any]) -> dict[str, Any]:
    cleaned = copy.deepcopy(dashboard)
    for visit in (_remove_properties, _relocate_dataprime, _ensure_columns, _ensure_label_definition):
        _walk_dicts(cleaned, visit)
    return cleaned


__all__ = ["sanitize_dashboard", "pop_dataprime", "REMOVED_PROPERTIES"]
