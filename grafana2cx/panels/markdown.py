"""Markdown family: text panels, conversion error widgets and row sizing."""
from __future__ import annotations

from collections.abc import MutableSet
from typing import Any

from grafana2cx.transformations.plan import TransformationPlan

from .base import PanelConverter
from .helpers import clean_html, id_object
from .models import Widget

ERROR_DESCRIPTION = "Panel could not be converted; see content for details."

# (max lines, row height); anything longer gets TALL_HEIGHT.
HEIGHT_STEPS: tuple[tuple[int, int], ...] = ((3, 8), (10, 15))
TALL_HEIGHT = 23


def panel_content(panel: dict[str, Any]) -> str:
    options = panel.get("options")
    content = options.get("content") if isinstance(options, dict) else None
    if not isinstance(content, str) or not content.strip():
        content = panel.get("content")
    return content if isinstance(content, str) else ""


def calculate_height(panel: dict[str, Any]) -> int:
    lines = panel_content(panel).count("\n") + 1
    for max_lines, height in HEIGHT_STEPS:
        if lines <= max_lines:
            return height
    return TALL_HEIGHT


def markdown_widget(text: str, title: str = "", description: str = "") -> Widget:
    return {
        "id": id_object(),
        "title": title,
        "description": description,
        "definition": {"markdown": {"markdownText": text}},
    }


def create_error_widget(panel_title: str, panel_type: str, reason: str) -> Widget:
    """Markdown widget standing in for a panel the planner rejected."""
    text = f"## Conversion failed: {panel_type}\n\n{clean_html(reason)}"
    return markdown_widget(text, title=panel_title, description=ERROR_DESCRIPTION)


class MarkdownPanelConverter(PanelConverter):
    variant = "markdown"

    def convert(
        self,
        panel: dict[str, Any],
        discovered_metrics: MutableSet[str],
        plan: TransformationPlan | None = None,
    ) -> Widget | None:
        content = panel_content(panel)
        if not content.strip():
            return None
        return markdown_widget(clean_html(content))


__all__ = [
    "MarkdownPanelConverter",
    "calculate_height",
    "create_error_widget",
    "markdown_widget",
    "panel_content",
]
