"""Widget payload models emitted by the panel converters.

These types describe the JSON structures placed in ``layout.sections[].rows[].widgets``.
They intentionally remain loose (``total=False`` and ``dict[str, Any]``
definitions) because each widget variant carries its own Coralogix schema.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal, TypedDict

Outcome = Literal["converted", "fallback", "skipped", "error"]

WIDGET_VARIANTS: tuple[str, ...] = (
    "gauge",
    "dataTable",
    "lineChart",
    "pieChart",
    "barChart",
    "markdown",
)


class IdObject(TypedDict):
    value: str


class Widget(TypedDict, total=False):
    id: IdObject
    title: str
    description: str
    # exactly one key of WIDGET_VARIANTS
    definition: dict[str, Any]


class RowAppearance(TypedDict):
    height: int


class Row(TypedDict):
    id: IdObject
    appearance: RowAppearance
    widgets: list[Widget]


class Section(TypedDict):
    id: IdObject
    rows: list[Row]
    options: dict[str, Any]


@dataclass(frozen=True)
class PanelConversionDiagnostic:
    panel_title: str
    panel_type: str
    outcome: Outcome
    reason: str = ""

    def to_dict(self) -> dict[str, str]:
        d = asdict(self)
        return {
            "panelTitle": d["panel_title"],
            "panelType": d["panel_type"],
            "outcome": d["outcome"],
            "reason": d["reason"],
        }


def widget_variant(widget: dict[str, Any]) -> str | None:
    definition = widget.get("definition")
    if not isinstance(definition, dict):
        return None
    for key in WIDGET_VARIANTS:
        if definition.get(key) is not None:
            return key
    return None


__all__ = [
    "Outcome",
    "WIDGET_VARIANTS",
    "IdObject",
    "Widget",
    "Row",
    "RowAppearance",
    "Section",
    "PanelConversionDiagnostic",
    "widget_variant",
]
