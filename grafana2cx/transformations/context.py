"""Planner input: the panel plus its pre-parsed targets."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from grafana2cx.panels.helpers import panel_title
from grafana2cx.queries.targets import TargetView, panel_targets


def panel_transformations(panel: dict[str, Any]) -> list[Any]:
    """Root-level ``transformations`` or the newer ``data.spec.transformations``."""
    root = panel.get("transformations")
    if isinstance(root, list) and root:
        return root
    data = panel.get("data")
    spec = data.get("spec") if isinstance(data, dict) else None
    nested = spec.get("transformations") if isinstance(spec, dict) else None
    return nested if isinstance(nested, list) else []


@dataclass(frozen=True)
class TransformationContext:
    panel: dict[str, Any]
    panel_type: str
    panel_title: str
    targets: list[TargetView] = field(default_factory=list)
    transformations: list[Any] = field(default_factory=list)

    @classmethod
    def from_panel(cls, panel: dict[str, Any]) -> TransformationContext:
        ptype = panel.get("type")
        return cls(
            panel=panel,
            panel_type=ptype if isinstance(ptype, str) else "",
            panel_title=panel_title(panel),
            targets=panel_targets(panel),
            transformations=panel_transformations(panel),
        )

    @property
    def visible_targets(self) -> list[TargetView]:
        return [t for t in self.targets if not t.hidden]
