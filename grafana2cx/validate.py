"""Structural validation of converted dashboards.

Checks a produced document against the bundled JSON schema
(``schema/dashboard.schema.json``) plus the one rule JSON Schema cannot
express cleanly here: each widget definition holds exactly one variant.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema

from grafana2cx.panels.models import WIDGET_VARIANTS
from grafana2cx.utils.exceptions import SchemaValidationError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema" / "dashboard.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def _iter_widgets(dashboard: dict[str, Any]):
    layout = dashboard.get("layout")
    sections = layout.get("sections") if isinstance(layout, dict) else None
    for s_idx, section in enumerate(sections if isinstance(sections, list) else []):
        rows = section.get("rows") if isinstance(section, dict) else None
        for r_idx, row in enumerate(rows if isinstance(rows, list) else []):
            widgets = row.get("widgets") if isinstance(row, dict) else None
            for w_idx, widget in enumerate(widgets if isinstance(widgets, list) else []):
                if isinstance(widget, dict):
                    yield f"layout/sections/{s_idx}/rows/{r_idx}/widgets/{w_idx}", widget


def variant_errors(dashboard: dict[str, Any]) -> list[str]:
    errors = []
    for path, widget in _iter_widgets(dashboard):
        definition = widget.get("definition")
        if not isinstance(definition, dict):
            continue
        populated = [k for k in WIDGET_VARIANTS if definition.get(k) is not None]
        if len(populated) != 1:
            errors.append(f"{path}: definition must hold exactly one widget variant (found {len(populated)})")
    return errors


def validate_dashboard(dashboard: dict[str, Any]) -> list[str]:
    """Return human-readable problems; an empty list means valid."""
    validator = jsonschema.Draft202012Validator(load_schema())
    errors = []
    for err in sorted(validator.iter_errors(dashboard), key=lambda e: list(e.absolute_path)):
        location = "/".join(str(p) for p in err.absolute_path) or "<root>"
        errors.append(f"{location}: {err.message}")
    errors.extend(variant_errors(dashboard))
    if errors:
        logger.debug("validate.dashboard.failed count=%d", len(errors))
    return errors


def assert_valid_dashboard(dashboard: dict[str, Any]) -> None:
    errors = validate_dashboard(dashboard)
    if errors:
        raise SchemaValidationError(errors)


__all__ = ["validate_dashboard", "assert_valid_dashboard", "variant_errors", "load_schema"]
