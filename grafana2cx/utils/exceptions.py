"""grafana2cx exception hierarchy.

Per-panel problems never raise: they surface as conversion diagnostics and,
for rejected panels, as explanatory markdown widgets. These exceptions cover
the few failures that do cross the engine boundary.
"""
from __future__ import annotations


class Grafana2CxError(Exception):
    """Base class for all grafana2cx exceptions."""


class ConfigError(Grafana2CxError):
    """Configuration-related issues (unreadable file, non-mapping document)."""


class DashboardParseError(Grafana2CxError):
    """Source dashboard text is not valid JSON."""


class SchemaValidationError(Grafana2CxError):
    """A produced document does not satisfy the bundled dashboard schema."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "schema validation failed")


__all__ = [
    "Grafana2CxError",
    "ConfigError",
    "DashboardParseError",
    "SchemaValidationError",
]
