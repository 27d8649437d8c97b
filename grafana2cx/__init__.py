"""Grafana to Coralogix dashboard converter."""

from .converter import GrafanaToCxConverter, PanelConversionDiagnostic
from .version import __version__

__all__ = ["GrafanaToCxConverter", "PanelConversionDiagnostic", "__version__"]
