"""Panel converters, one family per Coralogix widget type."""
from .base import PanelConverter
from .factory import FALLBACK_TYPES, build_registry, fallback_converter
from .models import PanelConversionDiagnostic, Widget

__all__ = [
    "FALLBACK_TYPES",
    "PanelConverter",
    "PanelConversionDiagnostic",
    "Widget",
    "build_registry",
    "fallback_converter",
]
