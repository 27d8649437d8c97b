"""Query dialect translators.

One module per embedded source dialect plus the shared placeholder
normalizer and the tagged target view every converter dispatches on.
"""
from .placeholders import BUILTIN_VARIABLES, normalize_placeholders
from .targets import Dialect, TargetView, panel_targets, resolve_dialect, visible_targets

__all__ = [
    "BUILTIN_VARIABLES",
    "normalize_placeholders",
    "Dialect",
    "TargetView",
    "panel_targets",
    "resolve_dialect",
    "visible_targets",
]
