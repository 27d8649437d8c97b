"""Transformation plan result types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Proceed:
    """Conversion may continue; ``payload`` replaces the derived query when set."""

    payload: dict[str, Any] | None = None


@dataclass(frozen=True)
class Reject:
    """Panel must be replaced by an error markdown widget."""

    reason: str


TransformationPlan = Union[Proceed, Reject]

__all__ = ["Proceed", "Reject", "TransformationPlan"]
