"""
Lightweight metrics factory creating Prometheus metrics with standardized labels.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from prometheus_client import Counter


def _normalize_labels(labels: Iterable[str] | None) -> Sequence[str]:
    if not labels:
        return ()
    return tuple(str(l) for l in labels)


def make_counter(name: str, doc: str, labels: Iterable[str] | None = None) -> Counter:
    return Counter(name, doc, _normalize_labels(labels))


__all__ = ["make_counter"]
