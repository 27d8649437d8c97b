"""Field scope resolution.

Maps a Grafana/Elasticsearch field name to the Coralogix keypath/scope pair
used by group-by and observation-field objects:

  DATASET_SCOPE_METADATA  - system metadata: severity, timestamp
  DATASET_SCOPE_LABEL     - indexed labels: subsystemname, applicationname, ...
  DATASET_SCOPE_USER_DATA - user JSON fields: kubernetes.namespace_name, ...

Resolution is a pure function of the name, so results are memoized.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache


class FieldScope(str, Enum):
    METADATA = "DATASET_SCOPE_METADATA"
    LABEL = "DATASET_SCOPE_LABEL"
    USER_DATA = "DATASET_SCOPE_USER_DATA"


INDEX_SUFFIXES: tuple[str, ...] = (".keyword", ".numeric")

# The Grafana Elasticsearch datasource exposes Coralogix metadata under this prefix.
METADATA_PREFIX = "coralogix.metadata."

METADATA_FIELDS: frozenset[str] = frozenset({"severity", "timestamp"})

LABEL_FIELDS: frozenset[str] = frozenset({
    "applicationname", "subsystemname", "categoryname",
    "classname", "computername", "ipaddress", "threadid",
    "app", "component", "instance", "job",
})


@dataclass(frozen=True)
class FieldDescriptor:
    keypath: tuple[str, ...]
    scope: FieldScope

    def to_dict(self) -> dict[str, object]:
        return {"keypath": list(self.keypath), "scope": self.scope.value}


def strip_index_suffix(field_name: str | None) -> str:
    """Drop a terminal ``.keyword`` then ``.numeric`` suffix (case-insensitive)."""
    if not field_name:
        return ""
    result = field_name
    for suffix in INDEX_SUFFIXES:
        if result.lower().endswith(suffix):
            result = result[:-len(suffix)]
    return result


@lru_cache(maxsize=1024)
def resolve(field_name: str) -> FieldDescriptor:
    name = strip_index_suffix(field_name)
    if name.lower().startswith(METADATA_PREFIX):
        name = name[len(METADATA_PREFIX):].lower()

    lower = name.lower()
    if lower in METADATA_FIELDS:
        return FieldDescriptor((lower,), FieldScope.METADATA)
    if lower in LABEL_FIELDS:
        return FieldDescriptor((lower,), FieldScope.LABEL)
    return FieldDescriptor(tuple(name.split(".")), FieldScope.USER_DATA)


def group_by_field(field_name: str) -> dict[str, object]:
    """Wire form of resolve(): ``{"keypath": [...], "scope": "..."}``."""
    return resolve(field_name).to_dict()


__all__ = [
    "FieldScope",
    "FieldDescriptor",
    "METADATA_FIELDS",
    "LABEL_FIELDS",
    "strip_index_suffix",
    "resolve",
    "group_by_field",
]
