"""Grafana template variables -> Coralogix ``variablesV2``.

Supported types:
  query     label_values(metric, label) / label_values(label) -> metrics label-value source
            Elasticsearch {"find": "terms", "field": ...}    -> logs field-value source
            anything else                                    -> static list from options/current/literal
  interval  -> static list of common intervals
  constant  -> single static value
  custom    -> static options

Datasource and adhoc variables are dropped. A synthetic ``interval``
variable is always appended because converted PromQL references
``${interval}``.
"""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from typing import Any

from grafana2cx.panels.helpers import id_object
from grafana2cx.queries.fields import FieldScope

logger = logging.getLogger(__name__)

SKIP_TYPES = frozenset({"datasource", "adhoc"})
SKIP_NAMES = frozenset({"quantile_stat", "ds_prometheus"})
DEFAULT_SOURCE_METRIC = "k6_vus"
ALL_VALUE = "$__all"
DISPLAY_TYPE = "VARIABLE_DISPLAY_TYPE_V2_LABEL_VALUE"
ORDER_ASC = "ORDER_DIRECTION_ASC"

INTERVAL_OPTIONS: tuple[tuple[str, bool], ...] = (
    ("1m", False), ("5m", False), ("10m", False), ("30m", True),
    ("1h", False), ("6h", False), ("12h", False), ("1d", False),
)
SYNTHETIC_INTERVAL_OPTIONS: tuple[tuple[str, bool], ...] = (
    ("5m", True), ("30m", False), ("1h", False), ("12h", False), ("1d", False),
)

LABEL_VALUES_ONE_ARG_RE = re.compile(r"label_values\((\w+)\)")
LABEL_VALUES_TWO_ARGS_RE = re.compile(r"label_values\((\w+),\s*(\w+)\)")
_NOT_A_LITERAL_LIST = ("label_values", "metrics(", "{", "(", "$")


def _text(value: Any) -> str | None:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _first_text(value: Any) -> str:
    if isinstance(value, list):
        return (_text(value[0]) or "") if value else ""
    return _text(value) or ""


def option(value: str, is_default: bool = False) -> dict[str, Any]:
    opt: dict[str, Any] = {"value": value, "label": value}
    if is_default:
        opt["isDefault"] = True
    return opt


def static_source(values: list[dict[str, Any]], include_all: bool = False) -> dict[str, Any]:
    return {
        "static": {
            "values": values,
            "valuesOrderDirection": ORDER_ASC,
            "allOption": {"includeAll": include_all},
        }
    }


def multi_value() -> dict[str, Any]:
    return {"multiString": {"all": {}}}


def single_value(value: str, label: str) -> dict[str, Any]:
    return {"singleString": {"value": {"value": value, "label": label}}}


def resolve_source_metric(discovered: Iterable[str]) -> str:
    """First sorted ``k6_*`` gauge-like metric; ``_total`` counters are skipped."""
    for metric in sorted(discovered):
        lower = metric.lower()
        if lower.startswith("k6_") and not lower.endswith("_total"):
            return metric
    return DEFAULT_SOURCE_METRIC


def parse_literal_list(query: str) -> list[str]:
    """``a, 'b', "c"`` -> [a, b, c]; queries that look like expressions yield []."""
    if not query or not query.strip():
        return []
    lower = query.lower()
    if any(marker in lower for marker in _NOT_A_LITERAL_LIST):
        return []
    values = []
    for part in query.split(","):
        cleaned = part.strip().strip("\"'")
        if cleaned:
            values.append(cleaned)
    return values


class _StaticValues:
    """Ordered, de-duplicated (case-insensitive) static options."""

    def __init__(self) -> None:
        self.values: list[dict[str, Any]] = []
        self._seen: set[str] = set()

    def add(self, raw: str | None, is_default: bool = False) -> None:
        if raw is None or not raw.strip():
            return
        value = raw.strip()
        if value.lower() in self._seen:
            return
        self._seen.add(value.lower())
        self.values.append(option(value, is_default))


class VariableConverter:
    def __init__(self, log: logging.Logger | None = None):
        self.logger = log or logger

    def convert_variables(self, variables: list[dict[str, Any]], discovered_metrics: Iterable[str]) -> list[dict[str, Any]]:
        source_metric = resolve_source_metric(discovered_metrics)
        result: list[dict[str, Any]] = []
        for var in variables:
            try:
                converted = self.convert_variable(var, source_metric)
            except (TypeError, ValueError, KeyError, AttributeError, IndexError) as e:
                self.logger.debug("variables.convert.failed name=%s err=%s", var.get("name"), e)
                continue
            if converted is not None:
                result.append(converted)
        result.append(self.interval_variable())
        return result

    def convert_variable(self, var: dict[str, Any], source_metric: str) -> dict[str, Any] | None:
        name = _text(var.get("name")) or ""
        var_type = _text(var.get("type")) or ""
        if not name.strip() or var_type in SKIP_TYPES or name.lower() in SKIP_NAMES:
            return None

        raw_query = var.get("query")
        if isinstance(raw_query, dict):
            query_def = _text(raw_query.get("query")) or ""
        else:
            query_def = _text(raw_query) or ""
        if "metrics(" in query_def.lower():
            return None

        if var_type == "query":
            return self._query_variable(var, name, query_def, source_metric)
        if var_type == "interval":
            return self._interval_variable(var, name)
        if var_type == "constant":
            return self._constant_variable(var, name, query_def)
        if var_type == "custom":
            return self._custom_variable(var, name)
        return None

    @staticmethod
    def _envelope(var: dict[str, Any], name: str, source: dict[str, Any], value: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": name,
            "displayName": _text(var.get("label")) or name,
            "displayType": DISPLAY_TYPE,
            "source": source,
            "value": value,
            "displayFullRow": False,
            "id": id_object(),
        }

    @staticmethod
    def _current(var: dict[str, Any]) -> dict[str, Any]:
        current = var.get("current")
        return current if isinstance(current, dict) else {}

    def _query_variable(self, var: dict[str, Any], name: str, query_def: str, source_metric: str) -> dict[str, Any] | None:
        if query_def.lstrip().startswith("{"):
            return self._terms_variable(var, name, query_def) or self._static_fallback(var, name, query_def)
        if "label_values" not in query_def.lower():
            return self._static_fallback(var, name, query_def)

        metric_name, label_name = source_metric, name
        one = LABEL_VALUES_ONE_ARG_RE.search(query_def)
        if one:
            label_name = one.group(1)
        two = LABEL_VALUES_TWO_ARGS_RE.search(query_def)
        if two:
            metric_name, label_name = two.group(1), two.group(2)

        include_all = var.get("includeAll") is True
        current = self._current(var)
        value = _text(current.get("value")) or ""
        label = _text(current.get("text")) or ""
        use_multi = include_all or var.get("multi") is True or not value or value == ALL_VALUE

        source = {
            "query": {
                "metricsQuery": {
                    "type": {
                        "labelValue": {
                            "metricName": {"stringValue": metric_name},
                            "labelName": {"stringValue": label_name},
                            "labelFilters": [],
                        }
                    }
                },
                "valuesOrderDirection": ORDER_ASC,
                "refreshStrategy": "REFRESH_STRATEGY_UNSPECIFIED",
                "valueDisplayOptions": {},
                "allOption": {"includeAll": include_all},
            }
        }
        return self._envelope(var, name, source, multi_value() if use_multi else single_value(value, label))

    def _terms_variable(self, var: dict[str, Any], name: str, query_def: str) -> dict[str, Any] | None:
        try:
            es_query = json.loads(query_def)
        except ValueError:
            return None
        if not isinstance(es_query, dict) or (_text(es_query.get("find")) or "").lower() != "terms":
            return None
        field_name = _text(es_query.get("field")) or ""
        if not field_name.strip():
            return None
        if field_name.lower().endswith(".keyword"):
            field_name = field_name[: -len(".keyword")]

        include_all = var.get("includeAll") is True
        current = self._current(var)
        value = _text(current.get("value")) or ""
        label = _text(current.get("text")) or ""
        use_multi = include_all or var.get("multi") is True or not value

        source = {
            "query": {
                "logsQuery": {
                    "type": {
                        "fieldValue": {
                            "observationField": {
                                "keypath": field_name.split("."),
                                "scope": FieldScope.USER_DATA.value,
                            }
                        }
                    }
                },
                "valuesOrderDirection": ORDER_ASC,
                "refreshStrategy": "REFRESH_STRATEGY_ON_DASHBOARD_LOAD",
                "valueDisplayOptions": {},
                "allOption": {"includeAll": include_all},
            }
        }
        return self._envelope(var, name, source, multi_value() if use_multi else single_value(value, label))

    def _static_fallback(self, var: dict[str, Any], name: str, query_def: str) -> dict[str, Any] | None:
        include_all = var.get("includeAll") is True
        current = self._current(var)
        statics = _StaticValues()

        options = var.get("options")
        for opt in options if isinstance(options, list) else []:
            if not isinstance(opt, dict):
                continue
            value = _text(opt.get("value"))
            if value is None or not value.strip():
                value = _text(opt.get("text"))
            statics.add(value, opt.get("selected") is True)

        current_raw = current.get("value")
        value = _first_text(current_raw)
        label = _first_text(current.get("text")) or value

        if not statics.values:
            for raw in current_raw if isinstance(current_raw, list) else [current_raw]:
                statics.add(_text(raw))
        if not statics.values:
            for literal in parse_literal_list(query_def):
                statics.add(literal)
        if not statics.values:
            return None

        if not value.strip():
            value = statics.values[0]["value"]
            label = statics.values[0]["label"]

        use_multi = (
            include_all
            or var.get("multi") is True
            or isinstance(current_raw, list)
            or not value
            or value == ALL_VALUE
        )
        return self._envelope(
            var, name, static_source(statics.values, include_all),
            multi_value() if use_multi else single_value(value, label),
        )

    def _interval_variable(self, var: dict[str, Any], name: str) -> dict[str, Any]:
        value = _text(self._current(var).get("value")) or "5m"
        values = [option(v, d) for v, d in INTERVAL_OPTIONS]
        return self._envelope(var, name, static_source(values), single_value(value, value))

    def _constant_variable(self, var: dict[str, Any], name: str, query_def: str) -> dict[str, Any] | None:
        value = _text(var.get("query")) or query_def
        if not value.strip():
            return None
        return self._envelope(var, name, static_source([option(value, True)]), single_value(value, value))

    def _custom_variable(self, var: dict[str, Any], name: str) -> dict[str, Any] | None:
        options = var.get("options")
        values = []
        for opt in options if isinstance(options, list) else []:
            if not isinstance(opt, dict):
                continue
            value = _text(opt.get("value")) or ""
            if value.strip():
                values.append(option(value, opt.get("selected") is True))
        if not values:
            return None

        current_raw = self._current(var).get("value")
        value = _first_text(current_raw)
        use_multi = isinstance(current_raw, list) or not value or value == ALL_VALUE
        return self._envelope(
            var, name, static_source(values),
            multi_value() if use_multi else single_value(value, value),
        )

    @staticmethod
    def interval_variable() -> dict[str, Any]:
        return {
            "name": "interval",
            "displayName": "Interval",
            "displayType": DISPLAY_TYPE,
            "source": static_source([option(v, d) for v, d in SYNTHETIC_INTERVAL_OPTIONS]),
            "value": {"interval": {"value": {"value": "5m"}}},
            "displayFullRow": False,
            "id": id_object(),
        }


__all__ = ["VariableConverter", "resolve_source_metric", "parse_literal_list"]
