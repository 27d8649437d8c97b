"""Conversion options.

Single-pass hydration of the knobs the dashboard assembler reads, either from
environment variables or from a small YAML file. PURE DATA CONTAINER: loading
has no side effects beyond logging ignored keys.

Environment Flags:
  GRAFANA2CX_DASHBOARD_NAME         -> override the source dashboard title
  GRAFANA2CX_FOLDER_ID              -> target folder (used by the upload step)
  GRAFANA2CX_SKIP_UNSUPPORTED=0     -> forced line-chart fallback for unknown panel types
  GRAFANA2CX_MAX_WIDGETS_PER_ROW    -> widgets per layout row (default 3)
  GRAFANA2CX_ROW_HEIGHT             -> default row height (default 19)
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from grafana2cx.utils.env_flags import env_int, is_truthy
from grafana2cx.utils.exceptions import ConfigError

logger = logging.getLogger(__name__)

__all__ = ["ConversionOptions", "DEFAULT_OPTIONS"]


@dataclass(frozen=True)
class ConversionOptions:
    dashboard_name: str | None = None
    folder_id: str | None = None
    skip_unsupported_panels: bool = True
    max_widgets_per_row: int = 3
    default_row_height: int = 19

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ConversionOptions:
        e = env if env is not None else os.environ
        skip_raw = e.get("GRAFANA2CX_SKIP_UNSUPPORTED")
        return cls(
            dashboard_name=e.get("GRAFANA2CX_DASHBOARD_NAME") or None,
            folder_id=e.get("GRAFANA2CX_FOLDER_ID") or None,
            skip_unsupported_panels=True if skip_raw is None else is_truthy(skip_raw),
            max_widgets_per_row=max(1, env_int("GRAFANA2CX_MAX_WIDGETS_PER_ROW", 3, e)),
            default_row_height=max(1, env_int("GRAFANA2CX_ROW_HEIGHT", 19, e)),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ConversionOptions:
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("config.options.unknown_key key=%s", key)
                continue
            kwargs[key] = value
        if "skip_unsupported_panels" in kwargs:
            kwargs["skip_unsupported_panels"] = bool(kwargs["skip_unsupported_panels"])
        for key, default in (("max_widgets_per_row", 3), ("default_row_height", 19)):
            if key in kwargs:
                try:
                    kwargs[key] = max(1, int(kwargs[key]))
                except (TypeError, ValueError):
                    logger.warning("config.options.bad_int key=%s value=%r", key, kwargs[key])
                    kwargs[key] = default
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str | os.PathLike[str]) -> ConversionOptions:
        try:
            with open(Path(path), encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load conversion options from {path}: {e}") from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Conversion options file {path} must contain a mapping")
        return cls.from_mapping(data)

    def merged(self, **overrides: Any) -> ConversionOptions:
        return replace(self, **overrides)


DEFAULT_OPTIONS = ConversionOptions()
