"""Unified logging utilities for grafana2cx.

The conversion engine only ever obtains module loggers; callers that want
console or file output invoke setup_logging() once at startup.
"""
from __future__ import annotations

import json
import logging
import os
import sys

from .env_flags import is_truthy_env

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# Minimal console format (message only) used for cleaner terminal output.
MINIMAL_CONSOLE_FORMAT = '%(message)s'


class JsonFormatter(logging.Formatter):
    """One JSON object per record; used when GRAFANA2CX_JSON_LOGS is set."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            'ts': record.created,
            'level': record.levelname,
            'logger': record.name,
            'msg': record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: str = 'INFO', log_file: str | None = None, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure root logging.

    Console handler uses the minimal message-only format unless
    GRAFANA2CX_VERBOSE_CONSOLE=1 or a custom fmt is passed. With
    GRAFANA2CX_JSON_LOGS=1 the console emits JSON lines instead.

    File handler (if enabled) always uses full DEFAULT_FORMAT for diagnostics.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    # Remove existing handlers to avoid duplication on re-init
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()

    if fmt != DEFAULT_FORMAT:
        console_fmt = fmt
    elif is_truthy_env('GRAFANA2CX_VERBOSE_CONSOLE'):
        console_fmt = DEFAULT_FORMAT
    else:
        console_fmt = MINIMAL_CONSOLE_FORMAT

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)
    if is_truthy_env('GRAFANA2CX_JSON_LOGS'):
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(logging.Formatter(console_fmt))
    root.addHandler(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setLevel(log_level)
        # Always keep detailed format in file for post-mortem analysis
        fh.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(fh)

    return root

__all__ = ["setup_logging", "JsonFormatter", "DEFAULT_FORMAT", "MINIMAL_CONSOLE_FORMAT"]
