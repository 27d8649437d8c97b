from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture()
def converter():
    from grafana2cx.converter import GrafanaToCxConverter
    return GrafanaToCxConverter()


@pytest.fixture(autouse=True)
def _clean_grafana2cx_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("GRAFANA2CX_"):
            monkeypatch.delenv(key, raising=False)
