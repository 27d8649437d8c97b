import json
import logging

from prometheus_client import REGISTRY

from grafana2cx.utils.logging_utils import JsonFormatter

from _helpers import build_dashboard, panel, prom_target


def _panel_count(outcome, panel_type):
    value = REGISTRY.get_sample_value(
        "grafana2cx_panels_converted_total", {"outcome": outcome, "panel_type": panel_type}
    )
    return value or 0.0


def test_panel_outcomes_counted(converter):
    before_ok = _panel_count("converted", "gauge")
    before_skip = _panel_count("skipped", "heatmap")
    before_runs = REGISTRY.get_sample_value("grafana2cx_conversions_total") or 0.0

    converter.convert_to_dict(build_dashboard(panel("gauge", [prom_target("up")]), panel("heatmap")))

    assert _panel_count("converted", "gauge") == before_ok + 1
    assert _panel_count("skipped", "heatmap") == before_skip + 1
    assert REGISTRY.get_sample_value("grafana2cx_conversions_total") == before_runs + 1


def test_conversion_logs_summary(converter, caplog):
    with caplog.at_level(logging.INFO, logger="grafana2cx.converter"):
        converter.convert_to_dict(build_dashboard(panel("heatmap")))
    messages = [r.getMessage() for r in caplog.records]
    assert "dashboard.convert.start panels=1" in messages
    assert any(m.startswith("panel.convert.skipped title=P type=heatmap") for m in messages)
    assert any(m.endswith("non_converted=1") for m in messages)


def test_json_formatter():
    record = logging.LogRecord("grafana2cx.x", logging.INFO, __file__, 1, "event k=%s", ("v",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "event k=v"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "grafana2cx.x"


def test_setup_logging_console_and_file(tmp_path, monkeypatch):
    from grafana2cx.utils.logging_utils import DEFAULT_FORMAT, MINIMAL_CONSOLE_FORMAT, setup_logging

    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    log_file = tmp_path / "logs" / "convert.log"
    try:
        setup_logging("debug", log_file=str(log_file))
        console, file_handler = root.handlers
        assert root.level == logging.DEBUG
        assert console.formatter._fmt == MINIMAL_CONSOLE_FORMAT
        assert file_handler.formatter._fmt == DEFAULT_FORMAT
        assert log_file.parent.is_dir()

        monkeypatch.setenv("GRAFANA2CX_JSON_LOGS", "yes")
        setup_logging()
        (console,) = root.handlers
        assert isinstance(console.formatter, JsonFormatter)
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()


def test_version_override(monkeypatch):
    from grafana2cx.version import __version__, get_version

    assert get_version() == __version__
    monkeypatch.setenv("GRAFANA2CX_VERSION", "9.9.9")
    assert get_version() == "9.9.9"
