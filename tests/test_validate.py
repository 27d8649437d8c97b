import pytest

from grafana2cx.utils.exceptions import SchemaValidationError
from grafana2cx.validate import assert_valid_dashboard, validate_dashboard, variant_errors

from _helpers import build_dashboard, es_target, extract_widgets, panel, prom_target


def _converted(converter):
    text = build_dashboard(
        panel("stat", [prom_target("up")]),
        panel("table", [es_target("level:error", metric={"type": "raw_data", "id": "1"})]),
        panel("timeseries", [prom_target("rate(x{}[5m])")]),
        {"id": 5, "type": "text", "options": {"content": "notes"}},
        templating={"list": [{"name": "env", "type": "constant", "query": "prod"}]},
    )
    return converter.convert_to_dict(text)


def test_converted_dashboard_is_valid(converter):
    dashboard = _converted(converter)
    assert validate_dashboard(dashboard) == []
    assert_valid_dashboard(dashboard)


def test_two_variants_reported(converter):
    dashboard = _converted(converter)
    widget = extract_widgets(dashboard)[0]
    widget["definition"]["markdown"] = {"markdownText": "x"}
    errors = variant_errors(dashboard)
    assert len(errors) == 1
    assert "exactly one widget variant (found 2)" in errors[0]
    assert errors[0].startswith("layout/sections/0/rows/0/widgets/0")


def test_missing_name_raises(converter):
    dashboard = _converted(converter)
    del dashboard["name"]
    with pytest.raises(SchemaValidationError) as info:
        assert_valid_dashboard(dashboard)
    assert any("'name' is a required property" in e for e in info.value.errors)


def test_unknown_variant_and_bad_time_frame(converter):
    dashboard = _converted(converter)
    dashboard["relativeTimeFrame"] = "1h"
    extract_widgets(dashboard)[0]["definition"] = {"heatmap": {}}
    errors = validate_dashboard(dashboard)
    assert any(e.startswith("relativeTimeFrame:") for e in errors)
    assert any("found 0" in e for e in errors)
