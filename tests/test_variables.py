from grafana2cx.variables import VariableConverter, parse_literal_list, resolve_source_metric


def _convert(*variables, discovered=()):
    return VariableConverter().convert_variables(list(variables), set(discovered))


def _label_value(var):
    return var["source"]["query"]["metricsQuery"]["type"]["labelValue"]


def test_label_values_with_metric_and_label():
    var, interval = _convert({
        "name": "instance", "type": "query", "query": "label_values(k6_vus, instance)",
        "current": {"value": "host-1", "text": "host-1"},
    })
    lv = _label_value(var)
    assert lv["metricName"] == {"stringValue": "k6_vus"}
    assert lv["labelName"] == {"stringValue": "instance"}
    assert var["value"] == {"singleString": {"value": {"value": "host-1", "label": "host-1"}}}
    assert interval["name"] == "interval"


def test_label_values_single_arg_uses_discovered_metric():
    (var, _) = _convert(
        {"name": "testid", "type": "query", "query": {"query": "label_values(testid)"}, "includeAll": True},
        discovered={"k6_http_reqs_total", "k6_vus_max", "k6_checks"},
    )
    lv = _label_value(var)
    assert lv["metricName"] == {"stringValue": "k6_checks"}
    assert lv["labelName"] == {"stringValue": "testid"}
    assert var["value"] == {"multiString": {"all": {}}}
    assert var["source"]["query"]["allOption"] == {"includeAll": True}


def test_resolve_source_metric_default():
    assert resolve_source_metric({"up", "k6_http_reqs_total"}) == "k6_vus"
    assert resolve_source_metric(set()) == "k6_vus"


def test_elasticsearch_terms_variable():
    (var, _) = _convert({
        "name": "svc", "label": "Service", "type": "query",
        "query": '{"find": "terms", "field": "kubernetes.service.keyword"}',
        "current": {"value": "api", "text": "api"},
    })
    assert var["displayName"] == "Service"
    query = var["source"]["query"]
    field = query["logsQuery"]["type"]["fieldValue"]["observationField"]
    assert field == {"keypath": ["kubernetes", "service"], "scope": "DATASET_SCOPE_USER_DATA"}
    assert query["refreshStrategy"] == "REFRESH_STRATEGY_ON_DASHBOARD_LOAD"


def test_custom_variable():
    (var, _) = _convert({
        "name": "env", "type": "custom",
        "options": [{"value": "prod", "selected": True}, {"value": "dev"}, {"value": ""}],
        "current": {"value": "prod"},
    })
    values = var["source"]["static"]["values"]
    assert values == [
        {"value": "prod", "label": "prod", "isDefault": True},
        {"value": "dev", "label": "dev"},
    ]
    assert var["value"] == {"singleString": {"value": {"value": "prod", "label": "prod"}}}


def test_query_variable_with_literal_list_becomes_static():
    (var, _) = _convert({"name": "region", "type": "query", "query": "eu, 'us', \"EU\", ap"})
    values = [v["value"] for v in var["source"]["static"]["values"]]
    assert values == ["eu", "us", "ap"]
    assert var["value"] == {"singleString": {"value": {"value": "eu", "label": "eu"}}}


def test_static_fallback_prefers_options_then_current():
    (var, _) = _convert({
        "name": "q", "type": "query", "query": "some_query(x)",
        "current": {"value": ["a", "b"], "text": ["a", "b"]},
    })
    assert [v["value"] for v in var["source"]["static"]["values"]] == ["a", "b"]
    assert var["value"] == {"multiString": {"all": {}}}


def test_skipped_variables():
    converted = _convert(
        {"name": "ds", "type": "datasource"},
        {"name": "filters", "type": "adhoc"},
        {"name": "quantile_stat", "type": "custom", "options": [{"value": "p95"}]},
        {"name": "m", "type": "query", "query": "metrics(k6_)"},
        {"name": "empty", "type": "query", "query": "rate(x[5m])"},
        {"name": "weird", "type": "textbox"},
    )
    assert [v["name"] for v in converted] == ["interval"]


def test_interval_and_constant_variables():
    interval, constant, synthetic = _convert(
        {"name": "step", "type": "interval", "current": {"value": "1h"}},
        {"name": "region", "type": "constant", "query": "eu-west-1"},
    )
    assert interval["value"] == {"singleString": {"value": {"value": "1h", "label": "1h"}}}
    defaults = [v["value"] for v in interval["source"]["static"]["values"] if v.get("isDefault")]
    assert defaults == ["30m"]
    assert constant["source"]["static"]["values"] == [{"value": "eu-west-1", "label": "eu-west-1", "isDefault": True}]
    assert synthetic["name"] == "interval"
    assert synthetic["value"] == {"interval": {"value": {"value": "5m"}}}


def test_malformed_variable_is_dropped():
    converted = _convert({"name": "bad", "type": "custom", "options": "nope"}, {"name": "ok", "type": "constant", "query": "1"})
    assert [v["name"] for v in converted] == ["ok", "interval"]


def test_parse_literal_list():
    assert parse_literal_list("a, b ,,c") == ["a", "b", "c"]
    assert parse_literal_list("label_values(x)") == []
    assert parse_literal_list("$var") == []
    assert parse_literal_list("  ") == []


def test_variable_without_name_is_dropped():
    converted = _convert(
        {"type": "constant", "query": "prod"},
        {"name": "  ", "type": "custom", "options": [{"value": "a"}]},
    )
    assert [v["name"] for v in converted] == ["interval"]
