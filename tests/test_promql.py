from grafana2cx.queries import promql


def test_empty_query_defaults_to_up():
    discovered = set()
    assert promql.clean_query("", discovered) == "up"
    assert discovered == set()


def test_builtins_ranges_and_matchers_rewritten():
    discovered = set()
    out = promql.clean_query('sum(rate(http_requests_total{job=~"$job", env="$env"}[5m])) / $__range', discovered)
    assert "[${interval}]" in out
    assert "job=~${job}" in out
    assert 'env="${env}"' in out
    assert "$__range" not in out
    assert discovered == {"http_requests_total"}


def test_rate_interval_ends_up_on_dashboard_interval():
    out = promql.clean_query("rate(k6_http_reqs_total{}[$__rate_interval])", set())
    assert out == "rate(k6_http_reqs_total{}[${interval}])"


def test_series_name_from_legend_and_lookup():
    assert promql.generate_series_name("p95 $quantile_stat", "x", "A") == "p95"
    assert promql.generate_series_name("{{instance}}", "rate(k6_http_reqs_total{}[1m])", "A") == "HTTP Requests/s"
    assert promql.generate_series_name("__auto", 'k6_http_req_failed{expected_response="false"}', "B") == "HTTP Failed (Errors)"
    assert promql.generate_series_name(None, "node_cpu_seconds{}", "C") == "Node Cpu Seconds"
    assert promql.generate_series_name("", "1 + 1", "D") == "Series D"


def test_discovered_metrics_are_case_insensitive():
    discovered = set()
    promql.clean_query("K6_vus{}", discovered)
    promql.clean_query("k6_vus{}", discovered)
    assert discovered == {"K6_vus"}
