from grafana2cx.queries.targets import TargetView
from grafana2cx.transformations import (
    CompositeTransformationPlanner,
    Proceed,
    Reject,
    TransformationContext,
    plan,
)
from grafana2cx.transformations.pie_consolidation import extract_consolidation, parse_boolean_predicate

from _helpers import es_target, panel, prom_target


def _plan(p):
    return CompositeTransformationPlanner().plan(TransformationContext.from_panel(p))


def test_boolean_split_is_consolidated():
    p = panel("piechart", [es_target("payload.isEmail:true"), es_target("payload.isEmail:false", ref_id="B")])
    result = _plan(p)
    assert isinstance(result, Proceed)
    logs = result.payload["logs"]
    assert logs["groupNamesFields"] == [{"keypath": ["payload", "isEmail"], "scope": "DATASET_SCOPE_USER_DATA"}]
    assert logs["luceneQuery"] == {"value": "payload.isEmail:*"}
    assert logs["aggregation"] == {"count": {}}
    assert result.payload["dataPrime"]["value"] == "source logs | groupby payload.isEmail agg count()"


def test_consolidation_reports_field_and_empty_base():
    views = [TargetView.from_raw(es_target("payload.isEmail:true")),
             TargetView.from_raw(es_target("payload.isEmail:false"))]
    c = extract_consolidation(views)
    assert c is not None
    assert c.field == "payload.isEmail"
    assert c.base_filter == ""


def test_trailing_predicate_keeps_base_filter_and_escapes_it():
    base = "msg:\"it's\""
    p = panel("piechart", [
        es_target(f"{base} AND flag:TRUE", metric={"type": "sum", "field": "bytes.numeric"}),
        es_target(f"{base} AND flag:false"),
    ])
    result = _plan(p)
    assert isinstance(result, Proceed)
    assert result.payload["logs"]["luceneQuery"] == {"value": f"{base} AND flag:*"}
    assert result.payload["logs"]["aggregation"] == {"sum": {"field": "bytes"}}
    assert result.payload["dataPrime"]["value"] == (
        "source logs | lucene 'msg:\"it\\'s\"' | groupby flag agg sum(bytes)"
    )


def test_datasource_mix_rejected():
    p = panel("piechart", [es_target("a:true"), prom_target("up", ref_id="B")])
    result = _plan(p)
    assert isinstance(result, Reject)
    assert "datasource mix" in result.reason


def test_non_boolean_split_rejected():
    p = panel("piechart", [es_target("app:foo"), es_target("app:bar")])
    result = _plan(p)
    assert isinstance(result, Reject)
    assert "cannot be consolidated" in result.reason


def test_differing_fields_bases_or_values_rejected():
    for queries in (
        ("a:true", "b:false"),
        ("svc:x AND a:true", "svc:y AND a:false"),
        ("a:true", "a:true"),
    ):
        p = panel("piechart", [es_target(q) for q in queries])
        assert isinstance(_plan(p), Reject), queries


def test_wildcard_base_equals_empty_base():
    p = panel("piechart", [es_target("* AND a:true"), es_target("a:false")])
    result = _plan(p)
    assert isinstance(result, Proceed)
    assert result.payload["logs"]["luceneQuery"] == {"value": "a:*"}


def test_hidden_target_makes_panel_single_target():
    p = panel("piechart", [es_target("app:foo"), prom_target("up", ref_id="B", hide=True)])
    assert _plan(p) == Proceed()


def test_other_panel_types_proceed_without_payload():
    p = panel("table", [es_target("app:foo"), prom_target("up", ref_id="B")])
    assert _plan(p) == Proceed()


def test_module_level_plan():
    views = [TargetView.from_raw(es_target("a:true")), TargetView.from_raw(es_target("a:false"))]
    assert isinstance(plan("piechart", views), Proceed)
    assert plan("piechart", views).payload is not None
    assert plan("gauge", views) == Proceed()


def test_parse_boolean_predicate():
    assert parse_boolean_predicate("x.y:true") == ("", "x.y", "true")
    assert parse_boolean_predicate("svc:api x.y:False") == ("svc:api", "x.y", "False")
    assert parse_boolean_predicate("NOT x.y:true") == ("NOT", "x.y", "true")
    assert parse_boolean_predicate("x.y:maybe") is None
