import copy

from grafana2cx.sanitizer import DATAPRIME_DESCRIPTION, pop_dataprime, sanitize_dashboard


def _dashboard(*widgets):
    return {"name": "d", "layout": {"sections": [{"rows": [{"widgets": list(widgets)}]}]}}


def _widgets(dashboard):
    return dashboard["layout"]["sections"][0]["rows"][0]["widgets"]


def _pie(with_dataprime=True):
    query = {"logs": {"groupNamesFields": []}}
    if with_dataprime:
        query["dataPrime"] = {"value": "source logs | groupby isEmail agg count()"}
    return {"title": "Emails", "definition": {"pieChart": {"query": query, "stackedGroupName": "x"}}}


def test_dataprime_relocated_after_pie():
    source = _dashboard(_pie(), {"title": "other", "definition": {"markdown": {"markdownText": "hi"}}})
    snapshot = copy.deepcopy(source)
    cleaned = sanitize_dashboard(source)

    assert source == snapshot
    pie, preserved, other = _widgets(cleaned)
    assert "dataPrime" not in pie["definition"]["pieChart"]["query"]
    assert "stackedGroupName" not in pie["definition"]["pieChart"]
    assert pie["definition"]["pieChart"]["labelDefinition"]["labelSource"] == "LABEL_SOURCE_INNER"
    assert preserved["title"] == "Emails (DataPrime Query)"
    assert preserved["description"] == DATAPRIME_DESCRIPTION
    assert "groupby isEmail agg count()" in preserved["definition"]["markdown"]["markdownText"]
    assert other["title"] == "other"


def test_sanitize_is_idempotent():
    once = sanitize_dashboard(_dashboard(_pie()))
    twice = sanitize_dashboard(once)
    assert twice == once
    assert len(_widgets(twice)) == 2


def test_stacked_group_fields_removed_everywhere():
    cleaned = sanitize_dashboard({"a": [{"stackedGroupNameField": 1, "b": {"stackedGroupName": 2, "keep": 3}}]})
    assert cleaned == {"a": [{"b": {"keep": 3}}]}


def test_empty_table_columns_filled():
    cleaned = sanitize_dashboard(_dashboard({"definition": {"dataTable": {"columns": []}}}))
    assert _widgets(cleaned)[0]["definition"]["dataTable"]["columns"] == [{"field": "coralogix.text"}]


def test_existing_label_definition_kept():
    widget = _pie(with_dataprime=False)
    widget["definition"]["pieChart"]["labelDefinition"] = {"type": "custom"}
    cleaned = sanitize_dashboard(_dashboard(widget))
    assert _widgets(cleaned)[0]["definition"]["pieChart"]["labelDefinition"] == {"type": "custom"}


def test_pop_dataprime():
    widget = _pie()
    assert pop_dataprime(widget) == "source logs | groupby isEmail agg count()"
    assert pop_dataprime(widget) is None
    assert pop_dataprime({"definition": {"gauge": {}}}) is None
