# tests/test_pipeline_smoke.py
import copy
import json

import pytest

from services.common.results import artifact_bytes
from services.workers.profiling import MalformedInputError, profile, run_pipeline
from services.workers.profiling.core.constants import PHASE_ORDER


SALES_ROWS = [
    {"Region": "North", "Product": "A", "Sales": 120, "Revenue": "2400.50", "Rating": "4.5"},
    {"Region": "South", "Product": "B", "Sales": 80, "Revenue": "1610", "Rating": "n/a"},
    {"Region": "North", "Product": "B", "Sales": 95, "Revenue": "1890.25", "Rating": "4.1"},
    {"Region": "", "Product": "C", "Sales": "", "Revenue": "990", "Rating": "3.9"},
    {"Region": "East", "Product": "A", "Sales": 150, "Revenue": "3010", "Rating": "4.8"},
]

ARTIFACTS_EXPECTED = [
    "results/charts.json",
    "results/profile.json",
    "results/report.html",
    "results/report.txt",
    "results/statistics.csv",
]


def _assert_pipeline_result(res):
    # Phases present & ordered
    assert list(res.phases.keys()) == PHASE_ORDER

    metrics = res.phases["finalize"]["metrics"]
    for k in ["rows", "columns", "numericColumns", "categoricalColumns"]:
        assert k in metrics, f"missing metric key: {k}"

    # In-memory artifacts materialize to real bytes
    ac = res.artifact_contents
    for key in ARTIFACTS_EXPECTED:
        assert key in ac, f"missing artifact: {key}"
        body = artifact_bytes(ac[key])
        assert isinstance(body, bytes) and len(body) > 0, f"{key} body is empty"

    manifest_keys = [entry["key"] for entry in res.phases["finalize"]["manifest"]["artifacts"]]
    assert manifest_keys == ARTIFACTS_EXPECTED


def test_pipeline_profiles_sales_rows():
    res = run_pipeline(SALES_ROWS, dataset_name="sales.csv")

    _assert_pipeline_result(res)

    profile_ = res.profile
    assert profile_.row_count == 5
    assert profile_.column_count == 5
    assert profile_.column_names == ("Region", "Product", "Sales", "Revenue", "Rating")
    assert profile_.numeric_column_names == ("Sales", "Revenue", "Rating")
    assert profile_.categorical_column_names == ("Region", "Product")

    sales = profile_.summary("Sales")
    assert sales.valid_count == 4
    assert sales.minimum == 80
    assert sales.maximum == 150
    assert sales.mean == pytest.approx(111.25)
    assert sales.median == 120

    region = profile_.summary("Region")
    assert region.total_count == 4
    assert region.unique_count == 3

    # bar: mean Sales per Region, missing Region grouped as Unknown
    assert [(entry.label, entry.value) for entry in res.bar] == [
        ("North", pytest.approx(107.5)),
        ("South", 80.0),
        ("Unknown", 0.0),
        ("East", 150.0),
    ]
    assert [(slice_.label, slice_.count) for slice_ in res.pie] == [
        ("North", 2),
        ("South", 1),
        ("Unknown", 1),
        ("East", 1),
    ]
    assert len(res.line) == 5
    assert res.charts.line_columns == ("Sales", "Revenue")
    assert res.line[0].series_b_value == pytest.approx(2400.5)


def test_pipeline_is_deterministic():
    first = run_pipeline(SALES_ROWS, dataset_name="sales.csv")
    second = run_pipeline(SALES_ROWS, dataset_name="sales.csv")

    assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())
    for key in ARTIFACTS_EXPECTED:
        assert artifact_bytes(first.artifact_contents[key]) == artifact_bytes(second.artifact_contents[key])


def test_empty_rows_produce_degenerate_profile():
    res = profile([])

    assert res.profile.row_count == 0
    assert res.profile.column_count == 0
    assert res.profile.column_names == ()
    assert res.profile.numeric_column_names == ()
    assert res.profile.categorical_column_names == ()
    assert dict(res.profile.summaries) == {}
    assert res.bar == () and res.pie == () and res.line == ()
    assert list(res.phases.keys()) == PHASE_ORDER
    assert "results/statistics.csv" not in res.artifact_contents


def test_malformed_rows_raise_once():
    rows = [{"a": 1, "b": 2}, {"a": 3}]
    with pytest.raises(MalformedInputError) as excinfo:
        run_pipeline(rows)
    assert excinfo.value.row_index == 1


def test_line_ignores_third_numeric_column():
    rows = [{"x": index, "y": index * 10, "z": -index} for index in range(1, 4)]
    res = run_pipeline(rows)

    assert res.profile.numeric_column_names == ("x", "y", "z")
    assert res.charts.line_columns == ("x", "y")
    assert [(point.series_a_value, point.series_b_value) for point in res.line] == [
        (1.0, 10.0),
        (2.0, 20.0),
        (3.0, 30.0),
    ]


def test_phase_callback_reports_progress():
    seen = []

    def on_phase(phase, payload, index, total):
        seen.append((phase, index, total))
        assert isinstance(payload, dict)

    run_pipeline(SALES_ROWS, on_phase=on_phase)

    assert [phase for phase, _, _ in seen] == PHASE_ORDER
    assert [index for _, index, _ in seen] == list(range(len(PHASE_ORDER)))
    assert {total for _, _, total in seen} == {len(PHASE_ORDER)}


def test_pipeline_leaves_input_rows_untouched():
    rows = copy.deepcopy(SALES_ROWS)
    run_pipeline(rows)
    assert rows == SALES_ROWS
