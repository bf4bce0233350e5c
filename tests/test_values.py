import copy
import math

import pytest

from services.workers.profiling import FieldValue, MalformedInputError, RowSet, parse_numeric


@pytest.mark.parametrize(
    "raw, expected",
    [
        (5, 5.0),
        (2.25, 2.25),
        ("12", 12.0),
        (" 3.5 ", 3.5),
        ("-1e3", -1000.0),
        (".5", 0.5),
        ("+7", 7.0),
        (True, 1.0),
        (False, 0.0),
    ],
)
def test_parse_numeric_accepts_finite_numbers(raw, expected):
    assert parse_numeric(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", None, "abc", "nan", "NaN", "inf", "Infinity", "1_000", "0x10", "   ", "12abc", "1e999",
     float("inf"), float("nan"), [1], {"a": 1}],
)
def test_parse_numeric_rejects_non_numbers(raw):
    assert parse_numeric(raw) is None


def test_field_value_resolution():
    assert FieldValue.resolve("").is_missing
    assert FieldValue.resolve(None).is_missing
    assert FieldValue.resolve(float("nan")).is_missing

    whole = FieldValue.resolve(5.0)
    assert whole.is_numeric
    assert whole.text == "5"
    assert whole.number == 5.0

    # numeric text keeps its exact string form
    assert FieldValue.resolve("5.0").text == "5.0"

    flag = FieldValue.resolve(True)
    assert flag.text == "true"
    assert flag.number == 1.0

    text = FieldValue.resolve("abc")
    assert text.kind == "text"
    assert text.number is None
    assert text.numeric_or_zero() == 0.0
    assert text.group_label() == "abc"


def test_missing_value_groups_as_unknown():
    assert FieldValue.resolve(None).group_label() == "Unknown"
    assert FieldValue.resolve("").numeric_or_zero() == 0.0


def test_row_set_uses_first_row_column_order():
    row_set = RowSet.from_records([{"b": 1, "a": "x"}, {"a": "y", "b": 2}])
    assert row_set.column_names == ("b", "a")
    assert row_set.row_count == 2
    assert row_set.column_count == 2
    assert [value.text for value in row_set.column_values("a")] == ["x", "y"]


def test_row_set_from_no_records_is_empty():
    row_set = RowSet.from_records([])
    assert row_set.row_count == 0
    assert row_set.column_count == 0
    assert row_set.column_names == ()


def test_row_set_rejects_inconsistent_columns():
    records = [{"a": 1, "b": 2}, {"a": 3, "b": 4}, {"a": 5, "c": 6}]
    with pytest.raises(MalformedInputError) as excinfo:
        RowSet.from_records(records)
    assert excinfo.value.row_index == 2
    assert "row 2" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_row_set_rejects_non_mapping_rows():
    with pytest.raises(MalformedInputError) as excinfo:
        RowSet.from_records([{"a": 1}, ["not", "a", "row"]])
    assert excinfo.value.row_index == 1

    with pytest.raises(MalformedInputError):
        RowSet.from_records(["header"])


def test_row_set_does_not_mutate_records():
    records = [{"a": "1", "b": None}, {"a": "", "b": "text"}]
    snapshot = copy.deepcopy(records)
    RowSet.from_records(records)
    assert records == snapshot


def test_present_values_skip_missing():
    row_set = RowSet.from_records([{"a": ""}, {"a": None}, {"a": "5"}, {"a": 7}])
    present = row_set.present_values("a")
    assert [value.number for value in present] == [5.0, 7.0]
    assert not any(math.isnan(value.number) for value in present)
