"""
Tests for upload detection, validation and parsing
"""
import json

import polars as pl
import pytest

from config import AnalysisPolicy
from conftest import make_file
from exceptions import EmptyDatasetError, FileTooLargeError, ParseError, UnsupportedFormatError
from services.data_formats import (
    DataFormat,
    DataReader,
    DatasetFile,
    coerce_cell,
    detect_format,
    read_data,
    uniform_rows,
    validate_upload,
)


# ---------------------------------------------------------------------------
# Format detection
# ---------------------------------------------------------------------------

def test_detect_supported_formats():
    assert detect_format("survey.CSV").support_level == "full"
    assert detect_format("notes.txt").support_level == "partial"
    assert detect_format("records.ndjson").detected_format == "JSON Lines"
    assert DataReader.detect_format("book.xlsx") == DataFormat.EXCEL
    assert DataReader.detect_format("rows.tsv") == DataFormat.CSV


def test_detect_convertible_format_needs_manual_assessment():
    detection = detect_format("panel.dta")
    assert detection.support_level == "manual"
    assert detection.suggestions == ["Export as CSV from STATA"]
    assert not detection.analyzable


def test_detect_unknown_format():
    detection = detect_format("archive")
    assert detection.support_level == "unsupported"
    assert detection.confidence == "low"
    assert "no extension" in detection.detected_format


@pytest.mark.parametrize("filename", ["photo.jpg", "app.sqlite", "model.parquet", "data.xyz"])
def test_validate_rejects_non_analyzable(filename):
    with pytest.raises(UnsupportedFormatError) as exc_info:
        validate_upload(make_file("a,b\n1,2\n", filename))
    assert exc_info.value.manual_assessment
    assert exc_info.value.detection.extension == filename.rsplit(".", 1)[1]


def test_validate_size_limits():
    policy = AnalysisPolicy(max_file_bytes=100, warn_file_bytes=20)
    assert validate_upload(make_file("a,b\n1,2\n"), policy) is None

    warning = validate_upload(make_file("a,b\n" + "1,2\n" * 10), policy)
    assert warning.startswith("Large file detected")

    with pytest.raises(FileTooLargeError) as exc_info:
        validate_upload(make_file("a,b\n" + "1,2\n" * 50), policy)
    assert "exceeds maximum limit" in exc_info.value.message
    assert not exc_info.value.retryable


# ---------------------------------------------------------------------------
# Delimited text
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("header,expected", [
    ("a,b,c", ","),
    ("a\tb\tc", "\t"),
    ("a|b|c", "|"),
    ("a;b;c", ";"),
    ("single", ","),
])
def test_detect_csv_delimiter(header, expected):
    assert DataReader.detect_csv_delimiter(header + "\n1\n") == expected


def test_coerce_cell():
    assert coerce_cell("") is None
    assert coerce_cell(None) is None
    assert coerce_cell("TRUE") is True
    assert coerce_cell("false") is False
    assert coerce_cell("42") == 42
    assert coerce_cell("-3.5") == -3.5
    assert coerce_cell("1e3") == 1000.0
    assert coerce_cell("abc") == "abc"
    assert coerce_cell("12 Main St") == "12 Main St"


def test_read_csv_types_and_blank_lines():
    rows = DataReader.read(make_file("name,age,active\nAnn,31,true\n\n   \nBob,,false\n"))

    assert rows == [
        {"name": "Ann", "age": 31, "active": True},
        {"name": "Bob", "age": None, "active": False},
    ]


def test_read_semicolon_file():
    rows = DataReader.read(make_file("city;population\nLyon;513275\nNice;342669\n"))
    assert rows[1] == {"city": "Nice", "population": 342669}


def test_read_tsv_by_content():
    rows = DataReader.read(make_file("a\tb\n1\t2\n", "table.tsv"))
    assert rows == [{"a": 1, "b": 2}]


def test_header_only_csv_is_empty():
    with pytest.raises(EmptyDatasetError):
        DataReader.read(make_file("id,age,gender,outcome\n"))


def test_empty_csv_is_empty():
    with pytest.raises(EmptyDatasetError):
        DataReader.read(make_file(""))


# ---------------------------------------------------------------------------
# JSON / JSON Lines
# ---------------------------------------------------------------------------

def test_read_json_array_unions_columns():
    content = json.dumps([{"a": 1}, {"b": "x", "a": 2}])
    rows = DataReader.read(make_file(content, "data.json"))

    assert rows == [{"a": 1, "b": None}, {"a": 2, "b": "x"}]
    assert list(rows[0]) == ["a", "b"]


def test_read_json_object_holding_array():
    content = json.dumps({"meta": {"v": 1}, "records": [{"x": 1}, {"x": 2}], "other": [{"y": 0}]})
    rows = DataReader.read(make_file(content, "data.json"))
    assert rows == [{"x": 1}, {"x": 2}]


def test_read_json_single_object_flattens_nested_values():
    content = json.dumps({"name": "Ann", "tags": ["a", "b"]})
    rows = DataReader.read(make_file(content, "data.json"))
    assert rows == [{"name": "Ann", "tags": '["a", "b"]'}]


def test_read_json_scalar_is_parse_error():
    with pytest.raises(ParseError):
        DataReader.read(make_file("42", "data.json"))


def test_read_malformed_json():
    with pytest.raises(ParseError) as exc_info:
        DataReader.read(make_file("[{\"a\": 1},", "data.json"))
    assert exc_info.value.retryable


def test_read_empty_json_array():
    with pytest.raises(EmptyDatasetError):
        DataReader.read(make_file("[]", "data.json"))


def test_read_jsonl():
    content = '{"a": 1}\n\n{"a": 2, "b": true}\n'
    rows = DataReader.read(make_file(content, "data.jsonl"))
    assert rows == [{"a": 1, "b": None}, {"a": 2, "b": True}]


def test_read_jsonl_reports_bad_line():
    with pytest.raises(ParseError) as exc_info:
        DataReader.read(make_file('{"a": 1}\nnot json\n', "data.jsonl"))
    assert "line 2" in exc_info.value.message


def test_uniform_rows_wraps_scalars():
    assert uniform_rows([1, {"value": 2}]) == [{"value": 1}, {"value": 2}]


# ---------------------------------------------------------------------------
# Spreadsheets
# ---------------------------------------------------------------------------

def test_read_excel_first_sheet(tmp_path):
    pytest.importorskip("xlsxwriter")
    path = tmp_path / "book.xlsx"
    pl.DataFrame({"region": ["north", "south"], "sales": [10, 25]}).write_excel(path)

    rows = read_data(path)

    assert [row["region"] for row in rows] == ["north", "south"]
    assert [row["sales"] for row in rows] == [10, 25]


def test_read_garbage_excel():
    with pytest.raises(ParseError):
        DataReader.read(DatasetFile(filename="book.xlsx", content=b"not a workbook"))


# ---------------------------------------------------------------------------
# Hostile but valid content
# ---------------------------------------------------------------------------

def test_coerce_cell_keeps_overlong_integers_as_text():
    digits = "9" * 5000
    assert coerce_cell(digits) == digits
    assert coerce_cell("9" * 400) == int("9" * 400)


def test_huge_integer_cells_are_analyzed():
    from services.analyzer import analyze_dataset

    for cell in ("9" * 400, "9" * 5000):
        statistics = analyze_dataset(make_file(f"id,amount\n1,5\n2,{cell}\n3,7\n"))
        assert statistics.basic_metrics.total_rows == 3


def test_huge_integer_in_json_is_analyzed():
    from services.analyzer import analyze_dataset

    content = '[{"a": 1}, {"a": ' + "9" * 400 + '}, {"a": 3}]'
    statistics = analyze_dataset(make_file(content, "data.json"))
    assert statistics.basic_metrics.total_rows == 3


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_json_constants_are_rejected(token):
    with pytest.raises(ParseError):
        DataReader.read(make_file(f'[{{"a": {token}}}]', "data.json"))
    with pytest.raises(ParseError):
        DataReader.read(make_file(f'{{"a": 1}}\n{{"a": {token}}}\n', "data.jsonl"))


def test_blank_line_inside_quoted_cell_is_kept():
    content = 'name,note\nAnn,"line one\n\nline three"\n\nBob,plain\n'
    rows = DataReader.read(make_file(content))

    assert rows == [
        {"name": "Ann", "note": "line one\n\nline three"},
        {"name": "Bob", "note": "plain"},
    ]
