from __future__ import annotations

import pytest

from reclink.adapters.parsers import parse_input_data
from reclink.domain.errors import ParseError
from reclink.domain.ports import InputFormat


def test_json_rows_are_returned_as_records() -> None:
    rows = [{"title": "a", "author": {"name": "x"}, "tags": []}]

    records = parse_input_data(InputFormat.JSON, rows, collection="articles")

    assert records == rows


def test_json_document_string_is_decoded() -> None:
    records = parse_input_data("json", '[{"id": 3, "title": "a"}]', collection="articles")

    assert records == [{"id": 3, "title": "a"}]


@pytest.mark.parametrize("raw", ['{"title": "a"}', "[1, 2]", "not json", [1, 2]])
def test_json_input_must_be_an_array_of_objects(raw: object) -> None:
    with pytest.raises(ParseError):
        parse_input_data(InputFormat.JSON, raw, collection="articles")


def test_csv_cells_are_converted() -> None:
    rows = [
        {
            "id": "12",
            "title": "Hello",
            "subtitle": "",
            "author": '{"name": "x"}',
            "tags": '[{"label": "a"}, 4]',
            "code": "007",
        }
    ]

    records = parse_input_data(
        InputFormat.CSV, rows, collection="articles", relations={"author", "tags"}
    )

    assert records == [
        {
            "id": 12,
            "title": "Hello",
            "subtitle": None,
            "author": {"name": "x"},
            "tags": [{"label": "a"}, 4],
            "code": "007",
        }
    ]


def test_csv_text_is_read_with_a_header_row() -> None:
    text = 'title,author\nHello,"{""name"": ""x""}"\nBye,\n'

    records = parse_input_data(
        InputFormat.CSV, text, collection="articles", relations={"author"}
    )

    assert records == [
        {"title": "Hello", "author": {"name": "x"}},
        {"title": "Bye", "author": None},
    ]


def test_malformed_json_cell_names_row_and_column() -> None:
    rows = [{"title": "ok"}, {"title": "bad", "author": "{broken"}]

    with pytest.raises(ParseError) as excinfo:
        parse_input_data(InputFormat.CSV, rows, collection="articles", relations={"author"})

    assert excinfo.value.row == 1
    assert "author" in str(excinfo.value)


def test_unsupported_format_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_input_data("xml", [], collection="articles")


def test_csv_cells_outside_relation_columns_stay_text() -> None:
    text = 'title,summary,author\n[Draft] Hello,{not json},\n"[1, 2]","{""a"": 1}",\n'

    records = parse_input_data(
        InputFormat.CSV, text, collection="articles", relations={"author", "tags"}
    )

    assert records == [
        {"title": "[Draft] Hello", "summary": "{not json}", "author": None},
        {"title": "[1, 2]", "summary": '{"a": 1}', "author": None},
    ]


def test_csv_without_relations_decodes_nothing() -> None:
    records = parse_input_data(InputFormat.CSV, [{"author": '{"name": "x"}'}], collection="notes")

    assert records == [{"author": '{"name": "x"}'}]
