"""CSV/JSON input normalisation into records."""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from pydantic import TypeAdapter, ValidationError

from reclink.domain.errors import ParseError
from reclink.domain.ports.parsing import InputFormat
from reclink.domain.records import Record

log = logging.getLogger(__name__)

_ROWS_ADAPTER: TypeAdapter[list[dict[str, Any]]] = TypeAdapter(list[dict[str, Any]])
_CSV_ROWS_ADAPTER: TypeAdapter[list[dict[str, str | None]]] = TypeAdapter(
    list[dict[str, str | None]]
)
_JSON_CELL_PREFIXES = ("{", "[")


def parse_input_data(
    input_format: InputFormat | str,
    raw: object,
    *,
    collection: str,
    relations: Collection[str] = (),
) -> list[Record]:
    """Turn ``raw`` rows in ``input_format`` into records for ``collection``.

    CSV cells only carry nested data in ``relations`` columns; those are decoded
    as JSON when they start with ``{`` or ``[``. Every other cell stays text.
    """

    try:
        resolved_format = InputFormat(input_format)
    except ValueError as exc:
        raise ParseError(f"Unsupported input format: {input_format!r}") from exc

    if resolved_format is InputFormat.JSON:
        records = _parse_json(raw)
    else:
        records = _parse_csv(raw, frozenset(relations))
    log.debug("Parsed %s %s rows for %s", len(records), resolved_format, collection)
    return records


def _parse_json(raw: object) -> list[Record]:
    if isinstance(raw, str | bytes | bytearray):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid JSON document: {exc}") from exc
    try:
        return _ROWS_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise ParseError(f"JSON input must be an array of objects: {exc}") from exc


def _parse_csv(raw: object, relations: frozenset[str]) -> list[Record]:
    if isinstance(raw, str):
        raw = list(csv.DictReader(io.StringIO(raw)))
    if not isinstance(raw, Sequence) or not all(isinstance(row, Mapping) for row in raw):
        raise ParseError("CSV input must be CSV text or a sequence of row mappings")
    try:
        rows = _CSV_ROWS_ADAPTER.validate_python([dict(row) for row in raw])
    except ValidationError as exc:
        raise ParseError(f"CSV cells must be text: {exc}") from exc
    return [_convert_csv_row(row, index, relations) for index, row in enumerate(rows)]


def _convert_csv_row(
    row: dict[str, str | None], index: int, relations: frozenset[str]
) -> Record:
    record: Record = {}
    for column, cell in row.items():
        record[column] = _convert_cell(column, cell, index, is_relation=column in relations)
    return record


def _convert_cell(column: str, cell: str | None, index: int, *, is_relation: bool) -> Any:
    if cell is None:
        return None
    text = cell.strip()
    if not text:
        return None
    if is_relation and text.startswith(_JSON_CELL_PREFIXES):
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"column {column!r} holds invalid JSON: {exc}", row=index) from exc
    if column == "id" and text.isdigit():
        return int(text)
    return cell
