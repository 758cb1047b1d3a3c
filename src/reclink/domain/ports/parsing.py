"""Port for turning raw CSV/JSON rows into records."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Collection

    from reclink.domain.records import Record


class InputFormat(StrEnum):
    CSV = "csv"
    JSON = "json"


class RecordParser(Protocol):
    """Normalise raw input into records; raises ``ParseError`` for the whole batch.

    ``relations`` names the columns of ``collection`` that may hold nested data.
    """

    def __call__(
        self,
        input_format: InputFormat,
        raw: object,
        *,
        collection: str,
        relations: Collection[str] = (),
    ) -> list[Record]: ...
