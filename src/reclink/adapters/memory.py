"""Dictionary-backed store gateway.

Useful for dry runs and tests: it honours the same contract as the SQL gateway
(explicit ids on create, ``None`` from an update that matches nothing) without a
database.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from reclink.domain.errors import StoreError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from reclink.domain.records import Record, RelationAttribute, StoredRecord


@dataclass(slots=True)
class InMemoryStoreGateway:
    relations: Mapping[str, Sequence[RelationAttribute]] = field(default_factory=dict)
    rows: dict[str, dict[Any, Record]] = field(default_factory=dict)
    journal: list[tuple[str, str]] = field(default_factory=list)
    _next_ids: dict[str, int] = field(default_factory=dict)

    async def describe_relations(self, collection: str) -> Sequence[RelationAttribute]:
        self.journal.append(("describe", collection))
        return tuple(self.relations.get(collection, ()))

    async def create(self, collection: str, data: Mapping[str, Any]) -> StoredRecord:
        self.journal.append(("create", collection))
        table = self.rows.setdefault(collection, {})
        record_id = _row_key(data.get("id")) or self._allocate_id(collection)
        if record_id in table:
            raise StoreError(
                f"duplicate id {record_id!r}", collection=collection, operation="create"
            )
        if isinstance(record_id, int):
            self._next_ids[collection] = max(self._next_ids.get(collection, 1), record_id + 1)

        row = copy.deepcopy(dict(data))
        row["id"] = record_id
        table[record_id] = row
        return copy.deepcopy(row)

    async def update(
        self,
        collection: str,
        where: Mapping[str, Any],
        data: Mapping[str, Any],
    ) -> StoredRecord | None:
        self.journal.append(("update", collection))
        row = self.rows.get(collection, {}).get(_row_key(where["id"]))
        if row is None:
            return None
        row.update(copy.deepcopy({key: value for key, value in data.items() if key != "id"}))
        return copy.deepcopy(row)

    def get(self, collection: str, record_id: Any) -> Record | None:
        row = self.rows.get(collection, {}).get(_row_key(record_id))
        return None if row is None else copy.deepcopy(row)

    def count(self, collection: str) -> int:
        return len(self.rows.get(collection, {}))

    def operations(self, operation: str) -> list[str]:
        """Collections touched by ``operation``, in call order."""

        return [collection for op, collection in self.journal if op == operation]

    def _allocate_id(self, collection: str) -> int:
        next_id = self._next_ids.get(collection, 1)
        self._next_ids[collection] = next_id + 1
        return next_id


def _row_key(record_id: Any) -> Any:
    # digit-only text ids address the same row as their integer form, as in SQL
    if isinstance(record_id, str) and record_id.strip().isdigit():
        return int(record_id)
    return record_id
