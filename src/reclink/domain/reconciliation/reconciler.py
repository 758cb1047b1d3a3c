"""Recursive upsert of one record and everything nested in its relations.

Resolution order is bottom-up: every relation field of a record is resolved to
stored identifiers (creating or updating the nested records) before the record
itself is written. Relation fields of one record are resolved concurrently, as
are the elements of a many-relation; each fan-out is joined before the parent
write.

Nested writes that succeeded before a failure are not undone. Cyclic relation
payloads are not detected and recurse until the interpreter gives up.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from reclink.domain.errors import ReconcileError, root_cause
from reclink.domain.records import (
    AbsentRelation,
    ManyRelation,
    NullRelation,
    ScalarRelation,
    SingleRelation,
    classify_relation_value,
    classify_value,
    identifier_of,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reclink.domain.ports.store import StoreGateway
    from reclink.domain.records import Actor, Record, RelationAttribute, StoredRecord

log = logging.getLogger(__name__)


@dataclass(slots=True)
class Reconciler:
    """Upsert records into ``store`` on behalf of ``actor``.

    ``strip_stale_id`` controls the create issued after an update missed: by
    default the payload is passed through unchanged, ``id`` included.
    """

    store: StoreGateway
    actor: Actor
    strip_stale_id: bool = False

    async def reconcile(
        self,
        collection: str,
        record: Mapping[str, Any],
    ) -> StoredRecord | None:
        """Resolve the relations of ``record`` and upsert it into ``collection``.

        Raises ``ReconcileError`` wrapping the root cause of any failure.
        """

        try:
            return await self._upsert(collection, record)
        except Exception as exc:
            cause = root_cause(exc)
            raise ReconcileError(collection, cause) from cause

    async def _upsert(self, collection: str, record: Mapping[str, Any]) -> StoredRecord | None:
        payload: Record = dict(record)
        relations = await self.store.describe_relations(collection)
        async with asyncio.TaskGroup() as group:
            for relation in relations:
                group.create_task(self._resolve_relation(relation, payload))
        return await self._write(collection, payload)

    async def _resolve_relation(self, relation: RelationAttribute, payload: Record) -> None:
        if relation.is_audit:
            payload[relation.name] = self.actor.id
            return

        match classify_relation_value(payload, relation.name):
            case SingleRelation(record=nested):
                stored = await self._upsert(relation.target, nested)
                payload[relation.name] = identifier_of(stored)
            case ManyRelation(items=items):
                payload[relation.name] = await self._resolve_many(relation.target, items)
            case AbsentRelation() | NullRelation() | ScalarRelation():
                pass

    async def _resolve_many(self, target: str, items: tuple[Any, ...]) -> list[Any]:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(self._resolve_item(target, item)) for item in items]
        return [task.result() for task in tasks]

    async def _resolve_item(self, target: str, item: Any) -> Any:
        match classify_value(item):
            case SingleRelation(record=nested):
                return identifier_of(await self._upsert(target, nested))
            case _:
                # already an identifier (or null); kept as given
                return item

    async def _write(self, collection: str, payload: Record) -> StoredRecord | None:
        record_id = payload.get("id")
        if not record_id:
            log.debug("Creating %s record", collection)
            return await self.store.create(collection, payload)

        log.debug("Updating %s record id=%s", collection, record_id)
        stored = await self.store.update(collection, {"id": record_id}, payload)
        if stored is not None:
            return stored

        log.debug("No %s record with id=%s; creating instead", collection, record_id)
        if self.strip_stale_id:
            payload = {key: value for key, value in payload.items() if key != "id"}
        return await self.store.create(collection, payload)
