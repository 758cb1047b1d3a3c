"""Store gateway doubles wrapping the in-memory gateway."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from reclink.adapters.memory import InMemoryStoreGateway
from reclink.domain.errors import StoreError
from reclink.domain.records import RelationAttribute, StoredRecord

type FailurePredicate = Callable[[str, str, Mapping[str, Any]], bool]


@dataclass(slots=True)
class FailingStore:
    """Raise ``StoreError`` for writes matching ``should_fail(operation, collection, data)``."""

    inner: InMemoryStoreGateway
    should_fail: FailurePredicate

    async def describe_relations(self, collection: str) -> Sequence[RelationAttribute]:
        return await self.inner.describe_relations(collection)

    async def create(self, collection: str, data: Mapping[str, Any]) -> StoredRecord:
        if self.should_fail("create", collection, data):
            raise StoreError("constraint violated", collection=collection, operation="create")
        return await self.inner.create(collection, data)

    async def update(
        self,
        collection: str,
        where: Mapping[str, Any],
        data: Mapping[str, Any],
    ) -> StoredRecord | None:
        if self.should_fail("update", collection, data):
            raise StoreError("constraint violated", collection=collection, operation="update")
        return await self.inner.update(collection, where, data)


@dataclass(slots=True)
class NothingCreatedStore:
    """Pretend creates in ``collections`` succeed without yielding a record."""

    inner: InMemoryStoreGateway
    collections: frozenset[str]

    async def describe_relations(self, collection: str) -> Sequence[RelationAttribute]:
        return await self.inner.describe_relations(collection)

    async def create(self, collection: str, data: Mapping[str, Any]) -> StoredRecord | None:
        if collection in self.collections:
            return None
        return await self.inner.create(collection, data)

    async def update(
        self,
        collection: str,
        where: Mapping[str, Any],
        data: Mapping[str, Any],
    ) -> StoredRecord | None:
        return await self.inner.update(collection, where, data)


@dataclass(slots=True)
class SlowStore:
    """Yield to the event loop on every write and track how many overlap."""

    inner: InMemoryStoreGateway
    delay: float = 0.01
    in_flight: int = 0
    max_in_flight: int = 0
    events: list[tuple[str, str, str]] = field(default_factory=list)

    async def describe_relations(self, collection: str) -> Sequence[RelationAttribute]:
        return await self.inner.describe_relations(collection)

    async def create(self, collection: str, data: Mapping[str, Any]) -> StoredRecord:
        return await self._timed("create", collection, self.inner.create(collection, data))

    async def update(
        self,
        collection: str,
        where: Mapping[str, Any],
        data: Mapping[str, Any],
    ) -> StoredRecord | None:
        return await self._timed("update", collection, self.inner.update(collection, where, data))

    async def _timed(self, operation: str, collection: str, write: Any) -> Any:
        self.events.append(("start", operation, collection))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return await write
        finally:
            self.in_flight -= 1
            self.events.append(("end", operation, collection))
