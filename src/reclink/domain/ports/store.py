"""Port for the persistent store the importer reconciles against."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from reclink.domain.records import RelationAttribute, StoredRecord


@runtime_checkable
class StoreGateway(Protocol):
    """Minimal store contract: relation introspection plus create/update primitives.

    ``update`` returns ``None`` (not an error) when no row matches ``where["id"]``.
    Every other rejection is raised as ``StoreError``.
    """

    async def describe_relations(self, collection: str) -> Sequence[RelationAttribute]: ...

    async def create(self, collection: str, data: Mapping[str, Any]) -> StoredRecord: ...

    async def update(
        self,
        collection: str,
        where: Mapping[str, Any],
        data: Mapping[str, Any],
    ) -> StoredRecord | None: ...
