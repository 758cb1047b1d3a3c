"""Store gateway backed by a SQLAlchemy engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from reclink.domain.errors import StoreError, StoreOperation

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from reclink.domain.records import RelationAttribute, StoredRecord

    from .schema import SchemaDefinition
    from .tables import CollectionTables, StoreTables

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SqlAlchemyStoreGateway:
    """Persist records into the tables built for ``schema``.

    Each call runs in its own transaction. Statements execute synchronously on
    the calling event loop, so no two calls ever interleave inside the database.
    Cancelling a reconciliation takes effect between calls; a statement that has
    started always runs to completion.
    """

    engine: Engine
    schema: SchemaDefinition
    tables: StoreTables

    async def describe_relations(self, collection: str) -> Sequence[RelationAttribute]:
        self._collection(collection, "describe")
        return self.schema.relation_attributes(collection)

    async def create(self, collection: str, data: Mapping[str, Any]) -> StoredRecord:
        tables = self._collection(collection, "create")
        columns, links = self._split(tables, collection, data, "create")
        if not columns.get("id"):
            columns.pop("id", None)
        try:
            with self.engine.begin() as connection:
                result = connection.execute(insert(tables.table).values(**columns))
                record_id = result.inserted_primary_key[0]
                self._replace_links(connection, tables, record_id, links)
                stored = self._load(connection, tables, record_id)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), collection=collection, operation="create") from exc
        log.debug("Created %s id=%s", collection, record_id)
        return stored

    async def update(
        self,
        collection: str,
        where: Mapping[str, Any],
        data: Mapping[str, Any],
    ) -> StoredRecord | None:
        tables = self._collection(collection, "update")
        columns, links = self._split(tables, collection, data, "update")
        columns.pop("id", None)
        table = tables.table
        record_id = where["id"]
        try:
            with self.engine.begin() as connection:
                existing = connection.execute(
                    select(table.c.id).where(table.c.id == record_id)
                ).first()
                if existing is None:
                    return None
                if columns:
                    connection.execute(
                        update(table).where(table.c.id == record_id).values(**columns)
                    )
                self._replace_links(connection, tables, existing.id, links)
                stored = self._load(connection, tables, existing.id)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc), collection=collection, operation="update") from exc
        log.debug("Updated %s id=%s", collection, record_id)
        return stored

    def _collection(self, collection: str, operation: StoreOperation) -> CollectionTables:
        tables = self.tables.collections.get(collection)
        if tables is None:
            raise StoreError("unknown collection", collection=collection, operation=operation)
        return tables

    def _split(
        self,
        tables: CollectionTables,
        collection: str,
        data: Mapping[str, Any],
        operation: StoreOperation,
    ) -> tuple[dict[str, Any], dict[str, list[Any]]]:
        unknown = set(data).difference(tables.attribute_names)
        if unknown:
            raise StoreError(
                f"unknown attributes: {', '.join(sorted(unknown))}",
                collection=collection,
                operation=operation,
            )

        columns: dict[str, Any] = {}
        links: dict[str, list[Any]] = {}
        for name, value in data.items():
            if name not in tables.links:
                columns[name] = value
                continue
            if value is None:
                links[name] = []
            elif isinstance(value, Sequence) and not isinstance(value, str | bytes):
                links[name] = list(value)
            else:
                raise StoreError(
                    f"{name} expects a list of identifiers, got {type(value).__name__}",
                    collection=collection,
                    operation=operation,
                )
        return columns, links

    def _replace_links(
        self,
        connection: Connection,
        tables: CollectionTables,
        record_id: Any,
        links: Mapping[str, list[Any]],
    ) -> None:
        for name, target_ids in links.items():
            link_table = tables.links[name]
            connection.execute(delete(link_table).where(link_table.c.owner_id == record_id))
            if target_ids:
                connection.execute(
                    insert(link_table),
                    [
                        {"owner_id": record_id, "position": position, "target_id": target_id}
                        for position, target_id in enumerate(target_ids)
                    ],
                )

    def _load(
        self,
        connection: Connection,
        tables: CollectionTables,
        record_id: Any,
    ) -> StoredRecord:
        table = tables.table
        row = connection.execute(select(table).where(table.c.id == record_id)).one()
        stored: dict[str, Any] = dict(row._mapping)  # noqa: SLF001
        for name, link_table in tables.links.items():
            stored[name] = list(
                connection.execute(
                    select(link_table.c.target_id)
                    .where(link_table.c.owner_id == record_id)
                    .order_by(link_table.c.position)
                ).scalars()
            )
        return stored
