"""SQLAlchemy table metadata built from a schema definition."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.types import TypeEngine

    from .schema import FieldType, SchemaDefinition

NAMING_CONVENTION: Final[dict[str, str]] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_COLUMN_TYPES: Final[dict[str, type[TypeEngine[object]]]] = {
    "string": String,
    "text": Text,
    "integer": Integer,
    "float": Float,
    "boolean": Boolean,
    "json": JSON,
}


def link_table_name(collection: str, relation: str) -> str:
    return f"{collection}__{relation}"


@dataclass(slots=True)
class CollectionTables:
    """The main table of one collection plus a link table per many-relation."""

    table: Table
    links: dict[str, Table] = field(default_factory=dict)

    @property
    def attribute_names(self) -> frozenset[str]:
        return frozenset({*self.table.columns.keys(), *self.links})


@dataclass(slots=True)
class StoreTables:
    metadata: MetaData
    collections: dict[str, CollectionTables]

    def create_all(self, engine: Engine) -> None:
        self.metadata.create_all(engine)


def _column_type(field_type: FieldType) -> TypeEngine[object]:
    return _COLUMN_TYPES[field_type]()


def build_tables(schema: SchemaDefinition) -> StoreTables:
    """Build one ``Table`` per collection and one link table per many-relation."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    collections: dict[str, CollectionTables] = {}
    for collection in schema.collections:
        columns = [Column("id", Integer, primary_key=True, autoincrement=True)]
        columns.extend(
            Column(name, _column_type(field_type), nullable=True)
            for name, field_type in collection.attributes.items()
        )
        links: dict[str, Table] = {}
        for name, relation in schema.relations_of(collection.name).items():
            if relation.many:
                links[name] = Table(
                    link_table_name(collection.name, name),
                    metadata,
                    Column("owner_id", Integer, primary_key=True),
                    Column("position", Integer, primary_key=True),
                    Column("target_id", Integer, nullable=True),
                )
            else:
                columns.append(Column(name, Integer, nullable=True))
        table = Table(collection.name, metadata, *columns)
        collections[collection.name] = CollectionTables(table=table, links=links)
    return StoreTables(metadata=metadata, collections=collections)
