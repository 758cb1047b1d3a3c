"""SQLAlchemy adapter package for reclink."""

from __future__ import annotations

from .engine import StartupError, shutdown, startup
from .gateway import SqlAlchemyStoreGateway
from .schema import (
    CollectionDefinition,
    RelationDefinition,
    SchemaDefinition,
    load_schema,
)
from .tables import StoreTables, build_tables, link_table_name

__all__ = [
    "CollectionDefinition",
    "RelationDefinition",
    "SchemaDefinition",
    "SqlAlchemyStoreGateway",
    "StartupError",
    "StoreTables",
    "build_tables",
    "link_table_name",
    "load_schema",
    "shutdown",
    "startup",
]
