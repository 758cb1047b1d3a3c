from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from reclink.adapters.memory import InMemoryStoreGateway
from reclink.adapters.sqlalchemy import SchemaDefinition, SqlAlchemyStoreGateway, shutdown, startup
from reclink.domain.records import Actor
from tests.support.blog import BLOG_RELATIONS, BLOG_SCHEMA

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def actor() -> Actor:
    return Actor(id=42)


@pytest.fixture
def memory_store() -> InMemoryStoreGateway:
    return InMemoryStoreGateway(relations=BLOG_RELATIONS)


@pytest.fixture
def blog_schema() -> SchemaDefinition:
    return SchemaDefinition.model_validate(BLOG_SCHEMA)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_gateway(
    sqlite_engine: Engine,
    blog_schema: SchemaDefinition,
) -> Iterator[SqlAlchemyStoreGateway]:
    gateway = startup(blog_schema, engine=sqlite_engine, force=True)
    try:
        yield gateway
    finally:
        shutdown()
